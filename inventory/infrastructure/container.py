# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from inventory.application.services.password_hashing import BcryptPasswordHasher
from inventory.application.services.remember_me import RememberMeSigner
from inventory.application.services.session_resolver import SessionResolver
from inventory.application.services.tokens import ResetTokenIssuer
from inventory.application.use_cases.users.confirm_password_reset import \
    ConfirmPasswordResetUseCase
from inventory.application.use_cases.users.login_user import LoginUserUseCase
from inventory.application.use_cases.users.logout_user import LogoutUserUseCase
from inventory.application.use_cases.users.register_user import \
    RegisterUserUseCase
from inventory.application.use_cases.users.request_password_reset import \
    RequestPasswordResetUseCase
from inventory.domain.users.repositories import (Clock, NotificationPort,
                                                 PasswordHasher)
from inventory.infrastructure.clock import SystemClock
from inventory.infrastructure.mail import SmtpNotificationAdapter
from inventory.infrastructure.repositories.sessions.sqlalchemy_session_repository import \
    SqlAlchemySessionRepository
from inventory.infrastructure.repositories.users.sqlalchemy_user_repository import \
    SqlAlchemyUserRepository
from inventory.infrastructure.session_interface import ServerSessionInterface
from inventory.interfaces.http.controllers.auth_controller import AuthController
from inventory.interfaces.http.controllers.home_controller import HomeController
from inventory.interfaces.http.controllers.misc_controller import MiscController
from inventory.shared.config import AppConfig, load_config


class Container:
    """Wires adapters and use cases; tests may swap the clock, notifier or hasher."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        clock: Clock | None = None,
        notifier: NotificationPort | None = None,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self.config = config or load_config()
        self._clock = clock
        self._notifier = notifier
        self._password_hasher = password_hasher

    @cached_property
    def clock(self) -> Clock:
        return self._clock or SystemClock()

    @cached_property
    def password_hasher(self) -> PasswordHasher:
        return self._password_hasher or BcryptPasswordHasher(self.config.auth.bcrypt_rounds)

    @cached_property
    def notification_port(self) -> NotificationPort:
        return self._notifier or SmtpNotificationAdapter(self.config.mail)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def session_repository(self) -> SqlAlchemySessionRepository:
        return SqlAlchemySessionRepository()

    @cached_property
    def remember_me(self) -> RememberMeSigner:
        return RememberMeSigner(
            secret=self.config.remember_secret,
            clock=self.clock,
            max_age=timedelta(seconds=self.config.auth.remember_ttl),
        )

    @cached_property
    def reset_tokens(self) -> ResetTokenIssuer:
        return ResetTokenIssuer(
            clock=self.clock,
            ttl=timedelta(seconds=self.config.auth.reset_token_ttl),
        )

    @cached_property
    def session_resolver(self) -> SessionResolver:
        return SessionResolver(
            users=self.user_repository,
            remember_me=self.remember_me,
            clock=self.clock,
        )

    @cached_property
    def session_interface(self) -> ServerSessionInterface:
        return ServerSessionInterface(
            sessions=self.session_repository,
            clock=self.clock,
            ttl=timedelta(seconds=self.config.auth.session_ttl),
            cookie_name=self.config.auth.session_cookie_name,
            secure=self.config.cookie_secure,
            samesite=self.config.security.cookie_samesite,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            clock=self.clock,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            remember_me=self.remember_me,
            clock=self.clock,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(
            sessions=self.session_repository,
            users=self.user_repository,
        )

    @cached_property
    def request_password_reset_use_case(self) -> RequestPasswordResetUseCase:
        return RequestPasswordResetUseCase(
            users=self.user_repository,
            tokens=self.reset_tokens,
            notifications=self.notification_port,
        )

    @cached_property
    def confirm_password_reset_use_case(self) -> ConfirmPasswordResetUseCase:
        return ConfirmPasswordResetUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            clock=self.clock,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            config=self.config,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            request_reset_use_case=self.request_password_reset_use_case,
            confirm_reset_use_case=self.confirm_password_reset_use_case,
        )

    @cached_property
    def home_controller(self) -> HomeController:
        return HomeController()

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController()
