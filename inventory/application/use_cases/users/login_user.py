# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from inventory.application.services.remember_me import RememberMeSigner
from inventory.domain.users.entities import User
from inventory.domain.users.exceptions import AccountInactiveError, InvalidCredentialsError
from inventory.domain.users.repositories import Clock, PasswordHasher, UserRepository


@dataclass(slots=True, frozen=True)
class LoginOutcome:
    user: User
    remember_token: str | None = None


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        remember_me: RememberMeSigner,
        clock: Clock,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._remember_me = remember_me
        self._clock = clock

    def execute(self, identifier: str, password: str, remember_me: bool = False) -> LoginOutcome:
        user = self._users.find_by_username_or_email(identifier.strip())
        if user is None or user.id is None:
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountInactiveError()
        if not self._password_hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()

        self._users.touch_last_login(user.id, self._clock.now())
        token = self._remember_me.issue(user) if remember_me else None
        return LoginOutcome(user=user, remember_token=token)
