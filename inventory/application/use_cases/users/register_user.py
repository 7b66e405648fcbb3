# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from inventory.domain.users.entities import Role, User
from inventory.domain.users.exceptions import DuplicateIdentityError
from inventory.domain.users.repositories import Clock, PasswordHasher, UserRepository
from inventory.shared.errors.base import DuplicateKeyError
from inventory.shared.logging import logger


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        clock: Clock,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._clock = clock

    def execute(
        self,
        username: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> User:
        email = email.strip().lower()
        if self._users.find_by_username(username) or self._users.find_by_email(email):
            raise DuplicateIdentityError()

        user = User(
            id=None,
            username=username,
            email=email,
            password_hash=self._password_hasher.hash(password),
            phone=phone or None,
            role=Role.USER,
            is_active=True,
            created_at=self._clock.now(),
        )
        try:
            persisted = self._users.add(user)
        except DuplicateKeyError as exc:
            # lost a race with a concurrent registration
            raise DuplicateIdentityError() from exc

        logger.info(f"auth.register: created user_id={persisted.id}")
        return persisted
