# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from inventory.application.services.tokens import ResetTokenIssuer
from inventory.domain.users.entities import User
from inventory.domain.users.exceptions import InvalidOrExpiredTokenError, PasswordMismatchError
from inventory.domain.users.repositories import Clock, PasswordHasher, UserRepository


class ConfirmPasswordResetUseCase:
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

    def validate(self, token: str) -> User:
        user = self._users.find_by_reset_token(token) if token else None
        if user is None or not ResetTokenIssuer.is_valid(
            user.reset_token, user.reset_token_expires, token, self._clock.now()
        ):
            raise InvalidOrExpiredTokenError()
        return user

    def execute(self, token: str, password: str, confirm_password: str) -> User:
        if password != confirm_password:
            raise PasswordMismatchError()

        user = self.validate(token)
        if user.id is None:
            raise InvalidOrExpiredTokenError()

        new_hash = self._password_hasher.hash(password)
        if not self._users.complete_password_reset(user.id, token, new_hash):
            # consumed by a concurrent request between validate and update
            raise InvalidOrExpiredTokenError()
        return user
