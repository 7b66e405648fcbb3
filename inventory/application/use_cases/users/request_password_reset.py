# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from inventory.application.services.tokens import ResetTokenIssuer
from inventory.domain.users.entities import User
from inventory.domain.users.repositories import NotificationPort, UserRepository
from inventory.shared.errors.base import NotificationError
from inventory.shared.logging import logger

RESET_SUBJECT = "Password Reset Request"


def _reset_body(user: User, link: str) -> str:
    return (
        f"Hello {user.username},\n\n"
        "You requested a password reset. Open the link below to choose a new password:\n\n"
        f"{link}\n\n"
        "This link will expire in 1 hour.\n"
        "If you did not request this, you can ignore this email.\n"
    )


class RequestPasswordResetUseCase:
    """Issue a reset token for a known e-mail.

    The caller sees the same outcome whether or not the address is
    registered.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: ResetTokenIssuer,
        notifications: NotificationPort,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._notifications = notifications

    def execute(self, email: str, reset_link: Callable[[str], str]) -> User | None:
        user = self._users.find_by_email(email.strip().lower())
        if user is None or user.id is None:
            logger.info("auth.reset_request: no matching account")
            return None

        token = self._tokens.issue()
        self._users.set_reset_token(user.id, token.token, token.expires_at)

        try:
            self._notifications.send(user.email, RESET_SUBJECT, _reset_body(user, reset_link(token.token)))
        except NotificationError as exc:
            logger.error(f"auth.reset_request: delivery failed for user_id={user.id} ({exc.code})")
        return user
