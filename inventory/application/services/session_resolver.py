# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-request identity resolution.

A request is authenticated either by a server-side session that carries a
``user_id`` or, failing that, by a signed remember-me cookie. A valid cookie
restores the session: a fresh session id is bound to the user so that later
requests take the cheaper session path.

The resolver is framework agnostic. It works on any mutable mapping that
represents the server-side session; when that mapping exposes
``regenerate()`` the session id is rotated before the identity is written.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from inventory.application.services.remember_me import RememberMeSigner
from inventory.domain.users.entities import User
from inventory.domain.users.exceptions import InvalidRememberTokenError
from inventory.domain.users.repositories import Clock, UserRepository
from inventory.shared.logging import logger

SESSION_USER_ID = "user_id"
SESSION_USER = "user"


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    SESSION_AUTHENTICATED = "session_authenticated"
    COOKIE_RESTORED = "cookie_restored"


@dataclass(slots=True, frozen=True)
class Resolution:
    state: AuthState
    user: User | None = None
    clear_remember_cookie: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def rejected(self) -> bool:
        """The presented remember-me cookie was refused."""

        return self.clear_remember_cookie

    @classmethod
    def anonymous(cls, *, rejected: bool = False) -> Resolution:
        return cls(state=AuthState.ANONYMOUS, clear_remember_cookie=rejected)


def bind_identity(session: MutableMapping[str, Any], user: User) -> None:
    """Write ``user`` into ``session`` under a fresh session id."""

    regenerate = getattr(session, "regenerate", None)
    if callable(regenerate):
        regenerate()
    session[SESSION_USER_ID] = user.id
    session[SESSION_USER] = user.snapshot()


def forget_identity(session: MutableMapping[str, Any]) -> None:
    session.pop(SESSION_USER_ID, None)
    session.pop(SESSION_USER, None)


class SessionResolver:
    def __init__(
        self,
        *,
        users: UserRepository,
        remember_me: RememberMeSigner,
        clock: Clock,
    ) -> None:
        self._users = users
        self._remember_me = remember_me
        self._clock = clock

    def resolve(
        self,
        session: MutableMapping[str, Any],
        remember_token: str | None = None,
    ) -> Resolution:
        try:
            return self._resolve(session, remember_token)
        except Exception:
            logger.exception("auth.resolve: failed, continuing as anonymous")
            return Resolution.anonymous()

    def _resolve(
        self,
        session: MutableMapping[str, Any],
        remember_token: str | None,
    ) -> Resolution:
        user_id = session.get(SESSION_USER_ID)
        if user_id is not None:
            user = self._users.find_by_id(int(user_id))
            if user is not None and user.is_active:
                return Resolution(state=AuthState.SESSION_AUTHENTICATED, user=user)
            logger.info(f"auth.resolve: dropping session identity user_id={user_id}")
            forget_identity(session)

        if not remember_token:
            return Resolution.anonymous()

        return self._restore_from_cookie(session, remember_token)

    def _restore_from_cookie(
        self,
        session: MutableMapping[str, Any],
        remember_token: str,
    ) -> Resolution:
        try:
            claims = self._remember_me.verify(remember_token)
        except InvalidRememberTokenError as exc:
            reason = (exc.context or {}).get("reason", "invalid")
            logger.info(f"auth.resolve: remember-me cookie rejected reason={reason}")
            return Resolution.anonymous(rejected=True)

        user = self._users.find_by_id(claims.user_id)
        if user is None:
            logger.info(f"auth.resolve: remember-me user missing user_id={claims.user_id}")
            return Resolution.anonymous(rejected=True)
        if claims.version != user.remember_version:
            logger.info(f"auth.resolve: remember-me cookie revoked user_id={user.id}")
            return Resolution.anonymous(rejected=True)
        if not user.is_active:
            logger.info(f"auth.resolve: remember-me user inactive user_id={user.id}")
            return Resolution.anonymous()

        bind_identity(session, user)
        self._users.touch_last_login(claims.user_id, self._clock.now())
        logger.info(f"auth.resolve: session restored from remember-me user_id={user.id}")
        return Resolution(state=AuthState.COOKIE_RESTORED, user=user)


__all__ = [
    "AuthState",
    "Resolution",
    "SessionResolver",
    "bind_identity",
    "forget_identity",
]
