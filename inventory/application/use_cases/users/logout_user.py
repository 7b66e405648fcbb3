"""Use-case for ending a server-side session."""

from __future__ import annotations

from inventory.domain.users.repositories import SessionRepository, UserRepository
from inventory.shared.logging import logger


class LogoutUserUseCase:
    """Destroy the session record and revoke outstanding remember-me tokens.

    Logout always succeeds from the caller's point of view: store failures are
    logged and the request goes on to clear the cookies.
    """

    def __init__(self, *, sessions: SessionRepository, users: UserRepository) -> None:
        self._sessions = sessions
        self._users = users

    def execute(self, session_id: str | None, user_id: int | None = None) -> None:
        if session_id:
            try:
                self._sessions.delete(session_id)
            except Exception:
                logger.exception("auth.logout: could not delete session record, it will expire on its own")

        if user_id is not None:
            try:
                self._users.revoke_remember_tokens(user_id)
            except Exception:
                logger.exception(f"auth.logout: could not revoke remember-me tokens user_id={user_id}")
