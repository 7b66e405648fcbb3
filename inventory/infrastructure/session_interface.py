# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Server-side Flask sessions.

The browser only ever holds a signed, opaque session id. Everything else
(the bound user, flash messages, the one-time ``return_to`` location) lives
in the ``sessions`` table. Expiry is fixed at creation time and enforced
lazily: an expired record is deleted the next time its id is presented.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Any

from flask import Flask, Request, Response
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from inventory.domain.users.entities import AuthSession
from inventory.domain.users.repositories import Clock, SessionRepository
from inventory.shared.errors.base import StoreUnavailableError
from inventory.shared.logging import logger

SESSION_ID_BYTES = 32
SESSION_SALT = "inventory.session"


class ServerSession(CallbackDict, SessionMixin):
    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        *,
        sid: str | None = None,
        created_at: datetime | None = None,
    ) -> None:
        def on_update(self: ServerSession) -> None:
            self.modified = True
            self.accessed = True

        super().__init__(initial, on_update)
        self.sid = sid
        self.created_at = created_at
        self.new = sid is None
        self.modified = False
        self.accessed = False
        self.discarded_sids: list[str] = []

    def regenerate(self, *, discard: bool = True) -> None:
        """Move the contents to a fresh id, assigned when the response is saved."""

        if self.sid is not None and discard:
            self.discarded_sids.append(self.sid)
        self.sid = None
        self.created_at = None
        self.new = True
        self.modified = True


class ServerSessionInterface(SessionInterface):
    def __init__(
        self,
        *,
        sessions: SessionRepository,
        clock: Clock,
        ttl: timedelta,
        cookie_name: str,
        secure: bool,
        samesite: str,
    ) -> None:
        self._sessions = sessions
        self._clock = clock
        self._ttl = ttl
        self._cookie_name = cookie_name
        self._secure = secure
        self._samesite = samesite

    def _signer(self, app: Flask) -> Signer | None:
        if not app.secret_key:
            return None
        return Signer(app.secret_key, salt=SESSION_SALT)

    def open_session(self, app: Flask, request: Request) -> ServerSession | None:
        signer = self._signer(app)
        if signer is None:
            return None

        cookie = request.cookies.get(self._cookie_name)
        if not cookie:
            return ServerSession()

        try:
            sid = signer.unsign(cookie).decode("utf-8")
        except BadSignature:
            logger.info("session.open: cookie signature rejected")
            return self._stale()

        try:
            record = self._sessions.get(sid)
        except StoreUnavailableError:
            logger.error("session.open: store unavailable, continuing without session")
            return ServerSession()

        if record is None:
            return self._stale()
        if record.is_expired(self._clock.now()):
            logger.info("session.open: expired session discarded")
            self._delete_quietly(sid)
            return self._stale()

        return ServerSession(record.data, sid=record.id, created_at=record.created_at)

    @staticmethod
    def _stale() -> ServerSession:
        # empty and modified, so the dead cookie is removed on save
        session = ServerSession()
        session.modified = True
        return session

    def _delete_quietly(self, sid: str) -> None:
        try:
            self._sessions.delete(sid)
        except StoreUnavailableError:
            logger.error("session.delete: store unavailable, record left to expire")

    def delete_cookie(self, app: Flask, response: Response) -> None:
        response.delete_cookie(
            self._cookie_name,
            domain=self.get_cookie_domain(app),
            path=self.get_cookie_path(app),
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )

    def save_session(self, app: Flask, session: SessionMixin, response: Response) -> None:
        if not isinstance(session, ServerSession):
            return

        if session.accessed:
            response.vary.add("Cookie")

        for sid in session.discarded_sids:
            self._delete_quietly(sid)
        session.discarded_sids.clear()

        if not session:
            if session.modified:
                if session.sid is not None:
                    self._delete_quietly(session.sid)
                self.delete_cookie(app, response)
            return

        if not session.modified:
            return

        signer = self._signer(app)
        if signer is None:
            return

        now = self._clock.now()
        if session.sid is None or session.created_at is None:
            session.sid = secrets.token_urlsafe(SESSION_ID_BYTES)
            session.created_at = now
        expires_at = session.created_at + self._ttl

        user_id = session.get("user_id")
        self._sessions.save(
            AuthSession(
                id=session.sid,
                user_id=int(user_id) if user_id is not None else None,
                data=dict(session),
                created_at=session.created_at,
                expires_at=expires_at,
            )
        )

        response.set_cookie(
            self._cookie_name,
            signer.sign(session.sid).decode("utf-8"),
            max_age=max(0, int((expires_at - now).total_seconds())),
            domain=self.get_cookie_domain(app),
            path=self.get_cookie_path(app),
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )


__all__ = ["ServerSession", "ServerSessionInterface"]
