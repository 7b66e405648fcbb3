# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import AuthSession, Role, User


class UserRepository(Protocol):
    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_username(self, username: str) -> User | None: ...
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_username_or_email(self, identifier: str) -> User | None: ...
    def find_by_reset_token(self, token: str) -> User | None: ...
    def add(self, user: User) -> User: ...
    def touch_last_login(self, user_id: int, when: datetime) -> None: ...
    def set_reset_token(self, user_id: int, token: str, expires_at: datetime) -> None: ...
    def complete_password_reset(self, user_id: int, token: str, password_hash: str) -> bool: ...
    def set_active(self, user_id: int, active: bool) -> None: ...
    def set_role(self, user_id: int, role: Role) -> None: ...
    def revoke_remember_tokens(self, user_id: int) -> None: ...


class SessionRepository(Protocol):
    def get(self, session_id: str) -> AuthSession | None: ...
    def save(self, session: AuthSession) -> None: ...
    def delete(self, session_id: str) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class NotificationPort(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...

