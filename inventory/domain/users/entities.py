# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Identity records owned by the authentication subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from inventory.domain.exceptions import InvariantViolation


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(slots=True, frozen=True)
class User:
    """A registered account.

    ``reset_token`` and ``reset_token_expires`` are either both set or both
    empty. The password hash and the reset token never leave the process via
    :meth:`to_dict`.
    """

    id: int | None
    username: str
    email: str
    password_hash: str
    role: Role = Role.USER
    is_active: bool = True
    phone: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None
    reset_token: str | None = field(default=None, repr=False)
    reset_token_expires: datetime | None = None
    # bumped on logout; remember-me tokens carrying an older value are dead
    remember_version: int = 0

    def __post_init__(self) -> None:
        if not self.username:
            raise InvariantViolation("username is required", field="username")
        if not self.email:
            raise InvariantViolation("email is required", field="email")
        object.__setattr__(self, "email", self.email.strip().lower())
        object.__setattr__(self, "role", Role(self.role))
        if (self.reset_token is None) != (self.reset_token_expires is None):
            raise InvariantViolation(
                "reset token and expiry must be set together", field="reset_token"
            )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def snapshot(self) -> dict[str, Any]:
        """Denormalized identity stored inside the server-side session."""

        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }


@dataclass(slots=True, frozen=True)
class AuthSession:
    """Server-side session record addressed by an opaque id."""

    id: str
    data: dict[str, Any]
    created_at: datetime
    expires_at: datetime
    user_id: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvariantViolation("session id is required", field="id")
        if self.expires_at < self.created_at:
            raise InvariantViolation("session expires before it was created", field="expires_at")

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True, frozen=True)
class RememberMeClaims:
    user_id: int
    email: str
    role: Role
    issued_at: datetime
    version: int = 0


@dataclass(slots=True, frozen=True)
class ResetToken:
    token: str = field(repr=False)
    expires_at: datetime
