# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed remember-me tokens carried in a long-lived cookie."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, TimestampSigner, URLSafeTimedSerializer

from inventory.domain.users.entities import RememberMeClaims, Role, User
from inventory.domain.users.exceptions import InvalidRememberTokenError
from inventory.domain.users.repositories import Clock

REMEMBER_ME_SALT = "inventory.remember-me"
DEFAULT_REMEMBER_TTL = timedelta(days=7)


def _clocked_signer(clock: Clock) -> type[TimestampSigner]:
    class ClockedTimestampSigner(TimestampSigner):
        def get_timestamp(self) -> int:
            return int(clock.now().timestamp())

    return ClockedTimestampSigner


class RememberMeSigner:
    def __init__(
        self,
        *,
        secret: str,
        clock: Clock,
        max_age: timedelta = DEFAULT_REMEMBER_TTL,
    ) -> None:
        if not secret:
            raise ValueError("remember-me secret must not be empty")
        self._clock = clock
        self._max_age = max_age
        self._serializer = URLSafeTimedSerializer(
            secret,
            salt=REMEMBER_ME_SALT,
            signer=_clocked_signer(clock),
        )

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    def issue(self, user: User) -> str:
        if user.id is None:
            raise ValueError("cannot issue a remember-me token for an unsaved user")
        payload = {
            "uid": user.id,
            "email": user.email,
            "role": user.role.value,
            "ver": user.remember_version,
        }
        return str(self._serializer.dumps(payload))

    def verify(self, token: str) -> RememberMeClaims:
        if not token:
            raise InvalidRememberTokenError()
        try:
            payload, issued_at = self._serializer.loads(
                token,
                max_age=int(self._max_age.total_seconds()),
                return_timestamp=True,
            )
        except SignatureExpired as exc:
            raise InvalidRememberTokenError(context={"reason": "expired"}) from exc
        except BadSignature as exc:
            raise InvalidRememberTokenError(context={"reason": "bad_signature"}) from exc
        return self._claims(payload, issued_at)

    @staticmethod
    def _claims(payload: Any, issued_at: datetime) -> RememberMeClaims:
        if not isinstance(payload, dict):
            raise InvalidRememberTokenError(context={"reason": "malformed"})
        try:
            return RememberMeClaims(
                user_id=int(payload["uid"]),
                email=str(payload["email"]),
                role=Role(payload["role"]),
                issued_at=issued_at.astimezone(UTC),
                version=int(payload["ver"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidRememberTokenError(context={"reason": "malformed"}) from exc
