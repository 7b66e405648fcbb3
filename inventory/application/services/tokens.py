# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Single-use password reset tokens."""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta

from inventory.domain.users.entities import ResetToken
from inventory.domain.users.repositories import Clock

RESET_TOKEN_BYTES = 32
DEFAULT_RESET_TTL = timedelta(hours=1)


class ResetTokenIssuer:
    def __init__(self, *, clock: Clock, ttl: timedelta = DEFAULT_RESET_TTL) -> None:
        self._clock = clock
        self._ttl = ttl

    def issue(self) -> ResetToken:
        """Return a 256-bit hex token expiring exactly one TTL from now."""

        return ResetToken(
            token=secrets.token_hex(RESET_TOKEN_BYTES),
            expires_at=self._clock.now() + self._ttl,
        )

    @staticmethod
    def is_valid(
        stored: str | None,
        expires_at: datetime | None,
        presented: str,
        now: datetime,
    ) -> bool:
        if not stored or expires_at is None or not presented:
            return False
        if not hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8")):
            return False
        return now <= expires_at
