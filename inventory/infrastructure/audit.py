# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail.

Authentication events are written twice: as a log line and as a row in
``audit_logs``. A failure to persist the row never fails the request that
produced the event.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from inventory.infrastructure.db.models import AuditLog
from inventory.infrastructure.db.session import session_scope
from inventory.shared.errors.base import InfrastructureError
from inventory.shared.logging import logger


class AuditAction(str, Enum):
    REGISTER = "register"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    SESSION_RESTORED = "session_restored"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_RESET_FAILED = "password_reset_failed"
    ADMIN_GRANTED = "admin_granted"


_MASKED_KEYS = ("password", "token", "secret", "phone")
_MAX_DETAILS = 2048


def redact_details(details: Mapping[str, Any] | None) -> dict[str, Any]:
    if not details:
        return {}
    return {
        key: "***REDACTED***" if any(part in key.lower() for part in _MASKED_KEYS) else value
        for key, value in details.items()
    }


@dataclass(slots=True, frozen=True)
class AuditEntry:
    action: AuditAction
    success: bool = True
    user_id: int | None = None
    ip_address: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        text = f"AUDIT {self.action.value} user_id={self.user_id} ip={self.ip_address} success={self.success}"
        return f"{text} details={self.details}" if self.details else text


class AuditTrail:
    def record(self, entry: AuditEntry) -> None:
        if entry.success:
            logger.info(entry.describe())
        else:
            logger.warning(entry.describe())

        try:
            with session_scope() as session:
                session.add(
                    AuditLog(
                        action=entry.action.value,
                        user_id=entry.user_id,
                        ip_address=entry.ip_address,
                        success=entry.success,
                        details_json=self._encode(entry.details),
                    )
                )
        except InfrastructureError as exc:
            logger.warning(f"audit: row not stored action={entry.action.value} error={exc.code}")

    @staticmethod
    def _encode(details: dict[str, Any]) -> str | None:
        if not details:
            return None
        return json.dumps(details, default=str)[:_MAX_DETAILS]


_trail = AuditTrail()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: Mapping[str, Any] | None = None,
    success: bool = True,
) -> None:
    _trail.record(
        AuditEntry(
            action=action,
            success=success,
            user_id=user_id,
            ip_address=ip_address,
            details=redact_details(details),
        )
    )


__all__ = ["AuditAction", "AuditEntry", "AuditTrail", "audit_log", "redact_details"]
