# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction applied to every log record before it reaches a sink."""

from __future__ import annotations

import re
from typing import Any

REDACTED = "***REDACTED***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # bcrypt hashes
    (re.compile(r"\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}"), REDACTED),
    # reset links carry the raw token in the path
    (re.compile(r"(/auth/reset/)[A-Fa-f0-9]{16,}"), rf"\1{REDACTED}"),
    # cookie and form style key=value pairs
    (
        re.compile(
            r"\b((?:session[_-]?id|auth[_-]?token|remember[_-]?token|reset[_-]?token|token|secret[_-]?key)"
            r"\s*[:=]\s*['\"]?)[A-Za-z0-9_\-.]{16,}",
            re.IGNORECASE,
        ),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(r"\b((?:confirm_)?password\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE),
        rf"\1{REDACTED}",
    ),
    # credentials inside database urls
    (re.compile(r"\b(postgres(?:ql)?|mysql|mariadb)(\+\w+)?://([^:/\s]+):[^@\s]+@"), rf"\1\2://\3:{REDACTED}@"),
    (re.compile(r"\b[A-Za-z0-9._%+-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"), r"***@\1"),
    (re.compile(r"\b(phone\s*[:=]\s*['\"]?)\+?\d{7,15}", re.IGNORECASE), r"\1***"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """loguru filter: rewrite the message in place and never drop the record."""

    message = record.get("message")
    if message:
        record["message"] = sanitize_message(message)
    return True


__all__ = ["REDACTED", "sanitize_message", "sanitize_record"]
