# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError
from .messages import field_error_message


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    errors_list = []
    fields_set = set()

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)

        if field_path:
            fields_set.add(field_path)

        error_entry = {
            "field": field_path or "unknown",
            "type": error.get("type", "value_error"),
            "message": field_error_message(field_path, error),
        }

        if "ctx" in error:
            error_entry["ctx"] = {k: str(v) for k, v in error["ctx"].items()}

        errors_list.append(error_entry)

    return {
        "fields": sorted(fields_set),
        "errors": errors_list,
    }


def to_validation_error(exc: PydanticValidationError) -> ValidationError:
    return ValidationError(context=format_pydantic_errors(exc))


def raise_validation_error(exc: PydanticValidationError) -> None:
    raise to_validation_error(exc) from exc


def validation_messages(error: ValidationError) -> list[str]:
    """Human readable messages in field order, without duplicates."""

    context = error.context or {}
    messages: list[str] = []
    for entry in context.get("errors", []):
        message = entry.get("message")
        if message and message not in messages:
            messages.append(message)
    return messages


__all__ = [
    "format_pydantic_errors",
    "raise_validation_error",
    "to_validation_error",
    "validation_messages",
]
