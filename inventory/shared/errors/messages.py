# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""User facing wording for error codes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .validation_types import ValidationErrorType

ERROR_MESSAGES: dict[str, str] = {
    "duplicate_identity": "User with this email or username already exists",
    "invalid_credentials": "Invalid credentials",
    "invalid_or_expired_token": "Password reset token is invalid or has expired",
    "password_mismatch": "Passwords do not match",
    "validation_error": "Please correct the highlighted fields",
    "store_unavailable": "Service temporarily unavailable, please try again later",
    "corrupt_credential": "Server error, please try again later",
    "authentication_required": "Please log in to access this page",
    "admin_access_denied": "Access denied. Admin privileges required.",
    "not_found": "Page not found",
    "internal_error": "Server error, please try again later",
}

_FIELD_MESSAGES: dict[str, str] = {
    "username": "Username must be 3-30 characters and contain only letters, numbers and underscores",
    "email": "Please provide a valid email",
    "phone": "Phone number must be 10-11 digits",
    "password": "Password must be at least 6 characters and contain at least one lowercase letter, one uppercase letter, and one number",
    "confirm_password": "Passwords do not match",
    "identifier": "Email or username is required",
    "token": "Password reset token is invalid or has expired",
}

_CUSTOM_TYPES = {
    value
    for name, value in vars(ValidationErrorType).items()
    if not name.startswith("_")
}


def error_message(code: str) -> str:
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES["internal_error"])


def field_error_message(field: str, error: Mapping[str, Any]) -> str:
    if error.get("type") == "missing":
        return _FIELD_MESSAGES.get(field, f"{field} is required")
    if error.get("type") in _CUSTOM_TYPES and error.get("msg"):
        return str(error["msg"])
    return _FIELD_MESSAGES.get(field, str(error.get("msg") or "Invalid value"))


__all__ = ["ERROR_MESSAGES", "error_message", "field_error_message"]
