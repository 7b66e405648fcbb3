# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from inventory.shared.errors.base import DomainError


class DuplicateIdentityError(DomainError):
    code = "duplicate_identity"
    status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class AccountInactiveError(InvalidCredentialsError):
    """Deactivated account; reported to clients exactly like bad credentials."""


class InvalidOrExpiredTokenError(DomainError):
    code = "invalid_or_expired_token"
    status = HTTPStatus.BAD_REQUEST


class PasswordMismatchError(DomainError):
    code = "password_mismatch"
    status = HTTPStatus.BAD_REQUEST


class InvalidRememberTokenError(DomainError):
    code = "invalid_remember_token"
    status = HTTPStatus.UNAUTHORIZED


__all__ = [
    "AccountInactiveError",
    "DuplicateIdentityError",
    "InvalidCredentialsError",
    "InvalidOrExpiredTokenError",
    "InvalidRememberTokenError",
    "PasswordMismatchError",
]
