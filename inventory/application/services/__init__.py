# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .password_hashing import BcryptPasswordHasher
from .remember_me import RememberMeSigner
from .session_resolver import AuthState, Resolution, SessionResolver
from .tokens import ResetTokenIssuer

__all__ = [
    "AuthState",
    "BcryptPasswordHasher",
    "RememberMeSigner",
    "ResetTokenIssuer",
    "Resolution",
    "SessionResolver",
]
