"""Password hashing strategies."""

from __future__ import annotations

import bcrypt

from inventory.domain.users.repositories import PasswordHasher
from inventory.shared.errors.base import CorruptCredentialError
from inventory.shared.logging import logger

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        if not password:
            return False
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password_bytes, hashed.encode("utf-8"))
        except ValueError as exc:
            logger.error(f"password.verify: stored digest is malformed ({exc})")
            raise CorruptCredentialError() from exc
