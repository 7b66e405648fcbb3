from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from datetime import UTC, datetime, timedelta

_TMP_DIR = tempfile.mkdtemp(prefix="inventory-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "app.log")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-suite"
os.environ.pop("EMAIL_HOST", None)
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("REMEMBER_ME_SECRET", None)

import pytest  # noqa: E402

from inventory.domain.users.entities import AuthSession, Role, User  # noqa: E402
from inventory.domain.users.repositories import (  # noqa: E402
    Clock,
    NotificationPort,
    PasswordHasher,
    SessionRepository,
    UserRepository,
)
from inventory.shared.errors.base import DuplicateKeyError, NotificationError  # noqa: E402

START = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FrozenClock(Clock):
    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1
        self.raise_duplicate_on_add = False

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def find_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._users.values() if u.email == email), None)

    def find_by_username_or_email(self, identifier: str) -> User | None:
        return self.find_by_username(identifier) or self.find_by_email(identifier)

    def find_by_reset_token(self, token: str) -> User | None:
        return next((u for u in self._users.values() if u.reset_token == token), None)

    def add(self, user: User) -> User:
        if self.raise_duplicate_on_add:
            raise DuplicateKeyError("users.email")
        if self.find_by_username(user.username) or self.find_by_email(user.email):
            raise DuplicateKeyError("users.username")
        stored = replace(user, id=self._seq)
        self._users[stored.id] = stored
        self._seq += 1
        return stored

    def touch_last_login(self, user_id: int, when: datetime) -> None:
        self._users[user_id] = replace(self._users[user_id], last_login=when)

    def set_reset_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        self._users[user_id] = replace(
            self._users[user_id], reset_token=token, reset_token_expires=expires_at
        )

    def complete_password_reset(self, user_id: int, token: str, password_hash: str) -> bool:
        user = self._users.get(user_id)
        if user is None or user.reset_token != token:
            return False
        self._users[user_id] = replace(
            user, password_hash=password_hash, reset_token=None, reset_token_expires=None
        )
        return True

    def set_active(self, user_id: int, active: bool) -> None:
        self._users[user_id] = replace(self._users[user_id], is_active=active)

    def set_role(self, user_id: int, role: Role) -> None:
        self._users[user_id] = replace(self._users[user_id], role=role)

    def revoke_remember_tokens(self, user_id: int) -> None:
        user = self._users[user_id]
        self._users[user_id] = replace(user, remember_version=user.remember_version + 1)


class InMemorySessionRepository(SessionRepository):
    def __init__(self) -> None:
        self.records: dict[str, AuthSession] = {}

    def get(self, session_id: str) -> AuthSession | None:
        return self.records.get(session_id)

    def save(self, session: AuthSession) -> None:
        self.records[session.id] = session

    def delete(self, session_id: str) -> None:
        self.records.pop(session_id, None)


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class RecordingNotifier(NotificationPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError("smtp down")
        self.sent.append((to, subject, body))


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def sessions() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def make_user(users: InMemoryUserRepository, hasher: DeterministicHasher):
    def _make(
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = "Secret123",
        **overrides,
    ) -> User:
        return users.add(
            User(
                id=None,
                username=username,
                email=email,
                password_hash=hasher.hash(password),
                created_at=START,
                **overrides,
            )
        )

    return _make
