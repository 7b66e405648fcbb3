from datetime import UTC, datetime, timedelta

import pytest
from inventory.domain import InvariantViolation
from inventory.domain.users.entities import AuthSession, Role, User

NOW = datetime(2025, 3, 1, tzinfo=UTC)


def _user(**overrides) -> User:
    fields = {
        "id": 1,
        "username": "alice",
        "email": "Alice@Example.com",
        "password_hash": "$2b$12$secret",
        "created_at": NOW,
    }
    fields.update(overrides)
    return User(**fields)


def test_user_defaults_and_email_normalisation() -> None:
    user = _user()

    assert user.email == "alice@example.com"
    assert user.role is Role.USER
    assert user.is_active is True
    assert user.is_admin is False


def test_user_role_accepts_plain_string() -> None:
    assert _user(role="admin").is_admin is True


def test_reset_token_and_expiry_travel_together() -> None:
    with pytest.raises(InvariantViolation):
        _user(reset_token="abc")
    with pytest.raises(InvariantViolation):
        _user(reset_token_expires=NOW)

    user = _user(reset_token="abc", reset_token_expires=NOW + timedelta(hours=1))
    assert user.reset_token_expires == NOW + timedelta(hours=1)


def test_to_dict_never_exposes_secrets() -> None:
    user = _user(reset_token="abc", reset_token_expires=NOW, phone="5551234567")

    payload = user.to_dict()

    assert "password_hash" not in payload
    assert "reset_token" not in payload
    assert "abc" not in str(payload.values())
    assert payload["created_at"] == NOW.isoformat()
    assert payload["phone"] == "5551234567"


def test_snapshot_is_minimal_identity() -> None:
    assert _user().snapshot() == {
        "id": 1,
        "username": "alice",
        "email": "alice@example.com",
        "role": "user",
    }


def test_user_requires_username_and_email() -> None:
    with pytest.raises(InvariantViolation):
        _user(username="")
    with pytest.raises(InvariantViolation):
        _user(email="")


def test_auth_session_expiry() -> None:
    record = AuthSession(
        id="sid", data={}, created_at=NOW, expires_at=NOW + timedelta(hours=24)
    )

    assert record.is_expired(NOW + timedelta(hours=23)) is False
    assert record.is_expired(NOW + timedelta(hours=24)) is True

    with pytest.raises(InvariantViolation):
        AuthSession(id="sid", data={}, created_at=NOW, expires_at=NOW - timedelta(seconds=1))
