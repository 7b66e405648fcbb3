from __future__ import annotations

from datetime import timedelta

import pytest

from inventory.application.services.remember_me import RememberMeSigner
from inventory.application.services.session_resolver import (
    AuthState,
    SessionResolver,
    bind_identity,
)
from inventory.domain.users.exceptions import InvalidRememberTokenError


class FakeSession(dict):
    """Mutable session that records id rotations."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.regenerated = 0

    def regenerate(self) -> None:
        self.regenerated += 1


@pytest.fixture()
def signer(clock) -> RememberMeSigner:
    return RememberMeSigner(secret="remember-secret", clock=clock)


@pytest.fixture()
def resolver(users, signer, clock) -> SessionResolver:
    return SessionResolver(users=users, remember_me=signer, clock=clock)


def test_empty_request_is_anonymous(resolver) -> None:
    resolution = resolver.resolve(FakeSession(), None)

    assert resolution.state is AuthState.ANONYMOUS
    assert resolution.user is None
    assert resolution.rejected is False


def test_session_with_active_user_is_authenticated(resolver, make_user) -> None:
    user = make_user()
    session = FakeSession(user_id=user.id)

    resolution = resolver.resolve(session, None)

    assert resolution.state is AuthState.SESSION_AUTHENTICATED
    assert resolution.user == user
    assert session.regenerated == 0


def test_session_wins_over_remember_cookie(resolver, make_user, signer) -> None:
    alice = make_user()
    bob = make_user("bob", "bob@example.com")
    session = FakeSession(user_id=alice.id)

    resolution = resolver.resolve(session, signer.issue(bob))

    assert resolution.user.id == alice.id


def test_inactive_session_user_is_dropped(resolver, make_user, users) -> None:
    user = make_user()
    users.set_active(user.id, False)
    session = FakeSession(user_id=user.id, user=user.snapshot(), return_to="/account")

    resolution = resolver.resolve(session, None)

    assert resolution.state is AuthState.ANONYMOUS
    assert "user_id" not in session
    assert "user" not in session
    assert session["return_to"] == "/account"


def test_missing_session_user_is_dropped(resolver) -> None:
    session = FakeSession(user_id=999)

    assert resolver.resolve(session, None).state is AuthState.ANONYMOUS
    assert "user_id" not in session


def test_remember_cookie_restores_session(resolver, make_user, signer, users, clock) -> None:
    user = make_user()
    clock.advance(days=6)
    session = FakeSession()

    resolution = resolver.resolve(session, signer.issue(user))

    assert resolution.state is AuthState.COOKIE_RESTORED
    assert resolution.user.id == user.id
    assert session["user_id"] == user.id
    assert session["user"] == {
        "id": user.id,
        "username": "alice",
        "email": "alice@example.com",
        "role": "user",
    }
    assert session.regenerated == 1
    assert users.find_by_id(user.id).last_login == clock.now()


def test_expired_remember_cookie_is_rejected(resolver, make_user, signer, clock) -> None:
    token = signer.issue(make_user())
    clock.advance(days=7, seconds=1)
    session = FakeSession()

    resolution = resolver.resolve(session, token)

    assert resolution.state is AuthState.ANONYMOUS
    assert resolution.rejected is True
    assert resolution.clear_remember_cookie is True
    assert session == {}


def test_tampered_remember_cookie_is_rejected(resolver, make_user, signer) -> None:
    token = signer.issue(make_user())

    resolution = resolver.resolve(FakeSession(), token[:-2] + "xx")

    assert resolution.rejected is True


def test_cookie_for_other_secret_is_rejected(resolver, make_user, clock) -> None:
    forged = RememberMeSigner(secret="someone-else", clock=clock).issue(make_user())

    assert resolver.resolve(FakeSession(), forged).rejected is True


def test_cookie_for_inactive_user_stays_anonymous(resolver, make_user, signer, users) -> None:
    user = make_user()
    token = signer.issue(user)
    users.set_active(user.id, False)
    session = FakeSession()

    resolution = resolver.resolve(session, token)

    assert resolution.state is AuthState.ANONYMOUS
    assert resolution.rejected is False
    assert "user_id" not in session


def test_cookie_for_deleted_user_is_rejected(resolver, make_user, signer, users) -> None:
    user = make_user()
    token = signer.issue(user)
    users._users.clear()

    assert resolver.resolve(FakeSession(), token).rejected is True


def test_resolver_never_raises(signer, clock, make_user) -> None:
    class ExplodingUsers:
        def find_by_id(self, user_id: int):
            raise RuntimeError("database on fire")

    resolver = SessionResolver(users=ExplodingUsers(), remember_me=signer, clock=clock)

    resolution = resolver.resolve(FakeSession(user_id=1), "garbage")

    assert resolution.state is AuthState.ANONYMOUS
    assert resolution.user is None


def test_bind_identity_works_without_regenerate(make_user) -> None:
    user = make_user()
    session: dict = {}

    bind_identity(session, user)

    assert session["user_id"] == user.id
    assert session["user"]["username"] == "alice"


def test_remember_max_age_is_configurable(make_user, clock) -> None:
    signer = RememberMeSigner(secret="s", clock=clock, max_age=timedelta(hours=1))
    token = signer.issue(make_user())
    clock.advance(hours=2)

    with pytest.raises(InvalidRememberTokenError):
        signer.verify(token)


def test_revoked_remember_cookie_is_rejected(resolver, make_user, signer, users) -> None:
    user = make_user()
    token = signer.issue(user)
    users.revoke_remember_tokens(user.id)
    session = FakeSession()

    resolution = resolver.resolve(session, token)

    assert resolution.state is AuthState.ANONYMOUS
    assert resolution.rejected is True
    assert session == {}

    fresh = signer.issue(users.find_by_id(user.id))
    assert resolver.resolve(FakeSession(), fresh).state is AuthState.COOKIE_RESTORED
