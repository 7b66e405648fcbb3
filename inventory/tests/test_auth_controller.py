from __future__ import annotations

from datetime import UTC, datetime
from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from inventory.application.use_cases.users.login_user import LoginOutcome, LoginUserUseCase
from inventory.domain.users.entities import User
from inventory.domain.users.exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
)
from inventory.interfaces.http.controllers.auth_controller import AuthController
from inventory.interfaces.http.controllers.home_controller import HomeController
from inventory.shared.config import load_config
from inventory.shared.middleware.error_handler import configure_error_handling


def _user() -> User:
    return User(
        id=1,
        username="alice",
        email="alice@example.com",
        password_hash="hash",
        created_at=datetime.now(UTC),
    )


@pytest.fixture()
def use_cases() -> dict[str, MagicMock]:
    return {
        "register_use_case": MagicMock(),
        "login_use_case": MagicMock(),
        "logout_use_case": MagicMock(),
        "request_reset_use_case": MagicMock(),
        "confirm_reset_use_case": MagicMock(),
    }


@pytest.fixture()
def flask_app(use_cases: dict[str, MagicMock]) -> Flask:
    # resolve templates relative to the inventory package
    app = Flask("inventory.app")
    app.secret_key = "controller-tests"
    configure_error_handling(app)
    controller = AuthController(config=load_config(), **use_cases)
    app.register_blueprint(controller.as_blueprint())
    app.register_blueprint(HomeController().as_blueprint())
    return app


def test_register_redirects_to_login(flask_app: Flask, use_cases) -> None:
    use_cases["register_use_case"].execute.return_value = _user()

    with flask_app.test_client() as client:
        response = client.post(
            "/auth/register",
            data={
                "username": " alice ",
                "email": "Alice@Example.com",
                "password": "Secret123",
                "confirm_password": "Secret123",
                "phone": "",
            },
        )

    assert response.status_code == 302
    assert response.headers["Location"] == "/auth/login"
    use_cases["register_use_case"].execute.assert_called_once_with(
        "alice", "alice@example.com", "Secret123", None
    )


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"password": "secret123", "confirm_password": "secret123"}, "one uppercase letter"),
        ({"password": "Sec1", "confirm_password": "Sec1"}, "at least 6 characters"),
        ({"confirm_password": "Secret124"}, "Passwords do not match"),
        ({"username": "al"}, "Username must be 3-30 characters"),
        ({"username": "al ice!"}, "letters, numbers, and underscores"),
        ({"email": "not-an-email"}, "Please provide a valid email"),
        ({"phone": "12345"}, "Phone number must be 10-11 digits"),
    ],
)
def test_register_validation_rerenders_form(flask_app: Flask, use_cases, overrides, message) -> None:
    data = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "Secret123",
        "confirm_password": "Secret123",
    }
    data.update(overrides)

    with flask_app.test_client() as client:
        response = client.post("/auth/register", data=data)

    assert response.status_code == 422
    assert message in response.get_data(as_text=True)
    use_cases["register_use_case"].execute.assert_not_called()


def test_register_duplicate_returns_conflict(flask_app: Flask, use_cases) -> None:
    use_cases["register_use_case"].execute.side_effect = DuplicateIdentityError()

    with flask_app.test_client() as client:
        response = client.post(
            "/auth/register",
            data={
                "username": "alice",
                "email": "alice@example.com",
                "password": "Secret123",
                "confirm_password": "Secret123",
            },
        )

    body = response.get_data(as_text=True)
    assert response.status_code == 409
    assert "User with this email or username already exists" in body
    assert 'value="alice@example.com"' in body
    assert "Secret123" not in body


def test_login_invalid_payload_returns_422_json(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = client.post("/auth/login", json={"identifier": "", "password": ""})

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "validation_error"
    assert "password" in payload["error"]["context"]["fields"]


def test_login_failure_renders_generic_message(flask_app: Flask, use_cases) -> None:
    use_cases["login_use_case"].execute.side_effect = InvalidCredentialsError()

    with flask_app.test_client() as client:
        response = client.post("/auth/login", data={"identifier": "alice", "password": "nope"})

    assert response.status_code == 401
    assert "Invalid credentials" in response.get_data(as_text=True)


def test_login_failure_json(flask_app: Flask, use_cases) -> None:
    use_cases["login_use_case"].execute.side_effect = InvalidCredentialsError()

    with flask_app.test_client() as client:
        response = client.post("/auth/login", json={"identifier": "alice", "password": "nope"})

    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "invalid_credentials"


def test_login_sets_remember_cookie_when_requested(flask_app: Flask, use_cases) -> None:
    login = cast(LoginUserUseCase, use_cases["login_use_case"])
    login.execute.return_value = LoginOutcome(user=_user(), remember_token="signed-token")

    with flask_app.test_client() as client:
        response = client.post(
            "/auth/login",
            data={"email": "alice@example.com", "password": "Secret123", "remember_me": "on"},
        )
        cookie = client.get_cookie("auth_token")

    assert response.status_code == 302
    assert response.headers["Location"] == "/"
    login.execute.assert_called_once_with("alice@example.com", "Secret123", True)
    assert cookie is not None and cookie.value == "signed-token"
    assert cookie.http_only


def test_login_without_remember_sets_no_cookie(flask_app: Flask, use_cases) -> None:
    use_cases["login_use_case"].execute.return_value = LoginOutcome(user=_user())

    with flask_app.test_client() as client:
        client.post("/auth/login", data={"identifier": "alice", "password": "Secret123"})

        assert client.get_cookie("auth_token") is None


def test_forgot_always_answers_the_same(flask_app: Flask, use_cases) -> None:
    use_cases["request_reset_use_case"].execute.return_value = None

    with flask_app.test_client() as client:
        response = client.post("/auth/forgot", data={"email": "ghost@example.com"})

    assert response.status_code == 302
    assert response.headers["Location"] == "/auth/login"
    args, kwargs = use_cases["request_reset_use_case"].execute.call_args
    assert args == ("ghost@example.com",)
    with flask_app.test_request_context():
        assert kwargs["reset_link"]("abc") == "http://localhost/auth/reset/abc"


def test_show_reset_with_bad_token_redirects_to_forgot(flask_app: Flask, use_cases) -> None:
    use_cases["confirm_reset_use_case"].validate.side_effect = InvalidOrExpiredTokenError()

    with flask_app.test_client() as client:
        response = client.get("/auth/reset/deadbeef")

    assert response.status_code == 302
    assert response.headers["Location"] == "/auth/forgot"


def test_reset_success_redirects_to_login(flask_app: Flask, use_cases) -> None:
    use_cases["confirm_reset_use_case"].execute.return_value = _user()

    with flask_app.test_client() as client:
        response = client.post(
            "/auth/reset/abc", data={"password": "NewSecret1", "confirm_password": "NewSecret1"}
        )

    assert response.status_code == 302
    assert response.headers["Location"] == "/auth/login"
    use_cases["confirm_reset_use_case"].execute.assert_called_once_with(
        "abc", "NewSecret1", "NewSecret1"
    )


def test_logout_clears_remember_cookie(flask_app: Flask, use_cases) -> None:
    with flask_app.test_client() as client:
        client.set_cookie("auth_token", "signed-token")
        response = client.post("/auth/logout")

        assert client.get_cookie("auth_token") is None

    assert response.status_code == 302
    assert response.headers["Location"] == "/"
    use_cases["logout_use_case"].execute.assert_called_once()
