# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, flash, g, redirect, request, session, url_for

from inventory.application.services.session_resolver import AuthState, Resolution, SessionResolver
from inventory.domain.users.entities import User
from inventory.infrastructure.audit import AuditAction, audit_log
from inventory.shared.config import AppConfig
from inventory.shared.errors import error_message, wants_json
from inventory.shared.errors.base import AppError
from inventory.shared.logging import logger

RETURN_TO_KEY = "return_to"


class AuthenticationRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            code="authentication_required",
            status=HTTPStatus.UNAUTHORIZED,
        )


class AdminAccessDeniedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            code="admin_access_denied",
            status=HTTPStatus.FORBIDDEN,
        )


def current_user() -> User | None:
    return g.get("user")


def _client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def set_remember_cookie(response: Response, token: str, config: AppConfig) -> None:
    response.set_cookie(
        config.auth.remember_cookie_name,
        token,
        max_age=config.auth.remember_ttl,
        secure=config.cookie_secure,
        httponly=True,
        samesite=config.security.cookie_samesite,
    )


def clear_remember_cookie(response: Response, config: AppConfig) -> None:
    response.delete_cookie(
        config.auth.remember_cookie_name,
        secure=config.cookie_secure,
        httponly=True,
        samesite=config.security.cookie_samesite,
    )


def pop_return_to(default: str) -> str:
    """One-time post-login destination; only local paths are honoured."""

    target = session.pop(RETURN_TO_KEY, None)
    if isinstance(target, str) and target.startswith("/") and not target.startswith("//"):
        return target
    return default


def configure_identity(app: Flask, resolver: SessionResolver, config: AppConfig) -> None:
    remember_cookie = config.auth.remember_cookie_name

    @app.before_request
    def _resolve_identity() -> None:
        resolution = resolver.resolve(session, request.cookies.get(remember_cookie))
        g.resolution = resolution
        g.user = resolution.user
        g.user_id = resolution.user.id if resolution.user else None
        if resolution.state is AuthState.COOKIE_RESTORED:
            audit_log(AuditAction.SESSION_RESTORED, user_id=g.user_id, ip_address=_client_ip())

    @app.after_request
    def _drop_rejected_cookie(response: Response) -> Response:
        resolution: Resolution | None = g.get("resolution")
        if resolution is not None and resolution.clear_remember_cookie:
            clear_remember_cookie(response, config)
        return response

    @app.context_processor
    def _identity_context() -> dict[str, Any]:
        user = current_user()
        return {
            "current_user": user,
            "is_authenticated": user is not None,
            "is_admin": bool(user and user.is_admin),
        }


def login_required(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if current_user() is None:
            logger.info(f"auth.guard: anonymous request to {request.method} {request.path}")
            if wants_json():
                raise AuthenticationRequiredError()
            if request.method == "GET":
                session[RETURN_TO_KEY] = request.full_path if request.query_string else request.path
            flash(error_message("authentication_required"), "error")
            return redirect(url_for("auth.show_login"))
        return func(*args, **kwargs)

    return wrapper


def admin_required(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        user = current_user()
        if user is not None and not user.is_admin:
            logger.warning(f"Admin access denied: user {user.id} is not admin")
            raise AdminAccessDeniedError()
        return func(*args, **kwargs)

    return login_required(wrapper)


def anonymous_only(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if current_user() is not None:
            return redirect(url_for("home.index"))
        return func(*args, **kwargs)

    return wrapper


__all__ = [
    "AdminAccessDeniedError",
    "AuthenticationRequiredError",
    "admin_required",
    "anonymous_only",
    "clear_remember_cookie",
    "configure_identity",
    "current_user",
    "login_required",
    "pop_return_to",
    "set_remember_cookie",
]
