# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, flash, jsonify, redirect, render_template, request, session, url_for
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from inventory.application.services.session_resolver import bind_identity
from inventory.application.use_cases.users.confirm_password_reset import \
    ConfirmPasswordResetUseCase
from inventory.application.use_cases.users.login_user import LoginUserUseCase
from inventory.application.use_cases.users.logout_user import LogoutUserUseCase
from inventory.application.use_cases.users.register_user import \
    RegisterUserUseCase
from inventory.application.use_cases.users.request_password_reset import \
    RequestPasswordResetUseCase
from inventory.domain.users.exceptions import (DuplicateIdentityError,
                                               InvalidCredentialsError,
                                               InvalidOrExpiredTokenError,
                                               PasswordMismatchError)
from inventory.infrastructure.audit import AuditAction, audit_log
from inventory.infrastructure.auth_middleware import (anonymous_only,
                                                      clear_remember_cookie,
                                                      current_user,
                                                      pop_return_to,
                                                      set_remember_cookie)
from inventory.interfaces.http.dto.auth import (ForgotPasswordRequestDTO,
                                                LoginRequestDTO,
                                                RegisterRequestDTO,
                                                ResetPasswordRequestDTO)
from inventory.shared.config import AppConfig
from inventory.shared.errors import error_message, wants_json
from inventory.shared.errors.base import AppError, ValidationError
from inventory.shared.errors.validation import to_validation_error, validation_messages
from inventory.shared.logging import logger

RESET_REQUESTED_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent"
)

# never echoed back into a re-rendered form
_SECRET_FIELDS = {"password", "confirm_password"}


def _get_client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def _payload() -> dict[str, Any]:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


def _parse(model: type[BaseModel], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise to_validation_error(exc) from exc


def _form_values(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in _SECRET_FIELDS}


def _rejected(exc: AppError, template: str, **context: Any) -> tuple[Response | str, int]:
    """Re-render ``template`` with flash messages, or hand JSON clients the error."""

    if wants_json():
        raise exc
    if isinstance(exc, ValidationError):
        for message in validation_messages(exc) or [error_message(exc.code)]:
            flash(message, "error")
    else:
        flash(error_message(exc.code), "error")
    return render_template(template, **context), int(exc.status)


def _succeeded(message: str, location: str) -> Response:
    if wants_json():
        return jsonify({"success": True, "message": message, "redirect": location})
    flash(message, "success")
    return redirect(location)


class AuthController:
    def __init__(
        self,
        *,
        config: AppConfig,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        request_reset_use_case: RequestPasswordResetUseCase,
        confirm_reset_use_case: ConfirmPasswordResetUseCase,
    ) -> None:
        self._config = config
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._request_reset_use_case = request_reset_use_case
        self._confirm_reset_use_case = confirm_reset_use_case

    def show_register(self) -> str:
        return render_template("auth/register.html", form={})

    def register(self) -> Any:
        data = _payload()
        try:
            dto: RegisterRequestDTO = _parse(RegisterRequestDTO, data)
            user = self._register_use_case.execute(
                dto.username, dto.email, dto.password, dto.phone
            )
        except (ValidationError, DuplicateIdentityError) as exc:
            audit_log(
                AuditAction.REGISTER,
                ip_address=_get_client_ip(),
                details={"username": data.get("username"), "error": exc.code},
                success=False,
            )
            return _rejected(exc, "auth/register.html", form=_form_values(data))

        audit_log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=_get_client_ip(),
            details={"username": user.username},
            success=True,
        )
        logger.info(f"auth.register: ok user_id={user.id}")
        return _succeeded("Registration successful! Please log in", url_for("auth.show_login"))

    def show_login(self) -> str:
        return render_template("auth/login.html", form={})

    def login(self) -> Any:
        data = _payload()
        ip_address = _get_client_ip()
        try:
            dto: LoginRequestDTO = _parse(LoginRequestDTO, data)
            outcome = self._login_use_case.execute(dto.identifier, dto.password, dto.remember_me)
        except (ValidationError, InvalidCredentialsError) as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"identifier": data.get("identifier") or data.get("email"), "error": exc.code},
                success=False,
            )
            return _rejected(exc, "auth/login.html", form=_form_values(data))

        user = outcome.user
        destination = pop_return_to(url_for("home.index"))
        bind_identity(session, user)

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=user.id,
            ip_address=ip_address,
            details={"remember_me": outcome.remember_token is not None},
            success=True,
        )
        logger.info(f"auth.login: ok user_id={user.id} remember_me={outcome.remember_token is not None}")

        response = _succeeded(f"Welcome back, {user.username}!", destination)
        if outcome.remember_token:
            set_remember_cookie(response, outcome.remember_token, self._config)
        return response

    def logout(self) -> Response:
        user = current_user()
        self._logout_use_case.execute(getattr(session, "sid", None), user.id if user else None)

        regenerate = getattr(session, "regenerate", None)
        if callable(regenerate):
            regenerate(discard=False)
        session.clear()

        audit_log(
            AuditAction.LOGOUT,
            user_id=user.id if user else None,
            ip_address=_get_client_ip(),
            success=True,
        )
        logger.info("auth.logout: ok")

        response = _succeeded("You have been logged out", url_for("home.index"))
        clear_remember_cookie(response, self._config)
        return response

    def show_forgot(self) -> str:
        return render_template("auth/forgot.html", form={})

    def forgot(self) -> Any:
        data = _payload()
        try:
            dto: ForgotPasswordRequestDTO = _parse(ForgotPasswordRequestDTO, data)
        except ValidationError as exc:
            return _rejected(exc, "auth/forgot.html", form=_form_values(data))

        user = self._request_reset_use_case.execute(
            dto.email,
            reset_link=lambda token: url_for("auth.show_reset", token=token, _external=True),
        )
        audit_log(
            AuditAction.PASSWORD_RESET_REQUESTED,
            user_id=user.id if user else None,
            ip_address=_get_client_ip(),
            success=user is not None,
        )
        return _succeeded(RESET_REQUESTED_MESSAGE, url_for("auth.show_login"))

    def show_reset(self, token: str) -> Any:
        try:
            self._confirm_reset_use_case.validate(token)
        except InvalidOrExpiredTokenError as exc:
            if wants_json():
                raise
            flash(error_message(exc.code), "error")
            return redirect(url_for("auth.show_forgot"))
        return render_template("auth/reset.html", token=token)

    def reset(self, token: str) -> Any:
        data = _payload()
        try:
            dto: ResetPasswordRequestDTO = _parse(ResetPasswordRequestDTO, data)
            user = self._confirm_reset_use_case.execute(token, dto.password, dto.confirm_password)
        except (ValidationError, PasswordMismatchError) as exc:
            return _rejected(exc, "auth/reset.html", token=token)
        except InvalidOrExpiredTokenError as exc:
            audit_log(
                AuditAction.PASSWORD_RESET_FAILED,
                ip_address=_get_client_ip(),
                details={"error": exc.code},
                success=False,
            )
            if wants_json():
                raise
            flash(error_message(exc.code), "error")
            return redirect(url_for("auth.show_forgot"))

        audit_log(
            AuditAction.PASSWORD_RESET_COMPLETED,
            user_id=user.id,
            ip_address=_get_client_ip(),
            success=True,
        )
        logger.info(f"auth.reset: password changed user_id={user.id}")
        return _succeeded("Password has been reset, please log in", url_for("auth.show_login"))

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/auth")
        bp.add_url_rule(
            "/register", endpoint="show_register", view_func=anonymous_only(self.show_register), methods=["GET"]
        )
        bp.add_url_rule(
            "/register", endpoint="register", view_func=anonymous_only(self.register), methods=["POST"]
        )
        bp.add_url_rule(
            "/login", endpoint="show_login", view_func=anonymous_only(self.show_login), methods=["GET"]
        )
        bp.add_url_rule(
            "/login", endpoint="login", view_func=anonymous_only(self.login), methods=["POST"]
        )
        bp.add_url_rule("/logout", endpoint="logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule(
            "/forgot", endpoint="show_forgot", view_func=anonymous_only(self.show_forgot), methods=["GET"]
        )
        bp.add_url_rule(
            "/forgot", endpoint="forgot", view_func=anonymous_only(self.forgot), methods=["POST"]
        )
        bp.add_url_rule(
            "/reset/<token>", endpoint="show_reset", view_func=anonymous_only(self.show_reset), methods=["GET"]
        )
        bp.add_url_rule(
            "/reset/<token>", endpoint="reset", view_func=anonymous_only(self.reset), methods=["POST"]
        )
        return bp


__all__ = ["AuthController"]
