# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from inventory.shared.config import load_config
from inventory.shared.logging import logger

from .base import AppError
from .messages import error_message


def wants_json() -> bool:
    if request.is_json:
        return True
    if request.headers.get("X-Requested-With", "") == "XMLHttpRequest":
        return True
    # wildcards such as */* resolve to html
    best = request.accept_mimetypes.best_match(["text/html", "application/json"])
    return best == "application/json"


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _render(code: str, message: str, status: int, context: dict | None = None) -> tuple[Response | str, int]:
    if wants_json():
        error: dict[str, object] = {"code": code, "message": message}
        if context:
            error["context"] = context
        return jsonify({"success": False, "error": error}), status
    return render_template("error.html", code=code, message=message, status=status), status


def handle_app_error(error: AppError) -> tuple[Response | str, int]:
    status = int(error.status)
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"AppError {error.code} on {request.method} {request.path}")
        return _render(error.code, error_message(error.code), status)
    context = dict(error.context) if error.context else None
    return _render(error.code, error_message(error.code), status, context)


def register_error_handler(
    app: Flask, *, default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
) -> None:
    config = load_config()
    debug_mode = config.debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        status = exc.code or default_status
        code = "not_found" if status == HTTPStatus.NOT_FOUND else f"http_{status}"
        message = ERROR_TEXT.get(status, exc.description or exc.name)
        return _render(code, message, status)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        user_id = getattr(g, "user_id", None)

        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {_client_ip()}, user={user_id}, "
                f"query={dict(request.args)}, body_size={len(request.data)}"
            )
        else:
            logger.opt(exception=exc).error(
                f"Error: {type(exc).__name__} on {request.method} {request.path}"
            )

        return _render("internal_error", error_message("internal_error"), int(default_status))


ERROR_TEXT: dict[int, str] = {
    HTTPStatus.NOT_FOUND: error_message("not_found"),
    HTTPStatus.METHOD_NOT_ALLOWED: "Method not allowed",
}

__all__ = ["handle_app_error", "register_error_handler", "wants_json"]
