# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time
from collections.abc import Iterable, Mapping

from flask import Flask, Response, g, request

from inventory.shared.config import load_config
from inventory.shared.logging import (clear_correlation_id, get_correlation_id,
                                      logger, set_correlation_id)

REQUEST_ID_HEADER = "X-Request-ID"

_HASHED_HEADERS = {"authorization", "cookie", "set-cookie"}
_REDACTED_PARAMS = ("password", "token", "secret")


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _fingerprint(value: str) -> str:
    return f"<sha256:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"


def _safe_headers(headers: Iterable[tuple[str, str]]) -> dict[str, str]:
    return {
        name: _fingerprint(value) if name.lower() in _HASHED_HEADERS else value
        for name, value in headers
    }


def _safe_params(params: Mapping[str, str]) -> dict[str, str]:
    return {
        name: "<redacted>" if any(part in name.lower() for part in _REDACTED_PARAMS) else value
        for name, value in params.items()
    }


def configure_request_logging(app: Flask) -> None:
    verbose = load_config().debug_logging

    @app.before_request
    def _start() -> None:
        set_correlation_id(request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(6))
        g.request_started = time.perf_counter()
        if verbose:
            logger.debug(
                f"-> {request.method} {request.path} from {_client_ip()} "
                f"args={_safe_params(request.args)} headers={_safe_headers(request.headers.items())}"
            )

    @app.after_request
    def _finish(response: Response) -> Response:
        started = g.pop("request_started", None)
        elapsed = time.perf_counter() - started if started is not None else 0.0
        logger.info(
            f"{request.method} {request.path} {response.status_code} "
            f"{elapsed * 1000:.1f}ms user={g.get('user_id')}"
        )
        response.headers.setdefault(REQUEST_ID_HEADER, get_correlation_id())
        return response

    @app.teardown_request
    def _teardown(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"{request.method} {request.path} failed: {type(exc).__name__}")
        clear_correlation_id()


__all__ = ["REQUEST_ID_HEADER", "configure_request_logging"]
