# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask

from inventory.infrastructure.admin_setup import setup_admin_user
from inventory.infrastructure.auth_middleware import configure_identity
from inventory.infrastructure.container import Container
from inventory.infrastructure.db import init_db
from inventory.shared.logging import logger, setup_logging
from inventory.shared.middleware.error_handler import configure_error_handling
from inventory.shared.middleware.request_logger import configure_request_logging


def _configure_security_headers(app: Flask, *, enable_hsts: bool) -> None:
    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")

        resp.headers.setdefault("Referrer-Policy", "same-origin")

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")

        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")

        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
        )

        if enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )

        return resp


def create_app(container: Container | None = None) -> Flask:
    container = container or Container()
    config = container.config

    setup_logging(debug_mode=config.debug_logging)
    init_db()
    setup_admin_user(container.user_repository, config.admin_username)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_NAME=config.auth.session_cookie_name,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=config.cookie_secure,
        SESSION_COOKIE_SAMESITE=config.security.cookie_samesite,
    )
    app.session_interface = container.session_interface
    app.extensions["container"] = container

    configure_error_handling(app)
    configure_request_logging(app)
    configure_identity(app, container.session_resolver, config)
    _configure_security_headers(app, enable_hsts=config.security.enable_hsts)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.home_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())

    logger.info("Flask app initialized")
    return app
