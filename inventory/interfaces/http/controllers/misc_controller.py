# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify

from inventory.infrastructure.health import check_database
from inventory.shared.errors.base import StoreUnavailableError


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/health", view_func=self.health, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True}
        try:
            check_database()
            status["database"] = "ok"
        except StoreUnavailableError as exc:
            status["ok"] = False
            status["database"] = exc.code
            return jsonify(status), HTTPStatus.SERVICE_UNAVAILABLE
        return jsonify(status)
