# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, render_template

from inventory.infrastructure.auth_middleware import current_user, login_required


class HomeController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("home", __name__)
        bp.add_url_rule("/", endpoint="index", view_func=self.index, methods=["GET"])
        bp.add_url_rule(
            "/account", endpoint="account", view_func=login_required(self.account), methods=["GET"]
        )
        return bp

    def index(self) -> str:
        return render_template("home.html")

    def account(self) -> str:
        user = current_user()
        return render_template("account.html", profile=user.to_dict() if user else {})
