# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from inventory.infrastructure.db import ENGINE
from inventory.shared.errors.base import StoreUnavailableError


def check_database() -> bool:
    try:
        with ENGINE.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("health_check") from exc
    return True


__all__ = ["check_database"]
