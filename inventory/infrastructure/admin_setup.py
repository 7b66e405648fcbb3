# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from inventory.domain.users.entities import Role
from inventory.domain.users.repositories import UserRepository
from inventory.infrastructure.audit import AuditAction, audit_log
from inventory.shared.logging import logger


def setup_admin_user(users: UserRepository, admin_username: str | None) -> None:
    """Grant the admin role to ``ADMIN_USERNAME`` if that account exists."""

    if not admin_username:
        logger.info("admin_setup: No ADMIN_USERNAME configured, skipping admin setup")
        return

    user = users.find_by_username(admin_username)
    if user is None or user.id is None:
        # the account may simply not be registered yet
        logger.warning(
            f"admin_setup: ADMIN_USERNAME '{admin_username}' not found, "
            "register it and restart to grant admin privileges"
        )
        return

    if user.is_admin:
        logger.info(f"admin_setup: User '{admin_username}' already has admin privileges")
        return

    users.set_role(user.id, Role.ADMIN)
    audit_log(AuditAction.ADMIN_GRANTED, user_id=user.id, details={"username": admin_username})
    logger.info(f"admin_setup: Granted admin privileges to user '{admin_username}'")


__all__ = ["setup_admin_user"]
