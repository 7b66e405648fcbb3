# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_, select, update

from inventory.domain.users.entities import Role
from inventory.domain.users.entities import User as DomainUser
from inventory.domain.users.repositories import UserRepository
from inventory.infrastructure.db.models import User
from inventory.infrastructure.db.session import as_utc, session_scope


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        phone=row.phone,
        role=Role(row.role),
        is_active=row.is_active,
        created_at=as_utc(row.created_at),
        last_login=as_utc(row.last_login),
        reset_token=row.reset_token if row.reset_token_expires else None,
        reset_token_expires=as_utc(row.reset_token_expires) if row.reset_token else None,
        remember_version=row.remember_version or 0,
    )


class SqlAlchemyUserRepository(UserRepository):
    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def find_by_username(self, username: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.username == username)).first()
            return _to_domain(row) if row else None

    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(
                select(User).where(func.lower(User.email) == email.strip().lower())
            ).first()
            return _to_domain(row) if row else None

    def find_by_username_or_email(self, identifier: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(
                select(User).where(
                    or_(
                        User.username == identifier,
                        func.lower(User.email) == identifier.strip().lower(),
                    )
                )
            ).first()
            return _to_domain(row) if row else None

    def find_by_reset_token(self, token: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.reset_token == token)).first()
            return _to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        with session_scope() as session:
            row = User(
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                phone=user.phone,
                role=user.role.value,
                is_active=user.is_active,
            )
            if user.created_at is not None:
                row.created_at = user.created_at
            session.add(row)
            session.flush()
            session.refresh(row)
            return _to_domain(row)

    def touch_last_login(self, user_id: int, when: datetime) -> None:
        with session_scope() as session:
            session.execute(update(User).where(User.id == user_id).values(last_login=when))

    def set_reset_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        with session_scope() as session:
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(reset_token=token, reset_token_expires=expires_at)
            )

    def complete_password_reset(self, user_id: int, token: str, password_hash: str) -> bool:
        """Swap the hash and burn the token; False when the token was already used."""

        with session_scope() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id, User.reset_token == token)
                .values(
                    password_hash=password_hash,
                    reset_token=None,
                    reset_token_expires=None,
                )
            )
            return result.rowcount == 1

    def set_active(self, user_id: int, active: bool) -> None:
        with session_scope() as session:
            session.execute(update(User).where(User.id == user_id).values(is_active=active))

    def set_role(self, user_id: int, role: Role) -> None:
        with session_scope() as session:
            session.execute(update(User).where(User.id == user_id).values(role=role.value))

    def revoke_remember_tokens(self, user_id: int) -> None:
        with session_scope() as session:
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(remember_version=User.remember_version + 1)
            )
