# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from inventory.domain.users.entities import AuthSession as DomainSession
from inventory.domain.users.repositories import SessionRepository
from inventory.infrastructure.db.models import AuthSession
from inventory.infrastructure.db.session import as_utc, session_scope


class SqlAlchemySessionRepository(SessionRepository):
    def get(self, session_id: str) -> DomainSession | None:
        with session_scope() as session:
            row = session.get(AuthSession, session_id)
            if not row:
                return None
            return DomainSession(
                id=row.id,
                user_id=row.user_id,
                data=dict(row.data or {}),
                created_at=as_utc(row.created_at),
                expires_at=as_utc(row.expires_at),
            )

    def save(self, record: DomainSession) -> None:
        with session_scope() as session:
            row = session.get(AuthSession, record.id)
            if row is None:
                row = AuthSession(id=record.id, created_at=record.created_at)
                session.add(row)
            row.user_id = record.user_id
            row.data = dict(record.data)
            row.expires_at = record.expires_at

    def delete(self, session_id: str) -> None:
        with session_scope() as session:
            row = session.get(AuthSession, session_id)
            if row is not None:
                session.delete(row)
