"""DB-backed audit repository. Insert and read only; audit_logs rows are never updated or deleted."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_authz.application.exceptions import PersistenceError
from intranet_authz.governance.audit_models import AuditFilter, AuditPage, AuditRecord
from intranet_authz.infrastructure.database.models import AuditLogRow, UserRow


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(orm: AuditLogRow, actor_name: Optional[str] = None) -> AuditRecord:
    return AuditRecord(
        id=orm.id,
        actor_id=orm.user_id,
        actor_name=actor_name,
        action=orm.action,
        resource_type=orm.resource_type,
        resource_id=orm.resource_id,
        ip_address=orm.ip_address,
        user_agent=orm.user_agent,
        details=orm.details,
        created_at=_aware(orm.created_at),
    )


def _conditions(audit_filter: AuditFilter) -> list:
    conditions = []
    if audit_filter.actor_id is not None:
        conditions.append(AuditLogRow.user_id == audit_filter.actor_id)
    if audit_filter.action:
        conditions.append(AuditLogRow.action == audit_filter.action)
    if audit_filter.resource_type:
        conditions.append(AuditLogRow.resource_type == audit_filter.resource_type)
    if audit_filter.start_date is not None:
        conditions.append(AuditLogRow.created_at >= audit_filter.start_date)
    if audit_filter.end_date is not None:
        conditions.append(AuditLogRow.created_at <= audit_filter.end_date)
    return conditions


def _with_actor_name():
    # Outer join: pre-authentication rows and deleted users keep their record.
    return select(AuditLogRow, UserRow.name).outerjoin(UserRow, UserRow.id == AuditLogRow.user_id)


class DbAuditRepository:
    """
    Implements AuditRepository. With autocommit=False the insert is only flushed,
    so a handler can commit it in the same transaction as its own mutation.
    """

    def __init__(self, session: AsyncSession, autocommit: bool = True) -> None:
        self._session = session
        self._autocommit = autocommit

    async def insert(self, record: AuditRecord) -> AuditRecord:
        orm = AuditLogRow(
            user_id=record.actor_id,
            action=record.action,
            resource_type=record.resource_type,
            resource_id=record.resource_id,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            details=record.details,
            created_at=record.created_at,
        )
        try:
            self._session.add(orm)
            await self._session.flush()
            if self._autocommit:
                await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceError(f"Audit insert failed: {e}") from e
        return replace(record, id=orm.id)

    async def get(self, record_id: int) -> Optional[AuditRecord]:
        stmt = _with_actor_name().where(AuditLogRow.id == record_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Audit lookup failed: {e}") from e
        row = result.one_or_none()
        return None if row is None else _to_record(*row)

    async def query(self, audit_filter: AuditFilter, page: int, limit: int) -> AuditPage:
        conditions = _conditions(audit_filter)
        where = and_(*conditions) if conditions else None

        count_stmt = select(func.count()).select_from(AuditLogRow)
        rows_stmt = (
            _with_actor_name()
            .order_by(AuditLogRow.created_at.desc(), AuditLogRow.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        if where is not None:
            count_stmt = count_stmt.where(where)
            rows_stmt = rows_stmt.where(where)

        try:
            total = (await self._session.execute(count_stmt)).scalar_one()
            result = await self._session.execute(rows_stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Audit query failed: {e}") from e
        records = tuple(_to_record(orm, name) for orm, name in result.all())
        return AuditPage(records=records, total=total, page=page, limit=limit)
