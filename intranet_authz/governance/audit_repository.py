"""Audit repository protocol. Governance layer depends on this; infrastructure implements it."""

from typing import Optional, Protocol

from intranet_authz.governance.audit_models import AuditFilter, AuditPage, AuditRecord


class AuditRepository(Protocol):
    """Append-only store of audit records. There is deliberately no update or delete."""

    async def insert(self, record: AuditRecord) -> AuditRecord:
        """Persist a new record; return it with its assigned id."""
        ...

    async def get(self, record_id: int) -> Optional[AuditRecord]:
        """Return one record by id, or None."""
        ...

    async def query(self, audit_filter: AuditFilter, page: int, limit: int) -> AuditPage:
        """Matching records ordered by created_at desc, id desc; page is 1-based."""
        ...
