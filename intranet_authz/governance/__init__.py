"""Governance: append-only audit recording and admin audit queries. No FastAPI."""

from intranet_authz.governance.audit_models import AuditAction, AuditFilter, AuditPage, AuditRecord
from intranet_authz.governance.audit_query import AuditQueryService
from intranet_authz.governance.audit_recorder import AuditRecorder

__all__ = [
    "AuditAction",
    "AuditFilter",
    "AuditPage",
    "AuditQueryService",
    "AuditRecord",
    "AuditRecorder",
]
