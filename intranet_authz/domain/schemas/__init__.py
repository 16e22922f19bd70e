"""Domain schemas. Request/response and validation."""

from intranet_authz.domain.schemas.audit import (
    AuditPageResponse,
    AuditRecordCreateRequest,
    AuditRecordResponse,
    PrincipalResponse,
    SessionResponse,
)

__all__ = [
    "AuditPageResponse",
    "AuditRecordCreateRequest",
    "AuditRecordResponse",
    "PrincipalResponse",
    "SessionResponse",
]
