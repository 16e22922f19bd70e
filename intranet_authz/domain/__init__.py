"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from intranet_authz.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidIdentifierError,
    UnknownRoleError,
)
from intranet_authz.domain.models import (
    AccessDecision,
    ActionFamily,
    DenialReason,
    Operation,
    Principal,
    PrincipalStatus,
    ResourceLink,
    ResourceRef,
    ResourceType,
    Role,
)
from intranet_authz.domain.schemas import (
    AuditPageResponse,
    AuditRecordCreateRequest,
    AuditRecordResponse,
    SessionResponse,
)
from intranet_authz.domain.validators import (
    parse_datetime_bound,
    parse_identifier,
    parse_int_param,
)

__all__ = [
    "AccessDecision",
    "ActionFamily",
    "AuditPageResponse",
    "AuditRecordCreateRequest",
    "AuditRecordResponse",
    "DenialReason",
    "DomainError",
    "DomainValidationError",
    "InvalidIdentifierError",
    "Operation",
    "Principal",
    "PrincipalStatus",
    "ResourceLink",
    "ResourceRef",
    "ResourceType",
    "Role",
    "SessionResponse",
    "UnknownRoleError",
    "parse_datetime_bound",
    "parse_identifier",
    "parse_int_param",
]
