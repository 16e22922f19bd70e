"""Domain models. Pure business entities."""

from intranet_authz.domain.models.principal import (
    ActionFamily,
    Operation,
    Principal,
    PrincipalStatus,
    Role,
)
from intranet_authz.domain.models.resource import (
    INVOICE_FAMILIES,
    STOCK_FAMILIES,
    AccessDecision,
    DenialReason,
    ResourceLink,
    ResourceRef,
    ResourceType,
)

__all__ = [
    "AccessDecision",
    "ActionFamily",
    "DenialReason",
    "INVOICE_FAMILIES",
    "Operation",
    "Principal",
    "PrincipalStatus",
    "ResourceLink",
    "ResourceRef",
    "ResourceType",
    "Role",
    "STOCK_FAMILIES",
]
