"""Resource references and access decisions. Transient values, never persisted on their own."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from intranet_authz.domain.models.principal import Principal


class ResourceType(str, Enum):
    """Resource families. Values are the strings stored in audit_logs.resource_type."""

    AUTH = "auth"
    USER = "user"
    CHANTIER = "chantier"
    FILE = "file"
    STOCK_MATERIAU = "stock_materiau"
    STOCK_MATERIEL = "stock_materiel"
    STOCK_MOVEMENT = "stock_movement"
    INVOICE = "invoice"
    QUOTE = "quote"


STOCK_FAMILIES: FrozenSet[ResourceType] = frozenset(
    {ResourceType.STOCK_MATERIAU, ResourceType.STOCK_MATERIEL, ResourceType.STOCK_MOVEMENT}
)
INVOICE_FAMILIES: FrozenSet[ResourceType] = frozenset({ResourceType.INVOICE, ResourceType.QUOTE})
# Families whose rows carry a chantier_id and inherit that chantier's client as owner.
CHANTIER_LINKED_FAMILIES: FrozenSet[ResourceType] = INVOICE_FAMILIES | {ResourceType.FILE}


class DenialReason(str, Enum):
    """Why a decision was denied. First failing check in the decision order wins."""

    ACCOUNT_DISABLED = "account_disabled"
    ROLE_DENIED = "role_denied"
    OWNERSHIP_DENIED = "ownership_denied"
    SELF_PROTECTION = "self_protection"


@dataclass(frozen=True)
class ResourceLink:
    """Raw linkage read from persistence: direct owner and, for invoices/quotes/files, the chantier link."""

    owner_id: Optional[int] = None
    chantier_id: Optional[int] = None


@dataclass(frozen=True)
class ResourceRef:
    """Resolved ownership of one resource instance. owner_principal_id None means owned by nobody."""

    resource_type: ResourceType
    resource_id: int
    owner_principal_id: Optional[int] = None


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of a PDP evaluation. Consumed immediately by the handler and,
    for sensitive denials, by the audit recorder. owner_scope is set on an
    allowed collection read that must be narrowed to that owner's resources.
    """

    allowed: bool
    principal: Principal
    reason: Optional[DenialReason] = None
    resource: Optional[ResourceRef] = None
    owner_scope: Optional[int] = None

    @classmethod
    def allow(
        cls,
        principal: Principal,
        resource: Optional[ResourceRef] = None,
        *,
        owner_scope: Optional[int] = None,
    ) -> "AccessDecision":
        return cls(allowed=True, principal=principal, resource=resource, owner_scope=owner_scope)

    @classmethod
    def deny(
        cls,
        principal: Principal,
        reason: DenialReason,
        resource: Optional[ResourceRef] = None,
    ) -> "AccessDecision":
        return cls(allowed=False, principal=principal, reason=reason, resource=resource)
