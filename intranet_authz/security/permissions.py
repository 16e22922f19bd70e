"""Static role -> action family matrix and per-resource requirements. No FastAPI."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from intranet_authz.domain.models.principal import ActionFamily, Operation, Role
from intranet_authz.domain.models.resource import INVOICE_FAMILIES, STOCK_FAMILIES, ResourceType


# Permission matrix:
# Role         manage_   manage_   manage_  manage_  view_own_  view_own_
#              chantiers invoices  stock    users    chantiers  invoices
# admin        ✓         ✓         ✓        ✓        ✓          ✓
# travailleur  ✓         ✓         ✓        ✗        ✗          ✗
# client       ✗         ✗         ✗        ✗        ✓          ✓

_ROLE_FAMILIES: Mapping[Role, FrozenSet[ActionFamily]] = MappingProxyType(
    {
        Role.ADMIN: frozenset(ActionFamily),
        Role.TRAVAILLEUR: frozenset(
            {
                ActionFamily.MANAGE_CHANTIERS,
                ActionFamily.MANAGE_INVOICES,
                ActionFamily.MANAGE_STOCK,
            }
        ),
        Role.CLIENT: frozenset(
            {
                ActionFamily.VIEW_OWN_CHANTIERS,
                ActionFamily.VIEW_OWN_INVOICES,
            }
        ),
    }
)


@dataclass(frozen=True)
class FamilyRequirement:
    """
    What a (resource family, operation) pair needs. `full` grants every instance;
    `owned` grants only instances the principal owns; `self_service` allows
    acting on one's own user account without `full`. `owner_via` names the
    parent family whose instance a create targets; ownership is checked there.
    """

    full: ActionFamily
    owned: Optional[ActionFamily] = None
    self_service: bool = False
    owner_via: Optional[ResourceType] = None


_CHANTIER_VIEW = FamilyRequirement(ActionFamily.MANAGE_CHANTIERS, ActionFamily.VIEW_OWN_CHANTIERS)
_CHANTIER_WRITE = FamilyRequirement(ActionFamily.MANAGE_CHANTIERS)
_FILE_UPLOAD = FamilyRequirement(
    ActionFamily.MANAGE_CHANTIERS, ActionFamily.VIEW_OWN_CHANTIERS, owner_via=ResourceType.CHANTIER
)
_INVOICE_VIEW = FamilyRequirement(ActionFamily.MANAGE_INVOICES, ActionFamily.VIEW_OWN_INVOICES)
_INVOICE_WRITE = FamilyRequirement(ActionFamily.MANAGE_INVOICES)
_STOCK = FamilyRequirement(ActionFamily.MANAGE_STOCK)
_USER_SELF = FamilyRequirement(ActionFamily.MANAGE_USERS, self_service=True)
_USER_ADMIN = FamilyRequirement(ActionFamily.MANAGE_USERS)


class PermissionMatrix:
    """Check role grants. Immutable after import."""

    def families_for(self, role: Role) -> FrozenSet[ActionFamily]:
        return _ROLE_FAMILIES[role]

    def grants(self, role: Role, family: ActionFamily) -> bool:
        return family in _ROLE_FAMILIES[role]

    def requirement_for(self, resource_type: ResourceType, operation: Operation) -> Optional[FamilyRequirement]:
        """Family requirement for an operation; None when the family is not guarded by the matrix (auth)."""
        if resource_type is ResourceType.CHANTIER:
            return _CHANTIER_VIEW if operation is Operation.VIEW else _CHANTIER_WRITE
        if resource_type is ResourceType.FILE:
            # Clients may upload into their own chantier; resource_id is then the chantier.
            if operation is Operation.CREATE:
                return _FILE_UPLOAD
            return _CHANTIER_VIEW if operation is Operation.VIEW else _CHANTIER_WRITE
        if resource_type in INVOICE_FAMILIES:
            return _INVOICE_VIEW if operation is Operation.VIEW else _INVOICE_WRITE
        if resource_type in STOCK_FAMILIES:
            return _STOCK
        if resource_type is ResourceType.USER:
            if operation in (Operation.VIEW, Operation.UPDATE):
                return _USER_SELF
            return _USER_ADMIN
        return None
