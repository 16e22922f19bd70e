"""Principal, roles and action families. Pure business semantics, no ORM or infrastructure."""

from dataclasses import dataclass
from enum import Enum

from intranet_authz.domain.exceptions import DomainValidationError, UnknownRoleError


class Role(str, Enum):
    ADMIN = "admin"
    TRAVAILLEUR = "travailleur"
    CLIENT = "client"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Map a persisted role string to a Role. Raises UnknownRoleError on anything else."""
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownRoleError(f"Unknown role '{value}'") from e


class PrincipalStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def parse(cls, value: str) -> "PrincipalStatus":
        try:
            return cls(value)
        except ValueError as e:
            raise DomainValidationError(f"Unknown account status '{value}'") from e


class ActionFamily(str, Enum):
    """Coarse permission buckets granted per role."""

    MANAGE_CHANTIERS = "manage_chantiers"
    MANAGE_INVOICES = "manage_invoices"
    MANAGE_STOCK = "manage_stock"
    MANAGE_USERS = "manage_users"
    VIEW_OWN_CHANTIERS = "view_own_chantiers"
    VIEW_OWN_INVOICES = "view_own_invoices"


class Operation(str, Enum):
    """Verb a handler requests on a resource family."""

    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_mutation(self) -> bool:
        return self is not Operation.VIEW


@dataclass(frozen=True)
class Principal:
    """Authenticated actor evaluated by the policy engine. Read-only to this subsystem."""

    id: int
    role: Role
    status: PrincipalStatus = PrincipalStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is PrincipalStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
