"""
Policy Decision Point. Combines the static role matrix with instance-level
ownership into a single allow/deny decision. Never writes audit records;
callers record the decision. No FastAPI.
"""

from typing import FrozenSet, Iterable, Optional

from intranet_authz.domain.models.principal import ActionFamily, Operation, Principal, Role
from intranet_authz.domain.models.resource import AccessDecision, DenialReason, ResourceRef, ResourceType
from intranet_authz.security.exceptions import (
    AccountDisabledError,
    ForbiddenError,
    ResourceNotFoundError,
    error_for_denial,
)
from intranet_authz.security.identity import IdentityResolver
from intranet_authz.security.ownership import OwnershipResolver
from intranet_authz.security.permissions import PermissionMatrix

# Fields of a user account only an admin may change, including on itself.
PROTECTED_USER_FIELDS: FrozenSet[str] = frozenset({"role", "status"})


class PolicyDecisionPoint:
    """
    Decision order; the first failing check fixes the denial reason:
      1. inactive principal          -> account_disabled
      2. role grants no family       -> role_denied
      3. owned-only family, not owner -> ownership_denied
      4. delete self / non-admin changes own role or status -> self_protection
    """

    def __init__(
        self,
        identity: IdentityResolver,
        ownership: OwnershipResolver,
        matrix: Optional[PermissionMatrix] = None,
    ) -> None:
        self._identity = identity
        self._ownership = ownership
        self._matrix = matrix or PermissionMatrix()

    async def require_authenticated(self, credential: Optional[str]) -> Principal:
        return await self._identity.resolve(credential)

    def require_role(self, principal: Principal, allowed_roles: Iterable[Role]) -> Principal:
        """Raises AccountDisabledError or ForbiddenError(role_denied)."""
        self._require_active(principal)
        allowed = frozenset(allowed_roles)
        if principal.role not in allowed:
            raise ForbiddenError(
                f"Role {principal.role.value} is not allowed here",
                reason=DenialReason.ROLE_DENIED,
            )
        return principal

    def require_permission(self, principal: Principal, family: ActionFamily) -> Principal:
        """Raises AccountDisabledError or ForbiddenError(role_denied)."""
        self._require_active(principal)
        if not self._matrix.grants(principal.role, family):
            raise ForbiddenError(
                f"Role {principal.role.value} does not have permission '{family.value}'",
                reason=DenialReason.ROLE_DENIED,
            )
        return principal

    def granted_families(self, principal: Principal) -> FrozenSet[ActionFamily]:
        if not principal.is_active:
            return frozenset()
        return self._matrix.families_for(principal.role)

    async def can_access_resource(
        self, principal: Principal, resource_type: ResourceType, resource_id: int
    ) -> bool:
        """Read access to one instance. Clients are narrowed to what they own."""
        decision = await self.authorize(principal, Operation.VIEW, resource_type, resource_id)
        return decision.allowed

    def can_modify_user(self, principal: Principal, target_id: int) -> bool:
        if not principal.is_active:
            return False
        return principal.id == target_id or principal.is_admin

    def can_delete_user(self, principal: Principal, target_id: int) -> bool:
        if not principal.is_active or principal.id == target_id:
            return False
        return principal.is_admin

    async def authorize(
        self,
        principal: Principal,
        operation: Operation,
        resource_type: ResourceType,
        resource_id: Optional[int] = None,
        changed_fields: Iterable[str] = (),
    ) -> AccessDecision:
        """
        Evaluate one request. resource_id None means a collection operation;
        an owned-only grant then yields an allow with owner_scope set, and the
        handler must restrict its query to that owner. For a file upload,
        resource_id is the target chantier.
        """
        if not principal.is_active:
            return AccessDecision.deny(principal, DenialReason.ACCOUNT_DISABLED)

        requirement = self._matrix.requirement_for(resource_type, operation)
        if requirement is None:
            if principal.is_admin:
                return AccessDecision.allow(principal)
            return AccessDecision.deny(principal, DenialReason.ROLE_DENIED)

        resource: Optional[ResourceRef] = None
        owner_scope: Optional[int] = None
        if self._matrix.grants(principal.role, requirement.full):
            pass
        elif requirement.self_service and resource_id is not None and resource_id == principal.id:
            resource = ResourceRef(resource_type, resource_id, principal.id)
        elif requirement.owned is not None and self._matrix.grants(principal.role, requirement.owned):
            if resource_id is None:
                # A write under an owned-only grant must name the instance it targets.
                if operation.is_mutation:
                    return AccessDecision.deny(principal, DenialReason.OWNERSHIP_DENIED)
                owner_scope = principal.id
            else:
                try:
                    resource = await self._ownership.owner_of(
                        requirement.owner_via or resource_type, resource_id
                    )
                except ResourceNotFoundError:
                    # Absent and not-yours look the same to a client.
                    return AccessDecision.deny(principal, DenialReason.OWNERSHIP_DENIED)
                if resource.owner_principal_id is None or resource.owner_principal_id != principal.id:
                    return AccessDecision.deny(principal, DenialReason.OWNERSHIP_DENIED, resource)
        else:
            return AccessDecision.deny(principal, DenialReason.ROLE_DENIED)

        if resource_type is ResourceType.USER and resource_id == principal.id:
            if operation is Operation.DELETE:
                return AccessDecision.deny(principal, DenialReason.SELF_PROTECTION, resource)
            touched = PROTECTED_USER_FIELDS.intersection(changed_fields)
            if operation is Operation.UPDATE and touched and not principal.is_admin:
                return AccessDecision.deny(principal, DenialReason.SELF_PROTECTION, resource)

        return AccessDecision.allow(principal, resource, owner_scope=owner_scope)

    def enforce(self, decision: AccessDecision) -> Principal:
        """Return the principal of an allowed decision; raise the typed error otherwise."""
        if decision.allowed:
            return decision.principal
        raise error_for_denial(decision.reason)

    @staticmethod
    def _require_active(principal: Principal) -> None:
        if not principal.is_active:
            raise AccountDisabledError("Account disabled. Contact an administrator.")
