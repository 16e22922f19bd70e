"""Ownership resolution per resource family. Pure lookups against current persisted state, no caching."""

from typing import Optional, Protocol

from intranet_authz.domain.models.principal import Principal
from intranet_authz.domain.models.resource import (
    CHANTIER_LINKED_FAMILIES,
    ResourceLink,
    ResourceRef,
    ResourceType,
)
from intranet_authz.security.exceptions import ResourceNotFoundError


class ResourceOwnerLookup(Protocol):
    """Persistence collaborator: raw linkage of one resource row."""

    async def lookup_resource_owner(
        self, resource_type: ResourceType, resource_id: int
    ) -> Optional[ResourceLink]:
        """
        Return the row's linkage, or None if the row does not exist.
        chantier -> owner_id = client_id; invoice/quote/file -> chantier_id;
        user -> owner_id = the user id.
        """
        ...


class OwnershipResolver:
    """Answers "who owns resource Y" and "is Y visible to X" for the owned families."""

    def __init__(self, lookup: ResourceOwnerLookup) -> None:
        self._lookup = lookup

    async def owner_of(self, resource_type: ResourceType, resource_id: int) -> ResourceRef:
        """Resolve the owner. Raises ResourceNotFoundError when the resource is absent."""
        if resource_type is ResourceType.CHANTIER:
            link = await self._require(resource_type, resource_id)
            return ResourceRef(resource_type, resource_id, link.owner_id)

        if resource_type in CHANTIER_LINKED_FAMILIES:
            link = await self._require(resource_type, resource_id)
            return ResourceRef(resource_type, resource_id, await self._chantier_client(link.chantier_id))

        if resource_type is ResourceType.USER:
            await self._require(resource_type, resource_id)
            return ResourceRef(resource_type, resource_id, resource_id)

        # stock, auth: role-gated only
        return ResourceRef(resource_type, resource_id, None)

    async def is_visible_to(self, principal: Principal, resource_type: ResourceType, resource_id: int) -> bool:
        """True only when the resource has an owner and that owner is the principal."""
        try:
            ref = await self.owner_of(resource_type, resource_id)
        except ResourceNotFoundError:
            return False
        return ref.owner_principal_id is not None and ref.owner_principal_id == principal.id

    async def _chantier_client(self, chantier_id: Optional[int]) -> Optional[int]:
        # No link, or a link to a chantier that no longer exists: owned by nobody.
        if chantier_id is None:
            return None
        chantier = await self._lookup.lookup_resource_owner(ResourceType.CHANTIER, chantier_id)
        if chantier is None:
            return None
        return chantier.owner_id

    async def _require(self, resource_type: ResourceType, resource_id: int) -> ResourceLink:
        link = await self._lookup.lookup_resource_owner(resource_type, resource_id)
        if link is None:
            raise ResourceNotFoundError(f"{resource_type.value} {resource_id} not found")
        return link
