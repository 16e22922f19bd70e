"""DB-backed resource linkage for ownership checks. One row per call, never cached."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_authz.application.exceptions import PersistenceError
from intranet_authz.domain.models.resource import INVOICE_FAMILIES, ResourceLink, ResourceType
from intranet_authz.infrastructure.database.models import ChantierFileRow, ChantierRow, InvoiceQuoteRow, UserRow


class DbResourceLookup:
    """Implements ResourceOwnerLookup for chantier, invoice/quote, file and user rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def lookup_resource_owner(
        self, resource_type: ResourceType, resource_id: int
    ) -> Optional[ResourceLink]:
        if resource_type is ResourceType.CHANTIER:
            stmt = select(ChantierRow.id, ChantierRow.client_id).where(ChantierRow.id == resource_id)
            row = await self._fetch(stmt)
            return None if row is None else ResourceLink(owner_id=row.client_id)

        if resource_type in INVOICE_FAMILIES:
            stmt = select(InvoiceQuoteRow.id, InvoiceQuoteRow.chantier_id).where(
                InvoiceQuoteRow.id == resource_id
            )
            row = await self._fetch(stmt)
            return None if row is None else ResourceLink(chantier_id=row.chantier_id)

        if resource_type is ResourceType.FILE:
            stmt = select(ChantierFileRow.id, ChantierFileRow.chantier_id).where(
                ChantierFileRow.id == resource_id
            )
            row = await self._fetch(stmt)
            return None if row is None else ResourceLink(chantier_id=row.chantier_id)

        if resource_type is ResourceType.USER:
            stmt = select(UserRow.id).where(UserRow.id == resource_id)
            row = await self._fetch(stmt)
            return None if row is None else ResourceLink(owner_id=row.id)

        return None

    async def _fetch(self, stmt):
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Resource lookup failed: {e}") from e
        return result.one_or_none()
