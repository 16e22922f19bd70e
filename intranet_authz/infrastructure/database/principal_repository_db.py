"""DB-backed principal lookup. Reads role and status fresh on every call."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_authz.application.exceptions import PersistenceError
from intranet_authz.domain.exceptions import DomainValidationError
from intranet_authz.domain.models.principal import Principal, PrincipalStatus, Role
from intranet_authz.infrastructure.database.models import UserRow


class DbPrincipalRepository:
    """Implements PrincipalLookup against the users table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def lookup_principal(self, principal_id: int) -> Optional[Principal]:
        stmt = select(UserRow.id, UserRow.role, UserRow.status).where(UserRow.id == principal_id)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Principal lookup failed: {e}") from e
        row = result.one_or_none()
        if row is None:
            return None
        try:
            return Principal(
                id=row.id,
                role=Role.parse(row.role),
                status=PrincipalStatus.parse(row.status),
            )
        except DomainValidationError as e:
            raise PersistenceError(f"User {principal_id} has an unreadable role or status: {e.message}") from e
