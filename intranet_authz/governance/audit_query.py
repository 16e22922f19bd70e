"""Admin-only, paginated read access to the audit trail. No FastAPI."""

from dataclasses import replace

from intranet_authz.domain.models.principal import Principal, Role
from intranet_authz.governance.audit_models import AuditFilter, AuditPage, AuditRecord
from intranet_authz.governance.audit_repository import AuditRepository
from intranet_authz.governance.exceptions import AuditRecordNotFoundError
from intranet_authz.security.policy import PolicyDecisionPoint

MAX_LIMIT = 100
DEFAULT_LIMIT = 10
# Filter value the audit screen sends for "no filter".
ALL = "all"


class AuditQueryService:
    """Read side of the audit trail. Every call is gated to admin through the PDP."""

    def __init__(
        self,
        repository: AuditRepository,
        policy: PolicyDecisionPoint,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        self._repository = repository
        self._policy = policy
        self._max_limit = max_limit

    def clamp(self, page: int, limit: int) -> tuple[int, int]:
        """page >= 1; 1 <= limit <= max_limit."""
        return max(page, 1), min(max(limit, 1), self._max_limit)

    async def get(self, principal: Principal, record_id: int) -> AuditRecord:
        """Single-record lookup; bypasses pagination. Raises AuditRecordNotFoundError."""
        self._policy.require_role(principal, [Role.ADMIN])
        record = await self._repository.get(record_id)
        if record is None:
            raise AuditRecordNotFoundError(f"Audit log {record_id} not found")
        return record

    async def query(
        self,
        principal: Principal,
        audit_filter: AuditFilter,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
    ) -> AuditPage:
        """Newest first. A filter carrying an id returns exactly that record as a one-item page."""
        self._policy.require_role(principal, [Role.ADMIN])
        if audit_filter.id is not None:
            record = await self.get(principal, audit_filter.id)
            return AuditPage(records=(record,), total=1, page=1, limit=1)

        page, limit = self.clamp(page, limit)
        return await self._repository.query(_normalize(audit_filter), page, limit)


def _normalize(audit_filter: AuditFilter) -> AuditFilter:
    action = audit_filter.action
    resource_type = audit_filter.resource_type
    return replace(
        audit_filter,
        action=None if not action or action == ALL else action,
        resource_type=None if not resource_type or resource_type == ALL else resource_type,
    )
