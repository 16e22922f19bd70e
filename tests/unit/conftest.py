"""In-memory collaborators for unit tests: principals, resource linkage, audit store."""

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

import pytest

from intranet_authz.domain.models.principal import Principal, PrincipalStatus, Role
from intranet_authz.domain.models.resource import ResourceLink, ResourceType
from intranet_authz.governance.audit_models import AuditFilter, AuditPage, AuditRecord
from intranet_authz.governance.audit_recorder import AuditRecorder
from intranet_authz.observability.metrics import MetricsCollector
from intranet_authz.security.identity import IdentityResolver, TokenService
from intranet_authz.security.ownership import OwnershipResolver
from intranet_authz.security.policy import PolicyDecisionPoint

TEST_SECRET = "unit-test-secret-with-at-least-32-chars!"

ADMIN = Principal(id=1, role=Role.ADMIN)
WORKER = Principal(id=2, role=Role.TRAVAILLEUR)
CLIENT_A = Principal(id=5, role=Role.CLIENT)
CLIENT_B = Principal(id=6, role=Role.CLIENT)
DISABLED_ADMIN = Principal(id=9, role=Role.ADMIN, status=PrincipalStatus.INACTIVE)
DISABLED_CLIENT = Principal(id=7, role=Role.CLIENT, status=PrincipalStatus.INACTIVE)

# chantier 10 belongs to client 5, chantier 11 to client 6.
# invoice 20 -> chantier 10; invoice 21 has no chantier; invoice 22 -> missing chantier 99.
# quote 30 -> chantier 11. file 40 -> chantier 10; file 41 has no chantier.
RESOURCES: Dict[Tuple[ResourceType, int], ResourceLink] = {
    (ResourceType.CHANTIER, 10): ResourceLink(owner_id=5),
    (ResourceType.CHANTIER, 11): ResourceLink(owner_id=6),
    (ResourceType.CHANTIER, 12): ResourceLink(owner_id=None),
    (ResourceType.INVOICE, 20): ResourceLink(chantier_id=10),
    (ResourceType.INVOICE, 21): ResourceLink(chantier_id=None),
    (ResourceType.INVOICE, 22): ResourceLink(chantier_id=99),
    (ResourceType.QUOTE, 30): ResourceLink(chantier_id=11),
    (ResourceType.FILE, 40): ResourceLink(chantier_id=10),
    (ResourceType.FILE, 41): ResourceLink(chantier_id=None),
}


class FakePrincipalLookup:
    """Principal store; mutate `principals` to simulate role or status changes between requests."""

    def __init__(self, principals: List[Principal]):
        self.principals = {p.id: p for p in principals}
        self.calls: List[int] = []

    async def lookup_principal(self, principal_id: int) -> Optional[Principal]:
        self.calls.append(principal_id)
        return self.principals.get(principal_id)


class FakeResourceLookup:
    """Resource linkage; users resolve reflexively when present in `user_ids`."""

    def __init__(self, resources: Dict[Tuple[ResourceType, int], ResourceLink], user_ids: List[int]):
        self.resources = dict(resources)
        self.user_ids = set(user_ids)
        self.calls: List[Tuple[ResourceType, int]] = []

    async def lookup_resource_owner(self, resource_type: ResourceType, resource_id: int) -> Optional[ResourceLink]:
        self.calls.append((resource_type, resource_id))
        if resource_type is ResourceType.USER:
            return ResourceLink(owner_id=resource_id) if resource_id in self.user_ids else None
        return self.resources.get((resource_type, resource_id))


def _matches(record: AuditRecord, audit_filter: AuditFilter) -> bool:
    if audit_filter.actor_id is not None and record.actor_id != audit_filter.actor_id:
        return False
    if audit_filter.action and record.action != audit_filter.action:
        return False
    if audit_filter.resource_type and record.resource_type != audit_filter.resource_type:
        return False
    if audit_filter.start_date is not None and record.created_at < audit_filter.start_date:
        return False
    if audit_filter.end_date is not None and record.created_at > audit_filter.end_date:
        return False
    return True


class FakeAuditRepository:
    """Append-only list. Ids are assigned in insertion order starting at 1."""

    def __init__(self):
        self.records: List[AuditRecord] = []

    async def insert(self, record: AuditRecord) -> AuditRecord:
        stored = replace(record, id=len(self.records) + 1)
        self.records.append(stored)
        return stored

    async def get(self, record_id: int) -> Optional[AuditRecord]:
        return next((r for r in self.records if r.id == record_id), None)

    async def query(self, audit_filter: AuditFilter, page: int, limit: int) -> AuditPage:
        matches = [r for r in self.records if _matches(r, audit_filter)]
        matches.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        start = (page - 1) * limit
        return AuditPage(records=tuple(matches[start:start + limit]), total=len(matches), page=page, limit=limit)


class FailingAuditRepository(FakeAuditRepository):
    """Every insert fails as an unreachable database would."""

    async def insert(self, record: AuditRecord) -> AuditRecord:
        raise ConnectionError("audit store unreachable")


@pytest.fixture
def principal_lookup():
    return FakePrincipalLookup([ADMIN, WORKER, CLIENT_A, CLIENT_B, DISABLED_ADMIN, DISABLED_CLIENT])


@pytest.fixture
def resource_lookup():
    return FakeResourceLookup(RESOURCES, user_ids=[1, 2, 5, 6, 7, 9])


@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def policy(token_service, principal_lookup, resource_lookup):
    return PolicyDecisionPoint(
        identity=IdentityResolver(token_service, principal_lookup),
        ownership=OwnershipResolver(resource_lookup),
    )


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def audit_repository():
    return FakeAuditRepository()


@pytest.fixture
def recorder(audit_repository, metrics):
    return AuditRecorder(repository=audit_repository, metrics=metrics)


@pytest.fixture
def failing_audit_repository():
    return FailingAuditRepository()
