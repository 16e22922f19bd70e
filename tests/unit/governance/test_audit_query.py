"""AuditQueryService: admin gate, clamping, ordering, totals, single-record lookup."""

from datetime import datetime, timedelta, timezone

import pytest

from intranet_authz.domain.models.principal import Principal, PrincipalStatus, Role
from intranet_authz.governance.audit_models import AuditFilter, AuditRecord
from intranet_authz.governance.audit_query import AuditQueryService
from intranet_authz.governance.exceptions import AuditRecordNotFoundError
from intranet_authz.security.exceptions import AccountDisabledError, ForbiddenError

ADMIN = Principal(id=1, role=Role.ADMIN)
WORKER = Principal(id=2, role=Role.TRAVAILLEUR)
DISABLED_ADMIN = Principal(id=9, role=Role.ADMIN, status=PrincipalStatus.INACTIVE)

BASE = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(audit_repository, policy):
    return AuditQueryService(audit_repository, policy)


async def _seed(repository, count, **overrides):
    stored = []
    for i in range(count):
        fields = {
            "action": "UPDATE_CHANTIER" if i % 2 else "CREATE_CHANTIER",
            "resource_type": "chantier",
            "ip_address": "203.0.113.7",
            "user_agent": "pytest",
            "created_at": BASE + timedelta(minutes=i),
            "actor_id": 2 if i % 3 else 1,
            "resource_id": i,
        }
        fields.update(overrides)
        stored.append(await repository.insert(AuditRecord(**fields)))
    return stored


@pytest.mark.asyncio
@pytest.mark.parametrize("principal, error", [(WORKER, ForbiddenError), (DISABLED_ADMIN, AccountDisabledError)])
async def test_non_admin_rejected(service, principal, error):
    with pytest.raises(error):
        await service.query(principal, AuditFilter())
    with pytest.raises(error):
        await service.get(principal, 1)


@pytest.mark.asyncio
async def test_limit_clamped_to_100(service, audit_repository):
    await _seed(audit_repository, 150)
    page = await service.query(ADMIN, AuditFilter(), page=1, limit=1000)
    assert len(page.records) == 100
    assert page.limit == 100
    assert page.total == 150


def test_clamp_bounds(service):
    assert service.clamp(0, 0) == (1, 1)
    assert service.clamp(-3, 50) == (1, 50)
    assert service.clamp(2, 101) == (2, 100)


@pytest.mark.asyncio
async def test_newest_first_with_id_tie_break(service, audit_repository):
    await _seed(audit_repository, 3, created_at=BASE)
    page = await service.query(ADMIN, AuditFilter())
    assert [r.id for r in page.records] == [3, 2, 1]


@pytest.mark.asyncio
async def test_newest_first_by_created_at(service, audit_repository):
    await _seed(audit_repository, 5)
    page = await service.query(ADMIN, AuditFilter())
    created = [r.created_at for r in page.records]
    assert created == sorted(created, reverse=True)


@pytest.mark.asyncio
async def test_total_counts_all_matches_not_page(service, audit_repository):
    await _seed(audit_repository, 25)
    page = await service.query(ADMIN, AuditFilter(), page=3, limit=10)
    assert page.total == 25
    assert len(page.records) == 5
    assert page.page == 3


@pytest.mark.asyncio
async def test_filters_combine(service, audit_repository):
    await _seed(audit_repository, 12)
    page = await service.query(
        ADMIN,
        AuditFilter(actor_id=2, action="UPDATE_CHANTIER", start_date=BASE + timedelta(minutes=4)),
    )
    assert page.total > 0
    for record in page.records:
        assert record.actor_id == 2
        assert record.action == "UPDATE_CHANTIER"
        assert record.created_at >= BASE + timedelta(minutes=4)


@pytest.mark.asyncio
async def test_all_means_no_filter(service, audit_repository):
    await _seed(audit_repository, 4)
    page = await service.query(ADMIN, AuditFilter(action="all", resource_type="all"))
    assert page.total == 4


@pytest.mark.asyncio
async def test_query_is_idempotent(service, audit_repository):
    await _seed(audit_repository, 7)
    first = await service.query(ADMIN, AuditFilter(actor_id=2), page=1, limit=3)
    second = await service.query(ADMIN, AuditFilter(actor_id=2), page=1, limit=3)
    assert first == second


@pytest.mark.asyncio
async def test_get_round_trips_id(service, audit_repository):
    stored = await _seed(audit_repository, 3)
    assert await service.get(ADMIN, stored[1].id) == stored[1]


@pytest.mark.asyncio
async def test_get_missing_raises(service):
    with pytest.raises(AuditRecordNotFoundError):
        await service.get(ADMIN, 999)


@pytest.mark.asyncio
async def test_id_filter_bypasses_pagination(service, audit_repository):
    stored = await _seed(audit_repository, 30)
    page = await service.query(ADMIN, AuditFilter(id=stored[0].id), page=3, limit=5)
    assert page.records == (stored[0],)
    assert page.total == 1
