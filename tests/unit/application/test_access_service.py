"""AccessService: denial auditing for sensitive families, metrics, mutation records."""

import logging

import pytest

from intranet_authz.application.access_service import AccessService
from intranet_authz.domain.models.principal import Operation, Principal, PrincipalStatus, Role
from intranet_authz.domain.models.resource import DenialReason, ResourceType
from intranet_authz.governance.audit_models import AuditAction
from intranet_authz.governance.audit_recorder import AuditRecorder
from intranet_authz.security.exceptions import AccountDisabledError, ForbiddenError, UnauthenticatedError
from intranet_authz.security.request_metadata import RequestMetadata

ADMIN = Principal(id=1, role=Role.ADMIN)
WORKER = Principal(id=2, role=Role.TRAVAILLEUR)
CLIENT_A = Principal(id=5, role=Role.CLIENT)
CLIENT_B = Principal(id=6, role=Role.CLIENT)

METADATA = RequestMetadata(ip_address="203.0.113.7", user_agent="pytest")


@pytest.fixture
def service(policy, recorder, metrics):
    return AccessService(policy=policy, recorder=recorder, metrics=metrics)


@pytest.mark.asyncio
async def test_authenticate_delegates_to_identity(service, token_service):
    assert await service.authenticate(token_service.issue(CLIENT_B)) == CLIENT_B
    with pytest.raises(UnauthenticatedError):
        await service.authenticate(None)


@pytest.mark.asyncio
async def test_allowed_returns_decision_without_audit(service, audit_repository):
    decision = await service.authorize(CLIENT_A, Operation.VIEW, ResourceType.CHANTIER, METADATA, resource_id=10)
    assert decision.allowed
    assert audit_repository.records == []


@pytest.mark.asyncio
async def test_client_viewing_foreign_chantier_audited_once(service, audit_repository, metrics):
    """Client 6 asks for client 5's chantier: forbidden, one VIEW_CHANTIER record."""
    with pytest.raises(ForbiddenError) as exc_info:
        await service.authorize(CLIENT_B, Operation.VIEW, ResourceType.CHANTIER, METADATA, resource_id=10)
    assert exc_info.value.reason is DenialReason.OWNERSHIP_DENIED

    assert len(audit_repository.records) == 1
    record = audit_repository.records[0]
    assert record.actor_id == 6
    assert record.action == AuditAction.VIEW_CHANTIER.value
    assert record.resource_type == "chantier"
    assert record.resource_id == 10
    assert record.ip_address == "203.0.113.7"
    assert record.user_agent == "pytest"
    assert record.details["error"] == "Access denied"
    assert record.details["reason"] == "ownership_denied"
    assert record.details["role"] == "client"
    assert metrics.counter_value("access_denied", reason="ownership_denied") == 1


@pytest.mark.asyncio
async def test_denied_chantier_update_audited(service, audit_repository):
    with pytest.raises(ForbiddenError):
        await service.authorize(CLIENT_A, Operation.UPDATE, ResourceType.CHANTIER, METADATA, resource_id=10)
    assert [r.action for r in audit_repository.records] == ["UPDATE_CHANTIER"]
    assert audit_repository.records[0].details["reason"] == "role_denied"


@pytest.mark.asyncio
async def test_denied_user_update_audited_with_fields(service, audit_repository):
    with pytest.raises(ForbiddenError):
        await service.authorize(
            WORKER, Operation.UPDATE, ResourceType.USER, METADATA, resource_id=2, changed_fields=["role"]
        )
    record = audit_repository.records[0]
    assert record.action == "UPDATE_USER"
    assert record.details["reason"] == "self_protection"
    assert record.details["fields"] == ["role"]


@pytest.mark.asyncio
async def test_client_uploading_into_foreign_chantier_audited(service, audit_repository):
    with pytest.raises(ForbiddenError) as exc_info:
        await service.authorize(CLIENT_B, Operation.CREATE, ResourceType.FILE, METADATA, resource_id=10)
    assert exc_info.value.reason is DenialReason.OWNERSHIP_DENIED
    record = audit_repository.records[0]
    assert record.action == "UPLOAD_FILE"
    assert record.resource_type == "file"
    assert record.details["error"] == "Access denied"
    assert record.details["role"] == "client"


@pytest.mark.asyncio
async def test_client_upload_into_own_chantier_allowed(service, audit_repository):
    decision = await service.authorize(CLIENT_A, Operation.CREATE, ResourceType.FILE, METADATA, resource_id=10)
    assert decision.allowed
    assert audit_repository.records == []


@pytest.mark.asyncio
async def test_other_denials_not_audited(service, audit_repository, metrics):
    with pytest.raises(ForbiddenError):
        await service.authorize(CLIENT_A, Operation.DELETE, ResourceType.STOCK_MATERIAU, METADATA, resource_id=1)
    assert audit_repository.records == []
    assert metrics.counter_value("access_denied", reason="role_denied") == 1


@pytest.mark.asyncio
async def test_disabled_account_raises_account_disabled(service, audit_repository):
    disabled = Principal(id=7, role=Role.CLIENT, status=PrincipalStatus.INACTIVE)
    with pytest.raises(AccountDisabledError):
        await service.authorize(disabled, Operation.VIEW, ResourceType.CHANTIER, METADATA, resource_id=10)
    assert audit_repository.records[0].details["reason"] == "account_disabled"


@pytest.mark.asyncio
async def test_audit_failure_does_not_mask_denial(policy, failing_audit_repository, metrics, caplog):
    """The caller still gets Forbidden; the lost audit write shows up on the error channel."""
    service = AccessService(
        policy=policy,
        recorder=AuditRecorder(repository=failing_audit_repository, metrics=metrics),
        metrics=metrics,
    )
    with caplog.at_level(logging.ERROR):
        with pytest.raises(ForbiddenError):
            await service.authorize(CLIENT_B, Operation.VIEW, ResourceType.CHANTIER, METADATA, resource_id=10)
    assert any(r.getMessage() == "audit_write_failed" for r in caplog.records)
    assert metrics.counter_value("audit_write_failures", action="VIEW_CHANTIER") == 1


@pytest.mark.asyncio
async def test_record_mutation_writes_exactly_one(service, audit_repository):
    record = await service.record_mutation(
        ADMIN,
        AuditAction.DELETE_USER,
        ResourceType.USER,
        METADATA,
        resource_id=5,
        details={"email": "client@example.com"},
    )
    assert record is not None
    assert len(audit_repository.records) == 1
    assert audit_repository.records[0].action == "DELETE_USER"
    assert audit_repository.records[0].actor_id == 1


@pytest.mark.asyncio
async def test_record_mutation_failure_returns_none(policy, failing_audit_repository):
    service = AccessService(policy=policy, recorder=AuditRecorder(repository=failing_audit_repository))
    record = await service.record_mutation(ADMIN, AuditAction.CREATE_CHANTIER, ResourceType.CHANTIER, METADATA, 10)
    assert record is None
