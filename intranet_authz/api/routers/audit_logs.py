"""Audit logs API router: GET /audit-logs (admin only), POST /audit-logs (bootstrap ingestion)."""

import hmac
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Query, Response

from intranet_authz.api.dependencies import (
    get_audit_query_service,
    get_audit_recorder,
    get_client_address,
    get_rate_limiter,
    get_request_metadata,
    require_roles,
)
from intranet_authz.config.settings import AppSettings, get_settings
from intranet_authz.domain.models.principal import Principal, Role
from intranet_authz.domain.schemas.audit import (
    AuditPageResponse,
    AuditRecordCreateRequest,
    AuditRecordResponse,
)
from intranet_authz.domain.validators.request_params import (
    parse_datetime_bound,
    parse_identifier,
    parse_int_param,
)
from intranet_authz.governance.audit_models import AuditFilter, AuditRecord
from intranet_authz.governance.audit_query import AuditQueryService
from intranet_authz.governance.audit_recorder import AuditRecorder
from intranet_authz.security.exceptions import RateLimitExceededError, UnauthenticatedError
from intranet_authz.security.rate_limiter import BootstrapRateLimiter
from intranet_authz.security.request_metadata import RequestMetadata

router = APIRouter()

INGEST_TOKEN_HEADER = "X-Audit-Ingest-Token"


def _to_response(record: AuditRecord) -> AuditRecordResponse:
    return AuditRecordResponse(
        id=record.id,
        user_id=record.actor_id,
        user_name=record.actor_name,
        action=record.action,
        resource_type=record.resource_type,
        resource_id=record.resource_id,
        ip_address=record.ip_address,
        user_agent=record.user_agent,
        details=record.details,
        created_at=record.created_at,
    )


def _json(model, status_code: int = 200) -> Response:
    return Response(
        content=model.model_dump_json(by_alias=True),
        status_code=status_code,
        media_type="application/json",
    )


@router.get("")
async def list_audit_logs(
    principal: Annotated[Principal, Depends(require_roles(Role.ADMIN))],
    service: Annotated[AuditQueryService, Depends(get_audit_query_service)],
    settings: Annotated[AppSettings, Depends(get_settings)],
    id: Optional[str] = None,
    user_id: Annotated[Optional[str], Query(alias="userId")] = None,
    action: Optional[str] = None,
    resource_type: Annotated[Optional[str], Query(alias="resourceType")] = None,
    start_date: Annotated[Optional[str], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[str], Query(alias="endDate")] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    """Single record when `id` is given; otherwise a filtered page, newest first."""
    record_id = parse_identifier(id, code="INVALID_ID")
    if record_id is not None:
        record = await service.get(principal, record_id)
        return _json(_to_response(record))

    audit_filter = AuditFilter(
        actor_id=parse_identifier(user_id, code="INVALID_USER_ID", label="userId"),
        action=action,
        resource_type=resource_type,
        start_date=parse_datetime_bound(start_date, label="startDate"),
        end_date=parse_datetime_bound(end_date, label="endDate"),
    )
    page_number, page_size = service.clamp(
        parse_int_param(page, 1),
        parse_int_param(limit, settings.audit_query_default_limit),
    )
    result = await service.query(principal, audit_filter, page_number, page_size)
    return _json(
        AuditPageResponse(
            logs=[_to_response(r) for r in result.records],
            total=result.total,
            page=result.page,
            limit=result.limit,
        )
    )


@router.post("", status_code=201)
async def ingest_bootstrap_event(
    body: AuditRecordCreateRequest,
    metadata: Annotated[RequestMetadata, Depends(get_request_metadata)],
    client_address: Annotated[str, Depends(get_client_address)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    limiter: Annotated[BootstrapRateLimiter, Depends(get_rate_limiter)],
    settings: Annotated[AppSettings, Depends(get_settings)],
    ingest_token: Annotated[Optional[str], Header(alias=INGEST_TOKEN_HEADER)] = None,
):
    """
    Pre-authentication write (failed logins). Only whitelisted actions are accepted.
    With an ingest token configured, callers must present it; they are then not
    rate limited and may state the end user's ipAddress/userAgent. Without one the
    endpoint is open but limited per connecting address, and the record carries
    the request's own metadata.
    """
    ip_address, user_agent = metadata.ip_address, metadata.user_agent
    if settings.audit_ingest_token:
        if not ingest_token or not hmac.compare_digest(ingest_token, settings.audit_ingest_token):
            raise UnauthenticatedError(f"Valid {INGEST_TOKEN_HEADER} header is required")
        ip_address = body.ip_address or ip_address
        user_agent = body.user_agent or user_agent
    elif not await limiter.allow_request(client_address):
        raise RateLimitExceededError("Too many attempts. Try again later.")

    record = await recorder.record_bootstrap_event(
        actor_id=body.user_id,
        action=body.action,
        resource_type=body.resource_type,
        resource_id=body.resource_id,
        ip_address=ip_address,
        user_agent=user_agent,
        details=body.details,
    )
    return _json(_to_response(record), status_code=201)
