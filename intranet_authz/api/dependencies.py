"""FastAPI dependency injection: repositories, PDP, audit services, current principal, request metadata."""

import logging
from typing import Annotated, Iterable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_authz.application.access_service import AccessService
from intranet_authz.config.settings import AppSettings, get_settings
from intranet_authz.core.context import actor_id_ctx
from intranet_authz.domain.models.principal import Principal, Role
from intranet_authz.governance.audit_query import AuditQueryService
from intranet_authz.governance.audit_recorder import AuditRecorder
from intranet_authz.governance.audit_repository import AuditRepository
from intranet_authz.infrastructure.cache.rate_limit_backend_redis import RedisRateLimitBackend
from intranet_authz.infrastructure.cache.redis_client import RedisClient
from intranet_authz.infrastructure.database.audit_repository_db import DbAuditRepository
from intranet_authz.infrastructure.database.principal_repository_db import DbPrincipalRepository
from intranet_authz.infrastructure.database.resource_lookup_db import DbResourceLookup
from intranet_authz.infrastructure.database.session import get_db
from intranet_authz.observability.metrics import MetricsCollector
from intranet_authz.security.identity import (
    IdentityResolver,
    PrincipalLookup,
    TokenService,
    extract_credential,
)
from intranet_authz.security.ownership import OwnershipResolver, ResourceOwnerLookup
from intranet_authz.security.policy import PolicyDecisionPoint
from intranet_authz.security.rate_limiter import BootstrapRateLimiter
from intranet_authz.security.request_metadata import UNKNOWN, RequestMetadata

_redis_client: RedisClient | None = None
_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Process-wide metrics registry."""
    return _metrics


def get_redis_client() -> RedisClient:
    """Return singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


def get_principal_lookup(session: Annotated[AsyncSession, Depends(get_db)]) -> PrincipalLookup:
    return DbPrincipalRepository(session)


def get_resource_lookup(session: Annotated[AsyncSession, Depends(get_db)]) -> ResourceOwnerLookup:
    return DbResourceLookup(session)


def get_audit_repository(session: Annotated[AsyncSession, Depends(get_db)]) -> AuditRepository:
    return DbAuditRepository(session)


def get_token_service(settings: Annotated[AppSettings, Depends(get_settings)]) -> TokenService:
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiration_minutes=settings.jwt_expiration_minutes,
    )


def get_policy(
    tokens: Annotated[TokenService, Depends(get_token_service)],
    principals: Annotated[PrincipalLookup, Depends(get_principal_lookup)],
    resources: Annotated[ResourceOwnerLookup, Depends(get_resource_lookup)],
) -> PolicyDecisionPoint:
    """Built per request: collaborators are session-scoped, the matrix is static."""
    return PolicyDecisionPoint(
        identity=IdentityResolver(tokens, principals),
        ownership=OwnershipResolver(resources),
    )


def get_audit_recorder(
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> AuditRecorder:
    return AuditRecorder(
        repository=repository,
        metrics=metrics,
        logger=logging.getLogger("intranet_authz.audit"),
        bootstrap_actions=settings.bootstrap_audit_actions,
    )


def get_audit_query_service(
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
    policy: Annotated[PolicyDecisionPoint, Depends(get_policy)],
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> AuditQueryService:
    return AuditQueryService(repository, policy, max_limit=settings.audit_query_max_limit)


def get_access_service(
    policy: Annotated[PolicyDecisionPoint, Depends(get_policy)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> AccessService:
    return AccessService(policy=policy, recorder=recorder, metrics=metrics)


def get_rate_limiter(
    settings: Annotated[AppSettings, Depends(get_settings)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> BootstrapRateLimiter:
    return BootstrapRateLimiter(
        backend=RedisRateLimitBackend(get_redis_client()),
        requests_per_window=settings.bootstrap_rate_limit_requests,
        window_seconds=settings.bootstrap_rate_limit_window_seconds,
        metrics=metrics,
    )


def get_request_metadata(request: Request) -> RequestMetadata:
    """Extract RequestMetadata from request.state (set by middleware)."""
    metadata = getattr(request.state, "request_metadata", None)
    return metadata or RequestMetadata.from_headers(request.headers)


def get_client_address(
    request: Request,
    metadata: Annotated[RequestMetadata, Depends(get_request_metadata)],
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> str:
    """Rate-limit key. Forwarding headers are client-controlled unless a trusted proxy rewrites them."""
    if settings.trust_forwarded_for:
        return metadata.ip_address
    return request.client.host if request.client else UNKNOWN


def get_credential(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> Optional[str]:
    return extract_credential(
        request.headers.get("Authorization"),
        request.cookies,
        settings.session_cookie_name,
    )


async def get_current_principal(
    request: Request,
    credential: Annotated[Optional[str], Depends(get_credential)],
    access: Annotated[AccessService, Depends(get_access_service)],
) -> Principal:
    """Resolve the caller; raises UnauthenticatedError or AccountDisabledError."""
    principal = await access.authenticate(credential)
    request.state.principal_id = principal.id
    actor_id_ctx.set(principal.id)
    return principal


def require_roles(*roles: Role):
    """Dependency factory: current principal, provided its role is one of `roles`."""
    allowed: Iterable[Role] = frozenset(roles)

    def _dependency(
        principal: Annotated[Principal, Depends(get_current_principal)],
        policy: Annotated[PolicyDecisionPoint, Depends(get_policy)],
    ) -> Principal:
        return policy.require_role(principal, allowed)

    return _dependency
