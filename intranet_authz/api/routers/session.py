"""Session API router: GET /auth/session: resolved principal and its granted families."""

from typing import Annotated

from fastapi import APIRouter, Depends

from intranet_authz.api.dependencies import get_current_principal, get_policy
from intranet_authz.domain.models.principal import Principal
from intranet_authz.domain.schemas.audit import PrincipalResponse, SessionResponse
from intranet_authz.security.policy import PolicyDecisionPoint

router = APIRouter()


@router.get("/session", response_model=SessionResponse)
async def current_session(
    principal: Annotated[Principal, Depends(get_current_principal)],
    policy: Annotated[PolicyDecisionPoint, Depends(get_policy)],
):
    """Resolved principal with its granted action families, sorted for stable output."""
    families = sorted(policy.granted_families(principal), key=lambda f: f.value)
    return SessionResponse(
        user=PrincipalResponse(id=principal.id, role=principal.role, status=principal.status),
        permissions=families,
    )
