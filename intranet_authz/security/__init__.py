"""Security: identity, role matrix, ownership, policy decisions, request metadata. No FastAPI."""

from intranet_authz.security.identity import IdentityResolver, TokenService, extract_credential
from intranet_authz.security.ownership import OwnershipResolver
from intranet_authz.security.exceptions import (
    AccountDisabledError,
    ForbiddenError,
    RateLimitExceededError,
    ResourceNotFoundError,
    SecurityError,
    UnauthenticatedError,
    denial_code,
)
from intranet_authz.security.permissions import PermissionMatrix
from intranet_authz.security.policy import PolicyDecisionPoint
from intranet_authz.security.rate_limiter import BootstrapRateLimiter, InMemoryRateLimitBackend
from intranet_authz.security.request_metadata import RequestMetadata

__all__ = [
    "AccountDisabledError",
    "BootstrapRateLimiter",
    "ForbiddenError",
    "IdentityResolver",
    "InMemoryRateLimitBackend",
    "OwnershipResolver",
    "PermissionMatrix",
    "PolicyDecisionPoint",
    "RateLimitExceededError",
    "RequestMetadata",
    "ResourceNotFoundError",
    "SecurityError",
    "TokenService",
    "UnauthenticatedError",
    "denial_code",
    "extract_credential",
]
