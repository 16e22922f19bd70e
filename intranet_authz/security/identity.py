"""Identity resolution: opaque credential -> Principal. PyJWT-backed. No FastAPI."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Protocol

import jwt

from intranet_authz.domain.models.principal import Principal
from intranet_authz.security.exceptions import AccountDisabledError, UnauthenticatedError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
USER_ID_CLAIM = "userId"


class PrincipalLookup(Protocol):
    """Persistence collaborator: current principal state by id."""

    async def lookup_principal(self, principal_id: int) -> Optional[Principal]:
        """Return the principal with its current role and status, or None."""
        ...


def extract_credential(
    authorization: Optional[str],
    cookies: Mapping[str, str],
    cookie_name: str,
) -> Optional[str]:
    """Bearer token from the Authorization header first, then the session cookie."""
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
        if token:
            return token
    token = cookies.get(cookie_name)
    return token or None


class TokenService:
    """Issue and verify signed session tokens. The secret is injected, never read from globals."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiration_minutes: int = 60 * 24 * 7) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expiration = timedelta(minutes=expiration_minutes)

    def issue(self, principal: Principal, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            USER_ID_CLAIM: principal.id,
            "role": principal.role.value,
            "iat": issued_at,
            "exp": issued_at + self._expiration,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify signature and expiry. Raises UnauthenticatedError on any failure."""
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise UnauthenticatedError("Session expired") from e
        except jwt.InvalidTokenError as e:
            raise UnauthenticatedError("Invalid credential") from e


class IdentityResolver:
    """
    Turns a credential into a Principal. Role and status are read fresh from
    persistence on every call so role changes and deactivation apply immediately.
    """

    def __init__(self, tokens: TokenService, principals: PrincipalLookup) -> None:
        self._tokens = tokens
        self._principals = principals

    async def resolve(self, credential: Optional[str]) -> Principal:
        """Raises UnauthenticatedError or AccountDisabledError; the two are never conflated."""
        if not credential:
            raise UnauthenticatedError("Not authenticated")
        claims = self._tokens.decode(credential)
        principal_id = claims.get(USER_ID_CLAIM)
        if not isinstance(principal_id, int) or isinstance(principal_id, bool):
            raise UnauthenticatedError("Invalid credential")

        principal = await self._principals.lookup_principal(principal_id)
        if principal is None:
            raise UnauthenticatedError("Not authenticated")
        if not principal.is_active:
            logger.info("account_disabled_rejected", extra={"actor_id": principal.id})
            raise AccountDisabledError("Account disabled. Contact an administrator.")
        return principal
