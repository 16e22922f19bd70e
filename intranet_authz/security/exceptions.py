"""Security-layer exceptions. Typed, no HTTP. Each carries a stable machine-readable code."""

from typing import Optional

from intranet_authz.domain.models.resource import DenialReason


class SecurityError(Exception):
    """Base for all security-layer errors."""

    code = "SECURITY_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(SecurityError):
    """Raised when the credential is missing, malformed, expired or names no known principal."""

    code = "UNAUTHORIZED"


class AccountDisabledError(SecurityError):
    """Raised when a valid credential belongs to an inactive principal."""

    code = "ACCOUNT_DISABLED"


class ForbiddenError(SecurityError):
    """Raised when role, ownership or self-protection rules deny the action."""

    code = "FORBIDDEN"

    def __init__(self, message: str, reason: DenialReason) -> None:
        self.reason = reason
        super().__init__(message)


class ResourceNotFoundError(SecurityError):
    """Raised when the resource whose ownership is asked for does not exist."""

    code = "NOT_FOUND"


class RateLimitExceededError(SecurityError):
    """Raised when a caller exceeds the unauthenticated ingestion budget."""

    code = "RATE_LIMIT_EXCEEDED"


_DENIAL_MESSAGES = {
    DenialReason.ROLE_DENIED: "Access denied - insufficient permissions",
    DenialReason.OWNERSHIP_DENIED: "Access denied - resource does not belong to you",
    DenialReason.SELF_PROTECTION: "Access denied - this action is not allowed on your own account",
}


def error_for_denial(reason: Optional[DenialReason]) -> SecurityError:
    """Build the exception matching a denial reason. Disabled accounts never become Forbidden."""
    if reason is DenialReason.ACCOUNT_DISABLED:
        return AccountDisabledError("Account disabled. Contact an administrator.")
    if reason is None:
        reason = DenialReason.ROLE_DENIED
    return ForbiddenError(_DENIAL_MESSAGES[reason], reason=reason)


def denial_code(reason: Optional[DenialReason]) -> str:
    """Stable wire code for a denial: disabled accounts are told apart from plain refusals."""
    return error_for_denial(reason).code
