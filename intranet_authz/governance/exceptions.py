"""Governance-layer exceptions. Typed, no HTTP."""


class GovernanceError(Exception):
    """Base for all governance-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuditRecordNotFoundError(GovernanceError):
    """Raised when a single-record lookup by id finds nothing."""


class BootstrapActionNotAllowedError(GovernanceError):
    """Raised when an unauthenticated write names an action outside the whitelist."""
