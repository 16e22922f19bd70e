"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class InvalidIdentifierError(DomainValidationError):
    """Raised when an identifier or filter value cannot be parsed. Carries a stable code."""

    def __init__(self, message: str, code: str = "INVALID_ID") -> None:
        self.code = code
        super().__init__(message)


class UnknownRoleError(DomainValidationError):
    """Raised when a persisted role string is not one of the known roles."""
