"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PersistenceError(ApplicationError):
    """Raised when a persistence collaborator (principal, resource or audit store) fails. The caller decides whether to surface it."""
