# Application layer: services that orchestrate security, governance and infrastructure.
# AccessService is imported from its module; governance depends on these exceptions.

from intranet_authz.application.exceptions import ApplicationError, PersistenceError

__all__ = [
    "ApplicationError",
    "PersistenceError",
]
