"""Immutable audit record model and query types. Domain-level immutability."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class AuditAction(str, Enum):
    """Action vocabulary stored in audit_logs.action."""

    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"

    # Users
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    DISABLE_USER = "DISABLE_USER"
    ENABLE_USER = "ENABLE_USER"

    # Chantiers
    CREATE_CHANTIER = "CREATE_CHANTIER"
    UPDATE_CHANTIER = "UPDATE_CHANTIER"
    DELETE_CHANTIER = "DELETE_CHANTIER"
    VIEW_CHANTIER = "VIEW_CHANTIER"

    # Files
    UPLOAD_FILE = "UPLOAD_FILE"
    DELETE_FILE = "DELETE_FILE"
    DOWNLOAD_FILE = "DOWNLOAD_FILE"

    # Stock
    CREATE_STOCK_MATERIAU = "CREATE_STOCK_MATERIAU"
    UPDATE_STOCK_MATERIAU = "UPDATE_STOCK_MATERIAU"
    DELETE_STOCK_MATERIAU = "DELETE_STOCK_MATERIAU"
    CREATE_STOCK_MATERIEL = "CREATE_STOCK_MATERIEL"
    UPDATE_STOCK_MATERIEL = "UPDATE_STOCK_MATERIEL"
    DELETE_STOCK_MATERIEL = "DELETE_STOCK_MATERIEL"
    CREATE_STOCK_MOVEMENT = "CREATE_STOCK_MOVEMENT"

    # Invoices & quotes
    CREATE_INVOICE = "CREATE_INVOICE"
    UPDATE_INVOICE = "UPDATE_INVOICE"
    DELETE_INVOICE = "DELETE_INVOICE"
    CREATE_QUOTE = "CREATE_QUOTE"
    UPDATE_QUOTE = "UPDATE_QUOTE"
    DELETE_QUOTE = "DELETE_QUOTE"


@dataclass(frozen=True)
class AuditRecord:
    """
    Immutable audit record: who (actor_id, null before authentication), what
    (action on resource), where from (ip, user agent), when (UTC).
    id is assigned by the repository on insert; actor_name is filled on read
    from the actor's current account and is never stored.
    """

    action: str
    resource_type: str
    ip_address: str
    user_agent: str
    created_at: datetime
    actor_id: Optional[int] = None
    resource_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    id: Optional[int] = None
    actor_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON logging."""
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "details": self.details,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class AuditFilter:
    """Query filter. None fields do not constrain; dates bound created_at inclusively."""

    id: Optional[int] = None
    actor_id: Optional[int] = None
    action: Optional[str] = None
    resource_type: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass(frozen=True)
class AuditPage:
    """One page of records, newest first. total counts every match, not just this page."""

    records: Tuple[AuditRecord, ...] = field(default_factory=tuple)
    total: int = 0
    page: int = 1
    limit: int = 10
