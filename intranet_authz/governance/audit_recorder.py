"""Append-only audit recording for privileged decisions and mutations. No FastAPI."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional

from intranet_authz.application.exceptions import PersistenceError
from intranet_authz.governance.audit_models import AuditAction, AuditRecord
from intranet_authz.governance.audit_repository import AuditRepository
from intranet_authz.governance.exceptions import BootstrapActionNotAllowedError
from intranet_authz.observability.metrics import MetricsCollector

DEFAULT_BOOTSTRAP_ACTIONS: FrozenSet[str] = frozenset({AuditAction.LOGIN_FAILED.value})


def _value(item: Any) -> Any:
    return item.value if hasattr(item, "value") else item


class AuditRecorder:
    """
    Writes immutable audit records via repository. Timestamps are UTC.

    record() is strict and raises PersistenceError. record_best_effort() is
    what handlers call after their mutation succeeded: a failed write is
    logged on the operational channel and counted, never raised, and never
    undoes the mutation it describes.
    """

    def __init__(
        self,
        repository: AuditRepository,
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[logging.Logger] = None,
        bootstrap_actions: Optional[Iterable[str]] = None,
    ) -> None:
        self._repository = repository
        self._metrics = metrics
        self._logger = logger or logging.getLogger(__name__)
        self._bootstrap_actions = (
            frozenset(bootstrap_actions) if bootstrap_actions is not None else DEFAULT_BOOTSTRAP_ACTIONS
        )

    async def record(
        self,
        *,
        actor_id: Optional[int],
        action: str,
        resource_type: str,
        ip_address: str,
        user_agent: str,
        resource_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        """Append one record. Raises PersistenceError if the store fails."""
        record = AuditRecord(
            action=_value(action),
            resource_type=_value(resource_type),
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=datetime.now(timezone.utc),
            actor_id=actor_id,
            resource_id=resource_id,
            details=details,
        )
        try:
            stored = await self._repository.insert(record)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Audit write failed: {e}") from e
        self._logger.info(
            "audit_recorded",
            extra={"action": stored.action, "actor_id": stored.actor_id, "audit_id": stored.id},
        )
        if self._metrics is not None:
            self._metrics.increment("audit_records_written")
        return stored

    async def record_best_effort(
        self,
        *,
        actor_id: Optional[int],
        action: str,
        resource_type: str,
        ip_address: str,
        user_agent: str,
        resource_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditRecord]:
        """Append one record; on failure log audit_write_failed and return None."""
        try:
            return await self.record(
                actor_id=actor_id,
                action=action,
                resource_type=resource_type,
                ip_address=ip_address,
                user_agent=user_agent,
                resource_id=resource_id,
                details=details,
            )
        except PersistenceError as e:
            self._logger.error(
                "audit_write_failed",
                extra={
                    "action": _value(action),
                    "resource_type": _value(resource_type),
                    "resource_id": resource_id,
                    "actor_id": actor_id,
                    "ip_address": ip_address,
                    "details": details,
                    "error": e.message,
                },
            )
            if self._metrics is not None:
                self._metrics.increment("audit_write_failures", action=_value(action))
            # Do not re-raise: the described action already happened.
            return None

    def is_bootstrap_action(self, action: str) -> bool:
        return _value(action) in self._bootstrap_actions

    async def record_bootstrap_event(
        self,
        *,
        action: str,
        resource_type: str,
        ip_address: str,
        user_agent: str,
        actor_id: Optional[int] = None,
        resource_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        """
        Unauthenticated write for whitelisted bootstrap actions (failed logins).
        Raises BootstrapActionNotAllowedError for anything else.
        """
        if not self.is_bootstrap_action(action):
            raise BootstrapActionNotAllowedError(
                f"Action '{_value(action)}' cannot be recorded without authentication"
            )
        return await self.record(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            ip_address=ip_address,
            user_agent=user_agent,
            resource_id=resource_id,
            details=details,
        )
