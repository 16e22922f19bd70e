"""
Access application service: the seam route handlers call. Orchestrates
identity, the PDP and the audit recorder. No HTTP, no FastAPI.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from intranet_authz.domain.models.principal import Operation, Principal
from intranet_authz.domain.models.resource import AccessDecision, ResourceType
from intranet_authz.governance.audit_models import AuditAction, AuditRecord
from intranet_authz.governance.audit_recorder import AuditRecorder
from intranet_authz.observability.metrics import MetricsCollector
from intranet_authz.security.exceptions import error_for_denial
from intranet_authz.security.policy import PolicyDecisionPoint
from intranet_authz.security.request_metadata import RequestMetadata

ACCESS_DENIED = "Access denied"

# Guarded accesses whose denials carry compliance weight and are always audited.
AUDITED_DENIALS: Mapping[tuple[ResourceType, Operation], AuditAction] = {
    (ResourceType.CHANTIER, Operation.VIEW): AuditAction.VIEW_CHANTIER,
    (ResourceType.CHANTIER, Operation.UPDATE): AuditAction.UPDATE_CHANTIER,
    (ResourceType.USER, Operation.UPDATE): AuditAction.UPDATE_USER,
    (ResourceType.FILE, Operation.CREATE): AuditAction.UPLOAD_FILE,
}


class AccessService:
    """
    Handler flow: authenticate -> authorize -> (handler persists) -> record_mutation.
    A denial raises the typed security error after the denial is audited where required.
    """

    def __init__(
        self,
        policy: PolicyDecisionPoint,
        recorder: AuditRecorder,
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._policy = policy
        self._recorder = recorder
        self._metrics = metrics
        self._logger = logger or logging.getLogger(__name__)

    async def authenticate(self, credential: Optional[str]) -> Principal:
        return await self._policy.require_authenticated(credential)

    async def authorize(
        self,
        principal: Principal,
        operation: Operation,
        resource_type: ResourceType,
        metadata: RequestMetadata,
        resource_id: Optional[int] = None,
        changed_fields: Iterable[str] = (),
    ) -> AccessDecision:
        """Return the allowed decision, or audit (if sensitive) and raise."""
        changed = tuple(changed_fields)
        decision = await self._policy.authorize(
            principal, operation, resource_type, resource_id, changed
        )
        if decision.allowed:
            return decision

        reason = decision.reason.value if decision.reason else None
        self._logger.warning(
            "access_denied",
            extra={
                "actor_id": principal.id,
                "operation": operation.value,
                "resource_type": resource_type.value,
                "resource_id": resource_id,
                "reason": reason,
            },
        )
        if self._metrics is not None:
            self._metrics.increment("access_denied", reason=reason or "unknown")

        audit_action = AUDITED_DENIALS.get((resource_type, operation))
        if audit_action is not None:
            details: Dict[str, Any] = {
                "error": ACCESS_DENIED,
                "reason": reason,
                "role": principal.role.value,
            }
            if changed:
                details["fields"] = sorted(changed)
            await self._recorder.record_best_effort(
                actor_id=principal.id,
                action=audit_action,
                resource_type=resource_type,
                resource_id=resource_id,
                ip_address=metadata.ip_address,
                user_agent=metadata.user_agent,
                details=details,
            )
        raise error_for_denial(decision.reason)

    async def record_mutation(
        self,
        principal: Principal,
        action: AuditAction,
        resource_type: ResourceType,
        metadata: RequestMetadata,
        resource_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditRecord]:
        """Call once, after the mutation has durably succeeded. Never raises on audit failure."""
        return await self._recorder.record_best_effort(
            actor_id=principal.id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
            details=details,
        )
