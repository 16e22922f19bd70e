"""Pydantic schemas for the audit and session API. camelCase on the wire, snake_case in Python."""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from intranet_authz.domain.models.principal import ActionFamily, PrincipalStatus, Role


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class AuditRecordCreateRequest(_CamelModel):
    """Bootstrap ingestion payload (e.g. failed login). ipAddress/userAgent default to the caller's."""

    user_id: Optional[int] = Field(None, description="Actor id when known; null before authentication")
    action: str = Field(..., min_length=1)
    resource_type: str = Field(..., min_length=1)
    resource_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = Field(None, description="JSON object or JSON-encoded object string")

    @field_validator("action", "resource_type")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must be a non-empty string")
        return stripped

    @field_validator("ip_address", "user_agent")
    @classmethod
    def blank_means_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("details", mode="before")
    @classmethod
    def details_must_be_json_object(cls, v: Any) -> Any:
        """Accept an object, or a string holding a JSON object (as the login page sends it)."""
        if v is None or isinstance(v, dict):
            return v
        if isinstance(v, str):
            try:
                decoded = json.loads(v)
            except ValueError as e:
                raise ValueError("details must be a valid JSON string") from e
            if not isinstance(decoded, dict):
                raise ValueError("details must encode a JSON object")
            return decoded
        raise ValueError("details must be a JSON string or object")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class AuditRecordResponse(_CamelModel):
    id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[int] = None
    ip_address: str
    user_agent: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class AuditPageResponse(_CamelModel):
    logs: List[AuditRecordResponse]
    total: int
    page: int
    limit: int


class PrincipalResponse(_CamelModel):
    id: int
    role: Role
    status: PrincipalStatus


class SessionResponse(_CamelModel):
    user: PrincipalResponse
    permissions: List[ActionFamily]
