"""Client address and user agent as recorded on audit records. No FastAPI."""

from dataclasses import dataclass
from typing import Mapping

UNKNOWN = "unknown"
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"
USER_AGENT_HEADER = "user-agent"


@dataclass(frozen=True)
class RequestMetadata:
    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestMetadata":
        """
        ip: first x-forwarded-for entry, else x-real-ip, else "unknown".
        user agent: user-agent header, else "unknown".
        Header lookup is case-insensitive when given Starlette Headers.
        """
        ip_address = ""
        forwarded = headers.get(FORWARDED_FOR_HEADER)
        if forwarded:
            ip_address = forwarded.split(",")[0].strip()
        if not ip_address:
            ip_address = (headers.get(REAL_IP_HEADER) or "").strip()
        user_agent = (headers.get(USER_AGENT_HEADER) or "").strip()
        return cls(
            ip_address=ip_address or UNKNOWN,
            user_agent=user_agent or UNKNOWN,
        )
