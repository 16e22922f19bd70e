"""Parsers for identifiers and date bounds taken from query strings. Pure functions."""

from datetime import datetime, timezone
from typing import Optional

from intranet_authz.domain.exceptions import InvalidIdentifierError


def parse_identifier(
    value: Optional[str],
    *,
    code: str = "INVALID_ID",
    label: str = "ID",
) -> Optional[int]:
    """
    Parse a positive integer id from a query-string value. None/blank -> None.
    Raises InvalidIdentifierError carrying the caller's stable code.
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value.strip())
    except ValueError as e:
        raise InvalidIdentifierError(f"Valid {label} is required", code=code) from e
    if parsed < 1:
        raise InvalidIdentifierError(f"Valid {label} is required", code=code)
    return parsed


def parse_int_param(value: Optional[str], default: int) -> int:
    """Lenient paging parser: unparsable or missing values fall back to the default."""
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def parse_datetime_bound(value: Optional[str], *, label: str) -> Optional[datetime]:
    """ISO-8601 date or datetime; naive values are taken as UTC."""
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidIdentifierError(f"Invalid {label}: expected ISO-8601", code="INVALID_DATE") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
