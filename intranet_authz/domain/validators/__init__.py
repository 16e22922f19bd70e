"""Domain validators. Pure parsing of untrusted request parameters."""

from intranet_authz.domain.validators.request_params import (
    parse_datetime_bound,
    parse_identifier,
    parse_int_param,
)

__all__ = [
    "parse_datetime_bound",
    "parse_identifier",
    "parse_int_param",
]
