"""Client IP and user agent extraction."""

from starlette.datastructures import Headers

from intranet_authz.security.request_metadata import RequestMetadata


def test_first_forwarded_for_entry_wins():
    headers = Headers({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1", "X-Real-IP": "10.0.0.2"})
    assert RequestMetadata.from_headers(headers).ip_address == "203.0.113.7"


def test_real_ip_when_no_forwarded_for():
    headers = Headers({"x-real-ip": "198.51.100.4"})
    assert RequestMetadata.from_headers(headers).ip_address == "198.51.100.4"


def test_unknown_when_no_headers():
    metadata = RequestMetadata.from_headers(Headers({}))
    assert metadata.ip_address == "unknown"
    assert metadata.user_agent == "unknown"


def test_user_agent_copied():
    headers = Headers({"User-Agent": "Mozilla/5.0"})
    assert RequestMetadata.from_headers(headers).user_agent == "Mozilla/5.0"


def test_plain_mapping_accepted():
    metadata = RequestMetadata.from_headers({"x-forwarded-for": "192.0.2.1", "user-agent": "curl/8"})
    assert metadata == RequestMetadata(ip_address="192.0.2.1", user_agent="curl/8")
