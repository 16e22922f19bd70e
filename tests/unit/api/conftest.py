"""Fixtures for API unit tests: in-memory collaborators wired through dependency_overrides, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from intranet_authz.main import app
from intranet_authz.security.rate_limiter import BootstrapRateLimiter, InMemoryRateLimitBackend


@pytest.fixture
def rate_limiter(metrics):
    return BootstrapRateLimiter(
        backend=InMemoryRateLimitBackend(),
        requests_per_window=3,
        window_seconds=60,
        metrics=metrics,
    )


@pytest.fixture
def app_with_overrides(principal_lookup, resource_lookup, audit_repository, token_service, metrics, rate_limiter):
    """App with database, Redis and signing key replaced by in-memory fakes."""
    from intranet_authz.api import dependencies

    app.dependency_overrides[dependencies.get_principal_lookup] = lambda: principal_lookup
    app.dependency_overrides[dependencies.get_resource_lookup] = lambda: resource_lookup
    app.dependency_overrides[dependencies.get_audit_repository] = lambda: audit_repository
    app.dependency_overrides[dependencies.get_token_service] = lambda: token_service
    app.dependency_overrides[dependencies.get_metrics] = lambda: metrics
    app.dependency_overrides[dependencies.get_rate_limiter] = lambda: rate_limiter
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_with_overrides):
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(token_service):
    """Build a bearer header for a principal."""

    def _headers(principal):
        return {"Authorization": f"Bearer {token_service.issue(principal)}"}

    return _headers
