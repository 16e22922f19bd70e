"""API middleware: correlation ID, request metadata, request audit log line."""

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from intranet_authz.core.context import client_ip_ctx, correlation_id_ctx
from intranet_authz.observability.metrics import MetricsCollector
from intranet_authz.security.request_metadata import RequestMetadata

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
UNMATCHED_ROUTE = "unmatched"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestMetadataMiddleware(BaseHTTPMiddleware):
    """Derive client IP and user agent once per request; attach to request.state and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        metadata = RequestMetadata.from_headers(request.headers)
        request.state.request_metadata = metadata
        client_ip_ctx.set(metadata.ip_address)
        return await call_next(request)


def _route_label(request: Request) -> str:
    """Matched route template, so one series per endpoint rather than per URL."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class RequestAuditMiddleware(BaseHTTPMiddleware):
    """After response: structured access log line and latency observation. Not the audit trail."""

    def __init__(self, app, metrics: MetricsCollector | None = None) -> None:
        super().__init__(app)
        self._metrics = metrics

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        audit_event = {
            "event": "request_audit",
            "correlation_id": getattr(request.state, "correlation_id", None),
            "actor_id": getattr(request.state, "principal_id", None),
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
        }
        logger.info(json.dumps(audit_event))
        if self._metrics is not None:
            self._metrics.observe_latency("request_latency_ms", elapsed_ms, path=_route_label(request))
        return response
