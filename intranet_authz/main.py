# intranet_authz/main.py

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from intranet_authz.api.dependencies import get_metrics
from intranet_authz.api.middleware import (
    CorrelationIdMiddleware,
    RequestAuditMiddleware,
    RequestMetadataMiddleware,
)
from intranet_authz.api.routers import audit_logs, health, session
from intranet_authz.application.exceptions import ApplicationError, PersistenceError
from intranet_authz.config.logging import configure_logging
from intranet_authz.config.settings import get_settings
from intranet_authz.domain.exceptions import DomainError, DomainValidationError, InvalidIdentifierError
from intranet_authz.governance.exceptions import (
    AuditRecordNotFoundError,
    BootstrapActionNotAllowedError,
)
from intranet_authz.security.exceptions import (
    AccountDisabledError,
    ForbiddenError,
    RateLimitExceededError,
    ResourceNotFoundError,
    SecurityError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestMetadata -> RequestAudit.
app.add_middleware(RequestAuditMiddleware, metrics=get_metrics() if settings.enable_metrics else None)
app.add_middleware(RequestMetadataMiddleware)
app.add_middleware(CorrelationIdMiddleware)

_SECURITY_STATUS = {
    UnauthenticatedError: 401,
    AccountDisabledError: 403,
    ForbiddenError: 403,
    ResourceNotFoundError: 404,
    RateLimitExceededError: 429,
}


def _error(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


@app.exception_handler(SecurityError)
async def security_error_handler(request, exc: SecurityError):
    return _error(_SECURITY_STATUS.get(type(exc), 403), exc.message, exc.code)


@app.exception_handler(InvalidIdentifierError)
async def invalid_identifier_error_handler(request, exc: InvalidIdentifierError):
    return _error(400, exc.message, exc.code)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        # loc starts with the request part ("body", "query", ...)
        loc = error.get("loc") or ("request",)
        field = ".".join(str(part) for part in loc[1:]) or str(loc[0])
        problems.append(f"{field}: {error['msg']}")
    return _error(422, "; ".join(problems) or "Invalid request", "VALIDATION_ERROR")


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return _error(422, exc.message, "VALIDATION_ERROR")


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return _error(400, exc.message, "BAD_REQUEST")


@app.exception_handler(AuditRecordNotFoundError)
async def audit_record_not_found_handler(request, exc: AuditRecordNotFoundError):
    return _error(404, exc.message, "NOT_FOUND")


@app.exception_handler(BootstrapActionNotAllowedError)
async def bootstrap_action_not_allowed_handler(request, exc: BootstrapActionNotAllowedError):
    return _error(403, exc.message, "ACTION_NOT_ALLOWED")


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request, exc: PersistenceError):
    logger.error("persistence_error", extra={"path": request.url.path, "error": exc.message})
    return _error(503, "Service temporarily unavailable", "PERSISTENCE_ERROR")


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return _error(500, exc.message, "INTERNAL_ERROR")


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return _error(500, "Internal server error", "INTERNAL_ERROR")


# Routers: /health, /auth/session, /audit-logs
app.include_router(health.router)
app.include_router(session.router, prefix="/auth")
app.include_router(audit_logs.router, prefix="/audit-logs")
