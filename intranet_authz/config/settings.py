# intranet_authz/config/settings.py

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "intranet-authz"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Security ---
    jwt_secret: str = Field(..., min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 60 * 24 * 7
    session_cookie_name: str = "jhs_token"

    # --- Database ---
    database_url: str

    # --- Redis (rate-limit state) ---
    redis_url: str

    # --- Audit ---
    audit_query_default_limit: int = Field(10, ge=1)
    audit_query_max_limit: int = Field(100, ge=1)
    # Actions accepted on the unauthenticated ingestion endpoint.
    bootstrap_audit_actions: List[str] = ["LOGIN_FAILED"]
    # When set, unauthenticated ingestion also requires X-Audit-Ingest-Token.
    audit_ingest_token: Optional[str] = None
    bootstrap_rate_limit_requests: int = Field(12, ge=1)
    bootstrap_rate_limit_window_seconds: int = Field(15 * 60, ge=1)
    # Key that rate limit on X-Forwarded-For instead of the socket peer. Enable only
    # behind a reverse proxy that overwrites the header.
    trust_forwarded_for: bool = False

    # --- Observability ---
    enable_metrics: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
