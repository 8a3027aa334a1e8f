"""
Centralized settings using Pydantic Settings (v2).
Reads environment variables (and an optional .env file) so the HubSpot token is NOT hard-coded.

The Settings object is frozen: build it once at startup and hand it to the
components that need it (HubSpotClient, the FastAPI app factory).
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


class Settings(BaseSettings):
    # ---- HubSpot ----
    HUBSPOT_API_KEY: Optional[str] = Field(default=None, description="Private app access token (Bearer)")
    HUBSPOT_BASE_URL: str = Field(default="https://api.hubapi.com")
    # None = no client-side timeout; a hung HubSpot call hangs the request
    HUBSPOT_TIMEOUT_S: Optional[float] = None
    HUBSPOT_REQUIRE_API_KEY: bool = Field(False, description="Refuse to start without HUBSPOT_API_KEY")

    # ---- HTTP server ----
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    STATIC_DIR: str = Field(default="public", description="Bookmarklet/static assets served at /")
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # ---- Logging / Observability ----
    SERVICE_NAME: str = Field(default="clipbook-dialer")
    LOG_LEVEL: str = Field(default="INFO")
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None  # set to export traces

    # ---- PII Redaction ----
    PII_REDACTION_ENABLED: bool = Field(default=True)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("LOG_LEVEL")
    @classmethod
    def canonical_log_level(cls, v: str) -> str:
        # uvicorn only knows the canonical names
        name = _LOG_LEVEL_ALIASES.get(v.strip().upper(), v.strip().upper())
        if name not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {v!r}")
        return name

    @property
    def hubspot_configured(self) -> bool:
        return bool(self.HUBSPOT_API_KEY)

    def check_startup(self, log) -> None:
        """
        Run once when the server boots.
        Missing token -> loud warning (every HubSpot call will come back 401),
        or a hard failure when HUBSPOT_REQUIRE_API_KEY=true.
        """
        if self.hubspot_configured:
            return
        if self.HUBSPOT_REQUIRE_API_KEY:
            raise RuntimeError("HUBSPOT_API_KEY is not set and HUBSPOT_REQUIRE_API_KEY=true")
        log.warning(
            "hubspot_api_key_missing",
            hint="WARNING: HUBSPOT_API_KEY environment variable is not set!",
        )


settings = Settings()
