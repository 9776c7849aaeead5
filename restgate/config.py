"""
RestGate — Application Configuration
======================================

What:  Configuration for the request pipeline, loaded with Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types/ranges, and produces an immutable Settings object.
Who:   Built once at startup and passed to create_app(); every stage that
       needs configuration receives it from there.
When:  Constructed by the application factory or by the server entry point.

Modes:
    development  Stack traces in error responses, error diagnostics on the
                 console, verbose access log.
    production   Concise access log written through the application logger.
    test         Access and audit logs disabled.
"""

from enum import Enum
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Running mode of the server. One value drives every mode decision."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


# Short names accepted from the environment
_ENVIRONMENT_ALIASES = {
    "dev": Environment.DEVELOPMENT,
    "develop": Environment.DEVELOPMENT,
    "prod": Environment.PRODUCTION,
    "testing": Environment.TEST,
}


class Settings(BaseSettings):
    """
    Pipeline settings loaded from environment variables.

    Instances are frozen: assigning to a field after construction raises a
    pydantic ValidationError.
    """

    # ── Mode ──────────────────────────────────────────────────────────────
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias=AliasChoices("environment", "ENVIRONMENT", "ENV"),
        description="Running mode: development, production or test",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        """Accepts enum values as well as the short names dev/prod."""
        if isinstance(v, Environment):
            return v
        name = str(v).strip().lower()
        if name in _ENVIRONMENT_ALIASES:
            return _ENVIRONMENT_ALIASES[name]
        try:
            return Environment(name)
        except ValueError:
            valid = sorted(e.value for e in Environment)
            raise ValueError(f"Invalid environment '{v}'. Must be one of: {valid}")

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Routing ───────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api")

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Prefix must start with '/' and must not end with one."""
        v = "/" + v.strip().strip("/")
        if v == "/":
            raise ValueError("api_prefix must not be empty or '/'")
        return v

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Middleware ────────────────────────────────────────────────────────
    # Responses smaller than this are sent uncompressed
    gzip_minimum_size: int = Field(default=1024, ge=0)

    method_override_header: str = Field(default="X-HTTP-Method-Override")

    # Include request/response bodies in audit log records
    audit_log_bodies: bool = Field(default=True)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ── Mode helpers ──────────────────────────────────────────────────────
    @property
    def is_development(self) -> bool:
        return self.environment is Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    @property
    def is_test(self) -> bool:
        return self.environment is Environment.TEST
