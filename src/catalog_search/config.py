"""Centralized configuration for catalog-search using Pydantic Settings."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_INDICES_PATTERN = "{{YYYYMMDD}}-{{HHmmss}}"


class ObservabilityCollectorConfig(BaseModel):
    """Configuration for OTLP trace export."""

    model_config = {"extra": "forbid"}

    enabled: Annotated[
        bool,
        Field(
            description="Enable OTLP trace export to an external collector",
        ),
    ] = False

    otlp_protocol: Annotated[
        Literal["http", "grpc"],
        Field(
            description="OTLP transport protocol",
        ),
    ] = "http"

    collector_endpoint: Annotated[
        str,
        Field(
            description="OTLP collector endpoint (HTTP uses /v1/traces)",
            examples=["http://localhost:4317", "http://localhost:4318/v1/traces"],
        ),
    ] = "http://localhost:4318/v1/traces"

    headers: Annotated[
        dict[str, str],
        Field(
            description="Optional headers to include with OTLP requests",
        ),
    ] = Field(default_factory=dict)

    timeout_seconds: Annotated[
        int,
        Field(
            ge=1,
            le=60,
            description="OTLP exporter timeout in seconds",
        ),
    ] = 10

    grpc_insecure: Annotated[
        bool,
        Field(
            description="Allow insecure gRPC (plaintext) connections",
        ),
    ] = True


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every variable is prefixed with ``CATALOG_SEARCH_`` (for example
    ``CATALOG_SEARCH_ALIAS``). The alias has no default: constructing
    settings without one fails at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Transport
    hosts: str = Field(default="http://localhost:9200", description="Comma-separated search engine endpoints")
    http_timeout: float = Field(default=30.0, gt=0, description="Search engine request timeout in seconds")

    # Index lifecycle
    alias: str = Field(description="Alias clients query; always resolves to exactly one generation")
    indices_pattern: str = Field(
        default=DEFAULT_INDICES_PATTERN,
        description="Generation name suffix; {{...}} tokens are replaced with UTC date/time components",
    )
    number_of_shards: int = Field(default=1, ge=1, description="Primary shards for a freshly created generation")
    number_of_replicas: int = Field(default=0, ge=0, description="Replica count for every generation")
    rollback_failed_generation: bool = Field(
        default=False,
        description="Delete a generation whose creation failed during prepare_new_generation",
    )

    # Schema
    enable_icu_folding: bool = Field(default=False, description="Prepend icu_folding to every analyzer")
    date_format: str = Field(default="date", description="Format attached to datetime field mappings")
    document_type: str = Field(default="product", description="Mapping type for catalog documents")
    search_on_options: bool = Field(default=False, description="Also search the _options label field")
    schema_cache_version: str = Field(default="1", description="Bump to invalidate memoized index schemas")

    # Logging / tracing
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")
    otlp_endpoint: str = Field(default="", description="OTLP collector endpoint; empty disables export")
    otlp_protocol: Literal["http", "grpc"] = Field(default="http", description="OTLP transport protocol")

    @field_validator("alias")
    @classmethod
    def _check_alias(cls, value: str) -> str:
        alias = value.strip()
        if not alias:
            raise ValueError("Alias must be defined for search engine client (set CATALOG_SEARCH_ALIAS)")
        return alias

    @field_validator("indices_pattern")
    @classmethod
    def _check_indices_pattern(cls, value: str) -> str:
        if not value.strip():
            return DEFAULT_INDICES_PATTERN
        return value

    def get_hosts(self) -> list[str]:
        """Get list of search engine endpoints (comma-separated)."""
        return [host.strip().rstrip("/") for host in self.hosts.split(",") if host.strip()]

    def get_collector_config(self) -> ObservabilityCollectorConfig:
        """Build the OTLP exporter config; disabled when no endpoint is set."""
        if not self.otlp_endpoint:
            return ObservabilityCollectorConfig(enabled=False)
        return ObservabilityCollectorConfig(
            enabled=True,
            otlp_protocol=self.otlp_protocol,
            collector_endpoint=self.otlp_endpoint,
        )
