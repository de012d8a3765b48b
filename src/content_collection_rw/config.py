"""
Configuration for the content collection read/write service.

All values come from environment variables via pydantic-settings:

    CCRW_APP_NAME, CCRW_APP_SYSTEM_CODE, CCRW_LOG_LEVEL, CCRW_HEALTH_CHECK_TIMEOUT
    CCRW_FALKORDB_HOST, CCRW_FALKORDB_PORT, CCRW_FALKORDB_PASSWORD, ...
    CCRW_HTTP_HOST, CCRW_HTTP_PORT
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class FalkorDBSettings(BaseSettings):
    """Connection settings for the FalkorDB graph store."""

    model_config = SettingsConfigDict(env_prefix="CCRW_FALKORDB_", extra="ignore")

    host: str = Field(default="localhost", description="FalkorDB host")
    port: int = Field(default=6379, ge=1, le=65535, description="FalkorDB port")
    password: SecretStr | None = Field(default=None, description="FalkorDB password")
    graph_name: str = Field(default="content_graph", min_length=1, description="Graph key")
    max_connections: int = Field(default=16, ge=1, le=256, description="Connection pool size")
    socket_timeout: float | None = Field(
        default=None, gt=0, description="Per-command socket timeout in seconds (None = wait forever)"
    )
    constraint_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a new unique constraint to become operational"
    )


class HTTPSettings(BaseSettings):
    """Bind address for the HTTP interface."""

    model_config = SettingsConfigDict(env_prefix="CCRW_HTTP_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


class Settings(BaseSettings):
    """Top-level application settings."""

    model_config = SettingsConfigDict(env_prefix="CCRW_", extra="ignore")

    app_name: str = "content-collection-rw"
    app_system_code: str = "upp-content-collection-rw"
    log_level: LogLevel = "INFO"
    health_check_timeout: float = Field(default=10.0, gt=0, description="Seconds before a health check fails")

    falkordb: FalkorDBSettings = Field(default_factory=FalkorDBSettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)


settings = Settings()
