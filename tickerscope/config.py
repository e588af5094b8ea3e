"""Settings for the snapshot engine and its two servers, read from env / ``.env``."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Alpha Vantage
    alpha_vantage_api_key: str = "demo"
    """Provider API key. The public ``demo`` key only serves a handful of symbols."""

    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    upstream_timeout_seconds: float = Field(10.0, gt=0)

    max_query_length: int = Field(20, gt=0)
    """Longest ticker query accepted before a search is attempted."""

    app_env: str = "development"
    log_level: str = "INFO"

    # MCP (stdio)
    mcp_server_name: str = "ticker-snapshot-mcp"
    mcp_server_version: str = "0.1.0"

    # Debug HTTP server
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000
    enable_security_headers: bool = True
    allowed_origins: str = "*"
    """Comma-separated CORS origins. Use '*' only in development."""

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


settings = Settings()
