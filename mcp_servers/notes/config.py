"""Server configuration loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Notes server settings, read from ``NOTES_*`` variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="NOTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Transport
    transport: Literal["stdio", "sse", "lines"] = "stdio"
    host: str = "0.0.0.0"
    port: int = 8001

    # Identity advertised during MCP initialization
    server_name: str = "notes-mcp-server"
    server_version: str = "1.0.0"

    log_level: str = "INFO"


settings = Settings()
