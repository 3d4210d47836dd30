"""Runtime configuration for the prompt MCP server."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the prompt MCP server."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # FastAPI / uvicorn
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=3000, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Comma-separated bearer tokens; empty disables authentication
    auth_tokens_raw: str = Field(default="", alias="MCP_AUTH_TOKENS")

    # MCP endpoint shared by the stream (GET) and request (POST) legs
    mount_path: str = Field(default="/mcp", alias="MCP_MOUNT_PATH")
    server_name: str = Field(default="prompt-mcp", alias="SERVER_NAME")
    server_version: str = Field(default="0.1.0", alias="SERVER_VERSION")

    # Directory holding the template instruction texts; defaults to the packaged copies
    prompts_dir: str | None = Field(default=None, alias="PROMPTS_DIR")

    # Seconds between SSE keep-alive pings
    sse_ping_interval: int = Field(default=15, alias="SSE_PING_INTERVAL")

    @property
    def auth_tokens(self) -> frozenset[str]:
        return frozenset(token.strip() for token in self.auth_tokens_raw.split(",") if token.strip())

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_tokens)


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
