"""
Process-level settings using pydantic-settings.
Read from environment variables and .env files.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env files.
    """
    model_config = SettingsConfigDict(
        env_file=('.env', '.env.local'),  # Load both .env and .env.local
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False
    )

    # --- Environment ---
    CONNSTR_ENV: str = Field("Int", description="Deployment environment (Int, Stg, Prd)")
    LOG_LEVEL: str = Field("INFO", description="Logging level")
    LOG_JSON: bool = Field(True, description="Render logs as JSON (False for console output)")

    # --- MCP Server ---
    MCP_TRANSPORT: str = Field("stdio", description="MCP transport mode (stdio, sse)")
    MCP_HOST: str = Field("127.0.0.1", description="Host to bind to")
    MCP_PORT: int = Field(9304, description="Port to bind to")

    # --- Profiles ---
    CONNSTR_CONFIG_PATH: str = Field("config/config.yaml", description="YAML file holding connection profiles")
    DEFAULT_APPLICATION_NAME: Optional[str] = Field(None, description="Application name applied to profiles without one")
