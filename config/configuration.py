"""
Configuration Management Module.
Loads connection profiles from config.yaml and allows overrides via environment variables.
"""
import os
import yaml
from typing import List, Dict, Optional
from pathlib import Path
from pydantic import BaseModel, Field, SecretStr
import structlog

from config.settings import Settings
from connstr.common.exceptions import ConfigurationError
from connstr.core.models import ConnectionRequest

logger = structlog.get_logger()

# --- Configuration Models ---

class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 9304
    transport: str = "stdio"
    log_level: str = "INFO"
    json_logs: bool = True

class BuilderConfig(BaseModel):
    default_application_name: Optional[str] = None

    # Map of ProfileName -> ConnectionRequest
    # e.g. {"northwind": ConnectionRequest(server_instance="(local)", database="Northwind")}
    profiles: Dict[str, ConnectionRequest] = Field(default_factory=dict)

class AppConfig(BaseModel):
    environment: str = "Int"
    available_environments: List[str] = ["Int", "Stg", "Prd"]
    server: ServerConfig = Field(default_factory=ServerConfig)
    builder: BuilderConfig = Field(default_factory=BuilderConfig)

    def get_profile(self, name: str) -> ConnectionRequest:
        """Look up a profile by name (case-insensitive)."""
        for profile_name, request in self.builder.profiles.items():
            if profile_name.lower() == name.lower():
                return request
        raise ConfigurationError(
            f"Unknown connection profile '{name}'",
            details={"available_profiles": sorted(self.builder.profiles)}
        )

# --- Loader Logic ---

class ConfigLoader:
    _instance: Optional[AppConfig] = None

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> AppConfig:
        """
        Load configuration from YAML and override with Environment Variables.
        Singleton pattern to avoid reloading.
        """
        if cls._instance:
            return cls._instance

        settings = Settings()

        # 1. Determine Config Path
        if not config_path:
            config_path = settings.CONNSTR_CONFIG_PATH

        path = Path(config_path)
        if not path.is_absolute():
            path = Path.cwd() / config_path

        # 2. Load YAML
        config_data = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error("config_load_error", error=str(e), path=str(path))
                raise ConfigurationError(f"Failed to load config file at {path}: {e}", details={"path": str(path)})
        else:
            logger.warning("config_file_not_found", path=str(path))

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file at {path} must contain a mapping", details={"path": str(path)})

        # 3. Validate and apply Environment Variable Overrides
        try:
            config = AppConfig(**config_data)
        except ValueError as e:
            logger.error("config_validation_error", error=str(e))
            raise ConfigurationError(f"Invalid Configuration: {e}", details={"path": str(path)})

        env_overrides = settings.model_dump(exclude_unset=True)
        if "CONNSTR_ENV" in env_overrides:
            config.environment = settings.CONNSTR_ENV
        if "LOG_LEVEL" in env_overrides:
            config.server.log_level = settings.LOG_LEVEL
        if "LOG_JSON" in env_overrides:
            config.server.json_logs = settings.LOG_JSON
        if "MCP_TRANSPORT" in env_overrides:
            config.server.transport = settings.MCP_TRANSPORT
            logger.info("transport_overridden", transport=settings.MCP_TRANSPORT)
        if "MCP_HOST" in env_overrides:
            config.server.host = settings.MCP_HOST
        if "MCP_PORT" in env_overrides:
            config.server.port = settings.MCP_PORT
        if settings.DEFAULT_APPLICATION_NAME:
            config.builder.default_application_name = settings.DEFAULT_APPLICATION_NAME

        config.builder.profiles = {
            name: cls._apply_profile_overrides(name, request, config.builder.default_application_name)
            for name, request in config.builder.profiles.items()
        }

        if not config.builder.profiles:
            logger.warning("no_connection_profiles", path=str(path))

        cls._instance = config
        return config

    @staticmethod
    def _apply_profile_overrides(
        name: str,
        request: ConnectionRequest,
        default_application_name: Optional[str]
    ) -> ConnectionRequest:
        """
        Inject secrets and defaults into a profile.
        DB_USERNAME_<PROFILE> and DB_PASSWORD_<PROFILE> take precedence over the YAML values.
        """
        name_upper = name.upper()
        updates = {}

        username = os.getenv(f"DB_USERNAME_{name_upper}")
        password = os.getenv(f"DB_PASSWORD_{name_upper}")
        if username:
            updates["username"] = username
        if password:
            updates["password"] = SecretStr(password)
        if request.application_name is None and default_application_name:
            updates["application_name"] = default_application_name

        if not updates:
            return request

        logger.info("profile_overrides_applied", profile=name, fields=sorted(updates))
        return ConnectionRequest.from_params(**{**request.model_dump(), **updates})

    @classmethod
    def reset(cls) -> None:
        """Drop the cached configuration (used by tests and reloads)."""
        cls._instance = None


def get_config() -> AppConfig:
    return ConfigLoader.load()
