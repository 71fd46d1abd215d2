"""
Connection String Service.
Dict-returning facade over the builder, the parser and configured profiles.
"""
from typing import Dict, Any, Optional

import structlog

from config.configuration import AppConfig, get_config
from connstr.common.exceptions import ConfigurationError, ValidationError
from connstr.common.logging import log_context
from connstr.core.models import ConnectionRequest
from connstr.infrastructure.connection_string_builder import ConnectionStringBuilder
from connstr.infrastructure.connection_string_parser import mask_connection_string, parse_connection_string

logger = structlog.get_logger()


class ConnectionStringService:
    def __init__(self, config: Optional[AppConfig] = None, builder: Optional[ConnectionStringBuilder] = None):
        self.config = config or get_config()
        self.builder = builder or ConnectionStringBuilder()

    def build(self, **params: Any) -> Dict[str, Any]:
        """
        Build a connection string from discrete parameters.

        Accepts the ConnectionRequest field names as keyword arguments.
        """
        try:
            request = ConnectionRequest.from_params(**params)
        except ValidationError as e:
            return {"success": False, "error": e.message, "error_code": e.code, **e.details}
        return self._build_request(request)

    def build_profile(self, name: str) -> Dict[str, Any]:
        """Build the connection string of a configured profile."""
        try:
            request = self.config.get_profile(name)
        except ConfigurationError as e:
            logger.warning("profile_not_found", profile=name)
            return {"success": False, "error": e.message, "error_code": "UnknownProfile", **e.details}

        with log_context(profile=name):
            result = self._build_request(request)
        result["profile"] = name
        return result

    def parse(self, connection_string: str) -> Dict[str, Any]:
        """Parse a connection string into its key/value pairs."""
        try:
            pairs = parse_connection_string(connection_string)
        except ValidationError as e:
            return {"success": False, "error": e.message, "error_code": e.code, **e.details}
        return {"success": True, "pairs": dict(pairs), "count": len(pairs)}

    def list_profiles(self) -> Dict[str, Any]:
        """List configured profiles without exposing credentials."""
        profiles = []
        for name, request in self.config.builder.profiles.items():
            profiles.append({
                "name": name,
                "server_instance": request.server_instance,
                "database": request.database,
                "authentication": self._describe_authentication(request),
            })
        return {"success": True, "profiles": profiles, "count": len(profiles)}

    @staticmethod
    def _describe_authentication(request: ConnectionRequest) -> str:
        try:
            return request.authentication_mode.value
        except ValidationError:
            return "IncompleteCredentials"

    def _build_request(self, request: ConnectionRequest) -> Dict[str, Any]:
        try:
            connection_string = self.builder.build(request)
            mode = request.authentication_mode
        except ValidationError as e:
            logger.info("connection_string_rejected", error_code=e.code, error=e.message)
            return {"success": False, "error": e.message, "error_code": e.code, **e.details}

        logger.info(
            "connection_string_served",
            connection_string=mask_connection_string(connection_string),
            authentication_mode=mode.value)

        return {
            "success": True,
            "connection_string": connection_string,
            "authentication_mode": mode.value,
        }
