"""
SQL Server Connection String MCP
"""
import sys
from typing import Dict, Any, Optional

from mcp.server.fastmcp import FastMCP  # type: ignore[import-untyped]
from config.configuration import get_config
from connstr.common.logging import configure_logging
from connstr.core.connection_service import ConnectionStringService

# Load Config
try:
    config = get_config()
except Exception as e:
    print(f"FATAL: Config load failed: {e}", file=sys.stderr)
    sys.exit(1)

configure_logging(log_level=config.server.log_level, json_format=config.server.json_logs, environment=config.environment)

# Initialize MCP
mcp = FastMCP("sql-connection-string", host=config.server.host, port=config.server.port)

connection_service = ConnectionStringService(config=config)

@mcp.tool()
def build_connection_string(
    server_instance: str,
    database: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    application_name: Optional[str] = None,
    application_intent: Optional[str] = None,
    host_name: Optional[str] = None,
    connect_timeout_seconds: Optional[int] = None,
    multiple_active_result_sets: bool = False,
    multi_subnet_failover: bool = False,
) -> Dict[str, Any]:
    """
    Build a SQL Server connection string. No connection is opened.

    Uses integrated security unless both username and password are given.

    Args:
        server_instance: Server or instance name, e.g. "(local)" or "HOST\\SQL2014".
        database: Initial catalog.
        username: SQL login (requires password).
        password: SQL login password (requires username).
        application_name: Reported as Application Name.
        application_intent: "ReadOnly" or "ReadWrite".
        host_name: Reported as Workstation Id.
        connect_timeout_seconds: Non-negative connect timeout.
        multiple_active_result_sets: Emit MultipleActiveResultSets=True.
        multi_subnet_failover: Emit MultiSubnetFailover=True.
    """
    return connection_service.build(
        server_instance=server_instance,
        database=database,
        username=username,
        password=password,
        application_name=application_name,
        application_intent=application_intent,
        host_name=host_name,
        connect_timeout_seconds=connect_timeout_seconds,
        multiple_active_result_sets=multiple_active_result_sets,
        multi_subnet_failover=multi_subnet_failover,
    )

@mcp.tool()
def build_profile_connection_string(profile: str) -> Dict[str, Any]:
    """Build the connection string of a profile defined in config.yaml."""
    return connection_service.build_profile(profile)

@mcp.tool()
def parse_connection_string(connection_string: str) -> Dict[str, Any]:
    """Split a connection string into its key/value pairs."""
    return connection_service.parse(connection_string)

@mcp.tool()
def list_connection_profiles() -> Dict[str, Any]:
    """List configured profiles (credentials are never returned)."""
    return connection_service.list_profiles()

@mcp.tool()
def config_info() -> Dict[str, Any]:
    """Return public configuration settings (sanitized)."""
    return {
        "environment": config.environment,
        "available_environments": config.available_environments,
        "profiles": sorted(config.builder.profiles),
        "default_application_name": config.builder.default_application_name,
    }

if __name__ == "__main__":
    print(f"Starting SQL Server Connection String MCP ({config.server.transport}) on {config.server.host}:{config.server.port}", file=sys.stderr)
    mcp.run(transport=config.server.transport)
