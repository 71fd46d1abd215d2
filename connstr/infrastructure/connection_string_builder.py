"""
Connection String Builder for SQL Server.
Builds ADO.NET style connection strings from individual components.
"""
import re
from collections import OrderedDict
from typing import Mapping, Optional, Union

import structlog
from pydantic import SecretStr

from connstr.common.exceptions import (
    InvalidEnumValueError,
    InvalidTimeoutError,
    InvalidValueError,
    MissingRequiredFieldError,
)
from connstr.core.models import ApplicationIntent, AuthenticationMode, ConnectionRequest

logger = structlog.get_logger()

DATA_SOURCE = "Data Source"
INITIAL_CATALOG = "Initial Catalog"
INTEGRATED_SECURITY = "Integrated Security"
USER_ID = "User ID"
PASSWORD = "Password"
APPLICATION_INTENT = "ApplicationIntent"
CONNECT_TIMEOUT = "Connect Timeout"
APPLICATION_NAME = "Application Name"
WORKSTATION_ID = "Workstation Id"
MULTIPLE_ACTIVE_RESULT_SETS = "MultipleActiveResultSets"
MULTI_SUBNET_FAILOVER = "MultiSubnetFailover"

# Keys: no ";" or control characters, no leading or trailing whitespace
_VALID_KEY = re.compile(r"^(?!\s)[^;\x00-\x1f\x7f-\x9f]+(?<!\s)\Z")

# Values made only of these characters are written without quotes
_UNQUOTED_VALUE = re.compile(r'^[^"\'=;\s\x00-\x1f\x7f-\x9f]*\Z')


def _format_bool(value: bool) -> str:
    return "True" if value else "False"


def escape_key(key: str) -> str:
    """Validate a key name and double any '=' inside it."""
    if not key or not _VALID_KEY.match(key):
        raise InvalidValueError(f"Invalid connection string key: {key!r}", details={"key": key})
    return key.replace("=", "==")


def escape_value(value: str) -> str:
    """
    Quote a value when it contains reserved characters.

    Rules:
        - plain values are written as is
        - values containing '"' but no "'" are wrapped in single quotes
        - anything else is wrapped in double quotes with '"' doubled

    Examples:
        >>> escape_value("Northwind")
        'Northwind'
        >>> escape_value("a;b")
        '"a;b"'
    """
    if "\0" in value:
        raise InvalidValueError("Connection string values cannot contain NUL characters")
    if _UNQUOTED_VALUE.match(value):
        return value
    if '"' in value and "'" not in value:
        return f"'{value}'"
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def format_connection_string(pairs: Mapping[str, str]) -> str:
    """Serialize key/value pairs as 'Key=Value' joined by ';', in mapping order."""
    return ";".join(f"{escape_key(key)}={escape_value(value)}" for key, value in pairs.items())


class ConnectionStringBuilder:
    """Builds SQL Server connection strings from a ConnectionRequest."""

    def validate(self, request: ConnectionRequest) -> AuthenticationMode:
        """
        Check a request before any output is produced.

        Returns:
            The authentication mode implied by the request

        Raises:
            MissingRequiredFieldError, IncompleteCredentialsError,
            InvalidEnumValueError, InvalidTimeoutError
        """
        for field in ("server_instance", "database"):
            value = getattr(request, field)
            if value is None or not value.strip():
                raise MissingRequiredFieldError(f"{field} is required", details={"field": field})

        mode = request.authentication_mode

        if request.application_intent is not None:
            self._resolve_intent(request.application_intent)

        timeout = request.connect_timeout_seconds
        if timeout is not None and timeout < 0:
            raise InvalidTimeoutError(
                f"Connect timeout must be a non-negative integer, got {timeout!r}",
                details={"connect_timeout_seconds": timeout},
            )

        return mode

    @staticmethod
    def _resolve_intent(intent: Union[ApplicationIntent, str]) -> ApplicationIntent:
        if isinstance(intent, ApplicationIntent):
            return intent
        for member in ApplicationIntent:
            if member.value.lower() == str(intent).lower():
                return member
        raise InvalidEnumValueError(
            f"Application intent must be one of {[m.value for m in ApplicationIntent]}, got {intent!r}",
            details={"application_intent": intent},
        )

    def build_pairs(self, request: ConnectionRequest) -> "OrderedDict[str, str]":
        """Validate the request and return the ordered connection string pairs."""
        mode = self.validate(request)

        pairs: "OrderedDict[str, str]" = OrderedDict()
        pairs[DATA_SOURCE] = request.server_instance
        pairs[INITIAL_CATALOG] = request.database

        if mode is AuthenticationMode.SQL_CREDENTIALS:
            pairs[INTEGRATED_SECURITY] = _format_bool(False)
            pairs[USER_ID] = request.username
            pairs[PASSWORD] = request.password.get_secret_value()
        else:
            pairs[INTEGRATED_SECURITY] = _format_bool(True)

        if request.application_intent is not None:
            pairs[APPLICATION_INTENT] = self._resolve_intent(request.application_intent).value
        if request.connect_timeout_seconds is not None:
            pairs[CONNECT_TIMEOUT] = str(request.connect_timeout_seconds)
        if request.application_name is not None:
            pairs[APPLICATION_NAME] = request.application_name
        if request.host_name is not None:
            pairs[WORKSTATION_ID] = request.host_name
        if request.multiple_active_result_sets:
            pairs[MULTIPLE_ACTIVE_RESULT_SETS] = _format_bool(True)
        if request.multi_subnet_failover:
            pairs[MULTI_SUBNET_FAILOVER] = _format_bool(True)

        return pairs

    def build(self, request: ConnectionRequest) -> str:
        """
        Build the connection string for a request.

        Args:
            request: Connection inputs

        Returns:
            Semicolon-delimited 'Key=Value' connection string

        Raises:
            ValidationError: if the request is invalid; nothing is returned in that case
        """
        pairs = self.build_pairs(request)
        connection_string = format_connection_string(pairs)
        logger.debug(
            "connection_string_built",
            server_instance=request.server_instance,
            database=request.database,
            keys=list(pairs.keys()),
        )
        return connection_string


def build_connection_string(
    server_instance: str,
    database: str,
    username: Optional[str] = None,
    password: Optional[Union[str, SecretStr]] = None,
    application_name: Optional[str] = None,
    application_intent: Optional[Union[ApplicationIntent, str]] = None,
    host_name: Optional[str] = None,
    connect_timeout_seconds: Optional[int] = None,
    multiple_active_result_sets: bool = False,
    multi_subnet_failover: bool = False,
) -> str:
    """
    Build a SQL Server connection string from discrete parameters.

    Example:
        >>> build_connection_string("(local)", "Northwind")
        'Data Source=(local);Initial Catalog=Northwind;Integrated Security=True'
    """
    request = ConnectionRequest.from_params(
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
    return ConnectionStringBuilder().build(request)
