"""
Value objects describing a connection string request.
"""
from enum import Enum
from functools import cached_property
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, SecretStr, StrictInt
from pydantic import ValidationError as PydanticValidationError

from connstr.common.exceptions import IncompleteCredentialsError, InvalidTimeoutError, ValidationError


class ApplicationIntent(str, Enum):
    READ_ONLY = "ReadOnly"
    READ_WRITE = "ReadWrite"


class AuthenticationMode(str, Enum):
    INTEGRATED = "Integrated"
    SQL_CREDENTIALS = "SqlCredentials"


def _is_present(value: Optional[Union[str, SecretStr]]) -> bool:
    if value is None:
        return False
    if isinstance(value, SecretStr):
        return value.get_secret_value() != ""
    return value != ""


class ConnectionRequest(BaseModel):
    """
    Immutable set of inputs for a single connection string.

    Field checks that carry a domain error code (required fields, credential
    pairing, intent, timeout) are performed by ConnectionStringBuilder so that
    they surface as connstr ValidationErrors rather than pydantic errors.
    Build new requests with from_params() rather than model_copy(), which
    would carry over the cached authentication mode.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    server_instance: Optional[str] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    application_name: Optional[str] = None
    application_intent: Optional[Union[ApplicationIntent, str]] = None
    host_name: Optional[str] = None
    connect_timeout_seconds: Optional[StrictInt] = None
    multiple_active_result_sets: bool = False
    multi_subnet_failover: bool = False

    @classmethod
    def from_params(cls, **params: Any) -> "ConnectionRequest":
        """
        Construct a request, reporting type errors as connstr ValidationErrors.

        Raises:
            InvalidTimeoutError: connect_timeout_seconds is not an integer (bools included)
            ValidationError: any other unknown field or wrongly typed value
        """
        try:
            return cls(**params)
        except PydanticValidationError as e:
            fields = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
            if fields == ["connect_timeout_seconds"]:
                timeout = params.get("connect_timeout_seconds")
                raise InvalidTimeoutError(
                    f"Connect timeout must be a non-negative integer, got {timeout!r}",
                    details={"connect_timeout_seconds": timeout},
                )
            raise ValidationError(f"Invalid connection request: {e}", details={"fields": fields})

    @property
    def has_username(self) -> bool:
        return _is_present(self.username)

    @property
    def has_password(self) -> bool:
        return _is_present(self.password)

    @cached_property
    def authentication_mode(self) -> AuthenticationMode:
        """
        Authentication mode implied by the supplied credentials, computed on first access.

        Raises:
            IncompleteCredentialsError: only one of username/password was supplied
        """
        if self.has_username and self.has_password:
            return AuthenticationMode.SQL_CREDENTIALS
        if self.has_username or self.has_password:
            missing = "password" if self.has_username else "username"
            raise IncompleteCredentialsError(
                f"Both username and password are required for SQL authentication; {missing} is missing",
                details={"missing": missing},
            )
        return AuthenticationMode.INTEGRATED
