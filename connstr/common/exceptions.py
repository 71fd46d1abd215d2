"""
Custom exceptions for the connection string builder.
"""

class ConnStrError(Exception):
    """Base exception for all connection string errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

class ConfigurationError(ConnStrError):
    """Raised when there is a configuration issue."""
    pass

class ValidationError(ConnStrError):
    """Raised when input validation fails."""
    code = "ValidationError"

class MissingRequiredFieldError(ValidationError):
    """Server instance or database name is empty or missing."""
    code = "MissingRequiredField"

class IncompleteCredentialsError(ValidationError):
    """Exactly one of username/password was supplied."""
    code = "IncompleteCredentials"

class InvalidEnumValueError(ValidationError):
    """Application intent is not ReadOnly or ReadWrite."""
    code = "InvalidEnumValue"

class InvalidTimeoutError(ValidationError):
    """Connect timeout is negative."""
    code = "InvalidTimeout"

class InvalidValueError(ValidationError):
    """A value cannot be represented in a connection string."""
    code = "InvalidValue"

class ConnectionStringFormatError(ValidationError):
    """Raised when a connection string cannot be parsed."""
    code = "MalformedConnectionString"
