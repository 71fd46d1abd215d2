"""
Parser for ADO.NET style connection strings.
Reads the same grammar ConnectionStringBuilder writes.
"""
from collections import OrderedDict

from connstr.common.exceptions import ConnectionStringFormatError
from connstr.infrastructure.connection_string_builder import format_connection_string

SECRET_KEYS = {"password", "pwd"}
MASK = "*****"


class ConnectionStringParser:
    """Parses 'Key=Value;Key2="quoted;value"' strings into ordered pairs."""

    def __init__(self, connection_string: str):
        if connection_string is None:
            raise ConnectionStringFormatError("Connection string cannot be None")
        self.text = connection_string
        self.pos = 0

    def parse(self) -> "OrderedDict[str, str]":
        pairs: "OrderedDict[str, str]" = OrderedDict()
        # lower-cased key -> key spelling stored in pairs
        seen = {}

        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == ";" or char.isspace():
                self.pos += 1
                continue

            key = self._read_key()
            value = self._read_value()

            existing = seen.get(key.lower())
            if existing is None:
                seen[key.lower()] = key
                pairs[key] = value
            else:
                pairs[existing] = value

        return pairs

    def _error(self, message: str) -> ConnectionStringFormatError:
        return ConnectionStringFormatError(message, details={"position": self.pos})

    def _read_key(self) -> str:
        chars = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self._error("Expected '=' after key")
            char = text[self.pos]
            if char == "=":
                # '==' is a literal '=' inside the key
                if self.pos + 1 < len(text) and text[self.pos + 1] == "=":
                    chars.append("=")
                    self.pos += 2
                    continue
                self.pos += 1
                break
            if char == ";":
                raise self._error("Expected '=' after key")
            chars.append(char)
            self.pos += 1

        key = "".join(chars).strip()
        if not key:
            raise self._error("Empty key")
        return key

    def _read_value(self) -> str:
        text = self.text
        while self.pos < len(text) and text[self.pos] != ";" and text[self.pos].isspace():
            self.pos += 1

        if self.pos < len(text) and text[self.pos] in ("'", '"'):
            return self._read_quoted_value(text[self.pos])

        start = self.pos
        while self.pos < len(text) and text[self.pos] != ";":
            self.pos += 1
        return text[start:self.pos].strip()

    def _read_quoted_value(self, quote: str) -> str:
        text = self.text
        chars = []
        self.pos += 1
        while True:
            if self.pos >= len(text):
                raise self._error("Unterminated quoted value")
            char = text[self.pos]
            if char == quote:
                if self.pos + 1 < len(text) and text[self.pos + 1] == quote:
                    chars.append(quote)
                    self.pos += 2
                    continue
                self.pos += 1
                break
            chars.append(char)
            self.pos += 1

        while self.pos < len(text) and text[self.pos].isspace():
            self.pos += 1
        if self.pos < len(text) and text[self.pos] != ";":
            raise self._error("Unexpected characters after quoted value")
        return "".join(chars)


def parse_connection_string(connection_string: str) -> "OrderedDict[str, str]":
    """Parse a connection string into ordered key/value pairs."""
    return ConnectionStringParser(connection_string).parse()


def mask_connection_string(connection_string: str) -> str:
    """Return the connection string with password values replaced, for logging."""
    pairs = parse_connection_string(connection_string)
    for key in pairs:
        if key.lower() in SECRET_KEYS:
            pairs[key] = MASK
    return format_connection_string(pairs)
