"""
Unit tests for ConnectionStringParser.
Covers the grammar written by ConnectionStringBuilder and malformed input.
"""
import pytest
from connstr.core.models import ConnectionRequest
from connstr.infrastructure.connection_string_builder import (
    ConnectionStringBuilder,
    build_connection_string,
    format_connection_string,
)
from connstr.infrastructure.connection_string_parser import (
    ConnectionStringParser,
    mask_connection_string,
    parse_connection_string,
)
from connstr.common.exceptions import ConnectionStringFormatError

class TestParse:
    def test_simple_pairs(self):
        pairs = parse_connection_string("Data Source=(local);Initial Catalog=Northwind;Integrated Security=True")
        assert list(pairs.items()) == [
            ("Data Source", "(local)"),
            ("Initial Catalog", "Northwind"),
            ("Integrated Security", "True"),
        ]

    def test_whitespace_and_empty_segments(self):
        pairs = parse_connection_string("  Server = srv ;; Database=db;  ")
        assert pairs == {"Server": "srv", "Database": "db"}

    def test_empty_string(self):
        assert parse_connection_string("") == {}

    def test_double_quoted_value(self):
        pairs = parse_connection_string('Password="p;w ""q""";User ID=u')
        assert pairs["Password"] == 'p;w "q"'
        assert pairs["User ID"] == "u"

    def test_single_quoted_value(self):
        pairs = parse_connection_string("Application Name='say \"hi\"'")
        assert pairs["Application Name"] == 'say "hi"'

    def test_escaped_equals_in_key(self):
        assert parse_connection_string("a==b=c") == {"a=b": "c"}

    def test_empty_value(self):
        assert parse_connection_string("Application Name=;Server=s") == {"Application Name": "", "Server": "s"}

    def test_duplicate_keys_last_value_wins(self):
        pairs = parse_connection_string("Server=a;Database=d;SERVER=b")
        assert list(pairs.items()) == [("Server", "b"), ("Database", "d")]

    @pytest.mark.parametrize("text", [
        "novalue",
        "Server;Database=db",
        "=value",
        'Password="unterminated',
        'Password="p"trailing;Server=s',
    ])
    def test_malformed(self, text):
        with pytest.raises(ConnectionStringFormatError) as exc:
            parse_connection_string(text)
        assert exc.value.code == "MalformedConnectionString"
        assert "position" in exc.value.details

    def test_none_rejected(self):
        with pytest.raises(ConnectionStringFormatError):
            ConnectionStringParser(None)

class TestRoundTrip:
    @pytest.mark.parametrize("request_fields", [
        {"server_instance": "(local)", "database": "Northwind"},
        {"server_instance": "Frodo\\SQL2014", "database": "Northwind", "username": "some_user", "password": "unsafe_password"},
        {
            "server_instance": "tcp:srv,1433",
            "database": "My Db",
            "username": "o'brien",
            "password": 'p;w="x"\'',
            "application_name": " padded ",
            "application_intent": "ReadWrite",
            "host_name": "ws=01",
            "connect_timeout_seconds": 5,
            "multiple_active_result_sets": True,
            "multi_subnet_failover": True,
        },
    ])
    def test_parse_recovers_built_pairs(self, request_fields):
        request = ConnectionRequest(**request_fields)
        builder = ConnectionStringBuilder()
        expected = builder.build_pairs(request)

        parsed = parse_connection_string(builder.build(request))

        assert list(parsed.items()) == list(expected.items())

class TestMask:
    def test_password_masked(self):
        cs = build_connection_string("srv", "db", "u", "hunter2")
        masked = mask_connection_string(cs)
        assert "hunter2" not in masked
        assert masked.endswith("User ID=u;Password=*****")

    def test_pwd_alias_masked(self):
        assert mask_connection_string("Uid=u;Pwd=secret") == "Uid=u;Pwd=*****"

    def test_integrated_unchanged(self):
        cs = build_connection_string("(local)", "Northwind")
        assert mask_connection_string(cs) == cs

def test_format_round_trip_with_unusual_keys():
    pairs = {"a=b": "1", "Key With Space": "v;w", "Trusted_Connection": "yes"}
    assert parse_connection_string(format_connection_string(pairs)) == pairs
