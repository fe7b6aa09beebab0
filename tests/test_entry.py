import json
from datetime import datetime, timedelta, timezone

import pytest

from logmgr.entry import (
    Entry,
    Level,
    LogField,
    Sink,
    encode_json_string,
    encode_json_value,
    field,
)

TIMESTAMP = datetime(2024, 1, 15, 10, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "key, value",
    [
        ("message", "test message"),
        ("count", 42),
        ("percentage", 85.5),
        ("enabled", True),
        ("optional", None),
    ],
)
def test_field(key, value):
    assert field(key, value) == LogField(key=key, value=value)


def test_entry_without_fields():
    entry = Entry(level=Level.INFO, timestamp=TIMESTAMP, message="test message", fields={})
    assert entry.marshal_json() == (
        '{"level":"info","timestamp":"2024-01-15T10:30:45.123456Z","message":"test message"}'
    )


def test_entry_with_single_field():
    entry = Entry(
        level=Level.ERROR,
        timestamp=TIMESTAMP,
        message="error occurred",
        fields={"error_code": "E001"},
    )
    assert entry.marshal_json() == (
        '{"level":"error","timestamp":"2024-01-15T10:30:45.123456Z",'
        '"message":"error occurred","error_code":"E001"}'
    )


def test_entry_with_multiple_fields():
    entry = Entry(
        level=Level.WARN,
        timestamp=TIMESTAMP,
        message="warning message",
        fields={"user_id": 12345, "action": "login", "success": True},
    )
    text = entry.marshal_json()
    for fragment in (
        '"level":"warn"',
        '"timestamp":"2024-01-15T10:30:45.123456Z"',
        '"message":"warning message"',
        '"user_id":12345',
        '"action":"login"',
        '"success":true',
    ):
        assert fragment in text
    assert json.loads(text)["user_id"] == 12345


def test_entry_whole_seconds_and_offset():
    moment = datetime(2024, 1, 15, 10, 30, 45, tzinfo=timezone(timedelta(hours=2)))
    entry = Entry(level=Level.INFO, timestamp=moment, message="m")
    assert '"timestamp":"2024-01-15T10:30:45+02:00"' in entry.marshal_json()


def test_entry_negative_offset_and_trimmed_fraction():
    moment = datetime(2024, 1, 15, 10, 30, 45, 500000, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
    entry = Entry(level=Level.INFO, timestamp=moment, message="m")
    assert '"timestamp":"2024-01-15T10:30:45.5-05:30"' in entry.marshal_json()


def test_entry_with_unencodable_field_still_marshals():
    entry = Entry(level=Level.INFO, timestamp=TIMESTAMP, message="test", fields={"bad": object()})
    assert json.loads(entry.marshal_json())["bad"] is None


def test_entry_unknown_level():
    entry = Entry(level=999, timestamp=TIMESTAMP, message="m")
    assert json.loads(entry.marshal_json())["level"] == "unknown"


@pytest.mark.parametrize(
    "level, expected",
    [
        (Level.DEBUG, "debug"),
        (Level.INFO, "info"),
        (Level.WARN, "warn"),
        (Level.ERROR, "error"),
        (Level.FATAL, "fatal"),
    ],
)
def test_level_string(level, expected):
    assert str(level) == expected


def test_level_ordering():
    levels = [Level(value) for value in range(5)]
    assert [str(level) for level in levels] == ["debug", "info", "warn", "error", "fatal"]
    assert sorted(reversed(levels)) == levels


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hello", '"hello"'),
        ('hello "world"', '"hello \\"world\\""'),
        ("hello\\world", '"hello\\\\world"'),
        ("hello\nworld", '"hello\\nworld"'),
        ("hello\rworld", '"hello\\rworld"'),
        ("hello\tworld", '"hello\\tworld"'),
        ("hello\x01world", '"hello\\u0001world"'),
        ("", '""'),
        ("hello 世界", '"hello 世界"'),
    ],
)
def test_encode_json_string(text, expected):
    assert encode_json_string(text) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("test", '"test"'),
        (42, "42"),
        (123, "123"),
        (456, "456"),
        (789, "789"),
        (101112, "101112"),
        (131415, "131415"),
        (3.14, "3.14"),
        (2.718, "2.718"),
        (True, "true"),
        (False, "false"),
        (None, "null"),
        (TIMESTAMP, '"2024-01-15T10:30:45.123456Z"'),
        (["a", "b"], '["a","b"]'),
        ({"count": 5}, '{"count":5}'),
    ],
)
def test_encode_json_value(value, expected):
    assert encode_json_value(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (85.5, "85.5"),
        (80.0, "80"),
        (100000.0, "100000"),
        (1000000.0, "1e+06"),
        (1234567.0, "1.234567e+06"),
        (0.0001, "0.0001"),
        (0.00001, "1e-05"),
        (0.0, "0"),
        (-2.5, "-2.5"),
        (float("inf"), "+Inf"),
        (float("nan"), "NaN"),
    ],
)
def test_encode_float_values(value, expected):
    assert encode_json_value(value) == expected


def test_encode_json_value_unencodable_is_null():
    class Unencodable:
        pass

    assert encode_json_value(Unencodable()) == "null"


def test_encode_json_value_escapes_html_in_complex_values():
    assert encode_json_value({"a": "<b>&"}) == '{"a":"\\u003cb\\u003e\\u0026"}'


def test_encode_json_value_sorts_mapping_keys():
    assert encode_json_value({"b": 1, "a": 2}) == '{"a":2,"b":1}'


def test_sink_cannot_be_instantiated_without_methods():
    with pytest.raises(TypeError):
        Sink()