from datetime import datetime, timedelta, timezone

import pytest

from log_stats.core.detection import detect_format
from log_stats.core.errors import LineParseError
from log_stats.core.models import LogFormat
from log_stats.core.parsers import (
    parse_apache_line,
    parse_line,
    parse_response_time,
    parse_simple_line,
    strip_query,
    to_int,
)

from conftest import APACHE_LINE, SIMPLE_LINE


# ----------------------------------------------------------------------
# simple format
# ----------------------------------------------------------------------

def test_simple_line_fields():
    record = parse_simple_line(SIMPLE_LINE)

    assert record.timestamp == datetime(2024, 1, 15, 10, 30, 45)
    assert record.method == "GET"
    assert record.path == "/home"
    assert record.status == 200
    assert record.response_ms == 120
    assert record.user_agent == "Mozilla/5.0"
    assert record.client_ip == ""
    assert record.bytes_sent == 0


def test_simple_user_agent_keeps_inner_spaces():
    record = parse_simple_line('2024-01-15 10:30:45 POST /api 201 15ms "Mozilla/5.0 (X11; Linux x86_64)"')
    assert record.user_agent == "Mozilla/5.0 (X11; Linux x86_64)"


@pytest.mark.parametrize("field, expected", [
    ("120ms", 120),
    ("0ms", 0),
    ("120", 0),
    ("120s", 0),
    ("abcms", 0),
    ("-5ms", 0),
    ("ms", 0),
])
def test_response_time_needs_ms_suffix(field, expected):
    assert parse_response_time(field) == expected
    line = f'2024-01-15 10:30:45 GET /home 200 {field} "agent"'
    assert parse_simple_line(line).response_ms == expected


def test_simple_non_numeric_status_is_zero():
    record = parse_simple_line('2024-01-15 10:30:45 GET /home OK 10ms "agent"')
    assert record.status == 0
    assert record.response_ms == 10


def test_simple_too_few_fields():
    with pytest.raises(LineParseError, match="malformed simple format"):
        parse_simple_line("2024-01-15 10:30:45 GET /home 200 120ms")


def test_simple_splits_on_single_spaces():
    # a double space shifts every field after it
    record = parse_simple_line('2024-01-15 10:30:45 GET  /home 200 120ms')
    assert record.path == ""
    assert record.status == 0
    assert record.user_agent == "120ms"


def test_simple_bad_timestamp_fails_line():
    with pytest.raises(LineParseError, match="invalid timestamp"):
        parse_simple_line('yesterday noon GET /home 200 120ms "agent"')


# ----------------------------------------------------------------------
# apache format
# ----------------------------------------------------------------------

def test_apache_line_fields():
    record = parse_apache_line(APACHE_LINE)

    assert record.client_ip == "10.0.0.1"
    assert record.user == "-"
    assert record.method == "GET"
    assert record.path == "/home"
    assert record.status == 200
    assert record.bytes_sent == 2326
    assert record.timestamp == datetime(2024, 1, 15, 10, 30, 45, tzinfo=timezone(timedelta(hours=-3)))
    assert record.response_ms == 0
    assert record.user_agent == ""


def test_apache_timestamp_without_offset():
    record = parse_apache_line('10.0.0.1 - [15/Jan/2024:10:30:45] "GET /home HTTP/1.1" 200 12')
    assert record.timestamp == datetime(2024, 1, 15, 10, 30, 45)
    assert record.timestamp.tzinfo is None


def test_apache_invalid_timestamp():
    with pytest.raises(LineParseError, match="invalid timestamp"):
        parse_apache_line('10.0.0.1 - - [15/Foo/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200 12')


def test_apache_combined_user_agent():
    line = ('10.0.0.2 - john [15/Jan/2024:10:30:45 +0000] "POST /login HTTP/1.1" 302 0 '
            '"https://example.com/" "curl/8.0.1"')
    record = parse_apache_line(line)
    assert record.user == "-"
    assert record.user_agent == "curl/8.0.1"
    assert record.status == 302


def test_apache_single_quoted_trailer_is_not_a_user_agent():
    record = parse_apache_line('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200 5 "-"')
    assert record.user_agent == ""
    assert record.bytes_sent == 5


def test_apache_bad_numbers_default_to_zero():
    record = parse_apache_line('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" abc -')
    assert record.status == 0
    assert record.bytes_sent == 0


@pytest.mark.parametrize("line, message", [
    ("nospace", "no client address"),
    ("10.0.0.1 -", "no user field"),
    ('10.0.0.1 - - 15/Jan/2024 "GET /home HTTP/1.1" 200 1', "no bracketed timestamp"),
    ('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300 "GET /home HTTP/1.1" 200 1', "no bracketed timestamp"),
    ('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] GET /home 200 1', "no quoted request"),
    ('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1 200 1', "no quoted request"),
    ('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET" 200 1', "malformed request line"),
    ('10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200', "malformed trailer"),
])
def test_apache_missing_delimiters(line, message):
    with pytest.raises(LineParseError, match=message):
        parse_apache_line(line)


ROUND_TRIP_CASES = [
    ("10.0.0.1", "-", datetime(2024, 1, 15, 10, 30, 45, tzinfo=timezone(timedelta(hours=-3))),
     "GET", "/home", 200, 2326),
    ("192.168.1.20", "alice", datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
     "POST", "/api/v1/items?page=2", 201, 0),
    ("2001:db8::1", "bob", datetime(2024, 2, 29, 0, 0, 0, tzinfo=timezone(timedelta(hours=5, minutes=30))),
     "DELETE", "/items/42", 404, 17),
    ("127.0.0.1", "-", datetime(2024, 7, 4, 12, 0, 1), "HEAD", "/", 500, 1),
]


@pytest.mark.parametrize("ip, user, timestamp, method, path, status, size", ROUND_TRIP_CASES)
def test_apache_round_trip(ip, user, timestamp, method, path, status, size):
    fmt = "%d/%b/%Y:%H:%M:%S %z" if timestamp.tzinfo else "%d/%b/%Y:%H:%M:%S"
    line = f'{ip} {user} - [{timestamp.strftime(fmt)}] "{method} {path} HTTP/1.1" {status} {size}'

    record = parse_line(line)

    assert (record.client_ip, record.user, record.timestamp, record.method,
            record.path, record.status, record.bytes_sent) == (ip, user, timestamp, method, path, status, size)


# ----------------------------------------------------------------------
# dispatch
# ----------------------------------------------------------------------

def test_parse_line_dispatches_on_format():
    assert parse_line(SIMPLE_LINE).response_ms == 120
    assert parse_line(APACHE_LINE).client_ip == "10.0.0.1"


def test_parse_line_falls_back_to_simple_for_json_flagged_lines():
    line = "2024-01-15 10:30:45 GET /{id}   120ms"
    assert detect_format(line) is LogFormat.JSON

    record = parse_line(line)
    assert record.method == "GET"
    assert record.path == "/{id}"


@pytest.mark.parametrize("line", ["garbage", '{"method": "GET", "path": "/home"}', ""])
def test_parse_line_rejects_unsupported_lines(line):
    with pytest.raises(LineParseError, match="unsupported format"):
        parse_line(line)


def test_query_string_kept_unless_stripped():
    simple = '2024-01-15 10:30:45 GET /search?q=python 200 8ms "agent"'
    apache = '10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /search?q=python HTTP/1.1" 200 1'

    assert parse_line(simple).path == "/search?q=python"
    assert parse_line(apache).path == "/search?q=python"
    assert parse_line(simple, strip_query_string=True).path == "/search"
    assert parse_line(apache, strip_query_string=True).path == "/search"


def test_helpers():
    assert strip_query("/a?b=1?c=2") == "/a"
    assert strip_query("/plain") == "/plain"
    assert to_int("2326") == 2326
    assert to_int("-") == 0
    assert to_int("+3") == 0
    assert to_int("") == 0


def test_oversized_numbers_default_to_zero():
    huge = "9" * 5000
    assert to_int(huge) == 0

    simple = parse_simple_line(f'2024-01-15 10:30:45 GET /home {huge} {huge}ms "agent"')
    assert (simple.status, simple.response_ms) == (0, 0)

    apache = parse_apache_line(f'10.0.0.1 - - [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200 {huge}')
    assert (apache.status, apache.bytes_sent) == (200, 0)
