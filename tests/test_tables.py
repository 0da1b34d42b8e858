from __future__ import annotations

import random
import re
from datetime import datetime, timezone

from wx_relay.normalize.tables import (
    CITIES,
    DEPARTMENTS,
    ENVS,
    HTTP_METHODS,
    PERFORMANCE_HEADERS,
    REGIONS,
    ROLES,
    USER_HEADERS,
    fallback_headers,
    fallback_rows,
    normalize_table,
    parse_table,
    username_from,
)

DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def test_parse_valid_json() -> None:
    text = '{"headers": ["City", "Country"], "rows": [["Paris", "France"], ["Rome", "Italy"]]}'
    headers, rows = parse_table(text, 2, 2)
    assert headers == ["City", "Country"]
    assert rows == [["Paris", "France"], ["Rome", "Italy"]]


def test_parse_repairs_fenced_python_style_output() -> None:
    text = "```json\n{headers: ['City', 'Country'], rows: [['Paris', 'France'],],}\n```"
    headers, rows = parse_table(text, 1, 2)
    assert headers == ["City", "Country"]
    assert rows == [["Paris", "France"]]


def test_parse_drops_nested_headers_and_truncates() -> None:
    text = '{"headers": ["A", "[B]", "{C}", "", "D", "E"], "rows": []}'
    headers, _ = parse_table(text, 0, 2)
    assert headers == ["A", "D"]


def test_parse_fits_rows_to_column_count() -> None:
    text = '{"headers": [], "rows": [["1", "2", "3", "4"], ["5"], "bad", [6, null]]}'
    _, rows = parse_table(text, 3, 3)
    assert rows == [["1", "2", "3"], ["5", "", ""], ["", "", ""]]


def test_parse_failure_returns_empty() -> None:
    assert parse_table("I cannot help with that.", 2, 2) == ([], [])
    assert parse_table("[1, 2, 3]", 2, 2) == ([], [])
    assert parse_table('{"headers": "A,B", "rows": []}', 2, 2) == ([], [])
    assert parse_table("", 2, 2) == ([], [])


def test_fallback_headers_by_keyword() -> None:
    assert fallback_headers("User management system", 3) == ["User ID", "Name", "Email"]
    assert fallback_headers("product catalogue", 2) == ["Product ID", "Name"]
    assert fallback_headers("Quarterly SALES", 2) == ["Order ID", "Customer"]
    assert fallback_headers("service uptime report", 3) == ["Application", "Hostname", "Method"]


def test_fallback_headers_first_match_wins() -> None:
    assert fallback_headers("product order history", 1) == ["Product ID"]


def test_fallback_headers_pads_with_generic_columns() -> None:
    assert fallback_headers("weather stations", 3) == ["Column 1", "Column 2", "Column 3"]
    headers = fallback_headers("users", 16)
    assert headers[:14] == USER_HEADERS
    assert headers[14:] == ["Column 15", "Column 16"]
    assert fallback_headers("users", 0) == []


def test_fallback_rows_user_columns() -> None:
    rows = fallback_rows(USER_HEADERS, 2, rng=random.Random(7))
    assert len(rows) == 2
    for i, row in enumerate(rows):
        cells = dict(zip(USER_HEADERS, row))
        assert cells["User ID"] == f"USR-{1000 + i}"
        name = cells["Name"]
        assert len(name.split(" ")) == 2
        assert cells["Username"] == username_from(name)
        assert cells["Email"] == f"{username_from(name)}{i + 1}@example.com"
        assert cells["Role"] in ROLES
        assert cells["Department"] in DEPARTMENTS
        assert cells["Status"] == ("Active" if i % 2 == 0 else "Inactive")
        assert re.match(r"^\+1-\d{3}-\d{3}-\d{4}$", cells["Phone"])
        assert cells["Location"] in CITIES
        assert cells["City"] in CITIES
        assert DATE.match(cells["Last Login"])
        assert DATE.match(cells["Created At"])
        assert cells["Country"] == f"Value {i + 1}-13"


def test_fallback_rows_performance_columns() -> None:
    rows = fallback_rows(PERFORMANCE_HEADERS, 4, rng=random.Random(3))
    for i, row in enumerate(rows):
        cells = dict(zip(PERFORMANCE_HEADERS, row))
        assert cells["Application"] == f"Application {i + 1}"
        assert cells["Hostname"] == f"host{i + 1}.example.com"
        assert cells["Method"] in HTTP_METHODS
        assert TIMESTAMP.match(cells["Start Time"])
        assert 50 <= int(cells["Response Time (ms)"]) <= 1200
        assert 200 <= int(cells["Load Time (ms)"]) <= 5000
        assert 0 <= int(cells["Downtime (min)"]) <= 120
        assert 95.0 <= float(cells["SLA (%)"]) <= 100.0
        assert 0.0 <= float(cells["Error Rate (%)"]) <= 5.0
        for key in ("CPU (%)", "Memory (%)", "Disk (%)"):
            assert 5.0 <= float(cells[key]) <= 95.0
            assert re.match(r"^\d+\.\d$", cells[key])
        assert cells["Region"] in REGIONS
        assert cells["Endpoint"] == f"/api/v{1 + i % 3}/resource/{100 + i}"
        assert cells["Env"] in ENVS


def test_fallback_rows_dates_are_before_reference_time() -> None:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = fallback_rows(["Created At", "Start Time"], 20, rng=random.Random(1), now=now)
    for created, started in rows:
        assert "2023-10-03" <= created <= "2024-01-01"
        assert "2023-12-25" <= started < "2024-01-01 00:00:01"


def test_unmatched_headers_get_positional_placeholder() -> None:
    assert fallback_rows(["Colour", "Mood"], 2) == [["Value 1-1", "Value 1-2"], ["Value 2-1", "Value 2-2"]]


def test_seeded_fallback_is_reproducible() -> None:
    a = fallback_rows(USER_HEADERS[:5], 3, rng=random.Random(42))
    b = fallback_rows(USER_HEADERS[:5], 3, rng=random.Random(42))
    assert a == b


def test_malformed_output_for_user_prompt() -> None:
    table = normalize_table("{headers: [oops", "user management system", 2, 3)
    assert table.headers == ["User ID", "Name", "Email"]
    assert len(table.rows) == 2
    for i, (uid, name, email) in enumerate(table.rows):
        assert uid == f"USR-{1000 + i}"
        assert name
        assert email == f"{username_from(name)}{i + 1}@example.com"


def test_parsed_headers_kept_when_only_rows_are_short() -> None:
    text = '{"headers": ["Colour", "Mood"], "rows": [["red", "calm"]]}'
    table = normalize_table(text, "anything", 2, 2)
    assert table.headers == ["Colour", "Mood"]
    assert table.rows == [["Value 1-1", "Value 1-2"], ["Value 2-1", "Value 2-2"]]


def test_parsed_rows_kept_when_only_headers_are_wrong() -> None:
    text = '{"headers": ["Only one"], "rows": [["a", "b"], ["c", "d"]]}'
    table = normalize_table(text, "inventory", 2, 2)
    assert table.headers == ["Column 1", "Column 2"]
    assert table.rows == [["a", "b"], ["c", "d"]]


def test_dimensions_are_exact() -> None:
    samples = ["", "nonsense", '{"headers": ["A"], "rows": [["1"], ["2"], ["3"]]}']
    for text in samples:
        for rows in range(0, 4):
            for cols in range(0, 4):
                table = normalize_table(text, "orders", rows, cols, rng=random.Random(0))
                assert len(table.headers) == cols
                assert len(table.rows) == rows
                assert all(len(r) == cols for r in table.rows)


def test_to_dict() -> None:
    table = normalize_table('{"headers": ["A"], "rows": [["1"]]}', "", 1, 1)
    assert table.to_dict() == {"headers": ["A"], "rows": [["1"]]}
