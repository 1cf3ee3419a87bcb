from __future__ import annotations

import io
import json

import pytest

from gtm_cli.utils.output import format_output, print_error


def test_json_output_is_indented() -> None:
    assert format_output({"a": 1}) == '{\n  "a": 1\n}'


def test_table_output_aligns_columns() -> None:
    rows = [
        {"tag_id": "1", "name": "GA4 Config", "paused": False},
        {"tag_id": "22", "name": "Pixel", "paused": True},
    ]

    lines = format_output(rows, "table").splitlines()

    assert lines[0].split() == ["tag_id", "name", "paused"]
    assert set(lines[1].replace(" ", "")) == {"-"}
    assert lines[2].split() == ["1", "GA4", "Config", "false"]
    assert lines[3].startswith("22      Pixel")
    assert lines[3].endswith("true")


def test_table_output_for_single_object_and_nested_values() -> None:
    out = format_output({"id": "1", "parameter": [{"key": "k"}]}, "table")
    assert '[{"key": "k"}]' in out


def test_empty_results() -> None:
    assert format_output([], "table") == "No data"
    assert format_output([], "csv") == ""
    assert format_output([], "json") == "[]"


def test_csv_output_quotes_commas() -> None:
    out = format_output([{"name": "a,b", "n": 1}], "csv")
    assert out.splitlines() == ["name,n", '"a,b",1']


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        format_output([], "xml")


def test_print_error_json_and_text() -> None:
    error = {"code": "RATE_LIMITED", "message": "Rate limit exceeded", "retry_after": 4}

    stream = io.StringIO()
    print_error(error, "json", stream)
    assert json.loads(stream.getvalue()) == {"error": error}

    stream = io.StringIO()
    print_error(error, "table", stream)
    assert stream.getvalue().strip() == "Error [RATE_LIMITED]: Rate limit exceeded (retry after 4s)"
