"""Render command results as JSON, an aligned table, or CSV."""

from __future__ import annotations

import csv
import io
import json
import sys
from typing import Any, TextIO

OUTPUT_FORMATS = ("json", "table", "csv")


def _rows(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return [row if isinstance(row, dict) else {"value": row} for row in data]
    if isinstance(data, dict):
        return [data]
    return [{"value": data}]


def _columns(rows: list[dict[str, Any]]) -> list[str]:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def _cell(value: Any) -> str:
    """Convert complex values to compact JSON string representation."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_table(rows: list[dict[str, Any]]) -> str:
    if not rows:
        return "No data"
    columns = _columns(rows)
    cells = [[_cell(row.get(col)) for col in columns] for row in rows]
    widths = [
        max(len(col), *(len(line[i]) for line in cells)) for i, col in enumerate(columns)
    ]

    lines = [
        "  ".join(col.ljust(widths[i]) for i, col in enumerate(columns)).rstrip(),
        "  ".join("-" * width for width in widths),
    ]
    for line in cells:
        lines.append("  ".join(value.ljust(widths[i]) for i, value in enumerate(line)).rstrip())
    return "\n".join(lines)


def _format_csv(rows: list[dict[str, Any]]) -> str:
    if not rows:
        return ""
    columns = _columns(rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(col)) for col in columns])
    return buffer.getvalue().rstrip("\n")


def format_output(data: Any, fmt: str = "json") -> str:
    if fmt == "table":
        return _format_table(_rows(data))
    if fmt == "csv":
        return _format_csv(_rows(data))
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    raise ValueError(f"Unknown output format '{fmt}'. Choose one of: {', '.join(OUTPUT_FORMATS)}")


def print_output(data: Any, fmt: str = "json", stream: TextIO | None = None) -> None:
    print(format_output(data, fmt), file=stream or sys.stdout)


def print_error(error: dict[str, Any], fmt: str = "json", stream: TextIO | None = None) -> None:
    """Print a classified error ({code, message, retry_after}) to stderr."""
    stream = stream or sys.stderr
    if fmt == "json":
        print(json.dumps({"error": error}, indent=2, ensure_ascii=False), file=stream)
        return
    line = f"Error [{error.get('code', 'ERROR')}]: {error.get('message', '')}"
    if error.get("retry_after"):
        line += f" (retry after {error['retry_after']}s)"
    print(line, file=stream)
