"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any


def parse_value(raw: str) -> Any:
    """Parse a CLI value as JSON when possible, else keep it as a string.

    Examples:
        "5" → 5, "true" → True, "hello" → "hello"
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_pairs(pairs: list[str] | None, separator: str = "=") -> dict[str, Any]:
    """Parse repeated ``key=value`` options into a dict.

    Raises:
        ValueError: If an entry has no separator
    """
    result: dict[str, Any] = {}
    for pair in pairs or []:
        if separator not in pair:
            raise ValueError(f"Invalid option '{pair}'. Expected format: key{separator}value")
        key, value = pair.split(separator, 1)
        result[key.strip()] = parse_value(value)
    return result


def parse_spans(spans: list[str] | None) -> dict[str, list[Any]]:
    """Parse repeated ``column=min:max`` options.

    Either bound may be left out: ``price=10:`` or ``price=:99``.

    Raises:
        ValueError: If an entry is not in ``column=min:max`` form
    """
    result: dict[str, list[Any]] = {}
    for span in spans or []:
        if "=" not in span or ":" not in span.split("=", 1)[1]:
            raise ValueError(f"Invalid span '{span}'. Expected format: column=min:max")
        column, bounds = span.split("=", 1)
        lower, upper = bounds.split(":", 1)
        result[column.strip()] = [
            parse_value(lower) if lower else None,
            parse_value(upper) if upper else None,
        ]
    return result


def parse_order(orders: list[str] | None) -> dict[str, str]:
    """Parse repeated ``column[=ASC|DESC]`` options; direction defaults to ASC."""
    result: dict[str, str] = {}
    for order in orders or []:
        if "=" in order:
            column, direction = order.split("=", 1)
        else:
            column, direction = order, "ASC"
        result[column.strip()] = direction.strip()
    return result


def read_json_file(path: str) -> dict[str, Any]:
    """Read single JSON object from file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("r") as f:
        return json.load(f)
