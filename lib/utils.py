# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - Table naming for tables created from free-form identifiers
# - JSON serialization of typed cells (dates become ISO strings)
# =============================================================================

import hashlib
import json
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any


# =============================================================================
# Table Naming
# =============================================================================

# Characters a table name may not contain, plus the escape marker itself,
# the component separator and the truncation marker.
ESCAPED_TABLE_CHARS = frozenset("[]*?/:\\%-~")

TABLE_NAME_SEPARATOR = "-"
MAX_TABLE_NAME_LENGTH = 100
_HASH_SUFFIX_LENGTH = 8


def _escape_component(value: str) -> str:
    return "".join(
        f"%{ord(ch):02X}" if ch in ESCAPED_TABLE_CHARS else ch
        for ch in value
    )


def table_name(category: str, key: str | None = None) -> str:
    """
    Build a table name from a category and an optional key.

    Each component is percent-escaped so that two different
    (category, key) pairs never map to the same name, even when they
    differ only in characters a table name cannot hold.

    Args:
        category: Leading component (e.g. a class name)
        key: Optional trailing component (e.g. a section)

    Returns:
        Sanitized name, at most MAX_TABLE_NAME_LENGTH characters

    Example:
        table_name("10", "A")      # "10-A"
        table_name("10/11", "B")   # "10%2F11-B"
    """
    parts = [_escape_component(str(category))]
    if key is not None:
        parts.append(_escape_component(str(key)))
    name = TABLE_NAME_SEPARATOR.join(parts)

    if len(name) <= MAX_TABLE_NAME_LENGTH:
        return name

    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:_HASH_SUFFIX_LENGTH]
    keep = MAX_TABLE_NAME_LENGTH - _HASH_SUFFIX_LENGTH - 1
    return f"{name[:keep]}~{digest}"


def class_table_name(class_name: str | None, section: str | None = None) -> str:
    """
    Name of the per-class table (attendance sheets, homework, marks).

    An empty class maps to "Unassigned"; a missing section defaults to "A".
    """
    if not class_name or not str(class_name).strip():
        return "Unassigned"
    return table_name(str(class_name).strip(), str(section or "A").strip())


# =============================================================================
# JSON Serialization
# =============================================================================

def json_default(value: Any) -> Any:
    """json.dumps hook for cell types the json module does not know."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """Serialize a row or payload to compact JSON."""
    return json.dumps(value, default=json_default, separators=(",", ":"))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
