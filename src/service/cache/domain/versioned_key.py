"""
Versioned cache key composition.

    build_key('api_cache:trips', 'v3', 'cat:tour', 'l:20')
    -> 'api_cache:trips:v3:cat:tour:l:20'

Every filter value goes through `labeled()` so that two different parameter
tuples can never produce the same key.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


KEY_SEPARATOR = ':'
PLACEHOLDER = '_'
VERSION_KEY_PREFIX = 'cache_version'

_ESCAPES = str.maketrans({'%': '%25', ':': '%3A'})


def build_key(namespace: str, *parts: str) -> str:
    return KEY_SEPARATOR.join((namespace, *parts))


def version_key(namespace: str) -> str:
    return f'{VERSION_KEY_PREFIX}{KEY_SEPARATOR}{namespace}'


def version_segment(version: int) -> str:
    return f'v{version}'


def parse_version(raw: Any) -> int:
    """Stored counter value to int; absent, garbage or negative reads as 0."""
    if raw is None:
        return 0
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')
    try:
        version = int(raw)
    except (TypeError, ValueError):
        return 0
    return max(version, 0)


def serialize_value(value: Any) -> str:
    if value is None or value == '':
        return PLACEHOLDER
    if isinstance(value, Enum):
        return serialize_value(value.value)
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')
    if isinstance(value, date):
        return value.isoformat()

    text = str(value)
    if text == PLACEHOLDER:
        # A literal '_' must not read as "no value"
        return '%5F'
    return text.translate(_ESCAPES)


def labeled(label: str, value: Any) -> str:
    return f'{label}{KEY_SEPARATOR}{serialize_value(value)}'
