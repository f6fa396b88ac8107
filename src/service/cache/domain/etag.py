"""
Strong entity tags over canonical JSON bodies, and If-None-Match matching
(RFC 9110 section 13.1.2, weak comparison).
"""

from decimal import Decimal
import hashlib
from typing import Any

import orjson
from uuid_utils import UUID


ETAG_KEY_SUFFIX = ':etag'
WILDCARD = '*'
_WEAK_PREFIX = 'W/'


def _default(obj: Any) -> str:
    # orjson knows stdlib UUID/datetime/enum but not uuid_utils.UUID or Decimal
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    raise TypeError(f'Type is not JSON serializable: {type(obj).__name__}')


def canonical_body(body: Any) -> bytes:
    """Serialize with sorted keys so equal content always hashes the same"""
    return orjson.dumps(body, default=_default, option=orjson.OPT_SORT_KEYS)


def compute_etag(content: bytes) -> str:
    return f'"{hashlib.sha1(content).hexdigest()}"'


def etag_storage_key(request_key: str) -> str:
    return f'{request_key}{ETAG_KEY_SUFFIX}'


def _opaque(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith(_WEAK_PREFIX):
        tag = tag[len(_WEAK_PREFIX) :]
    return tag


def parse_if_none_match(header: str | None) -> list[str]:
    if not header:
        return []
    return [tag for tag in (_opaque(part) for part in header.split(',')) if tag]


def etag_matches(etag: str | None, if_none_match: str | None) -> bool:
    if not etag:
        return False
    candidates = parse_if_none_match(if_none_match)
    if WILDCARD in candidates:
        return True
    return _opaque(etag) in candidates
