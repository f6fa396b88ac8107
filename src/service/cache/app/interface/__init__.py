"""Application layer interfaces (Ports)"""

from src.service.cache.app.interface.i_cache_invalidator import ICacheInvalidator
from src.service.cache.app.interface.i_cache_version_store import ICacheVersionStore
from src.service.cache.app.interface.i_etag_store import IEtagStore


__all__ = [
    'ICacheInvalidator',
    'ICacheVersionStore',
    'IEtagStore',
]
