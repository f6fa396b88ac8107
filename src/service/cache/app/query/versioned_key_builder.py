from typing import Any

from src.platform.logging.loguru_io import Logger
from src.service.cache.app.interface.i_cache_version_store import ICacheVersionStore
from src.service.cache.domain.versioned_key import build_key, labeled, version_segment


class VersionedKeyBuilder:
    """Prefixes request keys with the namespace's current version"""

    def __init__(self, *, version_store: ICacheVersionStore) -> None:
        self.version_store = version_store

    @Logger.io
    async def build_versioned_key(self, namespace: str, *parts: str) -> str:
        """
        Raises:
            BackendUnavailableError: Version could not be read
        """
        version = await self.version_store.get_version(namespace=namespace)
        return build_key(namespace, version_segment(version), *parts)

    async def build_from_filters(self, namespace: str, filters: dict[str, Any]) -> str:
        """Label and serialize filters in the given order, then version the key"""
        parts = [labeled(label, value) for label, value in filters.items()]
        return await self.build_versioned_key(namespace, *parts)
