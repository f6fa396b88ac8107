from abc import ABC, abstractmethod


class ICacheInvalidator(ABC):
    """Write paths call this after committing so cached reads go stale"""

    @abstractmethod
    async def invalidate(self, *namespaces: str) -> dict[str, int]:
        """
        Bump every namespace, returning the new versions.

        Raises:
            BackendUnavailableError: At least one bump did not happen
        """
        pass
