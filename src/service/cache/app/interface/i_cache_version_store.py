from abc import ABC, abstractmethod


class ICacheVersionStore(ABC):
    """Per-namespace monotonic version counters in the shared KV store"""

    @abstractmethod
    async def get_version(self, *, namespace: str) -> int:
        """Current version, 0 when absent. Raises BackendUnavailableError."""
        pass

    @abstractmethod
    async def bump_version(self, *, namespace: str) -> int:
        """Atomically increment and return the new version (>= 1)."""
        pass

    @abstractmethod
    async def reset_version(self, *, namespace: str) -> None:
        """Delete the counter so it reads as 0 again (test/ops only)."""
        pass
