from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine


class QueryCounter:
    """
    Counts statements sent to the primary data store by this process.

    Backs the /api/test/query-count endpoint used to prove that a conditional
    GET served from the cache issues zero queries.
    """

    def __init__(self) -> None:
        self._count = 0
        self._installed = False

    @property
    def count(self) -> int:
        return self._count

    def reset(self) -> None:
        self._count = 0

    def increment(self, *_: Any, **__: Any) -> None:
        self._count += 1

    def install(self) -> None:
        """Listen on every Engine, including those created later for a new event loop."""
        if self._installed:
            return
        event.listen(Engine, 'before_cursor_execute', self.increment)
        self._installed = True

    def uninstall(self) -> None:
        if self._installed:
            event.remove(Engine, 'before_cursor_execute', self.increment)
            self._installed = False
