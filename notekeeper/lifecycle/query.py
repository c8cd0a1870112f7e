"""
Database-Backed Observables.

An observable query result. While observed, the query is re-run each time
a write transaction touching one of its tables commits, and the fresh
result is pushed to observers. While unobserved, nothing is queried.

Refreshes run as tasks on the event loop; several invalidations arriving
during one refresh are folded into a single follow-up query.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.core.database import NotesDatabase
from notekeeper.core.logging import get_logger
from notekeeper.lifecycle.observable import Observable

logger = get_logger(__name__)

T = TypeVar("T")

Query = Callable[[AsyncSession], Awaitable[T]]


class QueryObservable(Observable[T]):
    """
    Observable result of a query against the notes database.

    Args:
        database: Database to query
        tables: Tables whose changes invalidate the result
        query: Coroutine function computing the result from a session
        name: Label used in logs
    """

    def __init__(
        self,
        database: NotesDatabase,
        tables: Iterable[str],
        query: Query,
        name: str = "query",
    ) -> None:
        super().__init__()
        self._database = database
        self._tables = frozenset(tables)
        self._query = query
        self._name = name
        self._unregister: Callable[[], None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._dirty = False

    @property
    def refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def _on_active(self) -> None:
        self._unregister = self._database.invalidation.add_observer(
            self._tables, self._invalidate,
        )
        self._invalidate(self._tables)

    def _on_inactive(self) -> None:
        if self._unregister is not None:
            self._unregister()
            self._unregister = None

    def _invalidate(self, tables: frozenset[str]) -> None:
        self._dirty = True
        if not self.refreshing:
            self._refresh_task = asyncio.get_running_loop().create_task(
                self._refresh(), name=f"refresh-{self._name}",
            )

    async def _refresh(self) -> None:
        while self._dirty and self.has_observers:
            self._dirty = False
            try:
                async with self._database.read() as session:
                    value = await self._query(session)
            except SQLAlchemyError as e:
                logger.error(
                    "Query refresh failed",
                    extra={"query": self._name, "error": str(e)},
                )
                return
            self._set_value(value)

    async def wait_refreshed(self) -> None:
        """Wait for a pending refresh, if any, to deliver its result."""
        while self.refreshing:
            await asyncio.shield(self._refresh_task)
