"""
Service layer over the notes database.

A service owns long-lived state (observables, the write queue) and funnels
every write through `_execute_write`, which opens one transaction over the
tables it touches and turns driver failures into WriteFailureError.

Usage:
    from notekeeper.services.base import BaseService

    class TagService(BaseService):
        async def _rename(self, old: str, new: str) -> None:
            await self._execute_write(
                "rename_tag", ("tag",), lambda session: TagRepository(session).rename(old, new),
            )
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.core.database import NotesDatabase
from notekeeper.core.exceptions import WriteFailureError
from notekeeper.core.logging import get_logger

ResultT = TypeVar("ResultT")


class BaseService:
    """Holds the database and a logger named after the concrete service's module."""

    def __init__(self, database: NotesDatabase) -> None:
        self._database = database
        self._logger = get_logger(self.__class__.__module__)

    async def _execute_write(
        self,
        operation: str,
        tables: Iterable[str],
        work: Callable[[AsyncSession], Awaitable[ResultT]],
    ) -> ResultT:
        """
        Run work in one write transaction over tables.

        Observers of tables are notified only after the commit succeeds.

        Args:
            operation: Name used in the failure log and message
            tables: Tables written by work
            work: Coroutine function receiving the transaction's session

        Raises:
            WriteFailureError: If the database rejects the transaction
        """
        try:
            async with self._database.transaction(*tables) as session:
                return await work(session)
        except SQLAlchemyError as exc:
            self._logger.error(
                "Database write failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise WriteFailureError(f"Database write failed: {operation}") from exc

    def _context(self, **context: Any) -> dict[str, Any]:
        return {"service": type(self).__name__, **context}

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, extra=self._context(**context))

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, extra=self._context(**context))
