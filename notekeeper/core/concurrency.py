"""
Concurrency Infrastructure.

Serial task queue for write commands. Commands are fire-and-forget: the
caller submits a coroutine factory and returns immediately; a single worker
task runs the commands one at a time, in submission order, so two writes
never interleave.

A failing command is logged and dropped; the worker moves on to the next
one. Nothing is reported back to the submitter.

The worker is created lazily on first submit and lives on the running
event loop.

Usage:
    from notekeeper.core.concurrency import SerialTaskQueue

    queue = SerialTaskQueue("note-store")
    queue.submit("generate_note", store_write)   # returns immediately

    await queue.join()    # wait for everything submitted so far
    await queue.close()   # drain, then stop the worker
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from notekeeper.core.logging import get_logger

logger = get_logger(__name__)

Command = Callable[[], Awaitable[Any]]


class SerialTaskQueue:
    """One-at-a-time executor for asynchronous commands."""

    def __init__(self, name: str = "tasks") -> None:
        self._name = name
        self._queue: asyncio.Queue[tuple[str, Command]] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._closed = False
        self._completed = 0
        self._failed = 0
        self._busy = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Commands submitted but not finished yet."""
        if self._queue is None:
            return 0
        return self._queue.qsize() + (1 if self._busy else 0)

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failed(self) -> int:
        return self._failed

    def submit(self, command_name: str, command: Command) -> None:
        """
        Queue a command for execution.

        Args:
            command_name: Label used in logs
            command: Zero-argument callable returning an awaitable

        Raises:
            RuntimeError: If the queue is closed or no event loop is running
        """
        if self._closed:
            raise RuntimeError(f"Task queue '{self._name}' is closed")

        queue = self._ensure_worker()
        queue.put_nowait((command_name, command))
        logger.debug(
            "Command queued",
            extra={"queue": self._name, "command": command_name},
        )

    def _ensure_worker(self) -> asyncio.Queue[tuple[str, Command]]:
        loop = asyncio.get_running_loop()
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(
                self._run(self._queue), name=f"{self._name}-worker",
            )
        return self._queue

    async def _run(self, queue: asyncio.Queue[tuple[str, Command]]) -> None:
        while True:
            command_name, command = await queue.get()
            self._busy = True
            try:
                with structlog.contextvars.bound_contextvars(
                    source="tasks", queue=self._name, command=command_name,
                ):
                    await self._execute(command_name, command)
            finally:
                self._busy = False
                queue.task_done()

    async def _execute(self, command_name: str, command: Command) -> None:
        try:
            await command()
        except Exception as e:
            self._failed += 1
            logger.error(
                "Command failed",
                extra={"command": command_name, "error": str(e)},
                exc_info=True,
            )
            return
        self._completed += 1
        logger.debug("Command completed", extra={"command": command_name})

    async def join(self) -> None:
        """Wait until every command submitted so far has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Refuse new commands, drain the queue and stop the worker."""
        self._closed = True
        await self.join()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
        logger.debug(
            "Task queue closed",
            extra={"queue": self._name, "completed": self._completed, "failed": self._failed},
        )
