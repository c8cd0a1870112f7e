"""
Database Configuration.

SQLAlchemy async engine (aiosqlite) and session management for the notes
database. The database is an explicitly constructed object handed to its
users; there is no module-level engine.

Every read and write goes through one lock, so a reader never sees a
transaction half way through. After a write transaction commits, the
invalidation tracker tells interested observers which tables changed.

Usage:
    database = NotesDatabase.from_config()
    created = await database.open()

    async with database.transaction("note") as session:
        session.add(note)

    async with database.read() as session:
        count = await NoteRepository(session).count()
"""

import asyncio
from collections.abc import AsyncGenerator, Callable, Iterable
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notekeeper.core.logging import get_logger
from notekeeper.models import Base, Note

logger = get_logger(__name__)

InvalidationCallback = Callable[[frozenset[str]], None]


class InvalidationTracker:
    """Dispatches table change notifications to registered observers."""

    def __init__(self) -> None:
        self._observers: list[tuple[frozenset[str], InvalidationCallback]] = []

    def add_observer(
        self, tables: Iterable[str], callback: InvalidationCallback,
    ) -> Callable[[], None]:
        """
        Register callback for changes to any of tables.

        Returns:
            Function removing the registration
        """
        entry = (frozenset(tables), callback)
        self._observers.append(entry)

        def _remove() -> None:
            if entry in self._observers:
                self._observers.remove(entry)

        return _remove

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def notify(self, tables: Iterable[str]) -> None:
        changed = frozenset(tables)
        if not changed:
            return
        for watched, callback in list(self._observers):
            if watched & changed:
                callback(changed)


class NotesDatabase:
    """
    Owner of the notes database.

    Args:
        url: Async SQLAlchemy URL (sqlite+aiosqlite)
        echo: Log SQL statements
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self._url = url
        self._engine: AsyncEngine = create_async_engine(url, echo=echo)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._lock = asyncio.Lock()
        self.invalidation = InvalidationTracker()
        logger.debug("Database engine created", extra={"url": url})

    @classmethod
    def from_config(cls) -> "NotesDatabase":
        """Create the database configured in database.yaml."""
        from notekeeper.core.config import get_app_config, get_database_path, get_database_url

        path = get_database_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(get_database_url(path), echo=get_app_config().database.echo)

    @classmethod
    def at_path(cls, path: Path, echo: bool = False) -> "NotesDatabase":
        from notekeeper.core.config import get_database_url

        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(get_database_url(path), echo=echo)

    @property
    def url(self) -> str:
        return self._url

    async def open(self) -> bool:
        """
        Create missing tables.

        Returns:
            True if the database was empty, i.e. created by this call
        """
        async with self._lock:
            async with self._engine.begin() as conn:
                existed = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table(Note.__tablename__)
                )
                await conn.run_sync(Base.metadata.create_all)

        if not existed:
            logger.info("Database created", extra={"url": self._url})
        return not existed

    @asynccontextmanager
    async def read(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session for queries."""
        async with self._lock:
            async with self._session_factory() as session:
                yield session

    @asynccontextmanager
    async def transaction(self, *tables: str) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session inside a transaction.

        The transaction commits when the block exits cleanly and rolls back
        on an exception. Observers of tables are notified after the commit.

        Args:
            *tables: Names of the tables the transaction writes to
        """
        async with self._lock:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        self.invalidation.notify(tables)

    async def close(self) -> None:
        await self._engine.dispose()
        logger.debug("Database engine disposed")
