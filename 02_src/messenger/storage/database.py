"""In-memory snapshot owner with a serialized unit of work."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..logging_config import get_logger
from ..models import Snapshot
from .storage import ISnapshotStore

logger = get_logger(__name__)


class Database:
    """Owns the live Snapshot and persists it through an ISnapshotStore.

    Every read-modify-write runs inside transaction(). Transactions are
    serialized by a single lock, nest for the task that holds the lock, and
    write the snapshot once when the outermost one exits. A transaction that
    raises restores the last committed snapshot.
    """

    def __init__(self, store: ISnapshotStore):
        self._store = store
        self._snapshot: Snapshot | None = None
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None
        self._dirty = False

    async def init(self) -> None:
        """Load the snapshot, creating the empty default on first run."""
        snapshot = await self._store.read()
        if snapshot is None:
            logger.info("Database file not found, creating new database")
            snapshot = Snapshot()
            await self._store.write(snapshot)
        else:
            logger.info(
                "Database loaded successfully",
                extra={
                    "context": {
                        "users": len(snapshot.users),
                        "conversations": len(snapshot.conversations),
                        "messages": len(snapshot.messages),
                    }
                },
            )
        self._snapshot = snapshot

    @property
    def snapshot(self) -> Snapshot:
        """Current in-memory dataset (read-only use outside transactions)."""
        if self._snapshot is None:
            raise RuntimeError("Database not initialized")
        return self._snapshot

    def mark_dirty(self) -> None:
        """Flag the running transaction as having changed the snapshot."""
        self._dirty = True

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Snapshot]:
        """Run a read-modify-write as one commit."""
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            # Nested call from the same use case: the outer block commits
            yield self.snapshot
            return

        async with self._lock:
            self._owner = task
            self._dirty = False
            try:
                yield self.snapshot
                if self._dirty:
                    await self._store.write(self.snapshot)
            except BaseException:
                if self._dirty:
                    logger.warning("Transaction failed, restoring last commit")
                    self._snapshot = await self._store.read() or Snapshot()
                raise
            finally:
                self._owner = None
                self._dirty = False

    async def clear(self) -> None:
        """Drop all data and persist the empty dataset."""
        async with self.transaction():
            self._snapshot = Snapshot()
            self.mark_dirty()
