"""JSON file storage implementation."""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from ..config import resolve_db_path
from ..errors import StorageError
from ..logging_config import get_logger
from ..models import Snapshot
from .serialization import snapshot_from_document, snapshot_to_document

logger = get_logger(__name__)


class ISnapshotStore(Protocol):
    """Blob store holding the whole dataset as one document."""

    async def read(self) -> Snapshot | None:
        """Load the stored snapshot, or None if nothing was written yet."""
        ...

    async def write(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot (all-or-nothing)."""
        ...


class JsonFileStore:
    """Snapshot store backed by a single JSON file.

    The path ":memory:" keeps the serialized document in memory instead,
    which gives tests the same copy-on-write semantics as the file.
    """

    def __init__(self, path: str | Path | None = None):
        self._path = resolve_db_path(path)
        self._memory: str | None = None

    @property
    def in_memory(self) -> bool:
        return self._path == ":memory:"

    @property
    def path(self) -> str | Path:
        return self._path

    async def read(self) -> Snapshot | None:
        """Load the stored snapshot, or None if nothing was written yet."""
        return await asyncio.to_thread(self._read)

    async def write(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot (all-or-nothing)."""
        await asyncio.to_thread(self._write, snapshot)

    def _read(self) -> Snapshot | None:
        if self.in_memory:
            raw = self._memory
        else:
            path = Path(self._path)
            if not path.exists():
                return None
            try:
                raw = path.read_text(encoding="utf-8")
            except OSError as e:
                raise StorageError(f"Cannot read database file {path}: {e}") from e

        if raw is None:
            return None

        try:
            return snapshot_from_document(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Corrupt database document: {e}") from e

    def _write(self, snapshot: Snapshot) -> None:
        raw = json.dumps(snapshot_to_document(snapshot), indent=2)

        if self.in_memory:
            self._memory = raw
            return

        path = Path(self._path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a sibling temp file, then swap it in
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(raw)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
