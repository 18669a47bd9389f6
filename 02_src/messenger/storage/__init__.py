"""Storage module."""

from .database import Database
from .storage import ISnapshotStore, JsonFileStore

__all__ = ["Database", "ISnapshotStore", "JsonFileStore"]
