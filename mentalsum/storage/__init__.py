"""Persistence for users, sessions and app state."""

from mentalsum.storage.base import BACKUP_VERSION, Backup, ProfileStore, parse_backup
from mentalsum.storage.database import Database
from mentalsum.storage.memory import InMemoryStore
from mentalsum.storage.sql_store import SqlStore

__all__ = [
    "BACKUP_VERSION",
    "Backup",
    "Database",
    "InMemoryStore",
    "ProfileStore",
    "SqlStore",
    "parse_backup",
]
