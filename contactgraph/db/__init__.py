"""Persistent record store for contacts and identities."""

from contactgraph.db.db_core import DbCore
from contactgraph.db.repositories import (
    ContactRecord,
    ContactRepository,
    IdentityRecord,
    IdentityRepository,
)
from contactgraph.db.store import RecordStore, open_record_store

__all__ = [
    "DbCore",
    "ContactRecord",
    "ContactRepository",
    "IdentityRecord",
    "IdentityRepository",
    "RecordStore",
    "open_record_store",
]
