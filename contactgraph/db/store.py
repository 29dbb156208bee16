"""
RecordStore: the one object the API layer holds for persistence.

Bundles the contact and identity repositories over a single
``DbCore`` so both entity kinds share one connection and one lock.
"""
from __future__ import annotations

import logging

from contactgraph.db.db_core import DbCore
from contactgraph.db.repositories import ContactRepository, IdentityRepository

log = logging.getLogger("contactgraph.db.store")


class RecordStore:
    """Facade over the contact and identity repositories."""

    def __init__(self, core: DbCore) -> None:
        self.core = core
        self.contacts = ContactRepository(core)
        self.identities = IdentityRepository(core)

    @property
    def is_open(self) -> bool:
        return self.core.is_open

    def ping(self) -> bool:
        """Cheap liveness check used by the health probe."""
        if not self.core.is_open:
            return False
        return self.core.query("SELECT 1") == [(1,)]

    def close(self) -> None:
        self.core.close()


def open_record_store(db_path: str = ":memory:") -> RecordStore:
    """Open (creating if needed) the record store at *db_path*."""
    store = RecordStore(DbCore(db_path))
    log.info("Record store ready (%s)", db_path)
    return store
