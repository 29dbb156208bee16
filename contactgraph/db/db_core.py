# db_core.py
"""
Core DB connection, locking and schema management for the record store.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Any, Sequence

log = logging.getLogger("contactgraph.db")


class DbCore:
    """
    Owns the single SQLite connection shared by every repository.

    All access goes through ``dbhLock`` so concurrent requests never
    interleave statements on the shared connection.
    """

    createSchemaQueries = [
        "CREATE TABLE IF NOT EXISTS tbl_contacts ( \
            id          VARCHAR NOT NULL PRIMARY KEY, \
            name        VARCHAR NOT NULL, \
            phone       VARCHAR, \
            street      VARCHAR NOT NULL, \
            city        VARCHAR NOT NULL, \
            created     REAL NOT NULL DEFAULT 0 \
        )",
        "CREATE TABLE IF NOT EXISTS tbl_identities ( \
            id          VARCHAR NOT NULL PRIMARY KEY, \
            username    VARCHAR NOT NULL UNIQUE, \
            created     REAL NOT NULL DEFAULT 0 \
        )",
        "CREATE TABLE IF NOT EXISTS tbl_identity_contacts ( \
            identity_id VARCHAR NOT NULL REFERENCES tbl_identities(id), \
            contact_id  VARCHAR NOT NULL REFERENCES tbl_contacts(id), \
            position    INT NOT NULL, \
            PRIMARY KEY (identity_id, contact_id) \
        )",
        "CREATE INDEX IF NOT EXISTS idx_contacts_name ON tbl_contacts (name)",
        "CREATE INDEX IF NOT EXISTS idx_identity_contacts ON tbl_identity_contacts (identity_id, position)",
    ]

    def __init__(self, db_path: str = ":memory:") -> None:
        self.db_path = db_path
        self.dbhLock = threading.RLock()
        self.conn: sqlite3.Connection | None = sqlite3.connect(
            db_path, check_same_thread=False
        )
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.create()
        log.debug("Opened record store at %s", db_path)

    def create(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with self.dbhLock, self.connection:
            for query in self.createSchemaQueries:
                self.connection.execute(query)

    @property
    def connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("Record store is closed")
        return self.conn

    @property
    def is_open(self) -> bool:
        return self.conn is not None

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a read query and return all rows."""
        with self.dbhLock:
            return self.connection.execute(sql, params).fetchall()

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self.dbhLock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
                log.debug("Closed record store at %s", self.db_path)
