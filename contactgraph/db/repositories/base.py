"""
AbstractRepository: Base class for the record store repositories.

Repositories wrap a ``DbCore`` they do not own: several repositories
share one handle, and only ``RecordStore.close()`` closes it.
"""
from __future__ import annotations

import sqlite3
import uuid
from abc import ABC

from contactgraph.db.db_core import DbCore
from contactgraph.errors import ValidationError


class AbstractRepository(ABC):
    """Base repository over a shared database handle.

    Usage::

        contacts = ContactRepository(core).find()
    """

    def __init__(self, dbh: DbCore | None = None) -> None:
        """
        Args:
            dbh: A ``DbCore`` instance.  When None, operations will
                 raise ``RuntimeError``.
        """
        self._dbh = dbh

    @property
    def dbh(self) -> DbCore:
        """The underlying database handle."""
        if self._dbh is None:
            raise RuntimeError(
                f"{type(self).__name__} has no database handle; "
                "ensure a DbCore was provided"
            )
        return self._dbh

    @property
    def is_connected(self) -> bool:
        """Whether the underlying DB handle is available."""
        return self._dbh is not None and self._dbh.is_open

    @staticmethod
    def new_id() -> str:
        """Store-assigned identifier for a record saved for the first time."""
        return uuid.uuid4().hex

    @staticmethod
    def require_text(errors: dict[str, str], field: str, value: str | None) -> None:
        """Record a field error when *value* is missing or blank."""
        if value is None or not str(value).strip():
            errors[field] = f"{field} is required"

    @staticmethod
    def integrity_error(exc: sqlite3.IntegrityError, entity: str) -> ValidationError:
        """Translate an SQLite constraint failure into a ``ValidationError``."""
        message = str(exc)
        if "UNIQUE" in message:
            field = message.rsplit(".", 1)[-1]
            return ValidationError(
                f"{entity} validation failed: {field} must be unique",
                field_errors={field: f"{field} must be unique"},
            )
        if "FOREIGN KEY" in message:
            return ValidationError(
                f"{entity} validation failed: references an unknown record",
            )
        return ValidationError(f"{entity} validation failed: {message}")

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"<{type(self).__name__} {status}>"
