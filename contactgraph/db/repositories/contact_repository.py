"""
ContactRepository: Clean interface for contact (person) records.

Names are not unique.  ``find_one`` returns the first match in
insertion order, which is what every lookup-by-name operation treats
as canonical.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from typing import Any

from contactgraph.db.repositories.base import AbstractRepository
from contactgraph.errors import ValidationError

log = logging.getLogger("contactgraph.db.repositories.contact")

_COLUMNS = "id, name, phone, street, city, created"


@dataclass
class ContactRecord:
    """Typed representation of a stored contact."""

    name: str
    street: str
    city: str
    phone: str | None = None
    id: str = ""
    created: float = 0.0

    @classmethod
    def from_row(cls, row: tuple) -> "ContactRecord":
        """Build from a DB row tuple (id, name, phone, street, city, created)."""
        if not row or len(row) < 6:
            raise ValueError(f"Invalid contact row: {row}")
        return cls(
            id=str(row[0]),
            name=str(row[1]),
            phone=None if row[2] is None else str(row[2]),
            street=str(row[3]),
            city=str(row[4]),
            created=float(row[5] or 0),
        )


class ContactRepository(AbstractRepository):
    """Contact lookups and writes."""

    def find(
        self,
        name: str | None = None,
        has_phone: bool | None = None,
    ) -> list[ContactRecord]:
        """List contacts, optionally filtered by name and phone presence.

        Args:
            name: exact name match.
            has_phone: True for contacts with a phone, False for
                contacts without one, None for all.
        """
        clauses: list[str] = []
        params: list[Any] = []
        if name is not None:
            clauses.append("name = ?")
            params.append(name)
        if has_phone is True:
            clauses.append("phone IS NOT NULL")
        elif has_phone is False:
            clauses.append("phone IS NULL")

        sql = f"SELECT {_COLUMNS} FROM tbl_contacts"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY rowid"

        return [ContactRecord.from_row(r) for r in self.dbh.query(sql, params)]

    def find_one(self, name: str) -> ContactRecord | None:
        """First contact with this name, or None."""
        rows = self.dbh.query(
            f"SELECT {_COLUMNS} FROM tbl_contacts WHERE name = ? ORDER BY rowid LIMIT 1",
            (name,),
        )
        return ContactRecord.from_row(rows[0]) if rows else None

    def find_by_id(self, contact_id: str) -> ContactRecord | None:
        rows = self.dbh.query(
            f"SELECT {_COLUMNS} FROM tbl_contacts WHERE id = ?", (contact_id,)
        )
        return ContactRecord.from_row(rows[0]) if rows else None

    def save(self, record: ContactRecord) -> ContactRecord:
        """Insert a new contact or update an existing one.

        A record without an id is inserted and receives its identifier
        here; the id never changes afterwards.

        Raises:
            ValidationError: a required field is blank, the phone is
                blank, or the record refers to an unknown id.
        """
        self._validate(record)

        core = self.dbh
        try:
            with core.dbhLock, core.connection as conn:
                if not record.id:
                    contact_id = self.new_id()
                    created = time.time()
                    conn.execute(
                        f"INSERT INTO tbl_contacts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                        (contact_id, record.name, record.phone, record.street,
                         record.city, created),
                    )
                    record.id = contact_id
                    record.created = created
                    log.debug("Inserted contact %s (%s)", record.id, record.name)
                else:
                    cur = conn.execute(
                        "UPDATE tbl_contacts SET name = ?, phone = ?, street = ?, city = ? "
                        "WHERE id = ?",
                        (record.name, record.phone, record.street, record.city, record.id),
                    )
                    if cur.rowcount == 0:
                        raise ValidationError(
                            f"Contact validation failed: unknown id {record.id}"
                        )
                    log.debug("Updated contact %s (%s)", record.id, record.name)
        except sqlite3.IntegrityError as e:
            raise self.integrity_error(e, "Contact") from e

        return record

    def count(self) -> int:
        rows = self.dbh.query("SELECT COUNT(*) FROM tbl_contacts")
        return int(rows[0][0]) if rows else 0

    def _validate(self, record: ContactRecord) -> None:
        errors: dict[str, str] = {}
        self.require_text(errors, "name", record.name)
        self.require_text(errors, "street", record.street)
        self.require_text(errors, "city", record.city)
        if record.phone is not None and not record.phone.strip():
            errors["phone"] = "phone must not be blank"
        if errors:
            raise ValidationError(
                "Contact validation failed: " + ", ".join(errors.values()),
                field_errors=errors,
            )
