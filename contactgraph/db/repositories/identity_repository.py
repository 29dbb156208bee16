"""
IdentityRepository: Clean interface for identity (user) records.

Identities are returned as hydrated aggregates: the ordered contact
collection is loaded alongside the identity row, so callers never see
a half-populated friend list.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass, field

from contactgraph.db.repositories.base import AbstractRepository
from contactgraph.db.repositories.contact_repository import ContactRecord
from contactgraph.errors import ValidationError

log = logging.getLogger("contactgraph.db.repositories.identity")


@dataclass
class IdentityRecord:
    """Typed representation of an identity and its contact collection."""

    username: str
    friends: list[ContactRecord] = field(default_factory=list)
    id: str = ""
    created: float = 0.0

    @classmethod
    def from_row(
        cls, row: tuple, friends: list[ContactRecord] | None = None
    ) -> "IdentityRecord":
        """Build from a DB row tuple (id, username, created)."""
        if not row or len(row) < 3:
            raise ValueError(f"Invalid identity row: {row}")
        return cls(
            id=str(row[0]),
            username=str(row[1]),
            created=float(row[2] or 0),
            friends=list(friends or []),
        )

    def friend_ids(self) -> list[str]:
        return [c.id for c in self.friends]

    def has_friend(self, contact_id: str) -> bool:
        return contact_id in self.friend_ids()

    def append_friend(self, contact: ContactRecord) -> None:
        """Append *contact* in memory only; see ``IdentityRepository.add_friend``."""
        self.friends.append(contact)


class IdentityRepository(AbstractRepository):
    """Identity lookups and writes."""

    def find_one(self, username: str) -> IdentityRecord | None:
        """Look an identity up by its unique username."""
        rows = self.dbh.query(
            "SELECT id, username, created FROM tbl_identities WHERE username = ?",
            (username,),
        )
        return self._hydrate(rows[0]) if rows else None

    def find_by_id(self, identity_id: str) -> IdentityRecord | None:
        rows = self.dbh.query(
            "SELECT id, username, created FROM tbl_identities WHERE id = ?",
            (identity_id,),
        )
        return self._hydrate(rows[0]) if rows else None

    def save(self, record: IdentityRecord) -> IdentityRecord:
        """Insert a new identity or update an existing one.

        A new identity is stored together with its contact links, in
        collection order; duplicate contacts are rejected by the link
        table.  Updating an existing identity only touches its row:
        links are appended one at a time with ``add_friend``.

        Raises:
            ValidationError: blank or already-taken username, a link to
                an unknown contact, or an unknown identity id.
        """
        errors: dict[str, str] = {}
        self.require_text(errors, "username", record.username)
        if errors:
            raise ValidationError(
                "Identity validation failed: " + ", ".join(errors.values()),
                field_errors=errors,
            )

        core = self.dbh
        identity_id = record.id or self.new_id()
        created = record.created or time.time()
        try:
            with core.dbhLock, core.connection as conn:
                if record.id:
                    cur = conn.execute(
                        "UPDATE tbl_identities SET username = ? WHERE id = ?",
                        (record.username, identity_id),
                    )
                    if cur.rowcount == 0:
                        raise ValidationError(
                            f"Identity validation failed: unknown id {identity_id}"
                        )
                else:
                    conn.execute(
                        "INSERT INTO tbl_identities (id, username, created) VALUES (?, ?, ?)",
                        (identity_id, record.username, created),
                    )
                    conn.executemany(
                        "INSERT INTO tbl_identity_contacts (identity_id, contact_id, position) "
                        "VALUES (?, ?, ?)",
                        [(identity_id, c.id, pos) for pos, c in enumerate(record.friends)],
                    )
        except sqlite3.IntegrityError as e:
            raise self.integrity_error(e, "Identity") from e

        record.id = identity_id
        record.created = created
        log.debug(
            "Saved identity %s (%s) with %d contact(s)",
            record.id, record.username, len(record.friends),
        )
        return record

    def add_friend(self, record: IdentityRecord, contact: ContactRecord) -> bool:
        """Append *contact* to the stored collection of *record*.

        Writes a single link row after the identity's last one, so
        appends from requests holding older copies of the identity do
        not overwrite each other.  *record* is updated in place.

        Returns:
            False when the contact was already linked.

        Raises:
            ValidationError: unknown identity or contact id.
        """
        core = self.dbh
        try:
            with core.dbhLock, core.connection as conn:
                linked = conn.execute(
                    "SELECT 1 FROM tbl_identity_contacts "
                    "WHERE identity_id = ? AND contact_id = ?",
                    (record.id, contact.id),
                ).fetchone()
                if linked is None:
                    conn.execute(
                        "INSERT INTO tbl_identity_contacts (identity_id, contact_id, position) "
                        "SELECT ?, ?, COALESCE(MAX(position), -1) + 1 "
                        "FROM tbl_identity_contacts WHERE identity_id = ?",
                        (record.id, contact.id, record.id),
                    )
        except sqlite3.IntegrityError as e:
            raise self.integrity_error(e, "Identity") from e

        if not record.has_friend(contact.id):
            record.append_friend(contact)
        if linked is not None:
            return False
        log.debug("Linked contact %s to identity %s", contact.id, record.id)
        return True

    def _hydrate(self, row: tuple) -> IdentityRecord:
        """Load the ordered contact collection for an identity row."""
        friend_rows = self.dbh.query(
            "SELECT c.id, c.name, c.phone, c.street, c.city, c.created "
            "FROM tbl_identity_contacts l "
            "JOIN tbl_contacts c ON c.id = l.contact_id "
            "WHERE l.identity_id = ? ORDER BY l.position",
            (row[0],),
        )
        return IdentityRecord.from_row(
            row, [ContactRecord.from_row(r) for r in friend_rows]
        )
