"""Record store repositories: clean abstraction over DbCore."""

from __future__ import annotations

from contactgraph.db.repositories.base import AbstractRepository
from contactgraph.db.repositories.contact_repository import ContactRecord, ContactRepository
from contactgraph.db.repositories.identity_repository import IdentityRecord, IdentityRepository

__all__ = [
    "AbstractRepository",
    "ContactRecord",
    "ContactRepository",
    "IdentityRecord",
    "IdentityRepository",
]
