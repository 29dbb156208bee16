"""
GraphQL type definitions for contactgraph domain objects.

Each Strawberry type is a read-only view over a record from the
``contactgraph.db`` repositories.  Records are converted with the
``from_record`` constructors; resolvers never hand repository objects
to the schema directly.
"""
from enum import Enum
from typing import Optional

import strawberry

from contactgraph.db.repositories import ContactRecord, IdentityRecord


# ── Enums ───────────────────────────────────────────────────────────


@strawberry.enum(description="Filter for listContacts by phone presence")
class PhoneFilter(Enum):
    ANY = "ANY"
    HAS = "HAS"
    NONE = "NONE"

    def has_phone(self) -> Optional[bool]:
        """Translate to the repository's ``has_phone`` argument."""
        if self is PhoneFilter.HAS:
            return True
        if self is PhoneFilter.NONE:
            return False
        return None


# ── Core Types ──────────────────────────────────────────────────────


@strawberry.type
class Location:
    """Postal location of a contact."""
    street: str
    city: str


@strawberry.type
class Contact:
    """A person in the directory."""
    id: strawberry.ID
    name: str
    phone: Optional[str]
    street: strawberry.Private[str]
    city: strawberry.Private[str]

    @strawberry.field
    def location(self) -> Location:
        """Street and city, composed when read."""
        return Location(street=self.street, city=self.city)

    @classmethod
    def from_record(cls, record: ContactRecord) -> "Contact":
        return cls(
            id=strawberry.ID(record.id),
            name=record.name,
            phone=record.phone,
            street=record.street,
            city=record.city,
        )


@strawberry.type
class Identity:
    """An account that can log in and curate its own contact list."""
    id: strawberry.ID
    username: str
    friends: list[Contact]

    @classmethod
    def from_record(cls, record: IdentityRecord) -> "Identity":
        return cls(
            id=strawberry.ID(record.id),
            username=record.username,
            friends=[Contact.from_record(c) for c in record.friends],
        )


@strawberry.type
class Token:
    """Signed bearer token returned by ``login``."""
    value: str
