"""
GraphQL resolvers: Query, Mutation & Subscription root types.

Resolvers map GraphQL operations onto the record store, the auth
service and the event bus held by ``GraphContext``.  Failures are
raised as ``contactgraph.errors`` exceptions; GraphQL reports them with
their ``extensions`` (``code``, and ``invalidArgs`` for store
validation failures).
"""
from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Optional

import strawberry
from strawberry.types import Info

from contactgraph.db.repositories import ContactRecord, IdentityRecord
from contactgraph.errors import ValidationError
from contactgraph.eventbus import EventBus

from .types import Contact, Identity, PhoneFilter, Token

_log = logging.getLogger("contactgraph.api.graphql")

# Topic carrying every newly created contact
CONTACT_ADDED = "contact_added"


def _add_friend(info: Info, identity: IdentityRecord, contact: ContactRecord,
                args: dict[str, Any]) -> bool:
    try:
        return info.context.store.identities.add_friend(identity, contact)
    except ValidationError as e:
        raise e.with_args(args) from e


# ── Query Root ──────────────────────────────────────────────────────

@strawberry.type
class Query:
    """Root query type for the contactgraph GraphQL API."""

    @strawberry.field(description="Total number of stored contacts")
    def count_contacts(self, info: Info) -> int:
        return info.context.store.contacts.count()

    @strawberry.field(description="All contacts, optionally filtered by phone presence")
    def list_contacts(
        self,
        info: Info,
        phone: PhoneFilter = PhoneFilter.ANY,
    ) -> list[Contact]:
        records = info.context.store.contacts.find(has_phone=phone.has_phone())
        return [Contact.from_record(r) for r in records]

    @strawberry.field(description="First contact with the given name")
    def find_contact(self, info: Info, name: str) -> Optional[Contact]:
        record = info.context.store.contacts.find_one(name)
        return Contact.from_record(record) if record else None

    @strawberry.field(name="me", description="The authenticated identity, if any")
    def current_identity(self, info: Info) -> Optional[Identity]:
        identity = info.context.current_identity
        return Identity.from_record(identity) if identity else None


# ── Mutation Root ───────────────────────────────────────────────────

@strawberry.type
class Mutation:
    """Root mutation type for the contactgraph GraphQL API."""

    @strawberry.mutation(description="Create a contact and add it to the caller's friends")
    async def create_contact(
        self,
        info: Info,
        name: str,
        street: str,
        city: str,
        phone: Optional[str] = None,
    ) -> Contact:
        """Persist a contact, link it to the caller and announce it.

        The two writes are not atomic: if linking fails the contact
        stays stored and the error is still reported.  The event is
        published only after both writes succeed.
        """
        ctx = info.context
        identity = ctx.require_identity()
        args = {"name": name, "phone": phone, "street": street, "city": city}

        record = ContactRecord(name=name, phone=phone, street=street, city=city)
        try:
            ctx.store.contacts.save(record)
        except ValidationError as e:
            raise e.with_args(args) from e

        _add_friend(info, identity, record, args)

        delivered = await ctx.bus.publish_event(CONTACT_ADDED, record)
        _log.info(
            "Contact %s created (%d subscriber(s) notified)", record.id, delivered,
            extra={"operation": "createContact", "identity": identity.username},
        )
        return Contact.from_record(record)

    @strawberry.mutation(description="Set the phone of the first contact with the given name")
    def update_phone(self, info: Info, name: str, phone: str) -> Optional[Contact]:
        contacts = info.context.store.contacts
        record = contacts.find_one(name)
        if record is None:
            return None

        record.phone = phone
        try:
            contacts.save(record)
        except ValidationError as e:
            raise e.with_args({"name": name, "phone": phone}) from e

        _log.info("Phone updated for contact %s", record.id,
                  extra={"operation": "updatePhone"})
        return Contact.from_record(record)

    @strawberry.mutation(description="Register a new identity")
    def create_identity(self, info: Info, username: str) -> Identity:
        record = IdentityRecord(username=username)
        try:
            info.context.store.identities.save(record)
        except ValidationError as e:
            raise e.with_args({"username": username}) from e
        _log.info("Identity created", extra={
            "operation": "createIdentity", "identity": record.username,
        })
        return Identity.from_record(record)

    @strawberry.mutation(description="Exchange credentials for a bearer token")
    def login(self, info: Info, username: str, password: str) -> Token:
        return Token(value=info.context.auth.login(username, password))

    @strawberry.mutation(description="Add an existing contact to the caller's friends")
    def add_contact_as_friend(self, info: Info, name: str) -> Identity:
        """Link the first contact named *name* to the caller.

        An unknown name or a contact that is already a friend leaves the
        identity unchanged; neither is an error.
        """
        identity = info.context.require_identity()
        extra = {"operation": "addContactAsFriend", "identity": identity.username}

        contact = info.context.store.contacts.find_one(name)
        if contact is None:
            _log.info("No contact named %r", name, extra=extra)
        elif _add_friend(info, identity, contact, {"name": name}):
            _log.info("Contact %s added as friend", contact.id, extra=extra)
        else:
            _log.info("Contact %s is already a friend", contact.id, extra=extra)

        current = info.context.store.identities.find_by_id(identity.id)
        return Identity.from_record(current or identity)


# ── Subscription Root ───────────────────────────────────────────────

async def contact_added_stream(bus: EventBus) -> AsyncGenerator[Contact, None]:
    """Contacts published on the bus from the moment of the first read.

    The bus channel is released when the stream is closed or cancelled.
    """
    channel = await bus.subscribe(bus.topic(CONTACT_ADDED))
    _log.debug("Subscriber %s attached", channel.id, extra={"topic": channel.topic})
    try:
        async for envelope in channel:
            yield Contact.from_record(envelope.payload)
    finally:
        await bus.unsubscribe(channel)
        _log.debug("Subscriber %s released", channel.id, extra={"topic": channel.topic})


@strawberry.type
class Subscription:
    """Root subscription type for real-time GraphQL updates."""

    @strawberry.subscription(description="Every contact created after subscribing")
    async def on_contact_added(self, info: Info) -> AsyncGenerator[Contact, None]:
        """Stream contacts created by any client.

        Nothing published before the subscription started is replayed.
        """
        stream = contact_added_stream(info.context.bus)
        try:
            async for contact in stream:
                yield contact
        finally:
            await stream.aclose()


# ── Build Schema ────────────────────────────────────────────────────

schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
)
