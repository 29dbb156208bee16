"""Tests for the contactgraph record store and its repositories."""
from __future__ import annotations

import pytest

from contactgraph.db import (
    ContactRecord,
    ContactRepository,
    DbCore,
    IdentityRecord,
    RecordStore,
    open_record_store,
)
from contactgraph.errors import ErrorKind, ValidationError


def _contact(store, name="Arto Hellas", phone=None, street="Tapiolankatu 5 A", city="Espoo"):
    return store.contacts.save(ContactRecord(name=name, phone=phone, street=street, city=city))


class TestDbCore:

    def test_schema_created(self):
        core = DbCore()
        tables = {r[0] for r in core.query("SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"tbl_contacts", "tbl_identities", "tbl_identity_contacts"} <= tables
        core.close()

    def test_close_is_idempotent(self):
        core = DbCore()
        core.close()
        core.close()
        assert not core.is_open

    def test_closed_connection_raises(self):
        core = DbCore()
        core.close()
        with pytest.raises(RuntimeError):
            core.query("SELECT 1")

    def test_file_database_persists(self, tmp_path):
        path = str(tmp_path / "cg.db")
        store = open_record_store(path)
        _contact(store)
        store.close()

        reopened = open_record_store(path)
        assert reopened.contacts.count() == 1
        reopened.close()


class TestContactRepository:

    def test_save_assigns_id(self, store):
        record = _contact(store)
        assert record.id
        assert record.created > 0
        assert store.contacts.find_by_id(record.id) == record

    def test_ids_are_unique(self, store):
        ids = {_contact(store, name=f"p{i}").id for i in range(5)}
        assert len(ids) == 5

    def test_count(self, store):
        assert store.contacts.count() == 0
        _contact(store, name="a")
        _contact(store, name="b")
        assert store.contacts.count() == 2

    def test_find_filters_by_phone(self, store):
        with_phone = _contact(store, name="a", phone="040-123")
        without = _contact(store, name="b")
        assert [c.id for c in store.contacts.find()] == [with_phone.id, without.id]
        assert [c.id for c in store.contacts.find(has_phone=True)] == [with_phone.id]
        assert [c.id for c in store.contacts.find(has_phone=False)] == [without.id]

    def test_find_one_returns_first_in_insertion_order(self, store):
        first = _contact(store, name="Dup", city="Espoo")
        _contact(store, name="Dup", city="Helsinki")
        found = store.contacts.find_one("Dup")
        assert found.id == first.id
        assert len(store.contacts.find(name="Dup")) == 2

    def test_find_one_missing(self, store):
        assert store.contacts.find_one("nobody") is None

    def test_update_keeps_id(self, store):
        record = _contact(store)
        original_id = record.id
        record.phone = "040-999"
        store.contacts.save(record)
        assert record.id == original_id
        assert store.contacts.find_by_id(original_id).phone == "040-999"
        assert store.contacts.count() == 1

    @pytest.mark.parametrize("field", ["name", "street", "city"])
    def test_required_fields(self, store, field):
        values = {"name": "n", "street": "s", "city": "c", field: "  "}
        with pytest.raises(ValidationError) as exc:
            store.contacts.save(ContactRecord(**values))
        assert exc.value.kind == ErrorKind.VALIDATION_ERROR
        assert field in exc.value.field_errors
        assert store.contacts.count() == 0

    def test_blank_phone_rejected(self, store):
        with pytest.raises(ValidationError) as exc:
            _contact(store, phone="")
        assert "phone" in exc.value.field_errors

    def test_unknown_id_update_rejected(self, store):
        with pytest.raises(ValidationError):
            store.contacts.save(ContactRecord(name="x", street="s", city="c", id="missing"))

    def test_repository_without_handle(self):
        repo = ContactRepository()
        assert not repo.is_connected
        with pytest.raises(RuntimeError):
            repo.count()


class TestIdentityRepository:

    def test_save_and_find(self, store):
        identity = store.identities.save(IdentityRecord(username="alice"))
        assert identity.id
        found = store.identities.find_one("alice")
        assert found.id == identity.id
        assert found.friends == []
        assert store.identities.find_by_id(identity.id).username == "alice"

    def test_username_unique(self, store):
        first = store.identities.save(IdentityRecord(username="alice"))
        with pytest.raises(ValidationError) as exc:
            store.identities.save(IdentityRecord(username="alice"))
        assert "username" in exc.value.field_errors
        assert store.identities.find_one("alice").id == first.id

    def test_blank_username_rejected(self, store):
        with pytest.raises(ValidationError):
            store.identities.save(IdentityRecord(username=""))

    def test_new_identity_saved_with_friends(self, store):
        c1 = _contact(store, name="one")
        c2 = _contact(store, name="two")
        store.identities.save(IdentityRecord(username="alice", friends=[c2, c1]))
        assert store.identities.find_one("alice").friend_ids() == [c2.id, c1.id]

    def test_friends_hydrated_in_order(self, store):
        identity = store.identities.save(IdentityRecord(username="alice"))
        c1 = _contact(store, name="one")
        c2 = _contact(store, name="two")
        c3 = _contact(store, name="three")
        for c in (c2, c1, c3):
            assert store.identities.add_friend(identity, c) is True
        assert identity.friend_ids() == [c2.id, c1.id, c3.id]

        found = store.identities.find_one("alice")
        assert found.friend_ids() == [c2.id, c1.id, c3.id]
        assert found.friends[0].name == "two"
        assert found.has_friend(c3.id)

    def test_add_friend_from_stale_copies(self, store):
        alice = store.identities.save(IdentityRecord(username="alice"))
        first = store.identities.find_by_id(alice.id)
        second = store.identities.find_by_id(alice.id)
        c1 = _contact(store, name="A")
        c2 = _contact(store, name="B")

        store.identities.add_friend(first, c1)
        store.identities.add_friend(second, c2)
        assert second.friend_ids() == [c2.id]
        assert store.identities.find_by_id(alice.id).friend_ids() == [c1.id, c2.id]

    def test_update_keeps_links(self, store):
        alice = store.identities.save(IdentityRecord(username="alice"))
        stale = store.identities.find_by_id(alice.id)
        contact = _contact(store)
        store.identities.add_friend(alice, contact)

        stale.username = "alicia"
        store.identities.save(stale)
        found = store.identities.find_one("alicia")
        assert found.friend_ids() == [contact.id]

    def test_add_friend_already_linked(self, store):
        identity = store.identities.save(IdentityRecord(username="alice"))
        contact = _contact(store)
        assert store.identities.add_friend(identity, contact) is True
        stale = store.identities.find_by_id(identity.id)
        stale.friends.clear()
        assert store.identities.add_friend(stale, contact) is False
        assert stale.friend_ids() == [contact.id]
        assert store.identities.find_one("alice").friend_ids() == [contact.id]

    def test_add_friend_unknown_identity(self, store):
        contact = _contact(store)
        ghost = IdentityRecord(username="ghost", id="no-such-identity")
        with pytest.raises(ValidationError) as exc:
            store.identities.add_friend(ghost, contact)
        assert "unknown record" in exc.value.message
        assert ghost.friends == []

    def test_friend_reflects_contact_updates(self, store):
        identity = store.identities.save(IdentityRecord(username="alice"))
        contact = _contact(store)
        store.identities.add_friend(identity, contact)

        contact.phone = "555"
        store.contacts.save(contact)
        assert store.identities.find_one("alice").friends[0].phone == "555"

    def test_duplicate_friend_rejected(self, store):
        contact = _contact(store)
        identity = IdentityRecord(username="alice", friends=[contact, contact])
        with pytest.raises(ValidationError):
            store.identities.save(identity)
        assert store.identities.find_one("alice") is None

    def test_unknown_contact_rejected(self, store):
        identity = IdentityRecord(username="alice")
        identity.append_friend(ContactRecord(name="ghost", street="s", city="c", id="nope"))
        with pytest.raises(ValidationError) as exc:
            store.identities.save(identity)
        assert "unknown record" in exc.value.message
        assert store.identities.find_one("alice") is None

    def test_missing_identity(self, store):
        assert store.identities.find_one("nobody") is None
        assert store.identities.find_by_id("nope") is None


class TestRecordStore:

    def test_ping(self, store):
        assert store.is_open
        assert store.ping() is True

    def test_ping_after_close(self):
        s = open_record_store()
        s.close()
        assert not s.is_open
        assert s.ping() is False

    def test_repositories_share_core(self):
        core = DbCore()
        s = RecordStore(core)
        assert s.contacts.dbh is core
        assert s.identities.dbh is core
        s.close()

    def test_only_store_closes_core(self, store):
        assert not hasattr(store.contacts, "close")
        assert not hasattr(store.identities, "__exit__")
        _contact(store)
        assert store.contacts.is_connected
        assert store.identities.is_connected

        store.close()
        assert not store.contacts.is_connected
        assert not store.identities.is_connected
