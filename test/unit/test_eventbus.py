"""Tests for the contactgraph EventBus abstraction layer."""
from __future__ import annotations

import asyncio

import pytest

from contactgraph.eventbus.base import EventBusConfig, EventEnvelope
from contactgraph.eventbus.factory import create_event_bus
from contactgraph.eventbus.memory import InMemoryEventBus


def _env(topic="cg.contact_added", payload="x"):
    return EventEnvelope(topic=topic, payload=payload)


class TestEventBusConfig:
    """Tests for EventBusConfig."""

    def test_default_config(self):
        config = EventBusConfig()
        assert config.channel_prefix == "cg"
        assert config.max_queue_size == 0


class TestEventEnvelope:
    """Tests for EventEnvelope."""

    def test_create_envelope(self):
        env = EventEnvelope(topic="cg.contact_added", payload={"name": "Bob"})
        assert env.topic == "cg.contact_added"
        assert env.timestamp > 0
        assert env.metadata == {}


class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    @pytest.mark.asyncio
    async def test_connect_disconnect(self, bus):
        await bus.connect()
        assert bus.is_connected
        await bus.disconnect()
        assert not bus.is_connected

    @pytest.mark.asyncio
    async def test_publish_subscribe(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")

        assert await bus.publish(_env(payload="hello")) == 1
        received = await asyncio.wait_for(sub.__anext__(), timeout=1)
        assert received.payload == "hello"
        await bus.disconnect()

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self, bus):
        await bus.connect()
        assert await bus.publish(_env()) == 0

    @pytest.mark.asyncio
    async def test_publish_when_disconnected(self, bus):
        assert await bus.publish(_env()) == 0

    @pytest.mark.asyncio
    async def test_subscribe_when_disconnected(self, bus):
        with pytest.raises(ConnectionError):
            await bus.subscribe("cg.contact_added")

    @pytest.mark.asyncio
    async def test_fan_out_in_order(self, bus):
        await bus.connect()
        subs = [await bus.subscribe("cg.contact_added") for _ in range(3)]

        for i in range(3):
            await bus.publish(_env(payload=i))

        for sub in subs:
            got = [(await sub.__anext__()).payload for _ in range(3)]
            assert got == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_no_replay(self, bus):
        await bus.connect()
        await bus.publish(_env(payload="early"))
        sub = await bus.subscribe("cg.contact_added")
        await bus.publish(_env(payload="late"))
        assert sub.pending == 1
        assert (await sub.__anext__()).payload == "late"

    @pytest.mark.asyncio
    async def test_topics_isolated(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.a")
        assert await bus.publish(_env(topic="cg.b")) == 0
        assert sub.pending == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_discards_buffered(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")
        await bus.publish(_env(payload=1))
        await bus.publish(_env(payload=2))

        await bus.unsubscribe(sub)
        assert sub.closed
        assert bus.subscriber_count == 0
        assert [env async for env in sub] == []
        assert await bus.publish(_env()) == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")
        await bus.unsubscribe(sub)
        await bus.unsubscribe(sub)
        assert bus.topic_count == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_wakes_waiting_consumer(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")

        async def consume():
            return [env async for env in sub]

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        await bus.unsubscribe(sub)
        assert await asyncio.wait_for(task, timeout=1) == []

    @pytest.mark.asyncio
    async def test_disconnect_closes_subscriptions(self, bus):
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")
        await bus.disconnect()
        assert sub.closed
        assert bus.subscriber_count == 0
        with pytest.raises(StopAsyncIteration):
            await sub.__anext__()

    @pytest.mark.asyncio
    async def test_metrics(self, bus):
        await bus.connect()
        s1 = await bus.subscribe("cg.a")
        await bus.subscribe("cg.a")
        await bus.subscribe("cg.b")
        assert bus.subscriber_count == 3
        assert bus.topic_count == 2

        await bus.unsubscribe(s1)
        assert bus.subscriber_count == 2
        assert bus.topic_count == 2

    @pytest.mark.asyncio
    async def test_bounded_queue_drops(self, caplog):
        bus = InMemoryEventBus(EventBusConfig(max_queue_size=1))
        await bus.connect()
        sub = await bus.subscribe("cg.contact_added")

        assert await bus.publish(_env(payload=1)) == 1
        assert await bus.publish(_env(payload=2)) == 0
        assert "queue full" in caplog.text
        assert (await sub.__anext__()).payload == 1

    @pytest.mark.asyncio
    async def test_publish_event_uses_prefix(self, bus):
        await bus.connect()
        sub = await bus.subscribe(bus.topic("contact_added"))
        assert await bus.publish_event("contact_added", "p", source="test") == 1
        env = await sub.__anext__()
        assert env.topic == "cg.contact_added"
        assert env.metadata == {"source": "test"}


class TestFactory:
    """Tests for create_event_bus."""

    def test_default(self):
        bus = create_event_bus()
        assert isinstance(bus, InMemoryEventBus)
        assert bus.topic("x") == "cg.x"

    def test_config_passed_through(self):
        bus = create_event_bus(EventBusConfig(channel_prefix="other", max_queue_size=8))
        assert bus.config.max_queue_size == 8
        assert bus.topic("x") == "other.x"
