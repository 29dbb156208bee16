"""
Abstract base class for the contactgraph Event Bus.

All event bus implementations must inherit from EventBus and implement
the required publish/subscribe/unsubscribe interface.  Subscribers do
not register callbacks; ``subscribe()`` hands back a ``Subscription``
that the consumer iterates with ``async for``.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EventBusConfig:
    """Configuration for the event bus.

    Attributes:
        channel_prefix: Prefix for all topic names
        max_queue_size: Per-subscriber buffer size; 0 means unbounded.
            When bounded, events for a full subscriber are dropped.
    """
    channel_prefix: str = "cg"
    max_queue_size: int = 0


@dataclass
class EventEnvelope:
    """Envelope wrapping an event for delivery over the bus.

    Attributes:
        topic: The fully-qualified topic
        payload: Event payload (any Python object; no serialization
            happens in-process)
        timestamp: Publish time
        metadata: Additional metadata
    """
    topic: str
    payload: Any
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


_CLOSED = object()


class Subscription:
    """One subscriber's channel: a lazy, non-restartable event stream.

    Delivery starts at registration; nothing published earlier is
    replayed.  Once closed (by ``EventBus.unsubscribe`` or bus shutdown) any
    buffered events are discarded and iteration stops for good.
    """

    def __init__(self, topic: str, max_queue_size: int = 0) -> None:
        self.id = str(uuid.uuid4())
        self.topic = topic
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Events buffered but not yet consumed."""
        return self._queue.qsize()

    def deliver(self, envelope: EventEnvelope) -> bool:
        """Buffer *envelope* for this subscriber. False if closed or full."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(envelope)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        """Discard buffered events and wake a waiting consumer."""
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> EventEnvelope:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        envelope = await self._queue.get()
        if envelope is _CLOSED:
            raise StopAsyncIteration
        return envelope

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"pending={self.pending}"
        return f"<Subscription {self.id} topic={self.topic!r} {state}>"


class EventBus(ABC):
    """Abstract base class for event bus implementations.

    The EventBus decouples producers (mutations) from any number of
    long-lived consumers (subscription resolvers).
    """

    def __init__(self, config: Optional[EventBusConfig] = None):
        self.config = config or EventBusConfig()
        self.log = logging.getLogger("contactgraph.eventbus")
        self._running = False

    @abstractmethod
    async def connect(self) -> None:
        """Start accepting publishes and subscriptions."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Stop the bus and release every live subscription."""
        ...

    @abstractmethod
    async def publish(self, envelope: EventEnvelope) -> int:
        """Publish an event envelope to the bus.

        Returns:
            Number of subscribers the event was delivered to
        """
        ...

    @abstractmethod
    async def subscribe(self, topic: str) -> Subscription:
        """Register a new subscriber channel on *topic*.

        Raises:
            ConnectionError: If the bus is not connected
        """
        ...

    @abstractmethod
    async def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscriber channel, discarding buffered events."""
        ...

    @property
    def is_connected(self) -> bool:
        """Whether the event bus is currently connected."""
        return self._running

    def topic(self, name: str) -> str:
        """Build a fully-qualified topic name."""
        return f"{self.config.channel_prefix}.{name}"

    async def publish_event(self, name: str, payload: Any, **metadata: Any) -> int:
        """Wrap *payload* in an envelope on topic *name* and publish it."""
        return await self.publish(
            EventEnvelope(topic=self.topic(name), payload=payload, metadata=metadata)
        )
