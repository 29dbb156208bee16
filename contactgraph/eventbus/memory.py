"""
In-memory event bus implementation.

Routes events between producers and subscribers within a single
process using one asyncio queue per subscriber.  Fan-out across
several server processes is out of scope.
"""

from __future__ import annotations

from contactgraph.eventbus.base import EventBus, EventBusConfig, EventEnvelope, Subscription


class InMemoryEventBus(EventBus):
    """In-memory event bus using asyncio queues.

    Subscribers on a topic are kept in registration order and every
    publish reaches them in that order.  No method awaits between
    reading and changing the registry, so no lock is needed on a
    single event loop.
    """

    def __init__(self, config: EventBusConfig | None = None) -> None:
        super().__init__(config)
        self._topic_subs: dict[str, dict[str, Subscription]] = {}
        self._subs: dict[str, Subscription] = {}

    async def connect(self) -> None:
        self._running = True
        self.log.info("In-memory event bus connected")

    async def disconnect(self) -> None:
        """Shut down the bus, closing every live subscription."""
        self._running = False
        for sub in list(self._subs.values()):
            sub.close()
        self._subs.clear()
        self._topic_subs.clear()
        self.log.info("In-memory event bus disconnected")

    async def publish(self, envelope: EventEnvelope) -> int:
        """Publish an event to every subscriber of its topic.

        Returns:
            Number of subscribers that buffered the event
        """
        if not self._running:
            self.log.warning("Cannot publish to %s: event bus not running", envelope.topic)
            return 0

        delivered = 0
        for sub in list(self._topic_subs.get(envelope.topic, {}).values()):
            if sub.deliver(envelope):
                delivered += 1
            else:
                self.log.warning(
                    "Dropped event on %s for subscriber %s (queue full)",
                    envelope.topic, sub.id,
                )

        self.log.debug("Published to %s (%d subscriber(s))", envelope.topic, delivered)
        return delivered

    async def subscribe(self, topic: str) -> Subscription:
        if not self._running:
            raise ConnectionError("event bus not connected")

        sub = Subscription(topic, self.config.max_queue_size)
        self._topic_subs.setdefault(topic, {})[sub.id] = sub
        self._subs[sub.id] = sub

        self.log.debug("Subscribed %s to topic '%s'", sub.id, topic)
        return sub

    async def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Unknown or repeated calls are no-ops."""
        subscription.close()
        if self._subs.pop(subscription.id, None) is None:
            return

        subs = self._topic_subs.get(subscription.topic)
        if subs is not None:
            subs.pop(subscription.id, None)
            if not subs:
                del self._topic_subs[subscription.topic]

        self.log.debug("Unsubscribed %s", subscription.id)

    # --- Metrics ---

    @property
    def subscriber_count(self) -> int:
        """Total number of active subscriptions."""
        return len(self._subs)

    @property
    def topic_count(self) -> int:
        """Number of unique topics with subscribers."""
        return len(self._topic_subs)
