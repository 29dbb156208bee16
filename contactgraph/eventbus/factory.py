"""
Event bus factory.

Only the in-process backend exists; the factory is the single place
the application builds its bus so a distributed backend could be
slotted in later without touching the resolvers.
"""

import logging
from typing import Optional

from contactgraph.eventbus.base import EventBus, EventBusConfig
from contactgraph.eventbus.memory import InMemoryEventBus

log = logging.getLogger("contactgraph.eventbus")


def create_event_bus(config: Optional[EventBusConfig] = None) -> EventBus:
    """Factory function to create an event bus instance.

    Args:
        config: Event bus configuration. If None, uses defaults.

    Returns:
        An EventBus implementation instance
    """
    if config is None:
        config = EventBusConfig()
    if config.max_queue_size:
        log.info("Event bus subscriber queues bounded at %d", config.max_queue_size)
    return InMemoryEventBus(config)
