"""
contactgraph Event Bus - in-process publish/subscribe.

Mutations publish envelopes on a topic; each GraphQL subscription
holds its own ``Subscription`` channel and iterates it until the
client disconnects.
"""

from contactgraph.eventbus.base import EventBus, EventBusConfig, EventEnvelope, Subscription
from contactgraph.eventbus.memory import InMemoryEventBus
from contactgraph.eventbus.factory import create_event_bus

__all__ = [
    'EventBus',
    'EventBusConfig',
    'EventEnvelope',
    'Subscription',
    'InMemoryEventBus',
    'create_event_bus',
]
