"""
Per-request GraphQL context.

``get_context`` is installed as the ``context_getter`` of the
Strawberry router.  It is resolved by FastAPI's dependency system, so
an ``AuthError`` raised here for a bad bearer token aborts the HTTP
request before any resolver runs (see ``error_handlers``).
WebSocket connections get an anonymous context.
"""
from __future__ import annotations

import logging
from typing import Optional

from starlette.requests import HTTPConnection
from strawberry.fastapi import BaseContext

from contactgraph.auth import AuthService
from contactgraph.db import RecordStore
from contactgraph.db.repositories import IdentityRecord
from contactgraph.errors import AuthError
from contactgraph.eventbus import EventBus

_log = logging.getLogger("contactgraph.api.graphql")


class GraphContext(BaseContext):
    """Request-scoped handles shared by every resolver."""

    def __init__(
        self,
        store: RecordStore,
        auth: AuthService,
        bus: EventBus,
        current_identity: Optional[IdentityRecord] = None,
    ) -> None:
        super().__init__()
        self.store = store
        self.auth = auth
        self.bus = bus
        self.current_identity = current_identity

    def require_identity(self) -> IdentityRecord:
        """The authenticated identity, or raise UNAUTHENTICATED."""
        if self.current_identity is None:
            raise AuthError.unauthenticated()
        return self.current_identity


async def get_context(connection: HTTPConnection) -> GraphContext:
    """Build the context from ``app.state`` and the Authorization header."""
    state = connection.app.state
    identity = None
    if connection.scope["type"] == "http":
        identity = state.auth.authenticate_request(
            connection.headers.get("authorization")
        )
    if identity is not None:
        _log.debug("Request authenticated", extra={"identity": identity.username})
    return GraphContext(
        store=state.store,
        auth=state.auth,
        bus=state.event_bus,
        current_identity=identity,
    )
