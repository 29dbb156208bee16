"""
FastAPI router that mounts the Strawberry GraphQL endpoint.

Provides:
  - <path>  - GraphQL endpoint + GraphiQL IDE
  - <path>  - GraphQL subscriptions via WebSocket

Usage in main.py:
    from contactgraph.api.graphql.router import create_graphql_router
    app.include_router(create_graphql_router("/graphql"))
"""
from __future__ import annotations

import logging

from strawberry.fastapi import GraphQLRouter

from .context import get_context
from .resolvers import schema

_log = logging.getLogger("contactgraph.api.graphql")


def create_graphql_router(path: str = "/graphql", graphql_ide: bool = True) -> GraphQLRouter:
    """Create the Strawberry → FastAPI router with subscription support."""
    router = GraphQLRouter(
        schema,
        path=path,
        graphql_ide="graphiql" if graphql_ide else None,
        context_getter=get_context,
        subscription_protocols=["graphql-transport-ws", "graphql-ws"],
    )
    _log.info("GraphQL router created, endpoint at %s (subscriptions enabled)", path)
    return router
