"""
GraphQL layer for the contactgraph API.

Uses Strawberry GraphQL to expose contacts and identities through a
single typed schema, with a live ``onContactAdded`` subscription over
WebSocket.

Endpoints (mounted by ``contactgraph.api.main``):
  - /graphql  (POST/GET) - Query & Mutation
  - /graphql  (WS)       - Subscriptions (graphql-transport-ws, graphql-ws)
"""
