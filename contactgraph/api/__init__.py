"""
contactgraph API package: FastAPI application, GraphQL schema and transport.
"""
