"""contactgraph - a small social graph of people and friend lists.

This package contains:
- The record store (SQLite-backed contacts and identities)
- Token authentication
- The in-process event bus feeding GraphQL subscriptions
- The FastAPI / Strawberry GraphQL application
"""

from contactgraph.__version__ import __version__

__author__ = "contactgraph developers"
__license__ = "MIT"

__all__ = ["__version__"]
