"""
FastAPI application factory for the contactgraph API.

``create_app()`` wires the record store, the auth service and the
event bus onto ``app.state`` and mounts the GraphQL router.  The bus
is connected for the lifetime of the application; on shutdown every
live subscription is released and the store is closed.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from contactgraph import __version__
from contactgraph.app_config import AppConfig
from contactgraph.auth import AuthService
from contactgraph.db import open_record_store
from contactgraph.eventbus import create_event_bus
from contactgraph.logging_config import configure_logging

from . import health
from .cors_config import install_cors
from .error_handlers import install_error_handlers
from .graphql.router import create_graphql_router

log = logging.getLogger("contactgraph.api")


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build a fully wired application.

    Raises:
        ValueError: if *config* does not validate.
    """
    config = config or AppConfig()
    errors = config.validate()
    if errors:
        raise ValueError("Invalid configuration: " + "; ".join(str(e) for e in errors))

    configure_logging(config)

    store = open_record_store(config.database.db_path)
    bus = create_event_bus(config.eventbus_config())
    auth = AuthService(config.auth_config(), store.identities)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await bus.connect()
        summary = config.summary()
        log.info("contactgraph API %s serving %s", __version__, summary["api"], extra=summary)
        try:
            yield
        finally:
            await bus.disconnect()
            store.close()
            log.info("contactgraph API stopped")

    app = FastAPI(
        title="contactgraph API",
        description="GraphQL contact directory with live contact notifications",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store
    app.state.auth = auth
    app.state.event_bus = bus

    install_cors(app, config.cors_origins())
    install_error_handlers(app)

    app.include_router(health.router)
    app.include_router(
        create_graphql_router(config.api.graphql_path, config.api.graphql_ide)
    )
    return app


def create_app_from_env() -> FastAPI:
    """uvicorn factory: defaults overlaid with ``CG_*`` environment variables."""
    config = AppConfig()
    config.apply_env_overrides()
    return create_app(config)
