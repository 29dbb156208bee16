"""
CORS (Cross-Origin Resource Sharing) configuration for the API.

Allowed origins come from ``AppConfig.api.cors_origins``
(``CG_CORS_ORIGINS``).  Credentials are never allowed together with
the ``*`` wildcard.

Usage::

    from contactgraph.api.cors_config import install_cors
    install_cors(app, ["https://example.org"])
"""
from __future__ import annotations

import logging
from typing import Any

from starlette.middleware.cors import CORSMiddleware

log = logging.getLogger("contactgraph.api.cors")


def install_cors(
    app: Any,
    origins: list[str] | None = None,
    *,
    credentials: bool = False,
    max_age: int = 600,
) -> None:
    """Install CORS middleware on a FastAPI/Starlette app."""
    origins = origins or ["*"]

    if "*" in origins and credentials:
        log.warning(
            "CORS: Cannot use allow_credentials=True with allow_origins=['*']. "
            "Disabling credentials. Set CG_CORS_ORIGINS to specific origins."
        )
        credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=max_age,
    )

    log.debug(
        "CORS middleware installed: origins=%s, credentials=%s, max_age=%ds",
        origins[:3] if len(origins) > 3 else origins,
        credentials,
        max_age,
    )
