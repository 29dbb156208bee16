"""
Logging configuration for contactgraph.

The pipeline is:

    Application code
        │
        ▼
    logging.getLogger("contactgraph.*")
        │
        └──► StreamHandler (stderr)
                 ├── JSON (StructuredFormatter) in production
                 └── plain text in development

Usage::

    from contactgraph.logging_config import configure_logging

    configure_logging(app_config)  # Call once at startup
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Optional

from contactgraph.structured_logging import StructuredFormatter

if TYPE_CHECKING:
    from contactgraph.app_config import AppConfig


DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT_TEXT = "%(asctime)s [%(levelname)s] %(name)s : %(message)s"

ROOT_LOGGER = "contactgraph"

_CONFIGURED = False


def configure_logging(
    config: Optional["AppConfig"] = None,
    *,
    force_json: Optional[bool] = None,
    force_text: bool = False,
) -> logging.Logger:
    """Configure the ``contactgraph`` logger tree.

    Subsequent calls are no-ops until ``reset_logging()`` is called.

    Args:
        config: application config; ``core.debug``, ``core.production``
            and ``api.log_level`` are consulted.
        force_json: Explicitly enable JSON output (default: JSON when
            ``core.production`` is set or ``CG_LOG_FORMAT=json``).
        force_text: Force plain-text output (overrides JSON).

    Returns:
        The root ``contactgraph`` logger.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return logging.getLogger(ROOT_LOGGER)

    debug = bool(config and config.core.debug)
    production = bool(config and config.core.production)

    if debug:
        level = logging.DEBUG
    elif config is not None:
        level = logging.getLevelName(config.api.log_level.upper())
        if not isinstance(level, int):
            level = DEFAULT_LOG_LEVEL
    else:
        level = DEFAULT_LOG_LEVEL

    env_format = os.environ.get("CG_LOG_FORMAT", "").lower()
    if force_text:
        use_json = False
    elif force_json is not None:
        use_json = force_json
    elif env_format in ("json", "text"):
        use_json = env_format == "json"
    else:
        use_json = production

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()
    root.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    if use_json:
        console.setFormatter(StructuredFormatter(
            environment="production" if production else "development",
            include_caller=debug,
        ))
    else:
        console.setFormatter(logging.Formatter(LOG_FORMAT_TEXT))
    root.addHandler(console)

    _CONFIGURED = True

    root.info(
        "Logging configured",
        extra={
            "log_format": "json" if use_json else "text",
            "log_level": logging.getLevelName(level),
        },
    )
    return root


def reset_logging() -> None:
    """Reset the logging configuration (for testing)."""
    global _CONFIGURED
    _CONFIGURED = False
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
