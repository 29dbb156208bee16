"""
Typed Application Configuration for contactgraph.

Single source of truth for every setting the server reads at startup.
Component configs (``AuthConfig``, ``EventBusConfig``) are built from
here and handed to the components explicitly; nothing below the API
layer reads the environment on its own.

Features:
  - Typed dataclass sections with defaults
  - ``from_dict()`` / ``to_dict()`` for flat-dict I/O
  - ``apply_env_overrides()`` overlay for CG_* environment variables
  - Built-in validation with descriptive errors

Usage::

    from contactgraph.app_config import AppConfig

    cfg = AppConfig()
    cfg.apply_env_overrides()

    errors = cfg.validate()
    if errors:
        raise ValueError(errors)
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Tuple

from contactgraph.auth.models import AuthConfig
from contactgraph.eventbus.base import EventBusConfig

log = logging.getLogger("contactgraph.app_config")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------

@dataclass
class CoreConfig:
    """Core / general settings."""
    debug: bool = False
    production: bool = False


@dataclass
class DatabaseConfig:
    """Record store location. ``:memory:`` keeps everything in-process."""
    db_path: str = "contactgraph.db"


@dataclass
class ApiConfig:
    """HTTP / GraphQL server settings."""
    host: str = "127.0.0.1"
    port: int = 4000
    graphql_path: str = "/graphql"
    graphql_ide: bool = True
    log_level: str = "INFO"
    cors_origins: str = "*"


@dataclass
class AuthSettings:
    """Token signing and the accepted login credential."""
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    fixed_password: str = "1234"
    bearer_scheme: str = "bearer"


@dataclass
class EventBusSettings:
    """Event bus settings. ``max_queue_size`` 0 means unbounded."""
    channel_prefix: str = "cg"
    max_queue_size: int = 0


# ---------------------------------------------------------------------------
# Field-key mappings  (section_attr, field_attr) <-> flat key
# ---------------------------------------------------------------------------

_KEY_TO_FIELD: Dict[str, Tuple[str, str]] = {
    "_debug": ("core", "debug"),
    "_production": ("core", "production"),

    "_dbpath": ("database", "db_path"),

    "_apihost": ("api", "host"),
    "_apiport": ("api", "port"),
    "_graphqlpath": ("api", "graphql_path"),
    "_graphqlide": ("api", "graphql_ide"),
    "_loglevel": ("api", "log_level"),
    "_corsorigins": ("api", "cors_origins"),

    "_jwtsecret": ("auth", "jwt_secret"),
    "_jwtalgorithm": ("auth", "jwt_algorithm"),
    "_fixedpassword": ("auth", "fixed_password"),
    "_bearerscheme": ("auth", "bearer_scheme"),

    "_eventbus_prefix": ("eventbus", "channel_prefix"),
    "_eventbus_max_queue": ("eventbus", "max_queue_size"),
}

_FIELD_TO_KEY: Dict[Tuple[str, str], str] = {
    sf: k for k, sf in _KEY_TO_FIELD.items()
}

_ENV_TO_KEY: Dict[str, str] = {
    "CG_DEBUG": "_debug",
    "CG_PRODUCTION": "_production",
    "CG_DB_PATH": "_dbpath",
    "CG_API_HOST": "_apihost",
    "CG_API_PORT": "_apiport",
    "CG_LOG_LEVEL": "_loglevel",
    "CG_CORS_ORIGINS": "_corsorigins",
    "CG_JWT_SECRET": "_jwtsecret",
    "CG_FIXED_PASSWORD": "_fixedpassword",
    "CG_EVENTBUS_PREFIX": "_eventbus_prefix",
    "CG_EVENTBUS_MAX_QUEUE": "_eventbus_max_queue",
}


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

class ConfigError:
    """Single validation failure."""

    __slots__ = ("field", "message", "value")

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value

    def __repr__(self) -> str:
        return f"ConfigError({self.field!r}, {self.message!r})"

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


# ---------------------------------------------------------------------------
# AppConfig: main typed configuration
# ---------------------------------------------------------------------------

@dataclass
class AppConfig:
    """Typed contactgraph application configuration."""

    core: CoreConfig = field(default_factory=CoreConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthSettings = field(default_factory=AuthSettings)
    eventbus: EventBusSettings = field(default_factory=EventBusSettings)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppConfig":
        """Build an ``AppConfig`` from a flat dict. Unknown keys are ignored."""
        cfg = cls()
        cfg.merge(d)
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        """Export to a flat dict keyed like ``from_dict`` expects."""
        out: Dict[str, Any] = {}
        for (section_attr, field_attr), key in _FIELD_TO_KEY.items():
            out[key] = getattr(getattr(self, section_attr), field_attr)
        return out

    def merge(self, overrides: Dict[str, Any]) -> None:
        """Apply a flat dict of overrides."""
        for key, value in overrides.items():
            mapping = _KEY_TO_FIELD.get(key)
            if mapping is None:
                log.debug("Ignoring unknown config key %s", key)
                continue
            section_attr, field_attr = mapping
            _set_field(getattr(self, section_attr), field_attr, value)

    def apply_env_overrides(self) -> List[str]:
        """Read ``CG_*`` environment variables and override matching fields.

        Returns a list of variables that were applied (for logging).
        """
        overridden: List[str] = []

        for env_var, key in _ENV_TO_KEY.items():
            raw = os.environ.get(env_var)
            if raw is None:
                continue
            section_attr, field_attr = _KEY_TO_FIELD[key]
            _set_field(getattr(self, section_attr), field_attr, raw)
            overridden.append(env_var)

        if overridden:
            log.info(
                "Applied %d env-var override(s): %s",
                len(overridden),
                ", ".join(overridden),
            )
        return overridden

    def validate(self) -> List[ConfigError]:
        """Validate all fields. Returns a list of errors (empty = valid)."""
        errors: List[ConfigError] = []

        if self.api.port < 1 or self.api.port > 65535:
            errors.append(ConfigError("_apiport", "Must be 1-65535", self.api.port))
        if self.api.log_level.upper() not in LogLevel.__members__:
            errors.append(ConfigError("_loglevel", "Invalid log level", self.api.log_level))
        if not self.api.graphql_path.startswith("/"):
            errors.append(ConfigError(
                "_graphqlpath", "Must start with '/'", self.api.graphql_path,
            ))
        if not self.database.db_path:
            errors.append(ConfigError("_dbpath", "Database path is required"))
        if not self.auth.fixed_password:
            errors.append(ConfigError("_fixedpassword", "Must not be empty"))
        if not self.auth.bearer_scheme.strip():
            errors.append(ConfigError("_bearerscheme", "Must not be empty"))
        if self.eventbus.max_queue_size < 0:
            errors.append(ConfigError(
                "_eventbus_max_queue", "Must be >= 0", self.eventbus.max_queue_size,
            ))

        return errors

    # ------------------------------------------------------------------
    # Component configs
    # ------------------------------------------------------------------

    def auth_config(self) -> AuthConfig:
        """Build the explicit ``AuthConfig`` handed to ``AuthService``.

        An empty secret is replaced by a random one for this process, so
        every token issued before a restart stops verifying afterwards.
        """
        secret = self.auth.jwt_secret
        if not secret:
            log.warning(
                "No JWT secret configured (CG_JWT_SECRET); using a random "
                "per-process secret"
            )
            secret = secrets.token_hex(32)
            self.auth.jwt_secret = secret
        return AuthConfig(
            jwt_secret=secret,
            jwt_algorithm=self.auth.jwt_algorithm,
            fixed_password=self.auth.fixed_password,
            bearer_scheme=self.auth.bearer_scheme,
        )

    def eventbus_config(self) -> EventBusConfig:
        return EventBusConfig(
            channel_prefix=self.eventbus.channel_prefix,
            max_queue_size=self.eventbus.max_queue_size,
        )

    def cors_origins(self) -> List[str]:
        value = self.api.cors_origins.strip()
        if value == "*":
            return ["*"]
        return [v.strip() for v in value.split(",") if v.strip()]

    def summary(self) -> Dict[str, Any]:
        """Return a concise overview suitable for logging."""
        return {
            "debug": self.core.debug,
            "production": self.core.production,
            "db_path": self.database.db_path,
            "api": f"{self.api.host}:{self.api.port}{self.api.graphql_path}",
            "jwt_secret_set": bool(self.auth.jwt_secret),
            "eventbus_max_queue": self.eventbus.max_queue_size,
        }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _set_field(section: Any, field_attr: str, value: Any) -> None:
    """Coerce *value* to the target field's type and set it."""
    target_type: type = str
    for f in fields(section):
        if f.name == field_attr:
            if f.type in (bool, "bool"):
                target_type = bool
            elif f.type in (int, "int"):
                target_type = int
            elif f.type in (float, "float"):
                target_type = float
            break

    if isinstance(value, str) and target_type is not str:
        value = _coerce(value, target_type)

    if target_type is int and isinstance(value, float):
        value = int(value)

    setattr(section, field_attr, value)


def _coerce(raw: str, target: type) -> Any:
    """Best-effort coercion from string to target type."""
    if target is bool:
        return raw.lower() in ("1", "true", "yes", "on")
    if target is int:
        try:
            return int(raw)
        except (ValueError, TypeError):
            return 0
    if target is float:
        try:
            return float(raw)
        except (ValueError, TypeError):
            return 0.0
    return raw
