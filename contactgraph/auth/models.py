# -*- coding: utf-8 -*-
"""
Data models for the contactgraph auth system.

``AuthConfig`` is built by ``AppConfig.auth_config()`` and passed to
``AuthService`` at construction; the service never reads the
environment itself.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AuthConfig:
    """Token signing and login settings.

    Attributes:
        jwt_secret: HMAC secret used to sign and verify tokens. Tokens
            carry no expiry and stay valid until this secret changes.
        jwt_algorithm: PyJWT algorithm name.
        fixed_password: The single password ``login`` accepts.
        bearer_scheme: Authorization header scheme, matched
            case-insensitively.
    """
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    fixed_password: str = "1234"
    bearer_scheme: str = "bearer"


@dataclass(frozen=True)
class TokenClaims:
    """The identity facts a token vouches for."""
    username: str
    id: str
