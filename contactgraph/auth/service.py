# -*- coding: utf-8 -*-
"""
Core authentication service for contactgraph.

Handles:
- JWT token issuance and validation
- Bearer header parsing and per-request identity resolution
- Login against the configured credential
"""
from __future__ import annotations

import hmac
import logging
import time
from typing import Any, Optional

import jwt

from contactgraph.auth.models import AuthConfig, TokenClaims
from contactgraph.db.repositories import IdentityRecord, IdentityRepository
from contactgraph.errors import AuthError

log = logging.getLogger("contactgraph.auth")


def extract_bearer_token(header_value: Optional[str], scheme: str = "bearer") -> Optional[str]:
    """Return the credential after a ``<scheme> `` prefix, or None.

    The scheme is matched case-insensitively.  A header with another
    scheme, or no header at all, means anonymous access and yields None.
    """
    if not header_value:
        return None
    value = header_value.strip()
    prefix = f"{scheme} "
    if not value.lower().startswith(prefix.lower()):
        return None
    return value[len(prefix):].strip()


class AuthService:
    """Issues tokens, verifies them and resolves them into identities."""

    def __init__(self, config: AuthConfig, identities: IdentityRepository) -> None:
        self.config = config
        self.identities = identities

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, identity: IdentityRecord) -> str:
        """Sign a token carrying the identity's username and id.

        No ``exp`` claim is set: tokens remain valid until the signing
        secret changes.
        """
        payload: dict[str, Any] = {
            "username": identity.username,
            "id": identity.id,
            "iat": int(time.time()),
        }
        return jwt.encode(
            payload,
            self.config.jwt_secret,
            algorithm=self.config.jwt_algorithm,
        )

    def verify_token(self, token: str) -> TokenClaims:
        """Check the signature and decode the claims.

        Raises:
            AuthError: (INVALID_TOKEN) on a bad signature, malformed
                token, or missing claims.
        """
        if not token:
            raise AuthError.invalid_token("empty token")
        try:
            payload = jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[self.config.jwt_algorithm],
            )
        except jwt.InvalidTokenError as e:
            log.info("Token verification failed: %s", e)
            raise AuthError.invalid_token(str(e)) from e

        username = payload.get("username")
        identity_id = payload.get("id")
        if not isinstance(username, str) or not isinstance(identity_id, str):
            raise AuthError.invalid_token("missing username or id claim")
        return TokenClaims(username=username, id=identity_id)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def authenticate_request(self, header_value: Optional[str]) -> IdentityRecord | None:
        """Resolve an Authorization header into a hydrated identity.

        Returns None for anonymous requests (no header, other scheme).
        A token that verifies but names an identity that no longer
        exists also resolves to None.

        Raises:
            AuthError: (INVALID_TOKEN) when a bearer token is present
                but does not verify.
        """
        token = extract_bearer_token(header_value, self.config.bearer_scheme)
        if token is None:
            return None

        claims = self.verify_token(token)
        identity = self.identities.find_by_id(claims.id)
        if identity is None:
            log.warning(
                "Token for %s refers to unknown identity %s",
                claims.username, claims.id,
            )
        return identity

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def check_credentials(self, password: str) -> bool:
        """Compare *password* against the configured login credential."""
        return hmac.compare_digest(
            password.encode("utf-8"),
            self.config.fixed_password.encode("utf-8"),
        )

    def login(self, username: str, password: str) -> str:
        """Authenticate and return a freshly signed token.

        Raises:
            AuthError: (INVALID_CREDENTIALS) for an unknown username or
                a wrong password; the two cases are indistinguishable.
        """
        identity = self.identities.find_one(username)
        if identity is None or not self.check_credentials(password):
            log.info("Failed login for %r", username)
            raise AuthError.invalid_credentials()

        log.info("Login succeeded", extra={"identity": identity.username})
        return self.issue_token(identity)
