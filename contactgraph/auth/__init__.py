# -*- coding: utf-8 -*-
"""
contactgraph Authentication Package.

Provides:
- JWT token issuance and validation
- Bearer header parsing
- Login against the configured credential
"""
from contactgraph.auth.models import AuthConfig, TokenClaims
from contactgraph.auth.service import AuthService, extract_bearer_token

__all__ = ["AuthService", "AuthConfig", "TokenClaims", "extract_bearer_token"]
