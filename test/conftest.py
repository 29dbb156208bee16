import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from contactgraph.auth import AuthConfig, AuthService
from contactgraph.db import open_record_store
from contactgraph.eventbus import InMemoryEventBus
from contactgraph.logging_config import reset_logging

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep CG_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CG_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def store():
    s = open_record_store(":memory:")
    yield s
    s.close()


@pytest.fixture
def auth_config():
    return AuthConfig(jwt_secret=TEST_SECRET)


@pytest.fixture
def auth(store, auth_config):
    return AuthService(auth_config, store.identities)


@pytest.fixture
def bus():
    return InMemoryEventBus()
