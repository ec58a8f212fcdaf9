"""
Root conftest.py — sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a database server. Database access goes through tests.fakes.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'config', 'infrastructure', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    Some modules read env vars at import time. We provide safe defaults
    so imports succeed without a provisioned node.
    """
    defaults = {
        "DB_HOST": "localhost",
        "DB_USER": "postgres",
        "DB_NAMESPACE": "app",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture
def fake_db():
    """Empty in-memory PostgreSQL stand-in."""
    from tests.fakes import FakeDatabase
    return FakeDatabase()


@pytest.fixture
def endpoint():
    """Endpoint descriptor pointing at a documentation address."""
    from config.database_config import EndpointConfig
    return EndpointConfig(
        host="203.0.113.10",
        user="postgres",
        password="s3cret-pw",
        namespace="app",
    )


@pytest.fixture
def no_sleep():
    """Records requested delays instead of sleeping."""
    calls = []

    def _sleep(seconds):
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep
