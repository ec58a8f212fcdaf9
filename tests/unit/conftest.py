"""
Unit test fixtures — factory-built models and wired components.
"""

import pytest

from tests.factories.model_factories import (
    make_collection_spec,
    make_seed_dataset,
)


@pytest.fixture
def collection_data():
    """Return randomized collection spec data dict."""
    return make_collection_spec()


@pytest.fixture
def seed_dataset():
    """Return a randomized, validated five-record dataset."""
    return make_seed_dataset(record_count=5)


@pytest.fixture
def users_dataset():
    """The built-in users dataset."""
    from config.seed_data import default_seed_dataset
    return default_seed_dataset()


@pytest.fixture
def open_conn(fake_db):
    """A connection to the fake database."""
    return fake_db.connect("host=fake")


@pytest.fixture
def bootstrap_config(endpoint, users_dataset):
    """BootstrapConfig with a fast retry policy and the users dataset."""
    from config import BootstrapConfig, RetryConfig
    return BootstrapConfig(
        endpoint=endpoint,
        retry=RetryConfig(max_attempts=3, delay_seconds=0.5),
        seed=users_dataset,
    )


@pytest.fixture
def make_controller(fake_db, bootstrap_config, no_sleep):
    """Factory: controller wired to the fake database."""
    from infrastructure.connection import ConnectionAcquirer
    from services.run_controller import BootstrapRunController

    def _make(config=None, run_id=None):
        config = config or bootstrap_config
        acquirer = ConnectionAcquirer.from_config(
            config, connect=fake_db.connect, sleep=no_sleep
        )
        return BootstrapRunController(config, acquirer=acquirer, run_id=run_id)

    return _make
