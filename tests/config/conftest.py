"""
Config test fixtures — clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME",
        "DB_NAMESPACE", "DB_CONNECT_TIMEOUT",
        "BOOTSTRAP_MAX_ATTEMPTS", "BOOTSTRAP_RETRY_DELAY_SECONDS",
        "PROVISIONING_OUTPUT", "PROVISIONING_ADDRESS_KEY",
        "SEED_FILE", "LOG_FORMAT", "DEBUG_LOGGING",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def provisioning_output(tmp_path):
    """Write a `terraform output -json` style file and return its path."""
    import json

    def _write(value="198.51.100.7", key="public_ip", flat=False):
        path = tmp_path / "outputs.json"
        entry = value if flat else {"sensitive": False, "type": "string", "value": value}
        path.write_text(json.dumps({key: entry, "instance_id": {"value": "i-0abc"}}))
        return str(path)

    return _write
