"""
Endpoint descriptor tests — environment loading and provisioning output.
"""

import json

import pytest
from pydantic import ValidationError

from config.database_config import EndpointConfig, read_provisioning_address
from exceptions import ConfigurationError


class TestFromEnvironment:

    def test_defaults(self, clean_env):
        clean_env.setenv("DB_HOST", "203.0.113.10")
        clean_env.setenv("DB_USER", "postgres")

        endpoint = EndpointConfig.from_environment()

        assert endpoint.host == "203.0.113.10"
        assert endpoint.port == 5432
        assert endpoint.database == "postgres"
        assert endpoint.namespace == "app"
        assert endpoint.connect_timeout_seconds == 5
        assert endpoint.password is None

    def test_all_values_from_environment(self, clean_env):
        for key, value in {
            "DB_HOST": "db.example.internal", "DB_PORT": "6543", "DB_USER": "admin",
            "DB_PASSWORD": "pw", "DB_NAME": "appdb", "DB_NAMESPACE": "tenant_1",
            "DB_CONNECT_TIMEOUT": "12",
        }.items():
            clean_env.setenv(key, value)

        endpoint = EndpointConfig.from_environment()

        assert endpoint.port == 6543
        assert endpoint.database == "appdb"
        assert endpoint.namespace == "tenant_1"
        assert endpoint.connect_timeout_seconds == 12
        assert endpoint.display_name == "admin@db.example.internal:6543/appdb"

    def test_missing_user_is_configuration_error(self, clean_env):
        clean_env.setenv("DB_HOST", "203.0.113.10")
        with pytest.raises(ConfigurationError, match="DB_USER"):
            EndpointConfig.from_environment()

    def test_missing_address_is_configuration_error(self, clean_env):
        clean_env.setenv("DB_USER", "postgres")
        with pytest.raises(ConfigurationError, match="DB_HOST"):
            EndpointConfig.from_environment()

    @pytest.mark.parametrize("var,value", [
        ("DB_PORT", "abc"), ("DB_PORT", "70000"), ("DB_NAMESPACE", "Bad-Name"),
        ("DB_CONNECT_TIMEOUT", "0"),
    ])
    def test_invalid_values_are_configuration_errors(self, clean_env, var, value):
        clean_env.setenv("DB_HOST", "203.0.113.10")
        clean_env.setenv("DB_USER", "postgres")
        clean_env.setenv(var, value)
        with pytest.raises(ConfigurationError):
            EndpointConfig.from_environment()


class TestProvisioningOutput:

    def test_terraform_shape(self, provisioning_output):
        assert read_provisioning_address(provisioning_output()) == "198.51.100.7"

    def test_flat_shape(self, provisioning_output):
        assert read_provisioning_address(provisioning_output(flat=True)) == "198.51.100.7"

    def test_custom_key(self, provisioning_output):
        path = provisioning_output(key="db_ip")
        assert read_provisioning_address(path, "db_ip") == "198.51.100.7"

    def test_missing_key(self, provisioning_output):
        with pytest.raises(ConfigurationError, match="no 'public_ip' entry"):
            read_provisioning_address(provisioning_output(key="private_ip"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            read_provisioning_address(str(tmp_path / "absent.json"))

    def test_not_json(self, tmp_path):
        path = tmp_path / "outputs.json"
        path.write_text("public_ip = 198.51.100.7")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            read_provisioning_address(str(path))

    def test_invalid_utf8_is_configuration_error(self, tmp_path):
        path = tmp_path / "outputs.json"
        path.write_bytes(b'{"public_ip": "\xff"}')
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            read_provisioning_address(str(path))

    def test_unreadable_file_is_configuration_error(self, tmp_path, monkeypatch):
        path = tmp_path / "outputs.json"
        path.write_text("{}")

        def _denied(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(type(path), "read_text", _denied)
        with pytest.raises(ConfigurationError, match="could not be read"):
            read_provisioning_address(str(path))

    def test_empty_value(self, tmp_path):
        path = tmp_path / "outputs.json"
        path.write_text(json.dumps({"public_ip": {"value": ""}}))
        with pytest.raises(ConfigurationError, match="does not hold an address"):
            read_provisioning_address(str(path))

    def test_env_output_used_when_no_host(self, clean_env, provisioning_output):
        clean_env.setenv("DB_USER", "postgres")
        clean_env.setenv("PROVISIONING_OUTPUT", provisioning_output())
        assert EndpointConfig.from_environment().host == "198.51.100.7"

    def test_db_host_wins_over_env_output(self, clean_env, provisioning_output):
        clean_env.setenv("DB_USER", "postgres")
        clean_env.setenv("DB_HOST", "203.0.113.10")
        clean_env.setenv("PROVISIONING_OUTPUT", provisioning_output())
        assert EndpointConfig.from_environment().host == "203.0.113.10"

    def test_explicit_output_wins_over_db_host(self, clean_env, provisioning_output):
        clean_env.setenv("DB_USER", "postgres")
        clean_env.setenv("DB_HOST", "203.0.113.10")
        endpoint = EndpointConfig.from_environment(provisioning_output=provisioning_output())
        assert endpoint.host == "198.51.100.7"

    def test_address_key_from_environment(self, clean_env, provisioning_output):
        clean_env.setenv("DB_USER", "postgres")
        clean_env.setenv("PROVISIONING_ADDRESS_KEY", "db_ip")
        clean_env.setenv("PROVISIONING_OUTPUT", provisioning_output(key="db_ip"))
        assert EndpointConfig.from_environment().host == "198.51.100.7"


class TestSecrets:

    def test_password_not_in_repr(self, endpoint):
        assert "s3cret-pw" not in repr(endpoint)

    def test_password_masked_in_debug_dict(self, endpoint):
        assert endpoint.debug_dict()["password"] == "***MASKED***"

    def test_password_in_conninfo(self, endpoint):
        assert "password=s3cret-pw" in endpoint.conninfo

    def test_no_password_key_without_password(self, endpoint):
        no_pw = endpoint.model_copy(update={"password": None})
        assert "password" not in no_pw.conninfo

    def test_frozen(self, endpoint):
        with pytest.raises(ValidationError):
            endpoint.host = "elsewhere"
