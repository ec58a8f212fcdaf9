"""
Database Endpoint Configuration.

Provides the Endpoint Descriptor: everything needed to reach the database
container on the provisioned node. Built once at run start and frozen;
no component updates it.

The address comes either from DB_HOST or from the provisioning engine's
JSON output (PROVISIONING_OUTPUT), whose shape is that of
`terraform output -json`:

    {
        "public_ip": {"sensitive": false, "type": "string", "value": "203.0.113.10"}
    }

Exports:
    EndpointConfig: Frozen endpoint descriptor
    read_provisioning_address: Extract the node address from provisioning output
"""

import json
import os
from pathlib import Path
from typing import Optional

from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.models.collection import IDENTIFIER_PATTERN
from exceptions import ConfigurationError
from .defaults import DatabaseDefaults, ProvisioningDefaults


# ============================================================================
# PROVISIONING OUTPUT
# ============================================================================

def read_provisioning_address(
    path: str,
    address_key: str = ProvisioningDefaults.ADDRESS_KEY
) -> str:
    """
    Read the node address from the provisioning engine's JSON output.

    Accepts both the `terraform output -json` shape ({"key": {"value": ...}})
    and a flat mapping ({"key": "..."}).

    Raises:
        ConfigurationError: file missing, unreadable, not UTF-8 JSON, or key absent/empty
    """
    output_path = Path(path)
    if not output_path.is_file():
        raise ConfigurationError(f"Provisioning output not found: {output_path}")

    try:
        outputs = json.loads(output_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Provisioning output {output_path} could not be read: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Provisioning output {output_path} is not valid JSON: {e}") from e

    if not isinstance(outputs, dict) or address_key not in outputs:
        raise ConfigurationError(
            f"Provisioning output {output_path} has no '{address_key}' entry"
        )

    entry = outputs[address_key]
    address = entry.get("value") if isinstance(entry, dict) else entry
    if not isinstance(address, str) or not address.strip():
        raise ConfigurationError(
            f"Provisioning output '{address_key}' does not hold an address: {entry!r}"
        )
    return address.strip()


# ============================================================================
# ENDPOINT CONFIGURATION
# ============================================================================

class EndpointConfig(BaseModel):
    """
    How to reach the target database: address, port, credentials, namespace.

    Immutable for the lifetime of one bootstrap run.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(
        ...,
        min_length=1,
        description="Address of the database node (IP or DNS name)",
        examples=["203.0.113.10"]
    )

    port: int = Field(
        default=DatabaseDefaults.PORT,
        ge=1,
        le=65535,
        description="PostgreSQL server port number"
    )

    user: str = Field(
        ...,
        min_length=1,
        description="Role to connect as (the principal)"
    )

    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="Role password (the secret). Never logged."
    )

    database: str = Field(
        default=DatabaseDefaults.MAINTENANCE_DATABASE,
        description="Database the session connects to"
    )

    namespace: str = Field(
        default=DatabaseDefaults.NAMESPACE,
        description="Schema created and populated by the bootstrap"
    )

    connect_timeout_seconds: int = Field(
        default=DatabaseDefaults.CONNECT_TIMEOUT_SECONDS,
        ge=1,
        description="Timeout of a single connection attempt"
    )

    @field_validator('namespace')
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if not IDENTIFIER_PATTERN.match(v):
            raise ValueError(f"Namespace '{v}' is not a lowercase PostgreSQL identifier")
        return v

    @property
    def conninfo(self) -> str:
        """
        libpq connection string for psycopg.connect().

        Contains the password; do not log it, use debug_dict() instead.
        """
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "connect_timeout": self.connect_timeout_seconds,
            "application_name": "db-node-bootstrap",
        }
        if self.password:
            params["password"] = self.password
        return make_conninfo(**params)

    @property
    def display_name(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

    def debug_dict(self) -> dict:
        """Debug output with masked password."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": "***MASKED***" if self.password else None,
            "database": self.database,
            "namespace": self.namespace,
            "connect_timeout_seconds": self.connect_timeout_seconds,
        }

    @classmethod
    def from_environment(cls, provisioning_output: Optional[str] = None):
        """
        Load from environment variables.

        The address is DB_HOST when set; otherwise it is read from the
        provisioning output file (argument, or PROVISIONING_OUTPUT).

        Raises:
            ConfigurationError: required values missing or invalid
        """
        address_key = os.environ.get("PROVISIONING_ADDRESS_KEY", ProvisioningDefaults.ADDRESS_KEY)
        if provisioning_output:
            host = read_provisioning_address(provisioning_output, address_key)
        else:
            # DB_HOST wins over an environment-level output file
            host = os.environ.get("DB_HOST")
            if not host and os.environ.get("PROVISIONING_OUTPUT"):
                host = read_provisioning_address(os.environ["PROVISIONING_OUTPUT"], address_key)
        if not host:
            raise ConfigurationError("DB_HOST is not set and no provisioning output was given")

        user = os.environ.get("DB_USER")
        if not user:
            raise ConfigurationError("DB_USER is required")

        try:
            return cls(
                host=host,
                port=int(os.environ.get("DB_PORT", str(DatabaseDefaults.PORT))),
                user=user,
                password=os.environ.get("DB_PASSWORD") or None,
                database=os.environ.get("DB_NAME", DatabaseDefaults.MAINTENANCE_DATABASE),
                namespace=os.environ.get("DB_NAMESPACE", DatabaseDefaults.NAMESPACE),
                connect_timeout_seconds=int(os.environ.get(
                    "DB_CONNECT_TIMEOUT", str(DatabaseDefaults.CONNECT_TIMEOUT_SECONDS)
                )),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid endpoint configuration: {e}") from e
