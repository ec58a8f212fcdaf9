"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - DatabaseDefaults: endpoint defaults for a freshly started container
    - RetryDefaults: fixed-interval connection retry policy
    - ProvisioningDefaults: how to read the provisioning engine's output
    - AppDefaults: logging

Required Environment Variables (no default):
    DB_USER - role to connect as
    DB_HOST or PROVISIONING_OUTPUT - where the node is

Usage:
    from config.defaults import DatabaseDefaults, RetryDefaults

    # In Pydantic Field definitions:
    port: int = Field(default=DatabaseDefaults.PORT, ...)
"""


# =============================================================================
# DATABASE DEFAULTS
# =============================================================================

class DatabaseDefaults:
    """
    Endpoint defaults for a PostgreSQL container on first boot.

    The session connects to MAINTENANCE_DATABASE, which every PostgreSQL
    cluster has; the namespace (schema) is created inside it.
    """

    PORT = 5432
    MAINTENANCE_DATABASE = "postgres"
    NAMESPACE = "app"
    CONNECT_TIMEOUT_SECONDS = 5


# =============================================================================
# RETRY DEFAULTS
# =============================================================================

class RetryDefaults:
    """
    Fixed-interval retry policy for the connection acquirer.

    10 attempts x 10 s covers a cold container pull plus initdb on a small
    node. The interval is constant; no backoff.
    """

    MAX_ATTEMPTS = 10
    DELAY_SECONDS = 10.0


# =============================================================================
# PROVISIONING DEFAULTS
# =============================================================================

class ProvisioningDefaults:
    """
    Shape of the provisioning engine's JSON output (`terraform output -json`).
    """

    ADDRESS_KEY = "public_ip"


# =============================================================================
# APP DEFAULTS
# =============================================================================

class AppDefaults:
    """Logging defaults."""

    LOG_FORMAT = "console"
    DEBUG_LOGGING = False
