# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration - package exports
# PURPOSE: Configuration package exports
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: All config classes and seed data helpers
# PYDANTIC_MODELS: BootstrapConfig, EndpointConfig, RetryConfig
# DEPENDENCIES: domain config modules
# ENTRY_POINTS: from config import BootstrapConfig
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

This package provides bootstrap configuration using a composition-based approach.

Structure:
    config/
    ├── __init__.py              # This file - exports
    ├── app_config.py            # Main config (composes domain configs)
    ├── database_config.py       # Endpoint descriptor, provisioning output
    ├── retry_config.py          # Fixed-interval connection retry
    ├── seed_data.py             # Default collection and seed records
    ├── env_validation.py        # Pre-run environment checks
    └── defaults.py              # Default values

Usage:
    from config import BootstrapConfig
    config = BootstrapConfig.from_environment(provisioning_output="outputs.json")
    info = config.debug_dict()  # Passwords masked
"""

from .database_config import EndpointConfig, read_provisioning_address
from .retry_config import RetryConfig
from .seed_data import (
    USERS_COLLECTION,
    USERS_SEED_RECORDS,
    default_seed_dataset,
    load_seed_file,
)
from .app_config import BootstrapConfig


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    # Main config
    'BootstrapConfig',

    # Endpoint
    'EndpointConfig',
    'read_provisioning_address',

    # Retry
    'RetryConfig',

    # Seed data
    'USERS_COLLECTION',
    'USERS_SEED_RECORDS',
    'default_seed_dataset',
    'load_seed_file',
]
