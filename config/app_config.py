"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - EndpointConfig (where the database node is and how to log in)
    - RetryConfig (fixed-interval connection retry)
    - SeedDataset (collection spec plus seed records)

Exports:
    BootstrapConfig: Immutable configuration for one bootstrap run

Dependencies:
    pydantic: BaseModel for configuration validation
    config.database_config: EndpointConfig
    config.retry_config: RetryConfig
    config.seed_data: default_seed_dataset, load_seed_file
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
    The composed object is frozen and handed to the run controller at
    construction; nothing mutates it during a run.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.models import SeedDataset
from exceptions import ConfigurationError
from .database_config import EndpointConfig
from .retry_config import RetryConfig
from .seed_data import default_seed_dataset, load_seed_file
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class BootstrapConfig(BaseModel):
    """
    Bootstrap configuration - composition of domain configs.
    """

    model_config = ConfigDict(frozen=True)

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    log_format: str = Field(
        default=AppDefaults.LOG_FORMAT,
        description="Console output format: 'console' (human-readable) or 'json'"
    )

    debug_logging: bool = Field(
        default=AppDefaults.DEBUG_LOGGING,
        description="Lower the log level to DEBUG"
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    endpoint: EndpointConfig = Field(
        ...,
        description="Database endpoint descriptor"
    )

    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Connection retry policy"
    )

    seed: SeedDataset = Field(
        default_factory=default_seed_dataset,
        description="Collection spec and seed records"
    )

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError(f"log_format must be 'console' or 'json', got '{v}'")
        return v

    # ========================================================================
    # Convenience Properties
    # ========================================================================

    @property
    def namespace(self) -> str:
        return self.endpoint.namespace

    @property
    def collection_name(self) -> str:
        return self.seed.collection.name

    def debug_dict(self) -> dict:
        """Sanitized view for logging (password masked)."""
        return {
            "log_format": self.log_format,
            "debug_logging": self.debug_logging,
            "endpoint": self.endpoint.debug_dict(),
            "retry": {
                "max_attempts": self.retry.max_attempts,
                "delay_seconds": self.retry.delay_seconds,
            },
            "seed": {
                "collection": self.seed.collection.name,
                "natural_key": self.seed.collection.natural_key,
                "fields": self.seed.collection.field_names,
                "record_count": len(self.seed.records),
            },
        }

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def from_environment(
        cls,
        provisioning_output: Optional[str] = None,
        seed_file: Optional[str] = None
    ):
        """
        Load all configs from environment.

        Args:
            provisioning_output: Path overriding PROVISIONING_OUTPUT
            seed_file: Path overriding SEED_FILE

        Raises:
            ConfigurationError: any domain config missing or invalid
        """
        seed_path = seed_file or os.environ.get("SEED_FILE")
        endpoint = EndpointConfig.from_environment(provisioning_output=provisioning_output)
        retry = RetryConfig.from_environment()
        seed = load_seed_file(seed_path) if seed_path else default_seed_dataset()

        try:
            return cls(
                log_format=os.environ.get("LOG_FORMAT", AppDefaults.LOG_FORMAT),
                debug_logging=os.environ.get(
                    "DEBUG_LOGGING", str(AppDefaults.DEBUG_LOGGING).lower()
                ).lower() == "true",
                endpoint=endpoint,
                retry=retry,
                seed=seed,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid bootstrap configuration: {e}") from e
