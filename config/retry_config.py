"""
Connection Retry Configuration.

Fixed-interval retry policy for the connection acquirer: a bounded number
of attempts with a constant delay between them. The target's startup
latency is roughly constant, so the delay never grows.

Exports:
    RetryConfig: Retry policy
"""

import os

from pydantic import BaseModel, ConfigDict, Field

from exceptions import ConfigurationError
from .defaults import RetryDefaults


class RetryConfig(BaseModel):
    """Bounded, fixed-interval retry policy."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=RetryDefaults.MAX_ATTEMPTS,
        ge=1,
        description="Total connection attempts before giving up"
    )

    delay_seconds: float = Field(
        default=RetryDefaults.DELAY_SECONDS,
        ge=0,
        description="Constant wait between two attempts"
    )

    @property
    def worst_case_wait_seconds(self) -> float:
        """Time spent sleeping if every attempt fails (excludes connect timeouts)."""
        return self.delay_seconds * (self.max_attempts - 1)

    @classmethod
    def from_environment(cls):
        """Load from BOOTSTRAP_MAX_ATTEMPTS / BOOTSTRAP_RETRY_DELAY_SECONDS."""
        try:
            return cls(
                max_attempts=int(os.environ.get(
                    "BOOTSTRAP_MAX_ATTEMPTS", str(RetryDefaults.MAX_ATTEMPTS)
                )),
                delay_seconds=float(os.environ.get(
                    "BOOTSTRAP_RETRY_DELAY_SECONDS", str(RetryDefaults.DELAY_SECONDS)
                )),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid retry configuration: {e}") from e
