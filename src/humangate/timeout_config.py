"""Timeout configuration for the verification call.

Every outbound verification request is bounded; there is no code path
that waits without a timeout.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
import httpx

from humangate.config.defaults import (
    ENV_CONNECT_TIMEOUT,
    ENV_READ_TIMEOUT,
    VERIFY_CONNECT_TIMEOUT_SECONDS,
    VERIFY_READ_TIMEOUT_SECONDS,
)
from humangate.errors import ConfigurationInvalid


@dataclass
class TimeoutConfig:
    """Configuration for verification request timeouts."""

    # Timeouts in seconds
    connect_timeout: float = VERIFY_CONNECT_TIMEOUT_SECONDS
    read_timeout: float = VERIFY_READ_TIMEOUT_SECONDS

    def __post_init__(self):
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is None or value <= 0:
                raise ConfigurationInvalid(
                    f"{name} must be a positive number of seconds, got {value!r}"
                )

    @classmethod
    def from_env(cls) -> "TimeoutConfig":
        """Create config from environment variables."""
        try:
            return cls(
                connect_timeout=float(os.environ.get(
                    ENV_CONNECT_TIMEOUT, str(VERIFY_CONNECT_TIMEOUT_SECONDS))),
                read_timeout=float(os.environ.get(
                    ENV_READ_TIMEOUT, str(VERIFY_READ_TIMEOUT_SECONDS))),
            )
        except ValueError as e:
            raise ConfigurationInvalid(f"Invalid timeout value: {e}") from e

    def as_httpx(self) -> httpx.Timeout:
        """Build the httpx timeout; write and pool waits share the read bound."""
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.read_timeout,
            pool=self.read_timeout,
        )

