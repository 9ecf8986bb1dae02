"""Gate configuration.

GateConfig carries the key pair, endpoint, storage paths and timeouts.
Invalid keys never raise here; they leave the gate "not ready" and the
engine decides the pass-through policy from ``fail_open_when_not_ready``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from humangate.config.defaults import (
    AUDIT_LEVELS,
    AUDIT_LOG_FILENAME,
    DEFAULT_AUDIT_LEVEL,
    ENV_AUDIT_LEVEL,
    ENV_AUDIT_PATH,
    ENV_DB_PATH,
    ENV_FAIL_OPEN,
    ENV_SECRET_KEY,
    ENV_SITE_KEY,
    ENV_VERIFY_URL,
    LEDGER_DB_FILENAME,
    SITE_VERIFY_URL,
    STATE_DIRNAME,
)
from humangate.errors import ConfigurationInvalid
from humangate.key_validator import KeyValidationResult, validate_keys
from humangate.timeout_config import TimeoutConfig

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class GateConfig:
    """Gate configuration options."""
    site_key: str = ""
    secret_key: str = field(default="", repr=False)
    verify_url: str = SITE_VERIFY_URL
    db_path: Path = field(default_factory=lambda: Path(STATE_DIRNAME) / LEDGER_DB_FILENAME)
    audit_path: Optional[Path] = field(
        default_factory=lambda: Path(STATE_DIRNAME) / AUDIT_LOG_FILENAME
    )
    audit_level: str = DEFAULT_AUDIT_LEVEL
    # An unconfigured gate lets submissions through unless this is False
    fail_open_when_not_ready: bool = True
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)

    def __post_init__(self):
        self.site_key = (self.site_key or "").strip()
        self.secret_key = (self.secret_key or "").strip()
        self.db_path = Path(self.db_path)
        if self.audit_path is not None:
            self.audit_path = Path(self.audit_path)
        self.audit_level = (self.audit_level or DEFAULT_AUDIT_LEVEL).strip().upper()
        if self.audit_level not in AUDIT_LEVELS:
            raise ConfigurationInvalid(
                f"audit_level must be one of {', '.join(AUDIT_LEVELS)}, got {self.audit_level!r}"
            )

    @classmethod
    def from_env(cls, base_dir: Optional[Path] = None) -> "GateConfig":
        """Create config from environment variables."""
        base = base_dir or Path.cwd()
        db_path = os.environ.get(ENV_DB_PATH)
        audit_path = os.environ.get(ENV_AUDIT_PATH)
        fail_open = os.environ.get(ENV_FAIL_OPEN, "true").strip().lower() in _TRUTHY
        return cls(
            site_key=os.environ.get(ENV_SITE_KEY, ""),
            secret_key=os.environ.get(ENV_SECRET_KEY, ""),
            verify_url=os.environ.get(ENV_VERIFY_URL, SITE_VERIFY_URL),
            db_path=Path(db_path) if db_path else base / STATE_DIRNAME / LEDGER_DB_FILENAME,
            audit_path=Path(audit_path) if audit_path else base / STATE_DIRNAME / AUDIT_LOG_FILENAME,
            audit_level=os.environ.get(ENV_AUDIT_LEVEL, DEFAULT_AUDIT_LEVEL),
            fail_open_when_not_ready=fail_open,
            timeouts=TimeoutConfig.from_env(),
        )

    def validation(self) -> KeyValidationResult:
        return validate_keys(self.site_key, self.secret_key, self.verify_url)

    @property
    def ready(self) -> bool:
        """True once both keys are well formed and the endpoint is https."""
        return self.validation().is_valid
