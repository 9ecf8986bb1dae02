"""
GateAuditor - JSONL audit trail of gate decisions with levels and sampling.

Records never carry the shared secret, the caller address or the proof
token; sessions are identified by a short hash.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import random
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, List, Optional

import aiofiles

from humangate.config.defaults import DEFAULT_AUDIT_SAMPLE_RATE

logger = logging.getLogger(__name__)


class AuditLevel(IntEnum):
    """Audit event levels with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def from_name(cls, name: str) -> "AuditLevel":
        """Parse "DEBUG", "INFO", "WARN" or "ERROR" (case-insensitive)."""
        return cls[name.strip().upper()]


def session_fingerprint(session_id: str) -> str:
    """Stable, non-reversible tag for a session id."""
    return hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:12]


class GateAuditor:
    """
    Audit gate decisions with level control and async file writes.

    - DEBUG: every decision (sampled)
    - INFO: challenges and verification outcomes
    - WARN: degraded paths (ledger or verification service down)
    - ERROR: errors only
    """

    def __init__(
        self,
        audit_path: Optional[Path] = None,
        level: AuditLevel = AuditLevel.INFO,
        sample_rate: float = DEFAULT_AUDIT_SAMPLE_RATE,
    ):
        self.audit_path = Path(audit_path) if audit_path else None
        self.level = level
        self.sample_rate = sample_rate
        self._lock = asyncio.Lock()

    async def log(
        self,
        event: str,
        level: AuditLevel = AuditLevel.DEBUG,
        **kwargs: Any,
    ) -> None:
        """Log audit event with level and sampling."""
        if level < self.level:
            return

        # DEBUG is high frequency
        if level == AuditLevel.DEBUG and random.random() > self.sample_rate:
            return

        if not self.audit_path:
            return

        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": f"gate_{event}",
            "level": level.name.lower(),
            **kwargs,
        }

        async with self._lock:
            try:
                self.audit_path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(self.audit_path, "a") as f:
                    await f.write(json.dumps(record) + "\n")
            except OSError as e:
                logger.error(f"Failed to write audit log: {e}")

    async def log_decision(
        self,
        session_id: str,
        state: str,
        outcome: str,
        error_codes: Optional[List[str]] = None,
    ) -> None:
        """Log the terminal state of one evaluation."""
        level = AuditLevel.DEBUG if outcome == "skip" else AuditLevel.INFO
        await self.log(
            "decision",
            level,
            session=session_fingerprint(session_id),
            state=state,
            outcome=outcome,
            error_codes=list(error_codes or []),
        )

    async def log_ledger_unavailable(self, session_id: str) -> None:
        await self.log(
            "ledger_unavailable",
            AuditLevel.WARN,
            session=session_fingerprint(session_id),
        )

    async def log_verification_unavailable(self, session_id: str) -> None:
        await self.log(
            "verification_unavailable",
            AuditLevel.WARN,
            session=session_fingerprint(session_id),
        )
