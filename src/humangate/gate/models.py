"""
Shared dataclasses for the gate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TrustState(str, Enum):
    """Per-session trust determination."""
    UNKNOWN = "unknown"
    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"


class DecisionState(str, Enum):
    """Terminal state reached by one evaluation."""
    AUTHENTICATED_SKIP = "authenticated_skip"
    NOT_READY = "not_ready"
    TRUSTED_SKIP = "trusted_skip"
    CHALLENGE_PENDING = "challenge_pending"
    CHALLENGE_VERIFY = "challenge_verify"


class Outcome(str, Enum):
    """What the host pipeline should do with the submission."""
    SKIP = "skip"
    CHALLENGE_REQUIRED = "challenge_required"
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True)
class Identity:
    """Declared submitter identity; url is optional."""
    name: str
    contact: str
    url: Optional[str] = ""

    def __post_init__(self):
        if self.url is None:
            object.__setattr__(self, "url", "")


@dataclass
class VerificationRequest:
    proof_token: Optional[str]
    caller_address: str = field(default="", repr=False)
    shared_secret: str = field(default="", repr=False)


@dataclass
class VerificationResult:
    success: bool
    error_codes: List[str] = field(default_factory=list)


@dataclass
class Verdict:
    """Accept/reject verdict; reasons is empty iff accepted."""
    accepted: bool
    reasons: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.accepted and self.reasons:
            raise ValueError("An accepted verdict carries no reasons")
        if not self.accepted and not self.reasons:
            raise ValueError("A rejected verdict needs at least one reason")

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(accepted=True)

    @classmethod
    def reject(cls, *reasons: str) -> "Verdict":
        return cls(accepted=False, reasons=list(reasons))


@dataclass
class SubmissionEvent:
    """One anonymous submission as seen by the host pipeline.

    proof_token is None when no challenge response was posted at all, and
    an empty string when the challenge was posted back unsolved.
    """
    identity: Identity
    session_id: str
    proof_token: Optional[str] = None
    caller_address: str = field(default="", repr=False)
    authenticated: bool = False


@dataclass
class Decision:
    outcome: Outcome
    state: DecisionState
    verdict: Optional[Verdict] = None
    message: Optional[str] = None
    # Remote error codes behind a REJECT, for auditing
    error_codes: List[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.verdict is not None and self.verdict.accepted

    @property
    def reasons(self) -> List[str]:
        return list(self.verdict.reasons) if self.verdict else []
