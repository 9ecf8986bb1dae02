"""
Human verification gate for anonymous submissions.

- TrustLedger: has this identity been approved before?
- SessionTrustState: per-session cache of that answer
- VerificationClient: proof-of-humanity round trip to the remote service
- ChallengeDecisionEngine: the state machine tying them together
"""

from __future__ import annotations

from .auditor import AuditLevel, GateAuditor
from .client import VerificationClient
from .engine import ChallengeDecisionEngine
from .ledger import SubmissionStatus, TrustLedger
from .models import (
    Decision,
    DecisionState,
    Identity,
    Outcome,
    SubmissionEvent,
    TrustState,
    Verdict,
    VerificationRequest,
    VerificationResult,
)
from .session import InMemorySessionTrustState, SessionTrustState

__all__ = [
    "AuditLevel",
    "GateAuditor",
    "VerificationClient",
    "ChallengeDecisionEngine",
    "SubmissionStatus",
    "TrustLedger",
    "Decision",
    "DecisionState",
    "Identity",
    "Outcome",
    "SubmissionEvent",
    "TrustState",
    "Verdict",
    "VerificationRequest",
    "VerificationResult",
    "InMemorySessionTrustState",
    "SessionTrustState",
]
