"""
ChallengeDecisionEngine - decides, per anonymous submission, whether a
challenge is needed and whether it was passed.

Single entry point for the host pipeline: ``evaluate(event, sessions)``.
Ledger and verification failures are recovered here into conservative
decisions; nothing propagates to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from humangate.config.settings import GateConfig
from humangate.errors import StoreUnavailable, VerificationRejected, VerificationUnavailable

from .auditor import AuditLevel, GateAuditor
from .client import VerificationClient
from .ledger import TrustLedger, TrustLookup
from .models import (
    Decision,
    DecisionState,
    Outcome,
    SubmissionEvent,
    TrustState,
    Verdict,
    VerificationResult,
)
from .session import SessionTrustState

logger = logging.getLogger(__name__)

CHALLENGE_PROMPT = (
    "You have not been approved before and have to complete a challenge. "
    "If you submitted before, you will not have to complete a challenge if "
    "you use the same combination of name, contact address and URL."
)
UNAVAILABLE_REASON = "Your response could not be verified. Please try again."
NOT_READY_REASON = "Submissions are temporarily unavailable."


class ChallengeDecisionEngine:
    """
    Trust/verification state machine.

    Every evaluation ends in TRUSTED_SKIP, CHALLENGE_PENDING or
    CHALLENGE_VERIFY, with AUTHENTICATED_SKIP and NOT_READY short circuits
    in front.
    """

    def __init__(
        self,
        config: GateConfig,
        ledger: TrustLookup,
        client: VerificationClient,
        auditor: Optional[GateAuditor] = None,
    ):
        self.config = config
        self.ledger = ledger
        self.client = client
        self.auditor = auditor or GateAuditor()

    @classmethod
    def from_config(cls, config: GateConfig) -> "ChallengeDecisionEngine":
        """Wire the SQLite ledger, HTTP client and JSONL auditor from config."""
        return cls(
            config=config,
            ledger=TrustLedger(config.db_path),
            client=VerificationClient(
                secret_key=config.secret_key,
                verify_url=config.verify_url,
                timeouts=config.timeouts,
            ),
            auditor=GateAuditor(
                config.audit_path, level=AuditLevel.from_name(config.audit_level)
            ),
        )

    @property
    def ready(self) -> bool:
        return self.config.ready

    async def initialize(self) -> None:
        """Create the ledger schema when the ledger is ours."""
        if isinstance(self.ledger, TrustLedger):
            await self.ledger.initialize()
        if not self.ready:
            logger.warning("Gate keys are missing or invalid; verification is disabled")
        logger.info("ChallengeDecisionEngine initialized")

    async def shutdown(self) -> None:
        if isinstance(self.ledger, TrustLedger):
            await self.ledger.close()

    def should_skip(self, event: SubmissionEvent) -> bool:
        """Hook for already-identified callers: the gate does not apply."""
        return event.authenticated

    async def evaluate(
        self, event: SubmissionEvent, sessions: SessionTrustState
    ) -> Decision:
        """
        Evaluate one submission event.

        Args:
            event: Submitter identity, session id and optional proof token.
            sessions: Session store; written only after a successful
                ledger lookup.

        Returns:
            Decision with SKIP, CHALLENGE_REQUIRED, ACCEPT or REJECT.
        """
        if self.should_skip(event):
            return Decision(Outcome.SKIP, DecisionState.AUTHENTICATED_SKIP, Verdict.accept())

        if not self.ready:
            decision = self._not_ready_decision()
            await self._audit(event, decision)
            return decision

        trust = await self._resolve_trust(event, sessions)

        if trust == TrustState.TRUSTED:
            decision = Decision(Outcome.SKIP, DecisionState.TRUSTED_SKIP, Verdict.accept())
        elif event.proof_token is None:
            decision = Decision(
                Outcome.CHALLENGE_REQUIRED,
                DecisionState.CHALLENGE_PENDING,
                message=CHALLENGE_PROMPT,
            )
        else:
            decision = await self._verify_challenge(event)

        await self._audit(event, decision)
        return decision

    def _not_ready_decision(self) -> Decision:
        if self.config.fail_open_when_not_ready:
            return Decision(Outcome.SKIP, DecisionState.NOT_READY, Verdict.accept())
        return Decision(Outcome.REJECT, DecisionState.NOT_READY, Verdict.reject(NOT_READY_REASON))

    async def _resolve_trust(
        self, event: SubmissionEvent, sessions: SessionTrustState
    ) -> TrustState:
        """Read the session cache, falling back to the ledger on UNKNOWN."""
        cached = sessions.get(event.session_id)
        if cached != TrustState.UNKNOWN:
            return cached

        try:
            found = await self.ledger.lookup(event.identity)
        except StoreUnavailable as e:
            # Not persisted, so the next event retries the lookup
            logger.warning(f"Trust ledger unavailable, requiring a challenge: {e}")
            await self.auditor.log_ledger_unavailable(event.session_id)
            return TrustState.UNTRUSTED

        state = TrustState.TRUSTED if found else TrustState.UNTRUSTED
        sessions.set(event.session_id, state)
        return state

    async def _verify_challenge(self, event: SubmissionEvent) -> Decision:
        request = self.client.build_request(event.proof_token, event.caller_address)
        try:
            result = await self.client.verify(request)
        except VerificationUnavailable:
            await self.auditor.log_verification_unavailable(event.session_id)
            return Decision(
                Outcome.REJECT,
                DecisionState.CHALLENGE_VERIFY,
                Verdict.reject(UNAVAILABLE_REASON),
            )
        return self.decide_from_result(result)

    @staticmethod
    def decide_from_result(result: VerificationResult) -> Decision:
        """Map a fixed VerificationResult to a Decision (pure)."""
        if result.success:
            return Decision(Outcome.ACCEPT, DecisionState.CHALLENGE_VERIFY, Verdict.accept())
        rejection = VerificationRejected(result.error_codes)
        return Decision(
            Outcome.REJECT,
            DecisionState.CHALLENGE_VERIFY,
            Verdict.reject(rejection.user_message()),
            error_codes=rejection.error_codes,
        )

    async def _audit(self, event: SubmissionEvent, decision: Decision) -> None:
        await self.auditor.log_decision(
            event.session_id,
            decision.state.value,
            decision.outcome.value,
            error_codes=decision.error_codes,
        )
