"""
Error taxonomy for the gate.

Every error here is recovered inside ChallengeDecisionEngine into a
Decision or the readiness flag; none escapes evaluate().
"""

from __future__ import annotations

from typing import List, Optional


class GateError(Exception):
    """Base class for gate errors."""
    pass


class ConfigurationInvalid(GateError):
    """Site key, secret key or timeouts are malformed."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class StoreUnavailable(GateError):
    """The ledger of accepted submissions could not be queried."""
    pass


class VerificationUnavailable(GateError):
    """Transport failure talking to the remote verification service."""
    pass


class VerificationRejected(GateError):
    """The remote service answered success=false."""

    def __init__(self, error_codes: Optional[List[str]] = None):
        self.error_codes = list(error_codes or [])
        super().__init__(self.user_message())

    @property
    def first_code(self) -> Optional[str]:
        return self.error_codes[0] if self.error_codes else None

    def user_message(self) -> str:
        """Sanitized message safe to show to the submitter."""
        if self.first_code:
            return f"You did not complete the challenge correctly ({self.first_code})"
        return "You did not complete the challenge correctly"
