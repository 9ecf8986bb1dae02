"""
SessionTrustState - per-session cache of the last trust determination.
"""

from __future__ import annotations

from typing import Dict, Protocol

from .models import TrustState


class SessionTrustState(Protocol):
    """Interface the engine needs from a session store.

    get/set on a single session id are assumed atomic; the host's session
    backend owns expiry.
    """

    def get(self, session_id: str) -> TrustState:
        ...

    def set(self, session_id: str, state: TrustState) -> None:
        ...


class InMemorySessionTrustState:
    """Dict-backed session store for single-process hosts and tests."""

    def __init__(self) -> None:
        self._states: Dict[str, TrustState] = {}

    def get(self, session_id: str) -> TrustState:
        return self._states.get(session_id, TrustState.UNKNOWN)

    def set(self, session_id: str, state: TrustState) -> None:
        self._states[session_id] = TrustState(state)

    def discard(self, session_id: str) -> None:
        """Forget a session (host calls this when the session ends)."""
        self._states.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._states)
