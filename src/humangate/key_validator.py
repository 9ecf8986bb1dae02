"""Key and endpoint validation for the remote verification service.

Provides utilities to check that the site key, secret key and endpoint URL
are set and well formed before the gate attempts any verification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from humangate.config.defaults import KEY_LENGTH
from humangate.errors import ConfigurationInvalid

INVALID_KEY_MESSAGE = (
    "The key you supplied does not appear to be valid. Please check that it "
    f"is exactly {KEY_LENGTH} characters long and contains no spaces."
)

INVALID_URL_MESSAGE = "The verification endpoint is not a valid URL."
INSECURE_URL_MESSAGE = "The verification endpoint must use https."

NOT_READY_NOTICE = (
    "The human verification gate is almost ready to go. Please supply the "
    "site key and secret key in the gate configuration."
)


@dataclass
class KeyValidationResult:
    """Result of key validation."""

    site_key_set: bool
    secret_key_set: bool
    is_valid: bool
    missing: List[str] = field(default_factory=list)
    errors: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "site_key_configured": self.site_key_set,
            "secret_key_configured": self.secret_key_set,
            "is_valid": self.is_valid,
            "missing": self.missing,
            "errors": self.errors,
        }


def check_key(text: Optional[str]) -> List[str]:
    """
    Basic sanity check on a single key.

    Returns:
        Empty list if the key passed, otherwise a list with one error string.
    """
    key = (text or "").strip()
    if len(key) == KEY_LENGTH and not any(ch.isspace() for ch in key):
        return []
    return [INVALID_KEY_MESSAGE]


def check_verify_url(url: Optional[str]) -> List[str]:
    """
    Check the endpoint parses and uses https.

    Returns:
        Empty list if the URL passed, otherwise a list with one error string.
    """
    try:
        parsed = httpx.URL((url or "").strip())
    except httpx.InvalidURL:
        return [INVALID_URL_MESSAGE]
    if not parsed.host:
        return [INVALID_URL_MESSAGE]
    if parsed.scheme != "https":
        return [INSECURE_URL_MESSAGE]
    return []


def validate_keys(
    site_key: Optional[str],
    secret_key: Optional[str],
    verify_url: Optional[str] = None,
) -> KeyValidationResult:
    """
    Validate both keys, and the endpoint when one is given.

    Missing keys are reported in ``missing``; keys that are present but
    malformed are reported in ``errors`` under "site_key" / "secret_key",
    endpoint problems under "verify_url".
    """
    missing = []
    errors: Dict[str, List[str]] = {}

    for name, value in (("site_key", site_key), ("secret_key", secret_key)):
        if not value:
            missing.append(name)
            continue
        problems = check_key(value)
        if problems:
            errors[name] = problems

    if verify_url is not None:
        problems = check_verify_url(verify_url)
        if problems:
            errors["verify_url"] = problems

    return KeyValidationResult(
        site_key_set=bool(site_key),
        secret_key_set=bool(secret_key),
        is_valid=not missing and not errors,
        missing=missing,
        errors=errors,
    )


def require_valid_keys(
    site_key: Optional[str],
    secret_key: Optional[str],
    verify_url: Optional[str] = None,
) -> None:
    """Raise ConfigurationInvalid unless keys (and endpoint) pass validation."""
    result = validate_keys(site_key, secret_key, verify_url)
    if result.is_valid:
        return
    messages = [f"{name} is not set" for name in result.missing]
    for name, problems in result.errors.items():
        messages.extend(f"{name}: {p}" for p in problems)
    raise ConfigurationInvalid("Gate configuration is not valid", errors=messages)


def readiness_notice(result: KeyValidationResult) -> Optional[str]:
    """Admin notice to display while keys still need to be supplied."""
    return None if result.is_valid else NOT_READY_NOTICE
