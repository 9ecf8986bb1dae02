"""Default configuration values for humangate.

This module centralizes the hard-coded values (endpoint, key format,
timeouts, file names) into a single location. All modules should import
these constants instead of hard-coding values.

Usage:
    from humangate.config.defaults import (
        SITE_VERIFY_URL,
        KEY_LENGTH,
        VERIFY_READ_TIMEOUT_SECONDS,
    )
"""

from __future__ import annotations

# =============================================================================
# Remote Verification Endpoint
# =============================================================================

SITE_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

# Form field names posted to the endpoint
FORM_FIELD_SECRET = "secret"
FORM_FIELD_RESPONSE = "response"
FORM_FIELD_REMOTE_IP = "remoteip"

# Response field names
RESPONSE_FIELD_SUCCESS = "success"
RESPONSE_FIELD_ERROR_CODES = "error-codes"


# =============================================================================
# Error Codes
# =============================================================================

# Same code the remote service uses for a wrong or missing solution
ERROR_CODE_MISSING_TOKEN = "incorrect-captcha-sol"
ERROR_CODE_MALFORMED_RESPONSE = "malformed-response"


# =============================================================================
# Key Validation
# =============================================================================

KEY_LENGTH = 40


# =============================================================================
# Timeouts
# =============================================================================

# Every verification call is bounded; both values must stay positive
VERIFY_CONNECT_TIMEOUT_SECONDS = 5.0
VERIFY_READ_TIMEOUT_SECONDS = 10.0


# =============================================================================
# Storage
# =============================================================================

STATE_DIRNAME = ".humangate"
LEDGER_DB_FILENAME = "ledger.db"
AUDIT_LOG_FILENAME = "audit.jsonl"


# =============================================================================
# Audit
# =============================================================================

DEFAULT_AUDIT_LEVEL = "INFO"          # "DEBUG", "INFO", "WARN", "ERROR"
AUDIT_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")
DEFAULT_AUDIT_SAMPLE_RATE = 0.1       # 10% sample for DEBUG events


# =============================================================================
# Environment Variables
# =============================================================================

ENV_SITE_KEY = "HUMANGATE_SITE_KEY"
ENV_SECRET_KEY = "HUMANGATE_SECRET_KEY"
ENV_VERIFY_URL = "HUMANGATE_VERIFY_URL"
ENV_DB_PATH = "HUMANGATE_DB_PATH"
ENV_AUDIT_PATH = "HUMANGATE_AUDIT_PATH"
ENV_AUDIT_LEVEL = "HUMANGATE_AUDIT_LEVEL"
ENV_FAIL_OPEN = "HUMANGATE_FAIL_OPEN"
ENV_CONNECT_TIMEOUT = "HUMANGATE_CONNECT_TIMEOUT"
ENV_READ_TIMEOUT = "HUMANGATE_READ_TIMEOUT"
