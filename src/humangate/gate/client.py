"""
VerificationClient - one round trip to the remote verification service.

Compatible with the reCAPTCHA v2 ``siteverify`` API: form-encoded POST of
``secret``, ``response`` and ``remoteip``; JSON answer with ``success``
and optional ``error-codes``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from humangate.config.defaults import (
    ERROR_CODE_MALFORMED_RESPONSE,
    ERROR_CODE_MISSING_TOKEN,
    FORM_FIELD_REMOTE_IP,
    FORM_FIELD_RESPONSE,
    FORM_FIELD_SECRET,
    RESPONSE_FIELD_ERROR_CODES,
    RESPONSE_FIELD_SUCCESS,
    SITE_VERIFY_URL,
)
from humangate.errors import VerificationUnavailable
from humangate.timeout_config import TimeoutConfig

from .models import VerificationRequest, VerificationResult

logger = logging.getLogger(__name__)


def parse_verification_body(data: Any) -> VerificationResult:
    """
    Normalize a decoded response body.

    Anything that is not a map with a boolean ``success`` and an optional
    list of strings under ``error-codes`` counts as a malformed response.
    """
    malformed = VerificationResult(success=False, error_codes=[ERROR_CODE_MALFORMED_RESPONSE])
    if not isinstance(data, dict):
        return malformed

    success = data.get(RESPONSE_FIELD_SUCCESS)
    if not isinstance(success, bool):
        return malformed

    codes = data.get(RESPONSE_FIELD_ERROR_CODES)
    if codes is None:
        codes = []
    if not isinstance(codes, list) or not all(isinstance(c, str) for c in codes):
        return malformed

    return VerificationResult(success=success, error_codes=list(codes))


class VerificationClient:
    """
    Send proof tokens to the remote verification endpoint.

    Certificate validation is always on. A failed call is never retried:
    tokens are single use, a new one needs a new challenge render.

    The HTTP client is always built here with ``verify=True``; callers can
    only swap the transport underneath it. An endpoint that cannot be parsed
    counts as the service being unavailable.
    """

    def __init__(
        self,
        secret_key: str,
        verify_url: str = SITE_VERIFY_URL,
        timeouts: Optional[TimeoutConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._secret_key = secret_key
        self.verify_url = verify_url
        self.timeouts = timeouts or TimeoutConfig()
        self._transport = transport

    def build_request(
        self, proof_token: Optional[str], caller_address: str = ""
    ) -> VerificationRequest:
        """Create a fresh request carrying the configured shared secret."""
        return VerificationRequest(
            proof_token=proof_token,
            caller_address=caller_address,
            shared_secret=self._secret_key,
        )

    async def verify(self, request: VerificationRequest) -> VerificationResult:
        """
        Verify a proof token.

        Args:
            request: Token, caller address and shared secret.

        Returns:
            VerificationResult; an absent token fails locally with
            ``incorrect-captcha-sol``.

        Raises:
            VerificationUnavailable: On transport errors, timeouts, a
                non-2xx answer or an endpoint that cannot be parsed.
        """
        if not request.proof_token:
            logger.debug("No proof token supplied, failing without a network call")
            return VerificationResult(success=False, error_codes=[ERROR_CODE_MISSING_TOKEN])

        form = {
            FORM_FIELD_SECRET: request.shared_secret,
            FORM_FIELD_RESPONSE: request.proof_token,
            FORM_FIELD_REMOTE_IP: request.caller_address,
        }

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.timeouts.as_httpx(),
                verify=True,
            ) as client:
                response = await client.post(self.verify_url, data=form)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Exception type only: the message may echo the request
            logger.warning(f"Verification service unreachable: {type(e).__name__}")
            raise VerificationUnavailable("Verification service unreachable") from e

        if not response.is_success:
            logger.warning(f"Verification service returned HTTP {response.status_code}")
            raise VerificationUnavailable(
                f"Verification service returned HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("Verification service returned a non-JSON body")
            data = None

        result = parse_verification_body(data)
        logger.debug(
            f"Verification finished: success={result.success} codes={result.error_codes}"
        )
        return result
