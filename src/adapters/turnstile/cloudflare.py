"""
Cloudflare Turnstile adapter - Implements ChallengeVerifier protocol.

Posts the client token to the siteverify endpoint and trusts the
submission only when the answer says `"success": true`. Every other
outcome (missing secret, network error, timeout, unexpected body) is a
rejection. One attempt per submission, no retries.
"""

import logging

import requests

logger = logging.getLogger(__name__)

SITEVERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class CloudflareTurnstileVerifier:
    """
    Implements ChallengeVerifier protocol via the siteverify HTTP API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Each call is a standalone requests.post, so one instance can be shared
    by every worker thread without sharing connection state.
    """

    def __init__(
        self,
        secret_key: str | None,
        verify_url: str = SITEVERIFY_URL,
        timeout: float = 5.0,
    ) -> None:
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.timeout = timeout

    def verify(self, token: str, remote_ip: str | None = None) -> bool:
        """
        Validate a Turnstile token.

        Args:
            token: Token produced by the widget in the browser
            remote_ip: Client address, forwarded to Cloudflare when known

        Returns:
            True only if Cloudflare answered with success exactly true
        """
        if not self.secret_key:
            logger.error("TURNSTILE_SECRET_KEY is not configured, rejecting challenge")
            return False

        form = {"secret": self.secret_key, "response": token}
        if remote_ip and remote_ip != "unknown":
            form["remoteip"] = remote_ip

        try:
            response = requests.post(self.verify_url, data=form, timeout=self.timeout)
            result = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Turnstile verification request failed: %s", exc)
            return False

        if not isinstance(result, dict):
            logger.warning("Unexpected Turnstile response body: %r", result)
            return False

        if result.get("success") is not True:
            logger.info("Turnstile rejected token: %s", result.get("error-codes", []))
            return False
        return True
