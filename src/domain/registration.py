"""
Registration domain service - self-service server signup.

This module contains the core business logic for registering a new
server (tenant) on the modl panel.

Registration Flow (linear, forward-only)
========================================

    RECEIVED
      -> RATE_CHECKED        per-IP limiter allows this address
      -> VALIDATED           form fields pass every constraint
      -> CHALLENGE_VERIFIED  Turnstile confirms a human sent the form
      -> PERSISTED           tenant row created by the store
      -> NOTIFIED            verification email handed to the mailer
      -> RESPONDED

Any step may stop the flow with a RegistrationError subclass. There are
no retries and no backward transitions.

Passing the rate check reserves the client IP until the request ends,
so a second submission from the same address is refused while the first
is still in flight. The slot is consumed only once the tenant row exists,
using the timestamp captured when the request arrived. Failed validation,
failed challenges, duplicates and store errors release the reservation so
the user can fix the input and try again immediately.

Mail delivery is best-effort: a send failure is logged and the
registration still counts as successful.
"""

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ChallengeVerificationFailed, DuplicateEntry, RateLimitExceeded
from .ports import (
    ChallengeVerifier,
    CreateOutcome,
    EmailSender,
    NewTenant,
    TenantRecord,
    TenantRepository,
)
from .rate_limit import RegistrationRateLimiter
from .validation import parse_registration

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify Your Email Address for modl"

_DUPLICATE_MESSAGES = {
    CreateOutcome.DUPLICATE_EMAIL: ("email", "An account with this email address already exists."),
    CreateOutcome.DUPLICATE_SUBDOMAIN: (
        "customDomain",
        "This subdomain is already taken. Please choose another one.",
    ),
}


@dataclass
class RegistrationService:
    """
    Domain service for server registration.

    Orchestrates rate limiting, validation, challenge verification,
    tenant persistence and the verification email.
    """

    repository: TenantRepository
    email_sender: EmailSender
    challenge_verifier: ChallengeVerifier
    rate_limiter: RegistrationRateLimiter
    app_domain: str = "modl.gg"
    clock: Callable[[], float] = field(default=time.monotonic)

    def register(self, payload: Any, client_ip: str) -> TenantRecord:
        """
        Register a new server from a decoded request body.

        Args:
            payload: Decoded JSON body (anything that is not a dict fails validation)
            client_ip: Resolved client address, used for rate limiting and Turnstile

        Returns:
            The created TenantRecord

        Raises:
            RateLimitExceeded: This IP registered within the window
            RegistrationValidationError: One or more fields are invalid
            ChallengeVerificationFailed: Turnstile rejected the token
            DuplicateEntry: Email or subdomain already belongs to a tenant
        """
        now = self.clock()
        logger.info("Registration attempt from IP %s", client_ip)

        decision = self.rate_limiter.check(client_ip, now)
        if not decision.allowed:
            logger.info(
                "Rate limit triggered for IP %s, retry in %ss",
                client_ip,
                decision.retry_after_seconds,
            )
            raise RateLimitExceeded(
                decision.retry_after_seconds, self.rate_limiter.window_seconds
            )

        try:
            tenant = self._create_tenant(payload, client_ip)
        except Exception:
            self.rate_limiter.release(client_ip)
            raise

        self.rate_limiter.record(client_ip, now)
        logger.info("Created server %s (%s)", tenant.id, tenant.custom_domain)

        self._send_verification_email(tenant)
        return tenant

    def _create_tenant(self, payload: Any, client_ip: str) -> TenantRecord:
        request = parse_registration(payload)

        if not self.challenge_verifier.verify(request.turnstile_token, client_ip):
            logger.info("Turnstile validation failed for IP %s", client_ip)
            raise ChallengeVerificationFailed("Security verification failed")

        token = self._generate_verification_token()
        result = self.repository.create_server(
            NewTenant(
                admin_email=self._normalize_email(request.email),
                server_name=request.server_name,
                custom_domain=request.custom_domain,
                plan=request.plan,
                email_verification_token=token,
            )
        )
        if not result.created or result.tenant is None:
            field_name, message = _DUPLICATE_MESSAGES[result.outcome]
            logger.info("Duplicate %s rejected for IP %s", field_name, client_ip)
            raise DuplicateEntry(field_name, message)
        return result.tenant

    def verification_link(self, tenant: TenantRecord) -> str:
        """Link the tenant follows to confirm their admin email."""
        return (
            f"https://{tenant.custom_domain}.{self.app_domain}"
            f"/verify-email?token={tenant.email_verification_token}"
        )

    def _send_verification_email(self, tenant: TenantRecord) -> None:
        link = self.verification_link(tenant)
        text = f"Please verify your email address by clicking the following link: {link}"
        html = (
            "<p>Please verify your email address by clicking the following link: "
            f'<a href="{link}">{link}</a></p>'
        )
        try:
            self.email_sender.send_mail(tenant.admin_email, VERIFICATION_SUBJECT, text, html)
        except Exception:
            # Registration is defined by persistence, not delivery
            logger.exception("Failed to send verification email for server %s", tenant.id)

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_verification_token(self) -> str:
        """32 random bytes, hex encoded, from the secrets module."""
        return secrets.token_hex(32)
