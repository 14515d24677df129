"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Request

from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.adapters.turnstile.cloudflare import CloudflareTurnstileVerifier
from src.config.settings import get_settings
from src.domain.ports import ChallengeVerifier, EmailSender, TenantRepository
from src.domain.rate_limit import RegistrationRateLimiter
from src.domain.registration import RegistrationService


def get_repository(request: Request) -> TenantRepository:
    """
    Get the tenant store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_rate_limiter(request: Request) -> RegistrationRateLimiter:
    """Get the process-wide registration rate limiter from app state."""
    return request.app.state.rate_limiter


@lru_cache
def get_email_sender() -> EmailSender:
    """Build the configured email sender (singleton)."""
    settings = get_settings()
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.sender_address,
        username=settings.smtp_username,
        password=settings.smtp_password,
        starttls=settings.smtp_starttls,
        timeout=settings.smtp_timeout_seconds,
    )


@lru_cache
def get_challenge_verifier() -> ChallengeVerifier:
    """Build the Turnstile verifier (singleton, stateless across threads)."""
    settings = get_settings()
    return CloudflareTurnstileVerifier(
        secret_key=settings.turnstile_secret_key,
        verify_url=settings.turnstile_verify_url,
        timeout=settings.turnstile_timeout_seconds,
    )


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the tenant store, mailer, challenge verifier and the
    shared rate limiter for the domain service.
    """
    return RegistrationService(
        repository=get_repository(request),
        email_sender=get_email_sender(),
        challenge_verifier=get_challenge_verifier(),
        rate_limiter=get_rate_limiter(request),
        app_domain=get_settings().app_domain,
    )


def get_client_ip(request: Request) -> str:
    """
    Resolve the address the request came from.

    With TRUST_PROXY_HEADERS enabled the left-most X-Forwarded-For entry
    wins; only turn that on behind a proxy that overwrites the header.
    Falls back to "unknown" when the transport exposes no peer address.
    """
    if get_settings().trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
