"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for rate-limit tests
- In-memory tenant store, mock mailer and mock challenge verifier
- A wired RegistrationService and a valid signup payload
"""

from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryTenantRepository
from src.domain.rate_limit import RegistrationRateLimiter
from src.domain.registration import RegistrationService


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter() -> RegistrationRateLimiter:
    return RegistrationRateLimiter(window_seconds=600)


@pytest.fixture
def repository() -> InMemoryTenantRepository:
    return InMemoryTenantRepository()


@pytest.fixture
def email_sender() -> Mock:
    return Mock()


@pytest.fixture
def verifier() -> Mock:
    verifier = Mock()
    verifier.verify.return_value = True
    return verifier


@pytest.fixture
def service(
    repository: InMemoryTenantRepository,
    email_sender: Mock,
    verifier: Mock,
    rate_limiter: RegistrationRateLimiter,
    clock: FakeClock,
) -> RegistrationService:
    return RegistrationService(
        repository=repository,
        email_sender=email_sender,
        challenge_verifier=verifier,
        rate_limiter=rate_limiter,
        app_domain="modl.gg",
        clock=clock,
    )


def make_payload(**overrides: object) -> dict:
    """Valid signup body in wire format, with optional field overrides."""
    payload = {
        "email": "owner@example.com",
        "serverName": "Block Party",
        "customDomain": "blockparty",
        "plan": "free",
        "turnstileToken": "XXXX.DUMMY.TOKEN",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload() -> dict:
    return make_payload()


@pytest.fixture
def make_body():
    """Factory fixture building signup bodies with overrides."""
    return make_payload
