"""
Shared fixtures for adversarial tests.

Provides an app wired to the in-memory tenant store with a stubbed
challenge verifier, so concurrent attacks can run without PostgreSQL.
"""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryTenantRepository
from src.api.dependencies import get_client_ip, get_registration_service
from src.api.v1 import router
from src.domain.rate_limit import RegistrationRateLimiter
from src.domain.registration import RegistrationService


def forwarded_ip(request: Request) -> str:
    return request.headers.get("x-forwarded-for", "testclient")


@pytest.fixture
def memory_repository() -> InMemoryTenantRepository:
    return InMemoryTenantRepository()


@pytest.fixture
def attack_app(memory_repository: InMemoryTenantRepository) -> FastAPI:
    """Registration endpoint backed by the in-memory store."""
    app = FastAPI()
    app.include_router(router, prefix="/v1")
    limiter = RegistrationRateLimiter(600)
    verifier = Mock()
    verifier.verify.return_value = True

    def build_service(request: Request) -> RegistrationService:
        return RegistrationService(
            repository=memory_repository,
            email_sender=Mock(),
            challenge_verifier=verifier,
            rate_limiter=limiter,
        )

    app.dependency_overrides[get_registration_service] = build_service
    app.dependency_overrides[get_client_ip] = forwarded_ip
    return app


@pytest.fixture
def attack_client(attack_app: FastAPI) -> TestClient:
    return TestClient(attack_app)
