"""
Unit tests for domain ports and exceptions.

Tests verify:
- Port interfaces and value types are properly defined
- Exceptions are properly structured
- Domain purity (no web framework or database imports)
"""

import json
import subprocess
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from enum import Enum

import pytest

from src.domain.exceptions import (
    ChallengeVerificationFailed,
    DuplicateEntry,
    RateLimitExceeded,
    RegistrationError,
    RegistrationValidationError,
)
from src.domain.ports import (
    ChallengeVerifier,
    CreateOutcome,
    CreateServerResult,
    EmailSender,
    NewTenant,
    Plan,
    TenantRecord,
    TenantRepository,
)


class TestPlanEnum:
    """Tests for Plan enum."""

    def test_plan_values(self) -> None:
        assert Plan.FREE.value == "free"
        assert Plan.PREMIUM.value == "premium"
        assert {p.value for p in Plan} == {"free", "premium"}

    def test_plan_is_str_mixin(self) -> None:
        """Plan uses str mixin for JSON serialization."""
        assert issubclass(Plan, str)
        assert json.dumps(Plan.FREE) == '"free"'
        assert Plan.PREMIUM == "premium"


class TestCreateOutcome:
    """Tests for CreateOutcome enum and CreateServerResult."""

    def test_create_outcome_is_enum(self) -> None:
        assert issubclass(CreateOutcome, Enum)
        assert {o.name for o in CreateOutcome} == {
            "CREATED",
            "DUPLICATE_EMAIL",
            "DUPLICATE_SUBDOMAIN",
        }

    def test_result_created_flag(self) -> None:
        assert CreateServerResult(outcome=CreateOutcome.CREATED).created is True
        assert CreateServerResult(outcome=CreateOutcome.DUPLICATE_EMAIL).created is False

    def test_duplicate_result_has_no_tenant(self) -> None:
        assert CreateServerResult(outcome=CreateOutcome.DUPLICATE_SUBDOMAIN).tenant is None


class TestValueTypes:
    """Tests for NewTenant and TenantRecord."""

    def test_new_tenant_defaults_to_unverified(self) -> None:
        tenant = NewTenant(
            admin_email="owner@example.com",
            server_name="Block Party",
            custom_domain="blockparty",
            plan=Plan.FREE,
            email_verification_token="a" * 64,
        )
        assert tenant.email_verified is False

    def test_tenant_record_is_immutable(self) -> None:
        record = TenantRecord(
            id="1",
            admin_email="owner@example.com",
            server_name="Block Party",
            custom_domain="blockparty",
            plan=Plan.FREE,
            email_verification_token="a" * 64,
            email_verified=False,
            created_at=datetime.now(timezone.utc),
        )
        with pytest.raises(FrozenInstanceError):
            record.email_verified = True  # type: ignore[misc]


class TestProtocols:
    """Tests for port protocols."""

    def test_tenant_repository_has_create_server(self) -> None:
        assert hasattr(TenantRepository, "create_server")

    def test_email_sender_has_send_mail(self) -> None:
        assert hasattr(EmailSender, "send_mail")

    def test_challenge_verifier_has_verify(self) -> None:
        assert hasattr(ChallengeVerifier, "verify")

    def test_structural_implementation_accepted(self) -> None:
        """Any object with the right methods satisfies the ports."""

        class StubVerifier:
            def verify(self, token: str, remote_ip: str | None = None) -> bool:
                return token == "ok"

        def accepts_verifier(v: ChallengeVerifier) -> bool:
            return v.verify("ok", None)

        assert accepts_verifier(StubVerifier()) is True


class TestDomainExceptions:
    """Tests for domain exceptions."""

    @pytest.mark.parametrize(
        "exc_type",
        [
            RegistrationValidationError,
            ChallengeVerificationFailed,
            DuplicateEntry,
            RateLimitExceeded,
        ],
    )
    def test_inherits_registration_error(self, exc_type: type) -> None:
        assert issubclass(exc_type, RegistrationError)

    def test_validation_error_keeps_every_field(self) -> None:
        errors = [
            {"field": "email", "message": "Please enter a valid email address"},
            {"field": "turnstileToken", "message": "Security verification is required"},
        ]
        exc = RegistrationValidationError(errors)
        assert exc.errors == errors
        assert str(exc) == (
            "Validation failed: email: Please enter a valid email address, "
            "turnstileToken: Security verification is required"
        )

    def test_duplicate_entry_carries_field(self) -> None:
        exc = DuplicateEntry("email", "An account with this email address already exists.")
        assert exc.field == "email"
        assert str(exc) == "An account with this email address already exists."

    @pytest.mark.parametrize(
        ("seconds", "minutes"), [(1, 1), (59, 1), (60, 1), (61, 2), (600, 10)]
    )
    def test_rate_limit_minutes_round_up(self, seconds: int, minutes: int) -> None:
        assert RateLimitExceeded(seconds).retry_after_minutes == minutes

    def test_rate_limit_window_minutes(self) -> None:
        assert RateLimitExceeded(10, window_seconds=600).window_minutes == 10
        assert RateLimitExceeded(10, window_seconds=30).window_minutes == 1


class TestDomainPurity:
    """Tests for domain purity - no web framework or database imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from starlette",
            "from psycopg",
            "import psycopg",
            "import requests",
            "import smtplib",
            "from smtplib",
        ],
    )
    def test_no_infrastructure_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, "src/domain/"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"'{pattern}' found in domain: {result.stdout}"
