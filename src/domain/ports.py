"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, and the value types that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class Plan(str, Enum):
    """Subscription plan chosen at signup. Upgrades happen in the panel."""

    FREE = "free"
    PREMIUM = "premium"


class CreateOutcome(Enum):
    """
    Result of a tenant creation attempt.

    Uniqueness is enforced by the store, so duplicates come back as
    an outcome rather than as an exception.
    """

    CREATED = "created"
    DUPLICATE_EMAIL = "duplicate_email"
    DUPLICATE_SUBDOMAIN = "duplicate_subdomain"


@dataclass(frozen=True)
class NewTenant:
    """Fields for a tenant that has not been persisted yet."""

    admin_email: str
    server_name: str
    custom_domain: str
    plan: Plan
    email_verification_token: str
    email_verified: bool = False


@dataclass(frozen=True)
class TenantRecord:
    """A persisted tenant (one registered server and its panel)."""

    id: str
    admin_email: str
    server_name: str
    custom_domain: str
    plan: Plan
    email_verification_token: str
    email_verified: bool
    created_at: datetime


@dataclass(frozen=True)
class CreateServerResult:
    """Tagged result of TenantRepository.create_server()."""

    outcome: CreateOutcome
    tenant: TenantRecord | None = None

    @property
    def created(self) -> bool:
        return self.outcome is CreateOutcome.CREATED


class TenantRepository(Protocol):
    """Port interface for tenant persistence."""

    def create_server(self, new_tenant: NewTenant) -> CreateServerResult:
        """
        Persist a new tenant.

        Implementations must enforce uniqueness of admin_email and
        custom_domain atomically, so that two concurrent identical
        registrations produce exactly one record.

        Args:
            new_tenant: Validated and normalized tenant fields

        Returns:
            CreateServerResult with CREATED and the stored record, or a
            DUPLICATE_* outcome and no record
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_mail(self, to: str, subject: str, text: str, html: str) -> None:
        """
        Send a multipart (text + HTML) message.

        Args:
            to: Recipient email address
            subject: Subject line
            text: Plain text body
            html: HTML body

        Raises:
            Any exception from the transport; callers decide whether to swallow it.
        """
        ...


class ChallengeVerifier(Protocol):
    """Port interface for bot challenge verification."""

    def verify(self, token: str, remote_ip: str | None = None) -> bool:
        """
        Confirm a client-supplied challenge token.

        Returns True only on a positive answer from the challenge service.
        Never raises: every failure mode answers False.
        """
        ...
