"""
Domain layer - Pure business logic with no web framework or database imports.

This package contains the server registration flow, the per-IP rate
limiter and form validation. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    ChallengeVerificationFailed,
    DuplicateEntry,
    RateLimitExceeded,
    RegistrationError,
    RegistrationValidationError,
)
from .ports import (
    ChallengeVerifier,
    CreateOutcome,
    CreateServerResult,
    EmailSender,
    NewTenant,
    Plan,
    TenantRecord,
    TenantRepository,
)
from .rate_limit import RateLimitDecision, RegistrationRateLimiter
from .registration import RegistrationService
from .validation import RESERVED_SUBDOMAINS, RegistrationRequest, parse_registration

__all__ = [
    "RESERVED_SUBDOMAINS",
    "ChallengeVerificationFailed",
    "ChallengeVerifier",
    "CreateOutcome",
    "CreateServerResult",
    "DuplicateEntry",
    "EmailSender",
    "NewTenant",
    "Plan",
    "RateLimitDecision",
    "RateLimitExceeded",
    "RegistrationError",
    "RegistrationRateLimiter",
    "RegistrationRequest",
    "RegistrationService",
    "RegistrationValidationError",
    "TenantRecord",
    "TenantRepository",
    "parse_registration",
]
