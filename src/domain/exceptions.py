"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each one maps onto a single HTTP outcome in the API layer.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class RegistrationValidationError(RegistrationError):
    """Submitted form failed validation. Carries every field error."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        summary = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Validation failed: {summary}")


class ChallengeVerificationFailed(RegistrationError):
    """Turnstile token was rejected or could not be verified."""

    pass


class DuplicateEntry(RegistrationError):
    """Email or subdomain is already used by another tenant."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


class RateLimitExceeded(RegistrationError):
    """Client IP registered a server too recently."""

    def __init__(self, retry_after_seconds: int, window_seconds: int = 600) -> None:
        self.retry_after_seconds = retry_after_seconds
        self.window_seconds = window_seconds
        super().__init__(f"Retry after {retry_after_seconds} seconds")

    @property
    def retry_after_minutes(self) -> int:
        return -(-self.retry_after_seconds // 60)

    @property
    def window_minutes(self) -> int:
        return max(1, self.window_seconds // 60)
