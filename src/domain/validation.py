"""
Registration form validation.

Turns a decoded JSON body into a RegistrationRequest, or raises
RegistrationValidationError listing every violated field (not just the
first one) with the wire field name and a message fit for the signup form.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .exceptions import RegistrationValidationError
from .ports import Plan

# Subdomains with operational meaning on the app domain. Letting a tenant
# claim one of these would let them impersonate the platform.
RESERVED_SUBDOMAINS = frozenset(
    {
        "admin",
        "administrator",
        "api",
        "app",
        "assets",
        "auth",
        "billing",
        "blog",
        "cdn",
        "dashboard",
        "dev",
        "docs",
        "ftp",
        "help",
        "internal",
        "login",
        "logout",
        "mail",
        "modl",
        "panel",
        "register",
        "root",
        "smtp",
        "staff",
        "static",
        "status",
        "support",
        "system",
        "test",
        "www",
    }
)

SUBDOMAIN_PATTERN = r"^[a-z0-9-]+$"

# Per-field messages keyed by pydantic error type; "*" covers any type.
_MESSAGES: dict[str, dict[str, str]] = {
    "email": {"*": "Please enter a valid email address"},
    "serverName": {
        "missing": "Server name is required (min 3 characters)",
        "string_too_short": "Server name is required (min 3 characters)",
        "string_too_long": "Server name must be less than 100 characters",
    },
    "customDomain": {
        "missing": "Subdomain is required (min 3 characters)",
        "string_too_short": "Subdomain is required (min 3 characters)",
        "string_too_long": "Subdomain must be less than 50 characters",
        "string_pattern_mismatch": (
            "Subdomain can only contain lowercase letters, numbers, and hyphens"
        ),
    },
    "plan": {"*": "Plan must be either 'free' or 'premium'"},
    "turnstileToken": {"*": "Security verification is required"},
}


def is_reserved_subdomain(subdomain: str) -> bool:
    """Case-insensitive membership test against RESERVED_SUBDOMAINS."""
    return subdomain.strip().lower() in RESERVED_SUBDOMAINS


class RegistrationRequest(BaseModel):
    """Validated signup form. Accepts camelCase wire names or field names."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, frozen=True)

    email: EmailStr
    server_name: str = Field(alias="serverName", min_length=3, max_length=100)
    custom_domain: str = Field(
        alias="customDomain", min_length=3, max_length=50, pattern=SUBDOMAIN_PATTERN
    )
    plan: Plan = Plan.FREE
    turnstile_token: str = Field(alias="turnstileToken", min_length=1)

    @field_validator("custom_domain")
    @classmethod
    def reject_reserved_subdomain(cls, value: str) -> str:
        if is_reserved_subdomain(value):
            raise PydanticCustomError(
                "reserved_subdomain",
                "This subdomain is reserved and cannot be used",
            )
        return value


def parse_registration(raw: Any) -> RegistrationRequest:
    """
    Validate a decoded request body.

    Anything that is not a JSON object (malformed body, array, null) is
    validated as an empty object so the client still receives a per-field
    error list, with an extra "body" entry explaining the shape problem.

    Raises:
        RegistrationValidationError: One entry per violated field
    """
    errors: list[dict[str, str]] = []
    if not isinstance(raw, dict):
        errors.append({"field": "body", "message": "Request body must be a JSON object"})
        raw = {}

    try:
        request = RegistrationRequest.model_validate(raw)
    except ValidationError as exc:
        errors.extend(_field_errors(exc))
        raise RegistrationValidationError(errors) from None

    if errors:
        raise RegistrationValidationError(errors)
    return request


def _field_errors(exc: ValidationError) -> list[dict[str, str]]:
    result = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        overrides = _MESSAGES.get(field, {})
        message = overrides.get(error["type"]) or overrides.get("*") or error["msg"]
        result.append({"field": field, "message": message})
    return result
