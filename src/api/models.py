"""
API request and response models.

Pydantic models for FastAPI endpoint responses and OpenAPI schema generation.
Request validation lives in src.domain.validation because it must run after
the rate-limit check, not before the handler is entered.
"""

from pydantic import BaseModel, Field


class ServerSummary(BaseModel):
    """Identifier and display name of a created server."""

    id: str
    name: str


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    success: bool = True
    message: str
    server: ServerSummary


class ErrorResponse(BaseModel):
    """Standard error response model."""

    success: bool = False
    message: str


class FieldError(BaseModel):
    """One violated field of the signup form."""

    field: str
    message: str


class ValidationErrorResponse(ErrorResponse):
    """Error response listing every invalid field."""

    errors: list[FieldError]


class RateLimitResponse(ErrorResponse):
    """Error response for a rate-limited client."""

    retry_after_seconds: int = Field(serialization_alias="retryAfterSeconds")
