"""
API v1 routes.

Defines the public REST endpoint for self-service server registration.
"""

import logging
from typing import Any, Union

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.api.dependencies import get_client_ip, get_registration_service
from src.api.models import (
    ErrorResponse,
    RateLimitResponse,
    RegisterResponse,
    ServerSummary,
    ValidationErrorResponse,
)
from src.domain.exceptions import (
    ChallengeVerificationFailed,
    DuplicateEntry,
    RateLimitExceeded,
    RegistrationValidationError,
)
from src.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

SUCCESS_MESSAGE = "Registration successful. Please check your email to verify your account."
CHALLENGE_FAILED_MESSAGE = "Security verification failed. Please try again."
INTERNAL_ERROR_MESSAGE = (
    "An internal server error occurred during registration. Please try again later. "
    "If the issue persists, contact support."
)

REGISTER_ROUTE_OPTIONS: dict[str, Any] = {
    "response_model": RegisterResponse,
    "status_code": status.HTTP_201_CREATED,
    "responses": {
        400: {
            "model": Union[ValidationErrorResponse, ErrorResponse],
            "description": "Invalid form fields (with an `errors` list) or failed "
            "security verification (message only)",
            "content": {
                "application/json": {
                    "examples": {
                        "validation": {
                            "summary": "Invalid form fields",
                            "value": {
                                "success": False,
                                "message": "Validation failed: customDomain: "
                                "This subdomain is reserved and cannot be used",
                                "errors": [
                                    {
                                        "field": "customDomain",
                                        "message": "This subdomain is reserved and cannot be used",
                                    }
                                ],
                            },
                        },
                        "challenge": {
                            "summary": "Failed security verification",
                            "value": {"success": False, "message": CHALLENGE_FAILED_MESSAGE},
                        },
                    }
                }
            },
        },
        409: {"model": ErrorResponse, "description": "Email or subdomain already in use"},
        429: {"model": RateLimitResponse, "description": "Too many registrations from this IP"},
        500: {"model": ErrorResponse, "description": "Unexpected failure"},
    },
    "summary": "Register a new server",
    "description": "Create a modl panel for a server. A verification link is emailed "
    "to the admin address; one registration per IP address every 10 minutes.",
    "openapi_extra": {
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "example": {
                        "email": "owner@example.com",
                        "serverName": "My Minecraft Server",
                        "customDomain": "myserver",
                        "plan": "free",
                        "turnstileToken": "<token from the Turnstile widget>",
                    }
                }
            },
        }
    },
}


async def register(
    request: Request,
    client_ip: str = Depends(get_client_ip),
    service: RegistrationService = Depends(get_registration_service),
) -> Any:
    """
    Register a new server and send the verification email.

    - **email**: Admin email address
    - **serverName**: Display name, 3-100 characters
    - **customDomain**: Panel subdomain, 3-50 of `a-z`, `0-9`, `-`
    - **plan**: `free` (default) or `premium`
    - **turnstileToken**: Token from the Cloudflare Turnstile widget

    The body is read raw so the rate limit applies before validation.
    """
    payload = await _read_json(request)

    try:
        tenant = await run_in_threadpool(service.register, payload, client_ip)
    except RateLimitExceeded as exc:
        minutes = exc.retry_after_minutes
        body = RateLimitResponse(
            message=(
                f"Rate limit exceeded. You can only register one server every "
                f"{exc.window_minutes} minutes. Please try again in {minutes} "
                f"minute{'' if minutes == 1 else 's'}."
            ),
            retry_after_seconds=exc.retry_after_seconds,
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=body.model_dump(by_alias=True),
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )
    except RegistrationValidationError as exc:
        body = ValidationErrorResponse(message=str(exc), errors=exc.errors)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())
    except ChallengeVerificationFailed:
        return _error(status.HTTP_400_BAD_REQUEST, CHALLENGE_FAILED_MESSAGE)
    except DuplicateEntry as exc:
        return _error(status.HTTP_409_CONFLICT, exc.message)
    except Exception:
        logger.exception("Registration error for IP %s", client_ip)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    return RegisterResponse(
        message=SUCCESS_MESSAGE,
        server=ServerSummary(id=tenant.id, name=tenant.server_name),
    )


router.add_api_route("/public/registration", register, methods=["POST"], **REGISTER_ROUTE_OPTIONS)


async def _read_json(request: Request) -> Any:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())
