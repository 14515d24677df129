"""
Legacy API routes.

The signup page originally posted to POST /api/register. The alias is
kept so older clients keep working; it shares the v1 handler.
"""

from fastapi import APIRouter

from src.api.v1.routes import REGISTER_ROUTE_OPTIONS, register

router = APIRouter(tags=["legacy"])

router.add_api_route(
    "/register",
    register,
    methods=["POST"],
    deprecated=True,
    **REGISTER_ROUTE_OPTIONS,
)
