"""Repository adapters - Tenant store implementations."""

from .memory import InMemoryTenantRepository
from .postgres import PostgresTenantRepository, run_migrations

__all__ = ["InMemoryTenantRepository", "PostgresTenantRepository", "run_migrations"]
