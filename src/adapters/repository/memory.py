"""
In-memory repository adapter - Implements TenantRepository protocol.

Keeps tenants in a dict for local development (TENANT_STORE=memory) and
for exercising the full HTTP flow without PostgreSQL. Uniqueness is
checked and the row inserted under one lock, mirroring the database's
unique constraints.
"""

import threading
import uuid
from datetime import datetime, timezone

from src.domain.ports import CreateOutcome, CreateServerResult, NewTenant, TenantRecord


class InMemoryTenantRepository:
    """
    Implements TenantRepository protocol with a lock-guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Data is lost when the process exits.
    """

    def __init__(self) -> None:
        self._tenants: dict[str, TenantRecord] = {}
        self._lock = threading.Lock()

    def create_server(self, new_tenant: NewTenant) -> CreateServerResult:
        with self._lock:
            for tenant in self._tenants.values():
                if tenant.admin_email == new_tenant.admin_email:
                    return CreateServerResult(outcome=CreateOutcome.DUPLICATE_EMAIL)
                if tenant.custom_domain == new_tenant.custom_domain:
                    return CreateServerResult(outcome=CreateOutcome.DUPLICATE_SUBDOMAIN)

            tenant = TenantRecord(
                id=str(uuid.uuid4()),
                admin_email=new_tenant.admin_email,
                server_name=new_tenant.server_name,
                custom_domain=new_tenant.custom_domain,
                plan=new_tenant.plan,
                email_verification_token=new_tenant.email_verification_token,
                email_verified=new_tenant.email_verified,
                created_at=datetime.now(timezone.utc),
            )
            self._tenants[tenant.id] = tenant
            return CreateServerResult(outcome=CreateOutcome.CREATED, tenant=tenant)

    def list_servers(self) -> list[TenantRecord]:
        """Snapshot of stored tenants, oldest first."""
        with self._lock:
            return sorted(self._tenants.values(), key=lambda t: t.created_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tenants)
