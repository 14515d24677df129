"""
PostgreSQL repository adapter - Implements TenantRepository protocol.

This module provides the PostgreSQL implementation of the domain's
tenant store port using psycopg3 with raw SQL.

Uniqueness:
-----------
The servers table carries UNIQUE constraints on admin_email and
custom_domain. Two concurrent registrations for the same email or
subdomain race on the INSERT; the database lets exactly one through and
the loser gets a UniqueViolation, which is translated into a
CreateOutcome by constraint name. No application-level check-then-insert.
"""

import logging
from pathlib import Path

from psycopg.errors import UniqueViolation
from psycopg_pool import ConnectionPool

from src.domain.ports import CreateOutcome, CreateServerResult, NewTenant, TenantRecord

logger = logging.getLogger(__name__)

# src/adapters/repository/postgres.py -> <project root>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"

_CONSTRAINT_OUTCOMES = {
    "servers_admin_email_key": CreateOutcome.DUPLICATE_EMAIL,
    "servers_custom_domain_key": CreateOutcome.DUPLICATE_SUBDOMAIN,
}


class PostgresTenantRepository:
    """
    Implements TenantRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create_server(self, new_tenant: NewTenant) -> CreateServerResult:
        """
        Insert a new tenant row.

        Args:
            new_tenant: Normalized tenant fields from the domain layer

        Returns:
            CREATED with the stored record, or DUPLICATE_EMAIL /
            DUPLICATE_SUBDOMAIN when a unique constraint fires
        """
        sql = """
            INSERT INTO servers (
                admin_email, server_name, custom_domain, plan,
                email_verification_token, email_verified
            )
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at
        """
        params = (
            new_tenant.admin_email,
            new_tenant.server_name,
            new_tenant.custom_domain,
            new_tenant.plan.value,
            new_tenant.email_verification_token,
            new_tenant.email_verified,
        )

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
                conn.commit()
        except UniqueViolation as exc:
            # The pool rolled the transaction back on the way out
            constraint = exc.diag.constraint_name
            outcome = _CONSTRAINT_OUTCOMES.get(constraint or "")
            if outcome is None:
                raise
            logger.info("Unique constraint %s rejected new server", constraint)
            return CreateServerResult(outcome=outcome)

        tenant = TenantRecord(
            id=str(row[0]),
            admin_email=new_tenant.admin_email,
            server_name=new_tenant.server_name,
            custom_domain=new_tenant.custom_domain,
            plan=new_tenant.plan,
            email_verification_token=new_tenant.email_verification_token,
            email_verified=new_tenant.email_verified,
            created_at=row[1],
        )
        return CreateServerResult(outcome=CreateOutcome.CREATED, tenant=tenant)


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Apply every *.sql file in `migrations_dir`, in filename order.

    Files must be idempotent (IF NOT EXISTS); they run on every startup.

    Raises:
        RuntimeError: A migration failed; the app should not start
    """
    if not migrations_dir.is_dir():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.info("No migration files in %s", migrations_dir)
        return

    for sql_file in sql_files:
        logger.info("Applying migration %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text(encoding="utf-8"))
        except Exception as exc:
            logger.error("Migration %s failed: %s", sql_file.name, exc)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from exc

    logger.info("Applied %d migration(s)", len(sql_files))
