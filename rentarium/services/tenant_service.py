"""Tenant directory: lookup, session identity and contract termination."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentarium.models.tenant import Tenant, TenantStatus
from rentarium.services.audit_service import AuditService
from rentarium.services.db import write_transaction
from rentarium.services.errors import InvalidStateError, NotFoundError, ValidationError
from rentarium.services.events import EventBus, TenantTerminated

logger = logging.getLogger(__name__)


class TenantService:
    """Service for tenant-related operations."""

    def __init__(self, db_session: Session, bus: EventBus | None = None):
        """Initialize with database session and the bus termination is published on."""
        self.db = db_session
        self.bus = bus or EventBus()

    def get(self, tenant_id: int) -> Tenant:
        """
        Get tenant by ID.

        Raises:
            NotFoundError: If no such tenant exists
        """
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    def get_by_username(self, username: str) -> Tenant | None:
        return self.db.execute(
            select(Tenant).where(Tenant.username == username)
        ).scalar_one_or_none()

    def resolve_current_tenant(self, username: str | None) -> Tenant:
        """
        Resolve the logged-in tenant from the session username.

        Tenant-initiated payments default to this identity.

        Raises:
            ValidationError: If no username is given
            NotFoundError: If the username does not belong to a tenant
        """
        if not username:
            raise ValidationError("No tenant session")
        tenant = self.get_by_username(username)
        if tenant is None:
            raise NotFoundError(f"No tenant with username '{username}'")
        return tenant

    def list_tenants(self, status: TenantStatus | None = None) -> list[Tenant]:
        stmt = select(Tenant).order_by(Tenant.id.asc())
        if status is not None:
            stmt = stmt.where(Tenant.status == status)
        return list(self.db.execute(stmt).scalars())

    def terminate(
        self,
        tenant_id: int,
        terminated_by: str,
        reason: str | None = None,
        today: date | None = None,
    ) -> Tenant:
        """
        Terminate a tenant's contract and publish TenantTerminated.

        Subscribers (unit occupancy) run inside the same transaction, so a
        failing handler rolls the termination back.

        Raises:
            NotFoundError: Unknown tenant
            InvalidStateError: Tenant already terminated
            ValidationError: terminated_by is empty
        """
        if not terminated_by or not terminated_by.strip():
            raise ValidationError("terminated_by is required")
        tenant = self.get(tenant_id)
        if tenant.status == TenantStatus.TERMINATED:
            raise InvalidStateError(f"Tenant {tenant_id} is already terminated")

        termination_date = today or date.today()
        with write_transaction(self.db):
            old_status = tenant.status
            tenant.status = TenantStatus.TERMINATED
            tenant.terminated_by = terminated_by.strip()
            tenant.termination_date = termination_date
            tenant.termination_reason = reason
            AuditService.log(
                self.db,
                "tenant",
                tenant.id,
                "terminate",
                actor=tenant.terminated_by,
                changes={"old": old_status.value, "reason": reason},
            )
            self.db.flush()

            self.bus.publish(
                TenantTerminated(
                    tenant_id=tenant.id,
                    tenant_name=tenant.name,
                    terminated_by=tenant.terminated_by,
                    termination_date=termination_date,
                    reason=reason,
                )
            )

        logger.info("Tenant %d (%s) terminated by %s", tenant.id, tenant.name, tenant.terminated_by)
        return tenant


__all__ = ["TenantService"]
