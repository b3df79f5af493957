"""Unit occupancy: assignment, auto-vacate on termination, statistics."""

import logging
from datetime import datetime, timezone
from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentarium.models.tenant import Tenant, TenantStatus
from rentarium.models.unit import Unit, UnitStatus
from rentarium.services.audit_service import AuditService
from rentarium.services.db import write_transaction
from rentarium.services.errors import InvalidStateError, NotFoundError
from rentarium.services.events import EventBus, TenantTerminated

logger = logging.getLogger(__name__)


class OccupancyStats(NamedTuple):
    total: int
    occupied: int
    vacant: int
    maintenance: int
    occupancy_rate: int
    """Occupied share of all units, whole percent."""


class UnitService:
    """Service for unit occupancy."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_unit(self, unit_number: str) -> Unit:
        unit = self.db.execute(
            select(Unit).where(Unit.unit_number == unit_number)
        ).scalar_one_or_none()
        if unit is None:
            raise NotFoundError(f"Unit {unit_number} not found")
        return unit

    def assign_tenant(self, unit_number: str, tenant_id: int, actor: str | None = None) -> Unit:
        """
        Move a tenant into a vacant unit.

        Raises:
            NotFoundError: Unknown unit or tenant
            InvalidStateError: Unit not vacant, or tenant terminated
        """
        unit = self.get_unit(unit_number)
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        if unit.status != UnitStatus.VACANT:
            raise InvalidStateError(f"Unit {unit_number} is {unit.status.value}")
        if tenant.status == TenantStatus.TERMINATED:
            raise InvalidStateError(f"Tenant {tenant_id} is terminated")

        with write_transaction(self.db):
            unit.status = UnitStatus.OCCUPIED
            unit.tenant_id = tenant.id
            unit.vacated_at = None
            unit.vacate_reason = None
            tenant.unit_number = unit.unit_number
            AuditService.log(
                self.db, "unit", unit.id, "assign", actor=actor, changes={"tenant_id": tenant.id}
            )

        logger.info("Unit %s assigned to tenant %d", unit_number, tenant.id)
        return unit

    def on_tenant_terminated(self, event: TenantTerminated) -> list[Unit]:
        """Vacate every unit held by the terminated tenant."""
        units = list(
            self.db.execute(select(Unit).where(Unit.tenant_id == event.tenant_id)).scalars()
        )
        if not units:
            logger.info("Tenant %d terminated with no unit to vacate", event.tenant_id)
            return []

        reason = f"Tenant {event.tenant_name} contract terminated"
        with write_transaction(self.db):
            for unit in units:
                unit.status = UnitStatus.VACANT
                unit.tenant_id = None
                unit.vacated_at = datetime.now(timezone.utc)
                unit.vacate_reason = reason
                AuditService.log(
                    self.db,
                    "unit",
                    unit.id,
                    "auto_vacate",
                    actor=event.terminated_by,
                    changes={
                        "tenant_id": event.tenant_id,
                        "termination_date": event.termination_date.isoformat(),
                        "reason": event.reason,
                    },
                )
                logger.info("Auto-vacated unit %s: %s", unit.unit_number, reason)

        return units

    def occupancy_stats(self) -> OccupancyStats:
        units = list(self.db.execute(select(Unit)).scalars())
        total = len(units)
        occupied = sum(1 for u in units if u.status == UnitStatus.OCCUPIED)
        vacant = sum(1 for u in units if u.status == UnitStatus.VACANT)
        maintenance = sum(1 for u in units if u.status == UnitStatus.MAINTENANCE)
        rate = int(occupied * 100 / total + 0.5) if total else 0
        return OccupancyStats(total, occupied, vacant, maintenance, rate)


def register_unit_handlers(bus: EventBus, db_session: Session) -> UnitService:
    """Subscribe unit occupancy to tenant events on the given bus."""
    service = UnitService(db_session)
    bus.subscribe(TenantTerminated, service.on_tenant_terminated)
    return service


__all__ = ["UnitService", "OccupancyStats", "register_unit_handlers"]
