"""Integration test: terminating a tenant vacates their unit in the same call."""

from datetime import date
from decimal import Decimal

import pytest

from rentarium.models.audit_log import AuditLog
from rentarium.models.tenant import TenantStatus
from rentarium.models.unit import Unit, UnitStatus
from rentarium.services.events import EventBus
from rentarium.services.payment_service import PaymentService
from rentarium.services.tenant_service import TenantService
from rentarium.services.unit_service import register_unit_handlers


@pytest.mark.integration
def test_termination_vacates_unit_and_keeps_ledger(db_session, tenant, today):
    db_session.add_all(
        [
            Unit(unit_number="A-101", status=UnitStatus.VACANT),
            Unit(unit_number="B-202", status=UnitStatus.VACANT),
        ]
    )
    db_session.commit()

    bus = EventBus()
    units = register_unit_handlers(bus, db_session)
    tenants = TenantService(db_session, bus)
    units.assign_tenant("A-101", tenant.id, actor="admin")
    assert units.occupancy_stats().occupancy_rate == 50

    payment = PaymentService(db_session).create_rent_payment(
        tenant.id, 15000, "gcash", status="verified", today=today
    )

    tenants.terminate(tenant.id, "admin", reason="Contract ended early", today=date(2024, 3, 31))

    assert tenants.get(tenant.id).status == TenantStatus.TERMINATED
    unit = units.get_unit("A-101")
    assert unit.status == UnitStatus.VACANT
    assert unit.tenant_id is None
    assert units.occupancy_stats().occupied == 0

    # Payments and ledger history survive termination
    assert PaymentService(db_session).get_payment(payment.id).amount == Decimal("15000.00")

    actions = {a.action for a in db_session.query(AuditLog).all()}
    assert {"assign", "terminate", "auto_vacate"} <= actions
