"""Utility rate table service."""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from rentarium.models import quantity_str
from rentarium.models.utility_rates import SINGLETON_ID, UtilityRates
from rentarium.services.audit_service import AuditService
from rentarium.services.config import get_settings
from rentarium.services.db import write_transaction
from rentarium.services.money import to_quantity

logger = logging.getLogger(__name__)


class RatesService:
    """Service for the singleton utility rate table.

    Rates are read by the bill generator at generation time. Updates merge
    over the current values; fields not provided keep their prior value.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def get(self) -> UtilityRates:
        """Get current utility rates, creating the row with configured defaults if missing.

        Returns:
            The UtilityRates singleton
        """
        rates = self.db.get(UtilityRates, SINGLETON_ID)
        if rates is not None:
            return rates

        settings = get_settings()
        with write_transaction(self.db):
            rates = UtilityRates(
                id=SINGLETON_ID,
                electricity_rate=to_quantity(settings.default_electricity_rate, "default electricity rate"),
                water_rate=to_quantity(settings.default_water_rate, "default water rate"),
            )
            self.db.add(rates)
            self.db.flush()
        logger.info(
            "Initialized utility rates: electricity=%s water=%s",
            rates.electricity_rate,
            rates.water_rate,
        )
        return rates

    def update(
        self,
        electricity: Decimal | float | str | None = None,
        water: Decimal | float | str | None = None,
        actor: str | None = None,
    ) -> UtilityRates:
        """Merge new rates over the current ones.

        Rates are kept at full precision. Zero and negative rates are accepted
        as given.

        Args:
            electricity: New price per kWh (None keeps current)
            water: New price per cubic meter (None keeps current)
            actor: Username of the administrator making the change

        Returns:
            Updated UtilityRates

        Raises:
            ValidationError: If a provided value is not numeric or has more than
                six decimal places
        """
        # Validate everything before touching the row
        new_electricity = to_quantity(electricity, "electricity rate") if electricity is not None else None
        new_water = to_quantity(water, "water rate") if water is not None else None

        rates = self.get()
        with write_transaction(self.db):
            changes = {}
            if new_electricity is not None:
                changes["electricity_rate"] = {
                    "old": quantity_str(rates.electricity_rate),
                    "new": quantity_str(new_electricity),
                }
                rates.electricity_rate = new_electricity
            if new_water is not None:
                changes["water_rate"] = {"old": quantity_str(rates.water_rate), "new": quantity_str(new_water)}
                rates.water_rate = new_water
            if changes:
                AuditService.log(self.db, "rates", rates.id, "update", actor=actor, changes=changes)

        logger.info("Utility rates updated by %s: %s", actor or "system", changes or "no changes")
        return rates


__all__ = ["RatesService"]
