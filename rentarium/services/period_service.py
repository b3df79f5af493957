"""Rent period resolution: lease-anchored billing months and due dates.

Months are identified as "YYYY-MM" strings throughout the ledger.
All functions take an optional ``today`` so callers (and tests) control the clock.
"""

import calendar
import logging
import re
from datetime import date

from rentarium.models.tenant import Tenant
from rentarium.services.errors import ValidationError

logger = logging.getLogger(__name__)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

RENT_DUE_DAY = 1
BILL_DUE_DAY = 15


def parse_month(month: str) -> tuple[int, int]:
    """Split a "YYYY-MM" string into (year, month).

    Raises:
        ValidationError: If the value is not a valid YYYY-MM month
    """
    match = _MONTH_RE.match(month or "")
    if not match:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM")
    year, month_num = int(match.group(1)), int(match.group(2))
    if not 1 <= month_num <= 12:
        raise ValidationError(f"Invalid month '{month}', month must be 01-12")
    return year, month_num


def format_month(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def current_month(today: date | None = None) -> str:
    """Calendar month of today as YYYY-MM."""
    return format_month(today or date.today())


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(index, 12)
    last_day = calendar.monthrange(year, month_index + 1)[1]
    return date(year, month_index + 1, min(value.day, last_day))


def rent_due_date(month: str) -> date:
    """Rent is due on the 1st of its month."""
    year, month_num = parse_month(month)
    return date(year, month_num, RENT_DUE_DAY)


def bill_due_date(month: str) -> date:
    """Utility bills are due on the 15th of their month."""
    year, month_num = parse_month(month)
    return date(year, month_num, BILL_DUE_DAY)


def current_period(tenant: Tenant, today: date | None = None) -> str | None:
    """Resolve the tenant's active payment period.

    Counts whole calendar months between lease start and today, then advances
    the lease-start month by that count. The result is the first-of-month
    anchor of the active period, formatted YYYY-MM.

    Args:
        tenant: Tenant whose lease anchors the period
        today: Reference date (default: date.today())

    Returns:
        Period as YYYY-MM, or None if the tenant has no lease start
    """
    if tenant is None or tenant.lease_start is None:
        return None

    today = today or date.today()
    start = tenant.lease_start
    months_since_start = (today.year - start.year) * 12 + (today.month - start.month)
    anchor = add_months(date(start.year, start.month, 1), months_since_start)
    return format_month(anchor)


def next_due_date(tenant: Tenant, today: date | None = None) -> date:
    """Next rent due date for a tenant.

    - Lease not started yet: the lease start date
    - Lease already ended: the lease end date
    - Otherwise: the lease-start day of month, this month if still ahead of
      today, else next month, never later than lease end
    - No lease start at all: the 1st of next month
    """
    today = today or date.today()

    if tenant is None or tenant.lease_start is None:
        return add_months(date(today.year, today.month, 1), 1)

    lease_start = tenant.lease_start
    lease_end = tenant.lease_end

    if lease_start > today:
        return lease_start

    if lease_end and today > lease_end:
        return lease_end

    this_month = date(today.year, today.month, 1)
    next_due = _on_lease_day(this_month, lease_start.day)
    if next_due <= today:
        next_due = _on_lease_day(add_months(this_month, 1), lease_start.day)

    if lease_end and next_due > lease_end:
        return lease_end

    return next_due


def _on_lease_day(month_start: date, day: int) -> date:
    last_day = calendar.monthrange(month_start.year, month_start.month)[1]
    return month_start.replace(day=min(day, last_day))


__all__ = [
    "parse_month",
    "format_month",
    "current_month",
    "add_months",
    "rent_due_date",
    "bill_due_date",
    "current_period",
    "next_due_date",
]
