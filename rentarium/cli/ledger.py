"""Admin CLI for the rent and utility ledger.

Usage:
    rentarium rates show
    rentarium rates set --electricity 12.00 --water 25.00
    rentarium bill generate TENANT_ID 2024-03 120 10
    rentarium pay rent TENANT_ID 15,000 --method gcash
    rentarium pay bill TENANT_ID BILL_ID 1630 --method cash --status verified
    rentarium payment status PAYMENT_ID verified --notes "GCash receipt checked"
    rentarium payment list --status pending
    rentarium tenant summary TENANT_ID --month 2024-03
    rentarium tenant terminate TENANT_ID --by admin --reason "Lease ended"
    rentarium stats

Exit Codes:
    0 - Success
    1 - Ledger error (validation, not found, duplicate payment, invalid state)

Logging:
    LOG_LEVEL controls verbosity; output goes to stdout and LOG_FILE
"""

import argparse
import json
import logging
import sys

from babel.numbers import NumberFormatError
from dotenv import load_dotenv
from sqlalchemy.orm import Session

from rentarium.models import quantity_str
from rentarium.models.payment import PaymentStatus
from rentarium.services.bills_service import BillsService
from rentarium.services.config import get_settings
from rentarium.services.db import create_schema
from rentarium.services.errors import LedgerError, ValidationError
from rentarium.services.events import EventBus
from rentarium.services.ledger_service import LedgerService
from rentarium.services.locale_service import format_amount, get_currency_symbol, parse_decimal
from rentarium.services.logging import setup_logging
from rentarium.services.payment_service import PaymentService
from rentarium.services.rates_service import RatesService
from rentarium.services.tenant_service import TenantService
from rentarium.services.unit_service import UnitService, register_unit_handlers

logger = logging.getLogger(__name__)


def _amount(value: str):
    """Parse a locale-formatted amount ("15,000.50")."""
    try:
        return parse_decimal(value)
    except NumberFormatError as e:
        raise ValidationError(f"'{value}' is not a valid amount") from e


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rentarium", description="Rent and utility ledger")
    parser.add_argument("--actor", default="admin", help="Username recorded in the audit log")
    commands = parser.add_subparsers(dest="command", required=True)

    # rates
    rates = commands.add_parser("rates", help="Utility rates")
    rates_cmd = rates.add_subparsers(dest="action", required=True)
    rates_cmd.add_parser("show")
    rates_set = rates_cmd.add_parser("set")
    rates_set.add_argument("--electricity", help="Price per kWh")
    rates_set.add_argument("--water", help="Price per cubic meter")

    # bill
    bill = commands.add_parser("bill", help="Utility bills")
    bill_cmd = bill.add_subparsers(dest="action", required=True)
    bill_generate = bill_cmd.add_parser("generate")
    bill_generate.add_argument("tenant_id", type=int)
    bill_generate.add_argument("month", help="YYYY-MM")
    bill_generate.add_argument("electricity_kwh")
    bill_generate.add_argument("water_cubic")

    # pay
    pay = commands.add_parser("pay", help="Submit a payment")
    pay_cmd = pay.add_subparsers(dest="action", required=True)
    pay_rent = pay_cmd.add_parser("rent")
    pay_rent.add_argument("tenant_id", type=int)
    pay_rent.add_argument("amount")
    pay_rent.add_argument("--month", help="YYYY-MM (default: tenant's current period)")
    pay_bill = pay_cmd.add_parser("bill")
    pay_bill.add_argument("tenant_id", type=int)
    pay_bill.add_argument("bill_id", type=int)
    pay_bill.add_argument("amount")
    for sub in (pay_rent, pay_bill):
        sub.add_argument("--method", required=True, help="gcash, bpi, cash, ...")
        sub.add_argument("--notes", default="")
        sub.add_argument("--reference")
        sub.add_argument(
            "--status",
            default=PaymentStatus.PENDING.value,
            choices=[PaymentStatus.PENDING.value, PaymentStatus.VERIFIED.value, PaymentStatus.COMPLETED.value],
        )

    # payment
    payment = commands.add_parser("payment", help="Review payments")
    payment_cmd = payment.add_subparsers(dest="action", required=True)
    payment_status = payment_cmd.add_parser("status")
    payment_status.add_argument("payment_id", type=int)
    payment_status.add_argument("status", choices=[s.value for s in PaymentStatus])
    payment_status.add_argument("--notes", default="", help="Admin notes")
    payment_list = payment_cmd.add_parser("list")
    payment_list.add_argument("--status", default="all")
    payment_list.add_argument("--method", default="all")
    payment_list.add_argument("--type", dest="payment_type", default="all")
    payment_list.add_argument("--search")

    # tenant
    tenant = commands.add_parser("tenant", help="Tenant standing and contracts")
    tenant_cmd = tenant.add_subparsers(dest="action", required=True)
    tenant_summary = tenant_cmd.add_parser("summary")
    tenant_summary.add_argument("tenant_id", type=int)
    tenant_summary.add_argument("--month", help="YYYY-MM (default: this month)")
    tenant_terminate = tenant_cmd.add_parser("terminate")
    tenant_terminate.add_argument("tenant_id", type=int)
    tenant_terminate.add_argument("--by", dest="terminated_by", required=True)
    tenant_terminate.add_argument("--reason")

    commands.add_parser("stats", help="Payment and occupancy statistics")
    return parser


def run(args: argparse.Namespace, db: Session) -> int:
    """Execute a parsed command against a session.

    Returns:
        Exit code: 0 for success, 1 for a ledger error
    """
    try:
        _dispatch(args, db)
        return 0
    except LedgerError as e:
        logger.warning("%s %s failed: %s", args.command, getattr(args, "action", ""), e.message)
        print(f"Error ({e.code}): {e.message}", file=sys.stderr)
        return 1


def _dispatch(args: argparse.Namespace, db: Session) -> None:
    if args.command == "rates":
        rates_service = RatesService(db)
        if args.action == "set":
            rates = rates_service.update(
                electricity=_amount(args.electricity) if args.electricity else None,
                water=_amount(args.water) if args.water else None,
                actor=args.actor,
            )
        else:
            rates = rates_service.get()
        symbol = get_currency_symbol()
        print(f"Electricity: {symbol}{quantity_str(rates.electricity_rate)} / kWh")
        print(f"Water:       {symbol}{quantity_str(rates.water_rate)} / m3")

    elif args.command == "bill":
        bill = BillsService(db).generate_bill(
            args.tenant_id,
            args.month,
            _amount(args.electricity_kwh),
            _amount(args.water_cubic),
            actor=args.actor,
        )
        _print_json(bill.to_dict())

    elif args.command == "pay":
        payments = PaymentService(db)
        if args.action == "rent":
            payment = payments.create_rent_payment(
                args.tenant_id,
                _amount(args.amount),
                args.method,
                month=args.month,
                notes=args.notes,
                status=args.status,
                reference=args.reference,
                actor=args.actor,
            )
        else:
            payment = payments.create_bill_payment(
                args.tenant_id,
                args.bill_id,
                _amount(args.amount),
                args.method,
                notes=args.notes,
                status=args.status,
                reference=args.reference,
                actor=args.actor,
            )
        _print_json(payment.to_dict())

    elif args.command == "payment":
        payments = PaymentService(db)
        if args.action == "status":
            payment = payments.set_status(
                args.payment_id, args.status, admin_notes=args.notes, actor=args.actor
            )
            _print_json(payment.to_dict())
        else:
            for payment in payments.filter_payments(
                status=args.status,
                method=args.method,
                payment_type=args.payment_type,
                search=args.search,
            ):
                print(
                    f"{payment.code}  {payment.month}  {payment.payment_type.label:<14} "
                    f"{payment.tenant_name:<20} {format_amount(payment.amount):>14}  "
                    f"{payment.method:<6} {payment.status.value}"
                )

    elif args.command == "tenant":
        if args.action == "summary":
            ledger = LedgerService(db)
            summary = ledger.tenant_summary(args.tenant_id, month=args.month)
            _print_json(
                {
                    "rent": summary.rent.to_dict(),
                    "bill": summary.bill.to_dict() if summary.bill else None,
                    "totalDue": format_amount(summary.total_due),
                }
            )
            for notification in ledger.notifications(args.tenant_id, month=summary.rent.month):
                print(f"[{notification.type}] {notification.title}: {notification.message}")
        else:
            bus = EventBus()
            register_unit_handlers(bus, db)
            tenant = TenantService(db, bus).terminate(
                args.tenant_id, args.terminated_by, reason=args.reason
            )
            print(f"Tenant {tenant.id} ({tenant.name}) terminated on {tenant.termination_date}")

    elif args.command == "stats":
        stats = PaymentService(db).payment_stats()
        print(f"Payments:  {stats.total} total, {stats.pending} pending, "
              f"{stats.verified} verified, {stats.rejected} rejected")
        print(f"Collected: {format_amount(stats.paid_amount)}")
        print(f"Pending:   {format_amount(stats.pending_amount)}")
        occupancy = UnitService(db).occupancy_stats()
        print(f"Units:     {occupancy.occupied}/{occupancy.total} occupied "
              f"({occupancy.occupancy_rate}%), {occupancy.maintenance} in maintenance")


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the ledger CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    load_dotenv()
    args = build_parser().parse_args(argv)

    from rentarium.services import SessionLocal, engine

    setup_logging(get_settings().log_file)
    create_schema(engine)

    db = SessionLocal()
    try:
        return run(args, db)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
