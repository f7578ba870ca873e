import argparse
import asyncio
import logging
import sys
from datetime import date

from landlord.config import load_config
from landlord.errors import LandlordError
from landlord.services.dashboard_service import (
    get_lease_alerts, get_month_summary, get_payment_totals, get_portfolio_stats,
)
from landlord.services.data_service import DataService
from landlord.services.store import create_store
from landlord.services.sync_service import SyncCoordinator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="landlord", description="Rental portfolio dashboard core")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("summary", help="Print portfolio, payment and lease figures")

    generate = commands.add_parser("generate", help="Generate rent payments for one month")
    generate.add_argument("--month", type=int, help="1-12, defaults to the current month")
    generate.add_argument("--year", type=int, help="defaults to the current year")
    generate.add_argument("--force", action="store_true", help="include vacant properties")

    upcoming = commands.add_parser("generate-upcoming", help="Generate payments for the coming months")
    upcoming.add_argument("--months", type=int, default=6)

    commands.add_parser("sync", help="Pull everything from the backend")
    commands.add_parser("push", help="Overwrite the backend with the loaded data")
    commands.add_parser("provision", help="Create the backend tables or sheets")
    return parser


def print_summary(data: DataService) -> None:
    today = date.today()
    snapshot = data.snapshot()
    stats = get_portfolio_stats(snapshot)
    totals = get_payment_totals(snapshot.payments, today)
    month = get_month_summary(snapshot, today)

    print(f"🏠 Properties: {stats.total_properties} ({stats.occupied} occupied, {stats.vacant} vacant)")
    print(f"💰 Expected monthly revenue: {stats.expected_revenue:.2f}")
    print(f"🔧 Active repairs: {stats.active_repairs} ({stats.urgent_repairs} urgent)")
    print(f"📊 Collected: {totals.collected:.2f}, pending: {totals.pending:.2f}, "
          f"paid this month: {totals.paid_this_month:.2f}")
    print(f"📅 {month.month}: expected {month.expected:.2f}, received {month.received:.2f}, "
          f"missing {month.missing:.2f}")

    alerts = get_lease_alerts(snapshot.tenants, snapshot.properties, today)
    if alerts:
        print("\n⚠️ Lease alerts:")
        for alert in alerts:
            print(f"  - {alert.tenant_name}, {alert.property_address}: {alert.status} ({alert.lease_end})")


async def run_command(args) -> int:
    config = load_config()
    logging.getLogger().setLevel(config.LOG_LEVEL)
    store = create_store(config)
    data = DataService.from_config(config, store)
    sync = SyncCoordinator(data, store)

    try:
        if args.command == "provision":
            result = await sync.provision()
            print(result.message)
            return 0 if result.success else 1

        source = await data.load()
        logging.info(f"Data loaded from {source}")

        if args.command == "sync":
            result = await sync.sync_now()
            print(result.message)
            return 0 if result.success else 1

        if args.command == "push":
            result = await sync.push_now()
            print(result.message)
            return 0 if result.success else 1

        if args.command == "generate":
            today = date.today()
            result = await data.generate_payments_for_specific_month(
                args.month or today.month, args.year or today.year, force_create=args.force
            )
            print(f"✅ Generated {result.generated} payments for {result.month}")
            return 0

        if args.command == "generate-upcoming":
            results = await data.generate_upcoming_months(args.months)
            for result in results:
                print(f"✅ {result.month}: {result.generated} payments")
            return 0

        print_summary(data)
        return 0
    finally:
        if store is not None:
            await store.close()


def run() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stdout,
    )
    args = build_parser().parse_args()

    try:
        code = asyncio.run(run_command(args))
    except (LandlordError, ValueError) as e:
        logging.error(f"❌ {e}")
        code = 1
    except KeyboardInterrupt:
        logging.info("Stopped")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    run()
