#!/usr/bin/env python3
"""
Unified CLI for fleet preventive maintenance scheduling.

Commands:
  status   - Show vehicles in the shop and upcoming scheduled visits
  history  - View maintenance history for a vehicle
  depots   - List depots with their daily capacity pool
  next     - Preview the next preventive date for a vehicle
  close    - Close an open ticket and schedule the next preventive visit
  plan     - Schedule (or preview) the next visit for every active vehicle
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from dateutil.parser import isoparse

from fleetsched import (
    CapacityPolicy,
    Fleet,
    FleetStore,
    MaintenanceRecord,
    SchedulingError,
    book_fleet,
    close_and_reschedule,
    load_config,
    load_fleet,
    plan_fleet,
    plan_next,
)
from fleetsched.booking import FleetPlan, plannable_vehicles

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format an odometer reading for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_date(day: Optional[date]) -> str:
    """Format a date for display."""
    return day.isoformat() if day is not None else "-"


def format_duration(days: Optional[int]) -> str:
    """Format a ticket duration (e.g., '3d'); '-' while open."""
    return f"{days}d" if days is not None else "-"


def format_relative(start: date, today: date) -> str:
    """Days in the shop for started tickets, 'in Nd' for future ones."""
    delta = (start - today).days
    if delta > 0:
        return f"in {delta}d"
    return f"{-delta}d in shop"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_date_arg(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return isoparse(value).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_tasks(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated task list."""
    if not value:
        return None
    return [t.strip() for t in value.split(",") if t.strip()]


def depot_name(fleet: Fleet, depot_id: Optional[int]) -> str:
    depot = fleet.get_depot(depot_id)
    return depot.name if depot else "-"


# =============================================================================
# Status command
# =============================================================================


def make_open_table(
    records: List[MaintenanceRecord], fleet: Fleet, today: date
) -> List[List[str]]:
    """Convert open records to table rows."""
    rows = []
    for record in records:
        vehicle = fleet.get_vehicle(record.vehicle_id)
        rows.append(
            [
                str(record.record_id),
                vehicle.plate if vehicle else str(record.vehicle_id),
                depot_name(fleet, record.depot_id),
                record.kind.value,
                format_date(record.start_date),
                format_relative(record.start_date, today),
                truncate(record.reason),
            ]
        )
    return rows


def cmd_status(args, fleet: Fleet) -> int:
    """Show vehicles in the shop and upcoming scheduled visits."""
    today = args.today
    in_shop = fleet.in_shop_records(today)
    scheduled = fleet.scheduled_records(today)

    print(f"Fleet: {len(fleet.vehicles)} vehicles, {len(fleet.depots)} depots (as of {today})")
    print(f"Open tickets: {len(in_shop) + len(scheduled)}")
    print()

    headers = ["Id", "Plate", "Depot", "Kind", "Start", "When", "Reason"]

    if in_shop:
        print("IN SHOP:")
        print(tabulate(make_open_table(in_shop, fleet, today), headers=headers, tablefmt="simple"))
        print()

    if scheduled:
        print("SCHEDULED:")
        print(tabulate(make_open_table(scheduled, fleet, today), headers=headers, tablefmt="simple"))
        print()

    unscheduled = plannable_vehicles(fleet)
    if unscheduled:
        print(f"UNSCHEDULED ({len(unscheduled)} active vehicles without an open ticket):")
        for vehicle in unscheduled:
            print(f"  {vehicle.plate}")
        print()

    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(records: List[MaintenanceRecord]) -> List[List[str]]:
    """Convert maintenance records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                str(record.record_id),
                record.kind.value,
                format_date(record.start_date),
                format_date(record.end_date),
                format_duration(record.duration_days),
                format_km(record.odometer),
                ", ".join(record.tasks) or "-",
                truncate(record.reason),
            ]
        )
    return rows


def cmd_history(args, fleet: Fleet) -> int:
    """View maintenance history for a vehicle."""
    vehicle = fleet.get_vehicle_by_plate(args.plate)
    if vehicle is None:
        print(f"Error: Unknown plate '{args.plate}'")
        return 1

    records = fleet.history_for(vehicle.vehicle_id)
    if args.kind:
        records = [r for r in records if r.kind.value == args.kind]

    print(f"Vehicle: {vehicle.plate} ({vehicle.status.value})")
    print(f"Depot: {depot_name(fleet, vehicle.depot_id)}")
    print(f"Odometer: {format_km(vehicle.odometer)}")
    print(f"Total visits: {len(fleet.history_for(vehicle.vehicle_id))}")
    if args.kind:
        print(f"Showing: {len(records)} (filtered)")
    print()

    if not records:
        print("No maintenance records found.")
        return 0

    headers = ["Id", "Kind", "Start", "End", "Duration", "Km", "Tasks", "Reason"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Depots command
# =============================================================================


def make_depot_table(fleet: Fleet, policy: CapacityPolicy) -> List[List[str]]:
    """Convert depots to table rows with their capacity pool."""
    rows = []
    for depot in sorted(fleet.depots, key=lambda d: d.name):
        pool = policy.pool_for(depot.depot_id)
        vehicles = sum(1 for v in fleet.vehicles if v.depot_id == depot.depot_id)
        rows.append(
            [
                str(depot.depot_id),
                depot.name,
                pool.key,
                str(pool.capacity),
                str(policy.separation_for(pool)),
                str(vehicles),
                depot.email or "-",
            ]
        )
    return rows


def cmd_depots(args, fleet: Fleet) -> int:
    """List depots with their daily capacity pool."""
    policy = CapacityPolicy(args.config, fleet.depots)
    print(f"Depots: {len(fleet.depots)}")
    print()
    headers = ["Id", "Name", "Pool", "Capacity/day", "Min spacing", "Vehicles", "Email"]
    print(tabulate(make_depot_table(fleet, policy), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Next command
# =============================================================================


def cmd_next(args, fleet: Fleet) -> int:
    """Preview the next preventive date for a vehicle."""
    vehicle = fleet.get_vehicle_by_plate(args.plate)
    if vehicle is None:
        print(f"Error: Unknown plate '{args.plate}'")
        return 1

    decision = plan_next(
        vehicle,
        fleet.history_for(vehicle.vehicle_id),
        fleet.snapshot(),
        args.config,
        args.today,
        parse_tasks(args.tasks),
        fleet.depots,
    )
    print(f"Vehicle: {vehicle.plate}")
    print(f"Depot:   {depot_name(fleet, vehicle.depot_id)}")
    print(f"Base:    {format_date(decision.base_date)}")
    print(f"Next:    {format_date(decision.date)}")
    print(f"Why:     {decision.explanation}")
    return 0


# =============================================================================
# Close command
# =============================================================================


def cmd_close(args, fleet: Fleet) -> int:
    """Close an open ticket and schedule the next preventive visit."""
    record = fleet.get_record(args.record_id)
    if record is None:
        print(f"Error: Unknown record {args.record_id}")
        return 1
    vehicle = fleet.get_vehicle(record.vehicle_id)

    store = FleetStore(fleet, path=None if args.dry_run else args.fleet_file)
    result = close_and_reschedule(
        store,
        args.record_id,
        end_date=args.end_date or args.today,
        config=args.config,
        today=args.today,
        tasks_performed=parse_tasks(args.tasks),
        created_by=args.by,
    )

    print(f"Closed record {record.record_id} for {vehicle.plate if vehicle else record.vehicle_id}:")
    print(f"  Kind:     {record.kind.value}")
    print(f"  Start:    {format_date(record.start_date)}")
    print(f"  End:      {format_date(record.end_date)}")
    print(f"  Duration: {format_duration(record.duration_days)}")
    print()
    print(f"Next preventive visit: {format_date(result.record.start_date)}")
    print(f"  {result.decision.explanation}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
    else:
        print("Changes saved.")
    return 0


# =============================================================================
# Plan command
# =============================================================================


def make_plan_table(plan: FleetPlan, fleet: Fleet) -> List[List[str]]:
    """Convert a batch plan to table rows."""
    rows = []
    for outcome in plan.outcomes:
        vehicle = outcome.vehicle
        if outcome.ok:
            when = format_date(outcome.decision.date)
            note = outcome.decision.explanation
        else:
            when = "-"
            note = f"FAILED: {outcome.error}"
        rows.append([vehicle.plate, depot_name(fleet, vehicle.depot_id), when, note])
    return rows


def cmd_plan(args, fleet: Fleet) -> int:
    """Schedule (or preview) the next visit for every active vehicle."""
    vehicles = plannable_vehicles(fleet, include_scheduled=args.all)
    if not vehicles:
        print("No active vehicles to schedule.")
        return 0

    if args.dry_run:
        plan = plan_fleet(fleet, args.config, args.today, vehicles)
    else:
        store = FleetStore(fleet, path=args.fleet_file)
        plan = book_fleet(store, vehicles, args.config, args.today, created_by=args.by)

    headers = ["Plate", "Depot", "Date", "Notes"]
    print(tabulate(make_plan_table(plan, fleet), headers=headers, tablefmt="simple"))
    print()
    print(f"Scheduled: {len(plan.scheduled)}  Failed: {len(plan.failures)}")

    if args.dry_run:
        print("(dry run - no changes made)")
    return 1 if plan.failures else 0


# =============================================================================
# Main
# =============================================================================


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fleet preventive maintenance scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fleets/example.yaml status
  %(prog)s fleets/example.yaml history ABC123
  %(prog)s fleets/example.yaml depots --config scheduler.yaml
  %(prog)s fleets/example.yaml next ABC123 --tasks "oil change,brakes"
  %(prog)s fleets/example.yaml close 42 --end-date 2024-01-10 --tasks brakes
  %(prog)s fleets/example.yaml plan --dry-run
""",
    )
    parser.add_argument(
        "fleet_file",
        type=Path,
        help="Path to fleet YAML file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to scheduler config YAML (default: built-in rules)",
    )
    parser.add_argument(
        "--today",
        type=parse_date_arg,
        help="Reference date in YYYY-MM-DD format (default: today)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scheduling decisions",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show vehicles in the shop and upcoming visits")

    history_parser = subparsers.add_parser("history", help="View maintenance history")
    history_parser.add_argument("plate", type=str, help="Vehicle plate")
    history_parser.add_argument(
        "--kind",
        choices=["PREVENTIVE", "CORRECTIVE"],
        help="Only show records of this kind",
    )

    subparsers.add_parser("depots", help="List depots and capacity pools")

    next_parser = subparsers.add_parser("next", help="Preview the next preventive date")
    next_parser.add_argument("plate", type=str, help="Vehicle plate")
    next_parser.add_argument(
        "--tasks",
        type=str,
        help='Tasks just performed (comma-separated, e.g., "oil change,tires")',
    )

    close_parser = subparsers.add_parser(
        "close", help="Close a ticket and schedule the next preventive visit"
    )
    close_parser.add_argument("record_id", type=int, help="Id of the open record")
    close_parser.add_argument(
        "--end-date",
        type=parse_date_arg,
        help="Close date in YYYY-MM-DD format (default: today)",
    )
    close_parser.add_argument(
        "--tasks",
        type=str,
        help="Tasks performed during the visit (comma-separated)",
    )
    close_parser.add_argument("--by", type=int, help="User id closing the ticket")
    close_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would happen without saving",
    )

    plan_parser = subparsers.add_parser(
        "plan", help="Schedule the next visit for every active vehicle"
    )
    plan_parser.add_argument(
        "--all",
        action="store_true",
        help="Include vehicles that already have an open ticket",
    )
    plan_parser.add_argument("--by", type=int, help="User id creating the plan")
    plan_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview dates without saving",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Validate input files exist
    if not args.fleet_file.exists():
        print(f"Error: File not found: {args.fleet_file}")
        return 1
    if args.config is not None and not args.config.exists():
        print(f"Error: File not found: {args.config}")
        return 1

    args.today = args.today or date.today()
    args.config = load_config(args.config)
    fleet = load_fleet(args.fleet_file)

    commands = {
        "status": cmd_status,
        "history": cmd_history,
        "depots": cmd_depots,
        "next": cmd_next,
        "close": cmd_close,
        "plan": cmd_plan,
    }
    try:
        return commands[args.command](args, fleet)
    except SchedulingError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
