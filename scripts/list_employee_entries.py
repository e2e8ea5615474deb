#!/usr/bin/env python3
"""
List all timer entries for an employee directly from the store.

Usage:
    python list_employee_entries.py --id EMPLOYEE_ID [--database-url URL]

Examples:
    python list_employee_entries.py --id E1
    python list_employee_entries.py --id E1 --database-url sqlite:///worktimer.db
"""
import argparse
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from worktimer.config import get_settings
from worktimer.data.database import open_store
from worktimer.services.timer_service import TimerService
from worktimer.utils.errors import WorkTimerError
from worktimer.utils.formatting import format_duration, format_timestamp


def print_entries(employee_id, entries):
    """Print the entries of an employee as a table"""
    if not entries:
        print(f"\nNo timer entries found for {employee_id}")
        return

    print(f"\n{'='*80}")
    print(f"Timer Entries for: {employee_id}")
    print(f"Total entries: {len(entries)}")
    print(f"{'='*80}")
    print(f"{'ID':<6} {'Start':<20} {'End':<20} {'Duration':<10} {'Status':<10}")
    print(f"{'-'*80}")

    for entry in entries:
        status = "RUNNING" if entry.is_running else "STOPPED"
        print(f"{entry.id:<6} {format_timestamp(entry.start_time):<20} "
              f"{format_timestamp(entry.end_time):<20} "
              f"{format_duration(entry.duration) or '-':<10} {status:<10}")

    print(f"{'='*80}\n")


def main():
    parser = argparse.ArgumentParser(
        description="List all timer entries for an employee"
    )
    parser.add_argument(
        '--id', '-i',
        dest='employee_id',
        required=True,
        help='Employee ID'
    )
    parser.add_argument(
        '--database-url', '-d',
        help='Store connection string (default: DATABASE_URL or sqlite:///worktimer.db)'
    )

    args = parser.parse_args()
    settings = get_settings()

    try:
        store = open_store(args.database_url or settings.database_url,
                           busy_timeout=settings.sqlite_busy_timeout)
    except WorkTimerError as e:
        print(f"ERROR: Failed to open store: {e}")
        sys.exit(1)

    try:
        service = TimerService(store)
        print_entries(args.employee_id, service.get_history(args.employee_id))
    except WorkTimerError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == '__main__':
    main()
