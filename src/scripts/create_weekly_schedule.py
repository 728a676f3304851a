#!/usr/bin/env python3
"""
Create a staff member's weekly schedule from the command line.

Working days share one start/end time. Conflicting days are skipped and
reported; everything else is created.

Usage:
    uv run python src/scripts/create_weekly_schedule.py --staff 5 \
        --week-start 2025-11-09 --days mon,tue,wed,thu,fri --start 09:00 --end 18:00 --repeat 2
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DAY_NAMES
from core.errors import BatchAbortedError, ScheduleError
from core.log import setup_logger
from services.schedule_store import SqliteScheduleStore
from services.scheduling import create_weekly_schedule, start_of_week

DAY_ABBREVIATIONS = {name[:3]: name for name in DAY_NAMES}


def parse_staff_id(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def build_template(days: str, start_time: str, end_time: str) -> dict:
    """'mon,wed' -> template with those days working and the rest off."""
    working = set()
    for token in days.split(","):
        token = token.strip().lower()
        if not token:
            continue
        day_name = DAY_ABBREVIATIONS.get(token[:3])
        if day_name is None:
            raise ValueError(f"Unknown day '{token}'")
        working.add(day_name)

    return {
        day_name: {
            "is_working": day_name in working,
            "start_time": start_time,
            "end_time": end_time,
        }
        for day_name in DAY_NAMES
    }


async def main(args: argparse.Namespace) -> int:
    """Main entry point."""
    setup_logger()
    template = build_template(args.days, args.start, args.end)
    week_start = args.week_start or start_of_week(date.today()).isoformat()

    store = SqliteScheduleStore()
    try:
        print(f"Creating schedule for staff {args.staff} from week of {week_start}...")
        result = await create_weekly_schedule(
            store,
            parse_staff_id(args.staff),
            template,
            week_start,
            repeat_weeks=args.repeat,
            notes=args.notes,
        )
    except BatchAbortedError as e:
        print(f"\nError: {e} ({e.result.created_count} created before failure)")
        return 1
    except (ScheduleError, ValueError) as e:
        print(f"\nError: {e}")
        return 1
    finally:
        store.close()

    for outcome in result.outcomes:
        c = outcome.candidate
        print(f"  {c['date']} {c['start_time']}-{c['end_time']}: {outcome.status}")
    print(f"\n{result.summary()}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a weekly staff schedule")
    parser.add_argument("--staff", required=True, help="Staff id")
    parser.add_argument(
        "--week-start",
        help="First day of the week (YYYY-MM-DD). Defaults to this week's Sunday.",
    )
    parser.add_argument("--days", default="mon,tue,wed,thu,fri", help="Comma-separated working days")
    parser.add_argument("--start", default="09:00", help="Shift start (HH:MM)")
    parser.add_argument("--end", default="18:00", help="Shift end (HH:MM)")
    parser.add_argument("--repeat", type=int, default=1, help="Number of consecutive weeks")
    parser.add_argument("--notes", help="Notes applied to every entry")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args)))
