"""
Re-derive every month log from its activity rows.
Usage: python scripts/recompute_month_logs.py [--year 2024 --month 11]
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from app.db.base import SessionLocal
from app.repositories import Repositories
from app.services.ledger import refresh_month_log


def recompute_all(year: int = None, month: int = None):
    """Recompute all month logs, or only those of one month."""
    db = SessionLocal()
    repos = Repositories.from_session(db)
    try:
        if year and month:
            month_logs = repos.month_logs.list_for_month(year, month)
        else:
            month_logs = repos.month_logs.list_all()

        keys = [(ml.participant_id, ml.year, ml.month) for ml in month_logs]
        changed = 0
        for participant_id, log_year, log_month in keys:
            before = repos.month_logs.get(participant_id, log_year, log_month)
            snapshot = (before.meals_earned, before.minutes_earned, before.is_complete)
            after = refresh_month_log(repos, participant_id, log_year, log_month)
            if (after.meals_earned, after.minutes_earned, after.is_complete) != snapshot:
                changed += 1
                print(
                    f"  {participant_id} {log_year:04d}-{log_month:02d}: "
                    f"{snapshot[0]} -> {after.meals_earned} meals, "
                    f"{snapshot[1]} -> {after.minutes_earned} minutes"
                )

        print(f"✅ Recomputed {len(keys)} month log(s), {changed} changed")
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Recompute month logs")
    parser.add_argument("--year", type=int, help="Only this year (with --month)")
    parser.add_argument("--month", type=int, help="Only this month (with --year)")

    args = parser.parse_args()
    recompute_all(year=args.year, month=args.month)
