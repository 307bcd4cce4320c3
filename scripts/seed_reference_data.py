"""
Seed default leave types and this year's public holidays.

Safe to run repeatedly: existing rows are skipped.

    python -m scripts.seed_reference_data
"""
import logging
from datetime import date

from synergy_ems.core.logging import setup_logging
from synergy_ems.database import SessionLocal, init_db
from synergy_ems.models.holiday import Holiday
from synergy_ems.models.leave_type import LeaveType

logger = logging.getLogger("seed_reference_data")

DEFAULT_LEAVE_TYPES = [
    {"name": "Annual Leave", "color": "#22c55e", "default_days": 20.0, "description": "Paid vacation"},
    {"name": "Sick Leave", "color": "#ef4444", "default_days": 10.0, "description": "Illness or medical appointments"},
    {"name": "Personal Leave", "color": "#f59e0b", "default_days": 3.0, "description": "Personal matters"},
    # No entitlement: employees get no balance row, so unpaid leave is unlimited
    {"name": "Unpaid Leave", "color": "#64748b", "default_days": 0.0, "description": "Leave without pay"},
]

def default_holidays(year: int):
    return [
        {"name": "New Year's Day", "date": date(year, 1, 1)},
        {"name": "Labour Day", "date": date(year, 5, 1)},
        {"name": "Christmas Eve", "date": date(year, 12, 24), "is_optional": True},
        {"name": "Christmas Day", "date": date(year, 12, 25)},
    ]

def seed(year: int = None):
    year = year or date.today().year
    init_db()
    db = SessionLocal()
    try:
        for row in DEFAULT_LEAVE_TYPES:
            if db.query(LeaveType).filter(LeaveType.name == row["name"]).first():
                logger.info(f"Leave type {row['name']} already exists. Skipping.")
                continue
            db.add(LeaveType(**row))
            logger.info(f"Created leave type {row['name']}")

        for row in default_holidays(year):
            if db.query(Holiday).filter(Holiday.date == row["date"]).first():
                logger.info(f"Holiday on {row['date']} already exists. Skipping.")
                continue
            db.add(Holiday(**row))
            logger.info(f"Created holiday {row['name']} ({row['date']})")

        db.commit()
    except Exception:
        db.rollback()
        logger.error("Seeding failed", exc_info=True)
        raise
    finally:
        db.close()

if __name__ == "__main__":
    setup_logging()
    seed()
