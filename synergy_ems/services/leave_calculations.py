"""
Pure leave arithmetic: business-day counting and balance aggregation.

Nothing in here touches the database. Balance rows are read through
attribute access (ORM rows, pydantic models) or mapping access (plain dicts),
so the same helpers serve services, schemas and tests.
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Set, Union

HALF_DAY = 0.5

# date.weekday(): Monday == 0 ... Sunday == 6
WEEKEND_DAYS = frozenset({5, 6})

DateLike = Union[date, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _holiday_dates(holidays: Iterable[Any]) -> Set[date]:
    """Accept dates, ISO strings, or rows/dicts carrying a ``date`` field."""
    dates = set()
    for holiday in holidays or ():
        if isinstance(holiday, (date, str)):
            dates.add(_as_date(holiday))
        elif isinstance(holiday, dict):
            dates.add(_as_date(holiday["date"]))
        else:
            dates.add(_as_date(holiday.date))
    return dates


def calculate_business_days(start_date: DateLike, end_date: DateLike, holidays: Iterable[Any] = ()) -> int:
    """
    Count weekdays between start_date and end_date, both inclusive,
    skipping Saturdays, Sundays and any holiday date.

    A start after the end is an empty range and yields 0.
    """
    start = _as_date(start_date)
    end = _as_date(end_date)
    excluded = _holiday_dates(holidays)

    count = 0
    current = start
    while current <= end:
        if current.weekday() not in WEEKEND_DAYS and current not in excluded:
            count += 1
        current += timedelta(days=1)
    return count


def request_day_count(
    start_date: DateLike,
    end_date: Optional[DateLike],
    is_half_day: bool = False,
    holidays: Iterable[Any] = (),
) -> float:
    """Days a request consumes. Half-day requests are always 0.5."""
    if is_half_day:
        return HALF_DAY
    return float(calculate_business_days(start_date, end_date if end_date is not None else start_date, holidays))


def _field(row: Any, name: str) -> float:
    value = row.get(name) if isinstance(row, dict) else getattr(row, name, None)
    return float(value or 0)


def available_days(balance: Any) -> Optional[float]:
    """total - used - pending, or None when there is no balance row (no limit)."""
    if balance is None:
        return None
    return _field(balance, "total_days") - _field(balance, "used_days") - _field(balance, "pending_days")


def usage_percentage(part: Optional[float], total: Optional[float]) -> float:
    """Share of ``total`` taken by ``part`` as a percentage; 0.0 for a zero or negative total."""
    if not total or total <= 0:
        return 0.0
    return round(float(part or 0) / float(total) * 100, 2)


@dataclass
class BalanceSummary:
    total_entitled: float = 0.0
    total_used: float = 0.0
    total_pending: float = 0.0
    total_available: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def summarize_balances(balances: Iterable[Any]) -> BalanceSummary:
    summary = BalanceSummary()
    for balance in balances or ():
        summary.total_entitled += _field(balance, "total_days")
        summary.total_used += _field(balance, "used_days")
        summary.total_pending += _field(balance, "pending_days")
    summary.total_available = summary.total_entitled - summary.total_used - summary.total_pending
    return summary


def available_by_type(balances: Iterable[Any], leave_type_ids: Iterable[int]) -> Dict[int, Optional[float]]:
    """
    Available days per leave type id. Types without a balance row map to
    None ("no limit"), which callers must not confuse with 0.
    """
    by_type = {}
    for balance in balances or ():
        type_id = balance.get("leave_type_id") if isinstance(balance, dict) else balance.leave_type_id
        by_type[type_id] = balance
    return {type_id: available_days(by_type.get(type_id)) for type_id in leave_type_ids}
