from datetime import date
from types import SimpleNamespace

import pytest

from synergy_ems.services.leave_calculations import (
    available_by_type,
    available_days,
    calculate_business_days,
    request_day_count,
    summarize_balances,
    usage_percentage,
)

# 2025-03-03 is a Monday
MONDAY = date(2025, 3, 3)
WEDNESDAY = date(2025, 3, 5)
SATURDAY = date(2025, 3, 8)
NEXT_SUNDAY = date(2025, 3, 9)


def test_single_weekday_counts_one():
    assert calculate_business_days(WEDNESDAY, WEDNESDAY) == 1

def test_single_weekend_day_counts_zero():
    assert calculate_business_days(SATURDAY, SATURDAY) == 0

def test_seven_day_range_with_one_weekend():
    assert calculate_business_days(MONDAY, NEXT_SUNDAY) == 5

def test_seven_day_range_minus_holiday_overlap():
    assert calculate_business_days(MONDAY, NEXT_SUNDAY, [WEDNESDAY]) == 4

def test_holiday_on_weekend_does_not_double_count():
    assert calculate_business_days(MONDAY, NEXT_SUNDAY, [SATURDAY]) == 5

def test_start_after_end_is_zero():
    assert calculate_business_days(NEXT_SUNDAY, MONDAY) == 0

def test_accepts_iso_strings_and_holiday_rows():
    holidays = [{"date": "2025-03-04"}, SimpleNamespace(date=WEDNESDAY)]
    assert calculate_business_days("2025-03-03", "2025-03-07", holidays) == 3

def test_range_across_two_weekends():
    assert calculate_business_days(date(2025, 3, 7), date(2025, 3, 17)) == 7

@pytest.mark.parametrize("start, end", [
    (MONDAY, NEXT_SUNDAY),
    (SATURDAY, SATURDAY),
    (NEXT_SUNDAY, MONDAY),
    (MONDAY, None),
])
def test_half_day_is_always_half(start, end):
    assert request_day_count(start, end, is_half_day=True) == 0.5

def test_full_day_request_uses_business_days():
    assert request_day_count(MONDAY, NEXT_SUNDAY, is_half_day=False, holidays=[WEDNESDAY]) == 4.0


def test_available_days_subtracts_used_and_pending():
    balance = SimpleNamespace(total_days=20, used_days=5, pending_days=2.5)
    assert available_days(balance) == 12.5

def test_available_days_without_balance_means_no_limit():
    assert available_days(None) is None

def test_available_days_can_go_negative_on_inconsistent_rows():
    assert available_days({"total_days": 2, "used_days": 3, "pending_days": 0}) == -1

def test_usage_percentage_guards_zero_total():
    assert usage_percentage(3, 0) == 0.0
    assert usage_percentage(3, None) == 0.0
    assert usage_percentage(5, 20) == 25.0

def test_summarize_balances_totals_across_types():
    rows = [
        {"total_days": 20, "used_days": 5, "pending_days": 1},
        SimpleNamespace(total_days=10, used_days=2, pending_days=None),
    ]
    summary = summarize_balances(rows)
    assert summary.total_entitled == 30
    assert summary.total_used == 7
    assert summary.total_pending == 1
    assert summary.total_available == 22

def test_summarize_empty_balances():
    assert summarize_balances([]).to_dict() == {
        "total_entitled": 0.0,
        "total_used": 0.0,
        "total_pending": 0.0,
        "total_available": 0.0,
    }

def test_available_by_type_marks_missing_types_as_unlimited():
    rows = [{"leave_type_id": 1, "total_days": 20, "used_days": 4, "pending_days": 0}]
    assert available_by_type(rows, [1, 2]) == {1: 16.0, 2: None}
