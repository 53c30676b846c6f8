# tests/test_commission.py

from datetime import date, timedelta

import pytest

from payroll.calculator.commission import compute, daily_average_hours, hours_by_day, select_rate
from payroll.calculator.records import (METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2, CommissionRange,
                                        PerformanceRecord, SalaryConfig)

TOLERANCE = 1e-9


def _records(per_day_hours, orders_per_day=100, workers=("W1",)):
    """Spreads each day's hours evenly over the workers."""
    records = []
    for offset, hours in enumerate(per_day_hours):
        day = date(2025, 11, 1) + timedelta(days=offset)
        for worker in workers:
            records.append(PerformanceRecord(date=day, worker_code=worker, hours=hours / len(workers),
                                             orders=orders_per_day // len(workers)))
    return records


def test_fixed_salary_has_no_commission():
    result = compute(SalaryConfig("SUP1", METHOD_FIXED, fixed_amount=5000), _records([8, 8]))

    assert result.method == METHOD_FIXED
    assert result.base_amount == 5000
    assert result.commission is None


def test_daily_average_is_over_per_day_sums_not_rows():
    records = _records([50, 60, 70, 80, 90], workers=("W1", "W2"))

    assert len(hours_by_day(records)) == 5
    assert abs(daily_average_hours(records) - 70) < TOLERANCE

    result = compute(SalaryConfig("SUP1", METHOD_TYPE1), records)
    assert result.rate == 1.0
    assert result.commission == 500
    assert result.details["working_days"] == 5
    assert result.details["total_orders"] == 500


def test_type1_picks_the_matching_configured_range():
    ranges = (CommissionRange(0, 5, 1.0), CommissionRange(5.01, 10, 2.0), CommissionRange(10.01, 24, 3.0))
    records = _records([8, 8, 8], orders_per_day=10)
    result = compute(SalaryConfig("SUP1", METHOD_TYPE1, type1_ranges=ranges), records)

    assert result.rate == 2.0
    assert result.commission == 60
    assert result.details["ranges"][1] == {"min_hours": 5.01, "max_hours": 10, "rate_per_order": 2.0}


@pytest.mark.parametrize("average, expected", [
    (0, 1.0),
    (100, 1.0),
    (150, 1.2),
    (401, 1.5),
    (100.5, 1.5),      # falls between ranges: the last range applies
])
def test_select_rate_with_default_ranges(average, expected):
    ranges = (
        CommissionRange(0, 100, 1.0),
        CommissionRange(101, 200, 1.2),
        CommissionRange(201, 300, 1.3),
        CommissionRange(301, 400, 1.4),
        CommissionRange(401, 999999, 1.5),
    )
    assert select_rate(ranges, average) == expected


def test_select_rate_without_ranges_is_zero():
    assert select_rate((), 8) == 0.0


def test_type1_without_records_earns_nothing():
    result = compute(SalaryConfig("SUP1", METHOD_TYPE1), [])
    assert result.commission == 0
    assert result.details["daily_average_hours"] == 0


def test_type2_uses_default_percentages():
    records = _records([8, 8], orders_per_day=100)
    result = compute(SalaryConfig("SUP1", METHOD_TYPE2), records)

    # 200 orders x 50 = 10,000 receipts; 11% = 1,100; 60% of that = 660
    assert abs(result.details["total_receipts"] - 10000) < TOLERANCE
    assert abs(result.details["base_value"] - 1100) < TOLERANCE
    assert abs(result.commission - 660) < TOLERANCE
    assert abs(result.rate - 3.3) < TOLERANCE
    assert result.details["receipts_estimated"] is True


def test_type2_uses_configured_percentages_and_order_value():
    records = _records([8], orders_per_day=10)
    config = SalaryConfig("SUP1", METHOD_TYPE2, type2_base_percentage=20, type2_supervisor_percentage=50)
    result = compute(config, records, average_order_value=100)

    # 10 x 100 = 1,000; 20% = 200; 50% = 100
    assert abs(result.commission - 100) < TOLERANCE


def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        compute(SalaryConfig("SUP1", "hourly"), [])
