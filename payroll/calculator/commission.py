# ==============================================================================
# payroll/calculator/commission.py
# ------------------------------------------------------------------------------
# Computes a supervisor's pay under one of three salary methods:
#   fixed             - a flat amount.
#   commission_type1  - orders x a rate picked by average daily hours.
#   commission_type2  - a share of the workers' estimated receipts.
# ==============================================================================

import logging

from .records import (METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2, CommissionRange, CommissionResult,
                      ranges_to_dicts)

DEFAULT_TYPE1_RANGES = (
    CommissionRange(0, 100, 1.0),
    CommissionRange(101, 200, 1.20),
    CommissionRange(201, 300, 1.30),
    CommissionRange(301, 400, 1.40),
    CommissionRange(401, 999999, 1.50),
)
DEFAULT_TYPE2_BASE_PERCENTAGE = 11.0
DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE = 60.0

# There is no receipts column in the performance sheet yet, so receipts are
# estimated as orders x a flat average order value.
DEFAULT_AVERAGE_ORDER_VALUE = 50.0
PROVISIONAL_RECEIPTS_NOTE = (
    'Receipts are estimated as orders x average order value until the '
    'performance sheet carries a receipts column.'
)


def hours_by_day(records):
    """Summed hours per calendar day, for days that have at least one record."""
    per_day = {}
    for record in records:
        per_day[record.date] = per_day.get(record.date, 0.0) + record.hours
    return dict(sorted(per_day.items()))


def daily_average_hours(records):
    """Mean of the per-day hour sums. Days without data do not count."""
    per_day = hours_by_day(records)
    if not per_day:
        return 0.0
    return sum(per_day.values()) / len(per_day)


def select_rate(ranges, average_hours):
    """First range with min <= hours <= max; the last range's rate when none matches."""
    if not ranges:
        return 0.0
    for commission_range in ranges:
        if commission_range.min_hours <= average_hours <= commission_range.max_hours:
            return commission_range.rate_per_order
    return ranges[-1].rate_per_order


def compute(config, records, average_order_value=DEFAULT_AVERAGE_ORDER_VALUE, default_ranges=DEFAULT_TYPE1_RANGES,
            default_base_percentage=DEFAULT_TYPE2_BASE_PERCENTAGE,
            default_supervisor_percentage=DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE):
    """
    Applies the supervisor's salary method to the filtered performance records.

    Args:
        config (SalaryConfig): The supervisor's salary configuration.
        records (list): PerformanceRecords of the supervisor's workers in the period.

    Returns:
        CommissionResult: base amount, commission (None for fixed pay), the
        rate used and the figures needed to reconstruct the arithmetic.
    """
    if config.method == METHOD_FIXED:
        return CommissionResult(
            method=METHOD_FIXED,
            base_amount=config.fixed_amount or 0.0,
            details={'fixed_amount': config.fixed_amount or 0.0},
        )

    total_orders = sum(record.orders for record in records)
    total_hours = sum(record.hours for record in records)

    if config.method == METHOD_TYPE1:
        ranges = tuple(config.type1_ranges or default_ranges or ())
        working_days = len(hours_by_day(records))
        average_hours = daily_average_hours(records)
        rate = select_rate(ranges, average_hours)
        commission = total_orders * rate
        logging.info(
            f"[Salary] Commission Type 1: working days={working_days}, daily average hours={average_hours:.2f}, "
            f"rate={rate} -> {total_orders} orders x {rate} = {commission:,.2f}"
        )
        return CommissionResult(
            method=METHOD_TYPE1,
            base_amount=0.0,
            commission=commission,
            rate=rate,
            details={
                'total_orders': total_orders,
                'total_hours': total_hours,
                'working_days': working_days,
                'daily_average_hours': average_hours,
                'rate_per_order': rate,
                'ranges': ranges_to_dicts(ranges),
            },
        )

    if config.method == METHOD_TYPE2:
        base_percentage = config.type2_base_percentage or default_base_percentage
        supervisor_percentage = config.type2_supervisor_percentage or default_supervisor_percentage
        total_receipts = total_orders * average_order_value
        base_value = total_receipts * (base_percentage / 100)
        commission = base_value * (supervisor_percentage / 100)
        per_order_rate = average_order_value * (base_percentage / 100) * (supervisor_percentage / 100)
        logging.info(
            f"[Salary] Commission Type 2: receipts={total_receipts:,.2f} (estimated), "
            f"base {base_percentage}% = {base_value:,.2f}, supervisor {supervisor_percentage}% = {commission:,.2f}"
        )
        return CommissionResult(
            method=METHOD_TYPE2,
            base_amount=0.0,
            commission=commission,
            rate=per_order_rate,
            details={
                'total_orders': total_orders,
                'total_hours': total_hours,
                'total_receipts': total_receipts,
                'average_order_value': average_order_value,
                'base_percentage': base_percentage,
                'supervisor_percentage': supervisor_percentage,
                'base_value': base_value,
                'receipts_estimated': True,
                'note': PROVISIONAL_RECEIPTS_NOTE,
            },
        )

    raise ValueError(f"Unknown salary method: {config.method!r}")
