# ==============================================================================
# payroll/calculator/composer.py
# ------------------------------------------------------------------------------
# Final step of a salary calculation: base/commission + bonus - deductions,
# plus the per-day breakdown shown next to commission-based salaries.
# ==============================================================================

import logging

from . import schema
from .dates import iter_days
from .records import METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2, DailyBreakdownRow, SalaryCalculation
from .rows import cell, cell_text, to_float, to_int


def find_bonus(rows, supervisor_code, month):
    """Bonus of the first targets row for this supervisor and month number, else 0."""
    columns = schema.TARGET_COLUMNS
    for row in rows:
        if cell_text(cell(row, columns['supervisor_code'])) != supervisor_code:
            continue
        if to_int(cell(row, columns['month'])) == month:
            return to_float(cell(row, columns['bonus']))
    return 0.0


def build_daily_breakdown(commission_result, records, start, end):
    """
    One row per calendar day in [start, end] for commission methods.
    Each day's commission uses the period-level rate so the rows add up to
    the period total.
    """
    if commission_result.method not in (METHOD_TYPE1, METHOD_TYPE2):
        return ()

    by_day = {day: {'orders': 0, 'hours': 0.0} for day in iter_days(start, end)}
    for record in records:
        day_data = by_day.get(record.date)
        if day_data is None:
            continue
        day_data['orders'] += record.orders
        day_data['hours'] += record.hours

    rate = commission_result.rate
    return tuple(
        DailyBreakdownRow(date=day, orders=data['orders'], hours=data['hours'], rate=rate,
                          daily_commission=data['orders'] * rate)
        for day, data in by_day.items()
    )


def compose(supervisor_code, start, end, commission_result, bonus, deductions, daily_breakdown=()):
    """
    Builds the SalaryCalculation.

    The net salary is clamped at zero. The pre-clamp figure is kept in
    raw_net and a warning is attached whenever clamping happened, so that
    deductions exceeding earnings do not disappear silently.
    """
    commission_amount = commission_result.commission or 0.0
    raw_net = commission_result.base_amount + commission_amount + bonus - deductions.total
    clamped = raw_net < 0
    warnings = []
    if clamped:
        message = (
            f"Net salary for {supervisor_code} was {raw_net:,.2f} before clamping to 0: "
            f"deductions ({deductions.total:,.2f}) exceed earnings."
        )
        warnings.append(message)
        logging.warning(message)

    logging.info(
        f"[Salary] {supervisor_code} {start} to {end}: base={commission_result.base_amount:,.2f}, "
        f"commission={commission_amount:,.2f}, bonus={bonus:,.2f}, deductions={deductions.total:,.2f}, "
        f"net={max(0.0, raw_net):,.2f}"
    )

    return SalaryCalculation(
        supervisor_code=supervisor_code,
        start=start,
        end=end,
        method=commission_result.method,
        base_amount=commission_result.base_amount,
        commission=None if commission_result.method == METHOD_FIXED else commission_result,
        bonus=bonus,
        deductions=deductions,
        raw_net=raw_net,
        net_salary=max(0.0, raw_net),
        clamped=clamped,
        warnings=tuple(warnings),
        daily_breakdown=tuple(daily_breakdown),
    )
