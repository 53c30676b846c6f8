# ==============================================================================
# payroll/calculator/performance.py
# ------------------------------------------------------------------------------
# Filters raw daily performance rows down to one supervisor's workers and a
# closed date range, then aggregates them per worker and per day.
# ==============================================================================

import logging

from .dates import iter_days
from .records import SupervisorPerformance, WorkerPerformance
from .rows import parse_debt_row, parse_performance_row, performance_date_cell, performance_worker_code

# Corrupted serials land far outside the years the business has data for.
MIN_RECORD_YEAR = 2020
MAX_RECORD_YEAR = 2030

MAX_LOGGED_DATE_FAILURES = 5


def filter_records(worker_codes, start, end, rows):
    """
    Returns the PerformanceRecords of `worker_codes` dated within [start, end].

    Args:
        worker_codes (iterable): Worker codes to keep.
        start (date): First day of the range, inclusive.
        end (date): Last day of the range, inclusive.
        rows (list): Data rows of the daily performance sheet (no header).

    Returns:
        list: PerformanceRecord objects in sheet order.
    """
    codes = set(worker_codes)
    if not codes:
        return []

    records = []
    date_failures = 0
    for index, row in enumerate(rows):
        worker_code = performance_worker_code(row)
        if not worker_code or worker_code not in codes:
            continue

        record = parse_performance_row(row)
        if record is None:
            date_failures += 1
            if date_failures <= MAX_LOGGED_DATE_FAILURES:
                logging.debug(f"Data row {index + 1}: skipping unrecognized date "
                              f"{performance_date_cell(row)!r} for worker {worker_code}.")
            continue

        day = record.date
        if not MIN_RECORD_YEAR <= day.year <= MAX_RECORD_YEAR:
            logging.debug(f"Data row {index + 1}: skipping implausible date {day} for worker {worker_code}.")
            continue
        if day < start or day > end:
            continue

        records.append(record)

    logging.info(
        f"[Performance Filter] {start} to {end}: {len(records)} records kept for "
        f"{len(codes)} workers out of {len(rows)} rows ({date_failures} undated)."
    )
    return records


def aggregate_by_worker(records, worker_codes=None):
    """
    Sums hours, orders, breaks, delay and debt per worker, counts absent days
    and averages acceptance over the rows that carried a non-zero rate.
    Workers listed in `worker_codes` without any record get a zero row.
    """
    totals = {}
    for code in worker_codes or ():
        totals.setdefault(code, _empty_totals())

    for record in records:
        data = totals.setdefault(record.worker_code, _empty_totals())
        data['days'] += 1
        data['hours'] += record.hours
        data['orders'] += record.orders
        data['break_minutes'] += record.break_minutes
        data['delay'] += record.delay
        data['debt'] += record.debt
        if record.absent:
            data['absences'] += 1
        if record.acceptance_rate > 0:
            data['acceptance_sum'] += record.acceptance_rate
            data['acceptance_count'] += 1

    results = []
    for code in sorted(totals):
        data = totals[code]
        count = data.pop('acceptance_count')
        acceptance_sum = data.pop('acceptance_sum')
        results.append(WorkerPerformance(
            worker_code=code,
            acceptance_rate=acceptance_sum / count if count else 0.0,
            **data,
        ))
    return results


def _empty_totals():
    return {
        'days': 0, 'hours': 0.0, 'orders': 0, 'break_minutes': 0.0, 'delay': 0.0,
        'absences': 0, 'debt': 0.0, 'acceptance_sum': 0.0, 'acceptance_count': 0,
    }


def filter_and_aggregate(worker_codes, start, end, rows):
    codes = set(worker_codes)
    records = filter_records(codes, start, end, rows)
    return aggregate_by_worker(records, codes)


def summarize_performance(records, start, end):
    """
    Dashboard view of a range: a zero-filled per-day series plus totals,
    average acceptance and the best day by orders.
    """
    by_day = {day: {'orders': 0, 'hours': 0.0} for day in iter_days(start, end)}
    total_breaks = 0.0
    total_absences = 0
    acceptance_sum = 0.0
    acceptance_count = 0

    for record in records:
        day_data = by_day.get(record.date)
        if day_data is not None:
            day_data['orders'] += record.orders
            day_data['hours'] += record.hours
        total_breaks += record.break_minutes
        if record.absent:
            total_absences += 1
        if record.acceptance_rate > 0:
            acceptance_sum += record.acceptance_rate
            acceptance_count += 1

    labels = [day.isoformat() for day in by_day]
    orders = [data['orders'] for data in by_day.values()]
    hours = [data['hours'] for data in by_day.values()]

    best_day = None
    if orders and max(orders) > 0:
        best_index = orders.index(max(orders))
        best_day = {'date': labels[best_index], 'orders': orders[best_index], 'hours': hours[best_index]}

    return {
        'labels': labels,
        'orders': orders,
        'hours': hours,
        'total_orders': sum(orders),
        'total_hours': sum(hours),
        'total_breaks': total_breaks,
        'total_absences': total_absences,
        'avg_acceptance': round(acceptance_sum / acceptance_count, 2) if acceptance_count else 0,
        'best_day': best_day,
    }


def supervisor_totals(supervisor, subordinate_count, records):
    """
    Overview line for one supervisor: totals over the records already
    filtered to its workers and range, with orders per assigned worker.
    Acceptance is averaged over the records that carried a non-zero rate.
    """
    total_orders = sum(record.orders for record in records)
    total_hours = sum(record.hours for record in records)
    rates = [record.acceptance_rate for record in records if record.acceptance_rate > 0]
    return SupervisorPerformance(
        code=supervisor.code,
        name=supervisor.name or supervisor.code,
        region=supervisor.region,
        subordinate_count=subordinate_count,
        total_orders=total_orders,
        total_hours=round(total_hours, 2),
        avg_acceptance=round(sum(rates) / len(rates), 2) if rates else 0,
        records_count=len(records),
        orders_per_rider=round(total_orders / subordinate_count, 2) if subordinate_count else 0,
    )


def filter_debts(worker_codes, rows):
    """Debt rows of the given workers, in sheet order. Rows without a worker code are dropped."""
    codes = set(worker_codes)
    debts = []
    for row in rows:
        debt = parse_debt_row(row)
        if debt is not None and debt.worker_code in codes:
            debts.append(debt)
    return debts
