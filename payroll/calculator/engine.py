# ==============================================================================
# payroll/calculator/engine.py
# ------------------------------------------------------------------------------
# Orchestrates a supervisor salary calculation, the performance report and
# the admin views (all-supervisor overview, worker debts).
#
# The data source is anything with read_rows / get_assigned_workers /
# get_salary_config / get_equipment_pricing. Fetches are independent and run
# concurrently; the calculation itself is pure and holds no state between
# calls.
# ==============================================================================

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

from . import commission, schema
from .composer import build_daily_breakdown, compose, find_bonus
from .dates import as_date
from .deductions import (DEFAULT_SECURITY_INQUIRY_FEE, aggregate_advances, aggregate_deductions, aggregate_equipment,
                         aggregate_security, summarize_deductions)
from .errors import InvalidDateRange, SalaryConfigNotFound
from .performance import aggregate_by_worker, filter_debts, filter_records, summarize_performance, supervisor_totals
from .records import EquipmentPricing
from .rows import data_rows, parse_ranges, parse_supervisor_row, to_float

DEFAULT_MAX_WORKERS = 4


# --- Configuration Holder ---

class CalculationConfig:
    """
    Business rules used by the calculator, read from a key/value mapping
    (the AppSetting table in the web app). Missing keys fall back to the
    built-in defaults.
    """

    def __init__(self, settings=None):
        self.load_settings(settings or {})

    def load_settings(self, settings_dict):
        self.SECURITY_INQUIRY_FEE = to_float(settings_dict.get('SECURITY_INQUIRY_FEE', DEFAULT_SECURITY_INQUIRY_FEE))
        self.AVERAGE_ORDER_VALUE = to_float(
            settings_dict.get('AVERAGE_ORDER_VALUE', commission.DEFAULT_AVERAGE_ORDER_VALUE))
        self.DEFAULT_TYPE1_RANGES = (parse_ranges(settings_dict.get('DEFAULT_TYPE1_RANGES'))
                                     or commission.DEFAULT_TYPE1_RANGES)
        self.DEFAULT_TYPE2_BASE_PERCENTAGE = to_float(
            settings_dict.get('DEFAULT_TYPE2_BASE_PERCENTAGE', commission.DEFAULT_TYPE2_BASE_PERCENTAGE))
        self.DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE = to_float(
            settings_dict.get('DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE', commission.DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE))


# --- Helper Functions ---

def _as_day(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return as_date(value)


def validate_range(start, end):
    """Normalizes both ends to calendar dates and rejects start > end."""
    start, end = _as_day(start), _as_day(end)
    if start > end:
        raise InvalidDateRange(start, end)
    return start, end


def _safe_fetch(label, fetch, default):
    try:
        return fetch()
    except Exception as e:
        logging.error(f"Fetching '{label}' failed, continuing with an empty value. Error: {e}", exc_info=True)
        return default


def fetch_all(jobs, max_workers=DEFAULT_MAX_WORKERS):
    """
    Runs independent fetches and joins on all of them.

    Args:
        jobs (dict): label -> (callable, default returned if the callable raises).
        max_workers (int): Thread pool size; 1 runs the fetches in order.

    Returns:
        dict: label -> fetched value.
    """
    if max_workers <= 1 or len(jobs) <= 1:
        return {label: _safe_fetch(label, fetch, default) for label, (fetch, default) in jobs.items()}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            label: executor.submit(_safe_fetch, label, fetch, default)
            for label, (fetch, default) in jobs.items()
        }
        return {label: future.result() for label, future in futures.items()}


def _worker_codes(assignments):
    return {assignment.worker_code for assignment in assignments}


# --- Main Calculation Orchestrator ---

def calculate_supervisor_salary(source, supervisor_code, start, end, config=None, max_workers=DEFAULT_MAX_WORKERS):
    """
    Computes a supervisor's salary for [start, end].

    Only a missing salary configuration stops the calculation. Any other
    unavailable input (workers, performance rows, a deduction sheet) counts
    as empty and the calculation still completes.

    Raises:
        InvalidDateRange: start is after end.
        SalaryConfigNotFound: the supervisor has no salary configuration.
    """
    start, end = validate_range(start, end)
    config = config or CalculationConfig()

    logging.info("=" * 80)
    logging.info(f"STARTING SALARY CALCULATION for {supervisor_code}: {start} to {end}")
    logging.info("=" * 80)

    try:
        salary_config = source.get_salary_config(supervisor_code)
    except Exception as e:
        logging.error(f"Could not load salary configuration for {supervisor_code}. Error: {e}", exc_info=True)
        salary_config = None
    if salary_config is None:
        raise SalaryConfigNotFound(supervisor_code)
    logging.info(f"  Salary method: {salary_config.method}")

    fetched = fetch_all({
        'assignments': (lambda: source.get_assigned_workers(supervisor_code), []),
        'performance': (lambda: source.read_rows(schema.PERFORMANCE_SHEET), []),
        'advances': (lambda: source.read_rows(schema.ADVANCES_SHEET), []),
        'deductions': (lambda: source.read_rows(schema.DEDUCTIONS_SHEET), []),
        'equipment': (lambda: source.read_rows(schema.EQUIPMENT_SHEET), []),
        'security': (lambda: source.read_rows(schema.SECURITY_SHEET), []),
        'targets': (lambda: source.read_rows(schema.TARGETS_SHEET), []),
        'pricing': (source.get_equipment_pricing, EquipmentPricing()),
    }, max_workers)

    worker_codes = _worker_codes(fetched['assignments'])
    if not worker_codes:
        logging.warning(f"Supervisor {supervisor_code} has no assigned workers; performance totals will be zero.")

    logging.info("--- Step 1: Filtering performance records ---")
    records = filter_records(worker_codes, start, end, data_rows(fetched['performance']))

    logging.info("--- Step 2: Aggregating deductions ---")
    deductions = summarize_deductions(
        aggregate_advances(supervisor_code, start, end, data_rows(fetched['advances'])),
        aggregate_deductions(supervisor_code, start, end, data_rows(fetched['deductions'])),
        aggregate_equipment(supervisor_code, start, end, data_rows(fetched['equipment']),
                            fetched['pricing'] or EquipmentPricing()),
        aggregate_security(supervisor_code, start, end, data_rows(fetched['security']),
                           fee=config.SECURITY_INQUIRY_FEE),
    )

    logging.info("--- Step 3: Computing base pay and commission ---")
    commission_result = commission.compute(
        salary_config,
        records,
        average_order_value=config.AVERAGE_ORDER_VALUE,
        default_ranges=config.DEFAULT_TYPE1_RANGES,
        default_base_percentage=config.DEFAULT_TYPE2_BASE_PERCENTAGE,
        default_supervisor_percentage=config.DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE,
    )

    logging.info("--- Step 4: Composing net salary ---")
    # Bonus targets are keyed by month number only; the period's first month is used.
    bonus = find_bonus(data_rows(fetched['targets']), supervisor_code, start.month)
    breakdown = build_daily_breakdown(commission_result, records, start, end)
    return compose(supervisor_code, start, end, commission_result, bonus, deductions, breakdown)


def _performance_records(source, supervisor_code, start, end, max_workers):
    fetched = fetch_all({
        'assignments': (lambda: source.get_assigned_workers(supervisor_code), []),
        'performance': (lambda: source.read_rows(schema.PERFORMANCE_SHEET), []),
    }, max_workers)
    worker_codes = _worker_codes(fetched['assignments'])
    return worker_codes, filter_records(worker_codes, start, end, data_rows(fetched['performance']))


def aggregate_performance(source, supervisor_code, start, end, max_workers=DEFAULT_MAX_WORKERS):
    """Per-worker performance aggregates for a supervisor's current workers."""
    start, end = validate_range(start, end)
    worker_codes, records = _performance_records(source, supervisor_code, start, end, max_workers)
    return aggregate_by_worker(records, worker_codes)


def performance_report(source, supervisor_code, start, end, max_workers=DEFAULT_MAX_WORKERS):
    """Per-worker aggregates plus the day-by-day summary used by dashboards."""
    start, end = validate_range(start, end)
    worker_codes, records = _performance_records(source, supervisor_code, start, end, max_workers)
    return {
        'supervisor_code': supervisor_code,
        'period': {'start_date': start.isoformat(), 'end_date': end.isoformat()},
        'workers': [worker.to_dict() for worker in aggregate_by_worker(records, worker_codes)],
        'summary': summarize_performance(records, start, end),
    }


# --- Admin Views ---

def supervisors_performance_overview(source, start, end, max_workers=DEFAULT_MAX_WORKERS):
    """
    Performance of every supervisor listed in the supervisors sheet over
    [start, end], plus grand totals.

    The supervisors and performance sheets are read once; worker lists are
    fetched per supervisor. A supervisor whose workers cannot be fetched
    shows up with zero workers.
    """
    start, end = validate_range(start, end)

    logging.info("=" * 80)
    logging.info(f"STARTING SUPERVISORS OVERVIEW: {start} to {end}")
    logging.info("=" * 80)

    fetched = fetch_all({
        'supervisors': (lambda: source.read_rows(schema.SUPERVISORS_SHEET), []),
        'performance': (lambda: source.read_rows(schema.PERFORMANCE_SHEET), []),
    }, max_workers)
    supervisors = [s for s in map(parse_supervisor_row, data_rows(fetched['supervisors'])) if s is not None]
    performance_rows = data_rows(fetched['performance'])

    assignments = fetch_all({
        supervisor.code: ((lambda code=supervisor.code: source.get_assigned_workers(code)), [])
        for supervisor in supervisors
    }, max_workers)

    lines = []
    all_rates = []
    total_hours = 0.0
    for supervisor in supervisors:
        worker_codes = _worker_codes(assignments.get(supervisor.code) or [])
        records = filter_records(worker_codes, start, end, performance_rows)
        total_hours += sum(record.hours for record in records)
        all_rates.extend(record.acceptance_rate for record in records if record.acceptance_rate > 0)
        lines.append(supervisor_totals(supervisor, len(worker_codes), records))

    logging.info(f"  Overview built for {len(lines)} supervisors.")
    return {
        'period': {'start_date': start.isoformat(), 'end_date': end.isoformat()},
        'summary': {
            'total_supervisors': len(lines),
            'total_orders': sum(line.total_orders for line in lines),
            'total_hours': round(total_hours, 2),
            'avg_acceptance': round(sum(all_rates) / len(all_rates), 2) if all_rates else 0,
            'total_records': sum(line.records_count for line in lines),
        },
        'supervisors': [line.to_dict() for line in lines],
    }


def supervisor_debts(source, supervisor_code, max_workers=DEFAULT_MAX_WORKERS):
    """Debts sheet rows belonging to the supervisor's workers, with their total."""
    fetched = fetch_all({
        'assignments': (lambda: source.get_assigned_workers(supervisor_code), []),
        'debts': (lambda: source.read_rows(schema.DEBTS_SHEET), []),
    }, max_workers)
    debts = filter_debts(_worker_codes(fetched['assignments']), data_rows(fetched['debts']))
    logging.info(f"[Debts] {supervisor_code}: {len(debts)} debt rows for its workers.")
    return {
        'supervisor_code': supervisor_code,
        'debts': [debt.to_dict() for debt in debts],
        'total': sum(debt.amount for debt in debts),
        'count': len(debts),
    }
