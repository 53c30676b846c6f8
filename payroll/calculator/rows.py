# ==============================================================================
# payroll/calculator/rows.py
# ------------------------------------------------------------------------------
# Ingestion boundary: raw spreadsheet rows in, typed records out.
# Cells are read defensively: a missing or non-numeric cell counts as zero,
# never as an error.
# ==============================================================================

import json
import logging
import math
import numbers
import re
from dataclasses import dataclass
from typing import Any

from . import schema
from .dates import month_bounds, normalize
from .records import (CommissionRange, DebtRecord, PerformanceRecord, SalaryConfig, SupervisorInfo,
                      WorkerAssignment)

_MONTH_NUMBER_RE = re.compile(r'^\d{1,2}(\.0+)?$')
_UNASSIGNED = frozenset(sentinel.casefold() for sentinel in schema.UNASSIGNED_TEXTS)

PERIOD_NONE = 'none'
PERIOD_MONTH = 'month'
PERIOD_DATE = 'date'
PERIOD_INVALID = 'invalid'


@dataclass(frozen=True)
class Period:
    kind: str
    value: Any = None


# --- Cell helpers ---

def cell(row, index):
    if index is None or row is None or index >= len(row):
        return None
    return row[index]


def cell_text(value):
    if value is None:
        return ''
    if isinstance(value, float):
        if math.isnan(value):
            return ''
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def to_float(value):
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
    else:
        text = cell_text(value).replace(',', '')
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_int(value):
    return int(to_float(value))


# --- Performance rows ---

def performance_worker_code(row):
    return cell_text(cell(row, schema.PERFORMANCE_COLUMNS['worker_code']))


def performance_date_cell(row):
    return cell(row, schema.PERFORMANCE_COLUMNS['date'])


def is_absent(value):
    """Explicit allow-list: the absence column is free text, not a boolean."""
    return cell_text(value).casefold() in schema.ABSENCE_TRUTHY


def parse_acceptance(value):
    """
    Acceptance arrives both as 95 and as 0.95 for the same 95%.
    Values in (0, 1] are scaled to percent; 0 stays 0.
    """
    text = cell_text(value).replace('%', '').replace('٪', '').strip()
    rate = to_float(text)
    if 0 < rate <= 1:
        rate *= 100
    return rate


def build_performance_record(row, day, worker_code):
    cols = schema.PERFORMANCE_COLUMNS
    return PerformanceRecord(
        date=day,
        worker_code=worker_code,
        hours=to_float(cell(row, cols['hours'])),
        break_minutes=to_float(cell(row, cols['break_minutes'])),
        delay=to_float(cell(row, cols['delay'])),
        absent=is_absent(cell(row, cols['absence'])),
        orders=to_int(cell(row, cols['orders'])),
        acceptance_rate=parse_acceptance(cell(row, cols['acceptance'])),
        debt=to_float(cell(row, cols['debt'])),
    )


def parse_performance_row(row):
    """Returns a PerformanceRecord, or None when the worker code or date is unusable."""
    worker_code = performance_worker_code(row)
    if not worker_code:
        return None
    day = normalize(performance_date_cell(row))
    if day is None:
        return None
    return build_performance_record(row, day, worker_code)


# --- Rider assignments ---

def normalize_supervisor_code(value):
    """Blank cells and every localized 'not assigned' text become None."""
    text = cell_text(value)
    if not text:
        return None
    if text.casefold() in _UNASSIGNED:
        return None
    return text


def parse_assignment_row(row):
    cols = schema.RIDER_COLUMNS
    worker_code = cell_text(cell(row, cols['code']))
    if not worker_code:
        return None
    status = cell_text(cell(row, cols['status'])).lower()
    return WorkerAssignment(
        worker_code=worker_code,
        supervisor_code=normalize_supervisor_code(cell(row, cols['supervisor_code'])),
        active=status not in schema.INACTIVE_STATUSES,
        name=cell_text(cell(row, cols['name'])),
    )


# --- Supervisors and debts ---

def parse_supervisor_row(row):
    cols = schema.SUPERVISOR_COLUMNS
    code = cell_text(cell(row, cols['code']))
    if not code:
        return None
    return SupervisorInfo(
        code=code,
        name=cell_text(cell(row, cols['name'])) or code,
        region=cell_text(cell(row, cols['region'])),
    )


def parse_debt_row(row):
    cols = schema.DEBT_COLUMNS
    worker_code = cell_text(cell(row, cols['worker_code']))
    if not worker_code:
        return None
    return DebtRecord(
        worker_code=worker_code,
        amount=to_float(cell(row, cols['amount'])),
        date=cell_text(cell(row, cols['date'])),
        notes=cell_text(cell(row, cols['notes'])),
    )


# --- Salary configuration rows ---

def normalize_method(value):
    return schema.METHOD_ALIASES.get(cell_text(value).lower())


def parse_ranges(value):
    """
    Parses commission ranges from a JSON list (or an already decoded list).
    Accepts both minHours/maxHours/ratePerOrder and snake_case keys.
    Returns None when nothing usable is present.
    """
    if value is None or value == '':
        return None
    raw = value
    if isinstance(value, str):
        try:
            raw = json.loads(value)
        except json.JSONDecodeError:
            logging.warning(f"Ignoring commission ranges that are not valid JSON: {value!r}")
            return None
    if not isinstance(raw, list):
        return None

    ranges = []
    for item in raw:
        if isinstance(item, CommissionRange):
            ranges.append(item)
            continue
        if not isinstance(item, dict):
            continue
        ranges.append(CommissionRange(
            min_hours=to_float(item.get('minHours', item.get('min_hours'))),
            max_hours=to_float(item.get('maxHours', item.get('max_hours'))),
            rate_per_order=to_float(item.get('ratePerOrder', item.get('rate_per_order'))),
        ))
    return tuple(ranges) or None


def _optional_float(value):
    if cell_text(value) == '':
        return None
    return to_float(value)


def parse_salary_config_row(row):
    cols = schema.SALARY_CONFIG_COLUMNS
    supervisor_code = cell_text(cell(row, cols['supervisor_code']))
    if not supervisor_code:
        return None
    raw_method = cell(row, cols['method'])
    method = normalize_method(raw_method) if cell_text(raw_method) else schema.METHOD_ALIASES['fixed']
    if method is None:
        logging.warning(f"Unknown salary method {cell_text(raw_method)!r} for supervisor '{supervisor_code}'.")
        return None
    return SalaryConfig(
        supervisor_code=supervisor_code,
        method=method,
        fixed_amount=to_float(cell(row, cols['fixed_amount'])),
        type1_ranges=parse_ranges(cell(row, cols['type1_ranges'])),
        type2_base_percentage=_optional_float(cell(row, cols['type2_base_percentage'])),
        type2_supervisor_percentage=_optional_float(cell(row, cols['type2_supervisor_percentage'])),
    )


# --- Deduction periods ---

def resolve_period(value):
    """
    Classifies a deduction period cell.

    A bare integer 1-12 is a month of the query's year. Anything else that
    normalizes is an explicit date. Empty cells have no period.
    """
    text = cell_text(value)
    if not text:
        return Period(PERIOD_NONE)
    if _MONTH_NUMBER_RE.match(text):
        month = int(float(text))
        if 1 <= month <= 12:
            return Period(PERIOD_MONTH, month)
    day = normalize(value)
    if day is not None:
        return Period(PERIOD_DATE, day)
    return Period(PERIOD_INVALID, text)


def period_in_range(period, start, end):
    if period.kind == PERIOD_NONE:
        return True
    if period.kind == PERIOD_DATE:
        return start <= period.value <= end
    if period.kind == PERIOD_MONTH:
        month_start, month_end = month_bounds(start.year, period.value)
        return month_start <= end and month_end >= start
    return False


def period_label(period):
    if period.kind == PERIOD_DATE:
        return period.value.isoformat()
    if period.kind == PERIOD_MONTH:
        return schema.MONTH_LABEL.format(month=period.value)
    if period.kind == PERIOD_NONE:
        return schema.UNSPECIFIED_PERIOD_LABEL
    return str(period.value)


def data_rows(rows):
    """Drops the header row every sheet starts with."""
    return list(rows[1:]) if rows else []
