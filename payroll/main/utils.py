# ==============================================================================
# payroll/main/utils.py
# ------------------------------------------------------------------------------
# Request helpers shared by the API routes and the CLI.
# ==============================================================================
from datetime import timedelta

from flask import current_app

from payroll.calculator.dates import as_date, month_period
from payroll.calculator.engine import (calculate_supervisor_salary, performance_report, supervisor_debts,
                                      supervisors_performance_overview)
from payroll.datasource import load_calculation_config

PERFORMANCE_DEFAULT_DAYS = 7


def default_salary_period(today):
    """First day of the current month through today."""
    return today.replace(day=1), today


def default_performance_period(today):
    """The last seven days, today included."""
    return today - timedelta(days=PERFORMANCE_DEFAULT_DAYS - 1), today


def parse_period_args(args, default_period):
    """
    Reads the period from query arguments.

    Args:
        args (MultiDict): Request arguments. Either startDate/endDate, or
            month/year for a whole calendar month.
        default_period (tuple): (start, end) used when neither is given.

    Returns:
        tuple: (start, end) as dates.

    Raises:
        ValueError: A date, month or year that cannot be read.
    """
    month, year = args.get('month'), args.get('year')
    if month or year:
        if not (month and year):
            raise ValueError("Both 'month' and 'year' are required.")
        try:
            return month_period(int(year), int(month))
        except ValueError:
            raise ValueError(f"Invalid month/year: {month}/{year}")

    start, end = default_period
    if args.get('startDate'):
        start = as_date(args['startDate'])
    if args.get('endDate'):
        end = as_date(args['endDate'])
    return start, end


def run_salary_calculation(supervisor_code, start, end):
    """Runs a salary calculation with the application's data source and settings."""
    return calculate_supervisor_salary(
        current_app.extensions['payroll_source'],
        supervisor_code,
        start,
        end,
        config=load_calculation_config(),
        max_workers=current_app.config.get('FETCH_MAX_WORKERS', 4),
    )


def run_performance_report(supervisor_code, start, end):
    return performance_report(
        current_app.extensions['payroll_source'],
        supervisor_code,
        start,
        end,
        max_workers=current_app.config.get('FETCH_MAX_WORKERS', 4),
    )


def run_supervisors_overview(start, end):
    return supervisors_performance_overview(
        current_app.extensions['payroll_source'],
        start,
        end,
        max_workers=current_app.config.get('FETCH_MAX_WORKERS', 4),
    )


def run_supervisor_debts(supervisor_code):
    return supervisor_debts(
        current_app.extensions['payroll_source'],
        supervisor_code,
        max_workers=current_app.config.get('FETCH_MAX_WORKERS', 4),
    )
