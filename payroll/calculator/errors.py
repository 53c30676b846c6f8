# ==============================================================================
# payroll/calculator/errors.py
# ------------------------------------------------------------------------------
# Exceptions that are allowed to stop a salary calculation.
# ==============================================================================


class PayrollError(Exception):
    """Base class for calculator errors."""


class SalaryConfigNotFound(PayrollError):
    def __init__(self, supervisor_code):
        self.supervisor_code = supervisor_code
        super().__init__(f"Salary configuration not found for supervisor '{supervisor_code}'")


class InvalidDateRange(PayrollError, ValueError):
    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Start date {start} is after end date {end}")
