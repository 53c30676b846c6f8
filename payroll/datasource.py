# ==============================================================================
# payroll/datasource.py
# ------------------------------------------------------------------------------
# Data sources handed to the calculator engine.
#
# SheetDataSource reads the sheets, salary configurations and settings stored
# in the database. CachedDataSource wraps any source and memoizes the sheet
# reads for a while, so several calculations in a row share one fetch.
# Every call may run on a worker thread, so each one pushes its own app context.
# ==============================================================================

import logging

from payroll.cache import riders_key, sheet_key
from payroll.calculator import schema
from payroll.calculator.engine import CalculationConfig
from payroll.calculator.records import EquipmentPricing
from payroll.calculator.rows import data_rows, parse_assignment_row, parse_salary_config_row
from payroll.models import AppSetting, DataSheet, SalaryConfigRecord

EQUIPMENT_PRICING_KEY = 'EQUIPMENT_PRICING'

_MISSING = object()


class SheetDataSource:
    """Reads everything from the application database."""

    def __init__(self, app):
        self.app = app

    def read_rows(self, sheet_name):
        with self.app.app_context():
            sheet = DataSheet.query.filter_by(name=sheet_name).first()
            if sheet is None:
                logging.warning(f"Sheet '{sheet_name}' has not been uploaded yet; treating it as empty.")
                return []
            return sheet.get_rows()

    def get_assigned_workers(self, supervisor_code):
        assignments = []
        for row in data_rows(self.read_rows(schema.RIDERS_SHEET)):
            assignment = parse_assignment_row(row)
            if assignment is not None and assignment.supervisor_code == supervisor_code:
                assignments.append(assignment)
        logging.info(f"  Found {len(assignments)} workers assigned to {supervisor_code}")
        return assignments

    def get_salary_config(self, supervisor_code):
        """
        The configuration saved through the admin endpoints wins; otherwise
        the salary settings sheet is searched. Returns None when neither has it.
        """
        with self.app.app_context():
            record = SalaryConfigRecord.query.filter_by(supervisor_code=supervisor_code).first()
            if record is not None:
                return record.to_config()

        for row in data_rows(self.read_rows(schema.SALARY_CONFIG_SHEET)):
            config = parse_salary_config_row(row)
            if config is not None and config.supervisor_code == supervisor_code:
                return config
        return None

    def get_equipment_pricing(self):
        with self.app.app_context():
            setting = AppSetting.query.filter_by(key=EQUIPMENT_PRICING_KEY).first()
            if setting is None:
                return EquipmentPricing()
            return EquipmentPricing.from_dict(setting.get_value())


class CachedDataSource:
    """
    Memoizes sheet reads and worker assignments of another source.
    Salary configurations and prices are always read fresh, since admins edit
    them directly.
    """

    def __init__(self, source, cache, ttl=None):
        self.source = source
        self.cache = cache
        self.ttl = ttl

    def _cached(self, key, fetch):
        value = self.cache.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = fetch()
        self.cache.set(key, value, self.ttl)
        return value

    def read_rows(self, sheet_name):
        return self._cached(sheet_key(sheet_name), lambda: self.source.read_rows(sheet_name))

    def get_assigned_workers(self, supervisor_code):
        return self._cached(riders_key(supervisor_code),
                            lambda: self.source.get_assigned_workers(supervisor_code))

    def get_salary_config(self, supervisor_code):
        return self.source.get_salary_config(supervisor_code)

    def get_equipment_pricing(self):
        return self.source.get_equipment_pricing()

    def invalidate(self):
        self.cache.clear()


def load_calculation_config():
    """Builds a CalculationConfig from the AppSetting table (needs an app context)."""
    settings = {}
    for setting in AppSetting.query.all():
        try:
            settings[setting.key] = setting.get_value()
        except ValueError as e:
            logging.error(f"Setting '{setting.key}' has an unreadable value {setting.value!r}; using the default. Error: {e}")
    return CalculationConfig(settings)
