# tests/conftest.py

import pytest

from config import Config
from payroll.calculator.records import EquipmentPricing


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    # SQLite in memory shares a single connection; fetch sheets in order.
    FETCH_MAX_WORKERS = 1
    CACHE_TTL_SECONDS = 60


@pytest.fixture(scope="module")
def app_with_db():
    """
    Creates a new app instance for a test module, sets up an in-memory database,
    and yields the app within an application context.
    """
    from payroll import create_app, db

    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app  # The tests will run here
        db.session.remove()
        db.drop_all()


class FakeSource:
    """
    In-memory data source. Sheets are given as data rows (a header row is
    added on read); any sheet or method named in `failing` raises.
    """

    def __init__(self, sheets=None, assignments=None, salary_configs=None, pricing=None, failing=()):
        self.sheets = sheets or {}
        self.assignments = assignments or []
        self.salary_configs = salary_configs or {}
        self.pricing = pricing or EquipmentPricing()
        self.failing = set(failing)
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.failing:
            raise RuntimeError(f"{name} is unavailable")

    def read_rows(self, sheet_name):
        self._maybe_fail(sheet_name)
        rows = self.sheets.get(sheet_name)
        if rows is None:
            return []
        return [['header']] + [list(row) for row in rows]

    def get_assigned_workers(self, supervisor_code):
        self._maybe_fail('assignments')
        return [a for a in self.assignments if a.supervisor_code == supervisor_code]

    def get_salary_config(self, supervisor_code):
        self._maybe_fail('salary_config')
        return self.salary_configs.get(supervisor_code)

    def get_equipment_pricing(self):
        self._maybe_fail('pricing')
        return self.pricing


@pytest.fixture
def fake_source():
    """Factory for FakeSource instances."""
    return FakeSource


def performance_row(day, worker_code, hours=8, orders=100, absence='', acceptance=95, debt=0,
                    break_minutes=30, delay=0):
    """A daily performance row in sheet column order."""
    return [day, worker_code, hours, break_minutes, delay, absence, orders, acceptance, debt]


@pytest.fixture
def make_performance_row():
    return performance_row
