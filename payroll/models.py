# ==============================================================================
# payroll/models.py
# ------------------------------------------------------------------------------
# Defines the database schema using SQLAlchemy ORM models.
# ==============================================================================

from datetime import datetime
import json

from payroll import db
from payroll.calculator.records import CommissionRange, SalaryConfig


class DataSheet(db.Model):
    """
    Raw rows of one source sheet (header first), stored as JSON exactly as
    they were received. The calculator parses them on every run.
    """
    __tablename__ = 'data_sheet'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False, index=True)
    rows_json = db.Column(db.Text, nullable=False, default='[]')
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<DataSheet {self.name}>'

    def get_rows(self):
        return json.loads(self.rows_json or '[]')

    def set_rows(self, rows):
        self.rows_json = json.dumps(rows, ensure_ascii=False)


class SalaryConfigRecord(db.Model):
    """
    Salary method and parameters for one supervisor.
    Managed via the admin endpoints.
    """
    __tablename__ = 'salary_config'
    id = db.Column(db.Integer, primary_key=True)
    supervisor_code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    method = db.Column(db.String(32), nullable=False, default='fixed')  # fixed, commission_type1, commission_type2
    fixed_amount = db.Column(db.Float, default=0)
    type2_base_percentage = db.Column(db.Float, nullable=True)
    type2_supervisor_percentage = db.Column(db.Float, nullable=True)

    ranges = db.relationship('CommissionRangeRule', backref='salary_config', lazy='dynamic',
                             cascade="all, delete-orphan")

    def __repr__(self):
        return f'<SalaryConfig {self.supervisor_code}: {self.method}>'

    def to_config(self):
        """Converts the row (and its ranges) into the calculator's SalaryConfig."""
        ranges = tuple(
            CommissionRange(min_hours=r.min_hours, max_hours=r.max_hours, rate_per_order=r.rate_per_order)
            for r in self.ranges.order_by(CommissionRangeRule.min_hours, CommissionRangeRule.id).all()
        )
        return SalaryConfig(
            supervisor_code=self.supervisor_code,
            method=self.method,
            fixed_amount=self.fixed_amount or 0.0,
            type1_ranges=ranges or None,
            type2_base_percentage=self.type2_base_percentage,
            type2_supervisor_percentage=self.type2_supervisor_percentage,
        )


class CommissionRangeRule(db.Model):
    """
    One average-daily-hours tier of a Type 1 commission.
    Tiers are tried in ascending min_hours order.
    """
    __tablename__ = 'commission_range'
    id = db.Column(db.Integer, primary_key=True)
    salary_config_id = db.Column(db.Integer, db.ForeignKey('salary_config.id'), nullable=False)
    min_hours = db.Column(db.Float, nullable=False)
    max_hours = db.Column(db.Float, nullable=False)
    rate_per_order = db.Column(db.Float, nullable=False, default=0)

    def __repr__(self):
        return f'<CommissionRange {self.id}: {self.min_hours}-{self.max_hours} @ {self.rate_per_order}>'


class AppSetting(db.Model):
    """
    Stores key-value pairs for the business rules the calculator reads
    (equipment prices, inquiry fee, default commission tiers).
    """
    __tablename__ = 'app_setting'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(128), unique=True, nullable=False, index=True)
    value = db.Column(db.String(1024), nullable=False)
    description = db.Column(db.String(512))  # For hints in the admin endpoints
    value_type = db.Column(db.String(32), default='string')  # e.g., 'float', 'int', 'string', 'json'

    def __repr__(self):
        return f'<AppSetting {self.key}: {self.value}>'

    def get_value(self):
        """Casts the string value to its correct Python type."""
        if self.value_type == 'float':
            return float(self.value)
        if self.value_type == 'int':
            return int(self.value)
        if self.value_type == 'json':
            return json.loads(self.value)
        return self.value
