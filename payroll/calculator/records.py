# ==============================================================================
# payroll/calculator/records.py
# ------------------------------------------------------------------------------
# Typed records produced at the ingestion boundary and by the calculator.
# Everything downstream of rows.py works on these, never on positional rows.
# ==============================================================================

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

METHOD_FIXED = 'fixed'
METHOD_TYPE1 = 'commission_type1'
METHOD_TYPE2 = 'commission_type2'
SALARY_METHODS = (METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2)


@dataclass(frozen=True)
class PerformanceRecord:
    """One day's metrics for one worker."""
    date: date
    worker_code: str
    hours: float = 0.0
    break_minutes: float = 0.0
    delay: float = 0.0
    absent: bool = False
    orders: int = 0
    acceptance_rate: float = 0.0
    debt: float = 0.0


@dataclass(frozen=True)
class WorkerAssignment:
    worker_code: str
    supervisor_code: Optional[str]
    active: bool = True
    name: str = ''


@dataclass(frozen=True)
class WorkerPerformance:
    """Per-worker aggregate over a date range."""
    worker_code: str
    days: int = 0
    hours: float = 0.0
    orders: int = 0
    break_minutes: float = 0.0
    delay: float = 0.0
    absences: int = 0
    debt: float = 0.0
    acceptance_rate: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class SupervisorInfo:
    code: str
    name: str = ''
    region: str = ''


@dataclass(frozen=True)
class SupervisorPerformance:
    """One supervisor's line in the admin overview; figures are rounded for display."""
    code: str
    name: str
    region: str
    subordinate_count: int = 0
    total_orders: int = 0
    total_hours: float = 0.0
    avg_acceptance: float = 0.0
    records_count: int = 0
    orders_per_rider: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DebtRecord:
    """A worker debt as written in the debts sheet; date and notes stay free text."""
    worker_code: str
    amount: float = 0.0
    date: str = ''
    notes: str = ''

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class CommissionRange:
    min_hours: float
    max_hours: float
    rate_per_order: float


@dataclass(frozen=True)
class SalaryConfig:
    supervisor_code: str
    method: str = METHOD_FIXED
    fixed_amount: float = 0.0
    type1_ranges: Optional[Tuple[CommissionRange, ...]] = None
    type2_base_percentage: Optional[float] = None
    type2_supervisor_percentage: Optional[float] = None


@dataclass(frozen=True)
class EquipmentPricing:
    motorcycle_box: float = 550.0
    bicycle_box: float = 550.0
    tshirt: float = 100.0
    jacket: float = 200.0
    helmet: float = 150.0

    _CAMEL_KEYS = {'motorcycle_box': 'motorcycleBox', 'bicycle_box': 'bicycleBox'}

    @classmethod
    def from_dict(cls, values):
        """Prices from a mapping; a key that is missing or not a number keeps its default (0 is kept)."""
        values = values or {}
        prices = {}
        for name in ('motorcycle_box', 'bicycle_box', 'tshirt', 'jacket', 'helmet'):
            value = values.get(name, values.get(cls._CAMEL_KEYS.get(name, name)))
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                prices[name] = float(value)
        return cls(**prices)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DeductionLine:
    label: str
    amount: float
    reason: Optional[str] = None
    quantity: Optional[int] = None


@dataclass(frozen=True)
class EquipmentLine:
    name: str
    quantity: int
    unit_price: float
    line_total: float

    @property
    def amount(self):
        return self.line_total


@dataclass(frozen=True)
class DeductionResult:
    total: float = 0.0
    items: Tuple[Any, ...] = ()
    count: int = 0


@dataclass(frozen=True)
class DeductionSummary:
    advances: float = 0.0
    deductions_generic: float = 0.0
    equipment: float = 0.0
    security: float = 0.0
    total: float = 0.0
    advance_items: Tuple[DeductionLine, ...] = ()
    deduction_items: Tuple[DeductionLine, ...] = ()
    equipment_items: Tuple[EquipmentLine, ...] = ()
    security_count: int = 0


@dataclass(frozen=True)
class CommissionResult:
    method: str
    base_amount: float = 0.0
    commission: Optional[float] = None
    rate: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DailyBreakdownRow:
    date: date
    orders: int
    hours: float
    rate: float
    daily_commission: float


@dataclass(frozen=True)
class SalaryCalculation:
    supervisor_code: str
    start: date
    end: date
    method: str
    base_amount: float
    commission: Optional[CommissionResult]
    bonus: float
    deductions: DeductionSummary
    raw_net: float
    net_salary: float
    clamped: bool = False
    warnings: Tuple[str, ...] = ()
    daily_breakdown: Tuple[DailyBreakdownRow, ...] = ()

    def to_dict(self):
        """Serializable view with ISO dates, in a fixed key order."""
        commission = None
        if self.commission is not None:
            commission = {
                'type': self.commission.method,
                'calculated_commission': self.commission.commission,
                'rate': self.commission.rate,
                'details': _jsonable(self.commission.details),
            }
        return {
            'supervisor_code': self.supervisor_code,
            'period': {'start_date': self.start.isoformat(), 'end_date': self.end.isoformat()},
            'method': self.method,
            'base_amount': self.base_amount,
            'commission': commission,
            'bonus': self.bonus,
            'deductions': _jsonable(asdict(self.deductions)),
            'raw_net': self.raw_net,
            'net_salary': self.net_salary,
            'clamped': self.clamped,
            'warnings': list(self.warnings),
            'daily_breakdown': [_jsonable(asdict(row)) for row in self.daily_breakdown],
        }


def _jsonable(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (CommissionRange, DeductionLine, EquipmentLine)):
        return _jsonable(asdict(value))
    return value


def ranges_to_dicts(ranges) -> List[Dict[str, float]]:
    return [asdict(r) for r in ranges or ()]
