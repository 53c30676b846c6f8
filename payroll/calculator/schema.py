# ==============================================================================
# payroll/calculator/schema.py
# ------------------------------------------------------------------------------
# Defines the expected layout of every source sheet.
# This schema is the single source of truth for the row parsers and the
# validator: no other module indexes a raw row by position.
# ==============================================================================

PERFORMANCE_SHEET = 'البيانات اليومية'
RIDERS_SHEET = 'المناديب'
ADVANCES_SHEET = 'السلف'
DEDUCTIONS_SHEET = 'الخصومات'
EQUIPMENT_SHEET = 'المعدات'
SECURITY_SHEET = 'استعلام أمني'
TARGETS_SHEET = 'الأهداف'
SALARY_CONFIG_SHEET = 'إعدادات_الرواتب'
SUPERVISORS_SHEET = 'المشرفين'
DEBTS_SHEET = 'الديون'

# --- Column positions (0-based) ---

PERFORMANCE_COLUMNS = {
    'date': 0, 'worker_code': 1, 'hours': 2, 'break_minutes': 3, 'delay': 4,
    'absence': 5, 'orders': 6, 'acceptance': 7, 'debt': 8,
}
RIDER_COLUMNS = {
    'code': 0, 'name': 1, 'region': 2, 'supervisor_code': 3,
    'supervisor_name': 4, 'phone': 5, 'join_date': 6, 'status': 7,
}
ADVANCE_COLUMNS = {'supervisor_code': 0, 'period': 1, 'amount': 2}
DEDUCTION_COLUMNS = {'supervisor_code': 0, 'period': 1, 'reason': 2, 'amount': 3}
EQUIPMENT_COLUMNS = {
    'supervisor_code': 0, 'period': 1, 'motorcycle_box': 2, 'bicycle_box': 3,
    'tshirt': 4, 'jacket': 5, 'helmet': 6,
}
SECURITY_COLUMNS = {'period': 0}
TARGET_COLUMNS = {'supervisor_code': 0, 'month': 1, 'bonus': 4}
SALARY_CONFIG_COLUMNS = {
    'supervisor_code': 0, 'method': 1, 'fixed_amount': 2, 'type1_ranges': 3,
    'type2_base_percentage': 4, 'type2_supervisor_percentage': 5,
}
SUPERVISOR_COLUMNS = {'code': 0, 'name': 1, 'region': 2}
DEBT_COLUMNS = {'worker_code': 0, 'amount': 1, 'date': 2, 'notes': 3}

METHOD_ALIASES = {
    'fixed': 'fixed',
    'ثابت': 'fixed',
    'commission_type1': 'commission_type1',
    'type1': 'commission_type1',
    'commission_type2': 'commission_type2',
    'type2': 'commission_type2',
}

# Equipment kinds in display order, with their line labels.
EQUIPMENT_KINDS = (
    ('motorcycle_box', 'صندوق دراجة نارية'),
    ('bicycle_box', 'صندوق دراجة هوائية'),
    ('tshirt', 'تيشرت'),
    ('jacket', 'جاكت'),
    ('helmet', 'خوذة'),
)

# --- Free-text vocabularies ---

ABSENCE_TRUTHY = frozenset({'نعم', '1', 'yes'})
UNASSIGNED_TEXTS = ('لم يتم التعيين', 'غير معروف', 'غير معين', 'لا يوجد', 'unassigned', 'not assigned', 'none')
INACTIVE_STATUSES = frozenset({'غير نشط', 'منتهي', 'inactive', 'terminated'})

UNSPECIFIED_PERIOD_LABEL = 'غير محدد'
MONTH_LABEL = 'شهر {month}'
DEFAULT_DEDUCTION_REASON = 'خصم'
SECURITY_LINE_LABEL = 'استعلامات أمنية'

# --- Validation rules per sheet ---

EXPECTED_SHEETS = {
    PERFORMANCE_SHEET: {
        'min_columns': 7,
        'key_column': PERFORMANCE_COLUMNS['worker_code'],
        'numeric_columns': [2, 3, 4, 6, 8],
    },
    RIDERS_SHEET: {
        'min_columns': 4,
        'key_column': RIDER_COLUMNS['code'],
        'numeric_columns': [],
    },
    ADVANCES_SHEET: {
        'min_columns': 3,
        'key_column': ADVANCE_COLUMNS['supervisor_code'],
        'numeric_columns': [ADVANCE_COLUMNS['amount']],
    },
    DEDUCTIONS_SHEET: {
        'min_columns': 4,
        'key_column': DEDUCTION_COLUMNS['supervisor_code'],
        'numeric_columns': [DEDUCTION_COLUMNS['amount']],
    },
    EQUIPMENT_SHEET: {
        'min_columns': 3,
        'key_column': EQUIPMENT_COLUMNS['supervisor_code'],
        'numeric_columns': [2, 3, 4, 5, 6],
    },
    SECURITY_SHEET: {
        'min_columns': 1,
        'key_column': None,
        'numeric_columns': [],
    },
    TARGETS_SHEET: {
        'min_columns': 2,
        'key_column': TARGET_COLUMNS['supervisor_code'],
        'numeric_columns': [TARGET_COLUMNS['bonus']],
    },
    SALARY_CONFIG_SHEET: {
        'min_columns': 2,
        'key_column': SALARY_CONFIG_COLUMNS['supervisor_code'],
        'numeric_columns': [2, 4, 5],
    },
    SUPERVISORS_SHEET: {
        'min_columns': 1,
        'key_column': SUPERVISOR_COLUMNS['code'],
        'numeric_columns': [],
    },
    DEBTS_SHEET: {
        'min_columns': 2,
        'key_column': DEBT_COLUMNS['worker_code'],
        'numeric_columns': [DEBT_COLUMNS['amount']],
    },
}
