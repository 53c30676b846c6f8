import json

from payroll import db
from payroll.calculator.commission import (DEFAULT_AVERAGE_ORDER_VALUE, DEFAULT_TYPE1_RANGES,
                                           DEFAULT_TYPE2_BASE_PERCENTAGE, DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE)
from payroll.calculator.deductions import DEFAULT_SECURITY_INQUIRY_FEE
from payroll.calculator.records import EquipmentPricing, ranges_to_dicts
from payroll.models import AppSetting

DEFAULT_SETTINGS = {
    # key: [value, description, value_type]
    'EQUIPMENT_PRICING': [json.dumps(EquipmentPricing().to_dict()), 'سعر الوحدة لكل نوع من المعدات (JSON)', 'json'],
    'SECURITY_INQUIRY_FEE': [str(DEFAULT_SECURITY_INQUIRY_FEE), 'رسوم الاستعلام الأمني الواحد', 'float'],
    'AVERAGE_ORDER_VALUE': [str(DEFAULT_AVERAGE_ORDER_VALUE), 'متوسط قيمة الطلب لتقدير الإيرادات (عمولة النوع الثاني)', 'float'],
    'DEFAULT_TYPE1_RANGES': [json.dumps(ranges_to_dicts(DEFAULT_TYPE1_RANGES)),
                             'شرائح عمولة النوع الأول الافتراضية حسب متوسط الساعات اليومي (JSON)', 'json'],
    'DEFAULT_TYPE2_BASE_PERCENTAGE': [str(DEFAULT_TYPE2_BASE_PERCENTAGE), 'النسبة الأساسية الافتراضية لعمولة النوع الثاني (%)', 'float'],
    'DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE': [str(DEFAULT_TYPE2_SUPERVISOR_PERCENTAGE),
                                            'نسبة المشرف الافتراضية لعمولة النوع الثاني (%)', 'float'],
}


def seed_data():
    """Populates the database with default settings."""
    for key, data in DEFAULT_SETTINGS.items():
        setting = AppSetting.query.filter_by(key=key).first()
        if not setting:  # Only add if it doesn't exist
            setting = AppSetting(key=key, value=data[0], description=data[1], value_type=data[2])
            db.session.add(setting)
            print(f'Seeding setting: {key}')

    db.session.commit()
    print('Seeding complete.')
