# ==============================================================================
# payroll/main/forms.py
# ------------------------------------------------------------------------------
# Defines the admin forms using Flask-WTF for input validation.
# ==============================================================================

from flask_wtf import FlaskForm
from wtforms import FloatField, SelectField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, NumberRange, Optional

from payroll.calculator.records import METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2


class AppSettingForm(FlaskForm):
    """Form for editing a single application setting."""
    value = TextAreaField('القيمة', validators=[DataRequired()])


class SalaryConfigForm(FlaskForm):
    """Form for setting a supervisor's salary method and parameters."""
    method = SelectField(
        'طريقة الراتب',
        choices=[(METHOD_FIXED, 'راتب ثابت'), (METHOD_TYPE1, 'عمولة النوع الأول'), (METHOD_TYPE2, 'عمولة النوع الثاني')],
        validators=[InputRequired(message="يرجى اختيار طريقة الراتب.")]
    )
    fixed_amount = FloatField('المبلغ الثابت', validators=[Optional(), NumberRange(min=0)])
    type2_base_percentage = FloatField('النسبة الأساسية (%)', validators=[Optional(), NumberRange(min=0, max=100)])
    type2_supervisor_percentage = FloatField('نسبة المشرف (%)', validators=[Optional(), NumberRange(min=0, max=100)])


class CommissionRangeForm(FlaskForm):
    """Form for adding one Type 1 commission tier."""
    min_hours = FloatField('من (ساعة)', validators=[InputRequired(message="هذا الحقل مطلوب."), NumberRange(min=0)])
    max_hours = FloatField('إلى (ساعة)', validators=[InputRequired(message="هذا الحقل مطلوب."), NumberRange(min=0)])
    rate_per_order = FloatField('العمولة لكل طلب', validators=[InputRequired(message="هذا الحقل مطلوب."), NumberRange(min=0)])

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators=extra_validators):
            return False
        if self.max_hours.data < self.min_hours.data:
            self.max_hours.errors.append("الحد الأعلى يجب أن يكون أكبر من أو يساوي الحد الأدنى.")
            return False
        return True
