# ==============================================================================
# payroll/main/routes.py
# ------------------------------------------------------------------------------
# Defines the JSON API and admin routes of the main blueprint.
# ==============================================================================

import json
from datetime import date

from flask import current_app, jsonify, request

from payroll import db
from payroll.main import bp
from payroll.models import AppSetting, CommissionRangeRule, DataSheet, SalaryConfigRecord
from payroll.calculator.errors import InvalidDateRange, SalaryConfigNotFound
from payroll.calculator.validator import validate_sheet_rows
from payroll.main.forms import AppSettingForm, CommissionRangeForm, SalaryConfigForm
from payroll.main.utils import (default_performance_period, default_salary_period, parse_period_args,
                                run_performance_report, run_salary_calculation, run_supervisor_debts,
                                run_supervisors_overview)

_NUMERIC_TYPES = {'float': float, 'int': int}

# --- Helper Functions ---


def error_response(message, status):
    return jsonify({'error': message}), status


def form_errors(form):
    return {name: list(errors) for name, errors in form.errors.items()}


def _invalidate_cache():
    current_app.extensions['payroll_source'].invalidate()


def _salary_config_json(record):
    return {
        'supervisor_code': record.supervisor_code,
        'method': record.method,
        'fixed_amount': record.fixed_amount,
        'type2_base_percentage': record.type2_base_percentage,
        'type2_supervisor_percentage': record.type2_supervisor_percentage,
        'ranges': [
            {'id': r.id, 'min_hours': r.min_hours, 'max_hours': r.max_hours, 'rate_per_order': r.rate_per_order}
            for r in record.ranges.order_by(CommissionRangeRule.min_hours, CommissionRangeRule.id).all()
        ],
    }

# --- API Routes ---


@bp.route('/api/salary/<supervisor_code>', methods=['GET'])
def supervisor_salary(supervisor_code):
    """Salary for startDate..endDate, a month/year, or the current month so far."""
    try:
        start, end = parse_period_args(request.args, default_salary_period(date.today()))
        result = run_salary_calculation(supervisor_code, start, end)
    except SalaryConfigNotFound as e:
        current_app.logger.warning(str(e))
        return error_response(str(e), 404)
    except (InvalidDateRange, ValueError) as e:
        return error_response(str(e), 400)
    return jsonify(result.to_dict())


@bp.route('/api/performance/<supervisor_code>', methods=['GET'])
def supervisor_performance(supervisor_code):
    """Per-worker performance for the period (the last 7 days by default)."""
    try:
        start, end = parse_period_args(request.args, default_performance_period(date.today()))
        report = run_performance_report(supervisor_code, start, end)
    except (InvalidDateRange, ValueError) as e:
        return error_response(str(e), 400)
    return jsonify(report)


@bp.route('/api/debts/<supervisor_code>', methods=['GET'])
def supervisor_debts(supervisor_code):
    return jsonify(run_supervisor_debts(supervisor_code))


@bp.route('/api/admin/supervisor-performance', methods=['GET'])
def supervisors_overview():
    """Every supervisor's totals for the period (the last 7 days by default)."""
    try:
        start, end = parse_period_args(request.args, default_performance_period(date.today()))
        overview = run_supervisors_overview(start, end)
    except (InvalidDateRange, ValueError) as e:
        return error_response(str(e), 400)
    return jsonify(overview)


@bp.route('/api/sheets/<sheet_name>', methods=['PUT'])
def upload_sheet(sheet_name):
    """Replaces a sheet's rows. Body: {"rows": [[header...], [cell, ...], ...]}."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or 'rows' not in payload:
        return error_response('Request body must be a JSON object with a "rows" list.', 400)

    rows, errors = validate_sheet_rows(sheet_name, payload['rows'])
    if errors:
        return jsonify({'errors': errors}), 400

    try:
        sheet = DataSheet.query.filter_by(name=sheet_name).first()
        if sheet is None:
            sheet = DataSheet(name=sheet_name)
            db.session.add(sheet)
        sheet.set_rows(rows)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Saving sheet '{sheet_name}' failed: {e}", exc_info=True)
        return error_response('The sheet could not be saved.', 500)

    _invalidate_cache()
    current_app.logger.info(f"Sheet '{sheet_name}' stored with {max(len(rows) - 1, 0)} data rows.")
    return jsonify({'sheet': sheet_name, 'rows': max(len(rows) - 1, 0)})

# --- Admin Routes ---


@bp.route('/admin/salary-config/<supervisor_code>', methods=['POST'])
def save_salary_config(supervisor_code):
    form = SalaryConfigForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form_errors(form)}), 400

    record = SalaryConfigRecord.query.filter_by(supervisor_code=supervisor_code).first()
    if record is None:
        record = SalaryConfigRecord(supervisor_code=supervisor_code)
        db.session.add(record)
    record.method = form.method.data
    record.fixed_amount = form.fixed_amount.data or 0
    record.type2_base_percentage = form.type2_base_percentage.data
    record.type2_supervisor_percentage = form.type2_supervisor_percentage.data
    db.session.commit()
    current_app.logger.info(f"Salary configuration for {supervisor_code} saved: {record.method}")
    return jsonify(_salary_config_json(record))


@bp.route('/admin/salary-config/<supervisor_code>/ranges', methods=['POST'])
def add_commission_range(supervisor_code):
    record = SalaryConfigRecord.query.filter_by(supervisor_code=supervisor_code).first_or_404()
    form = CommissionRangeForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form_errors(form)}), 400

    commission_range = CommissionRangeRule(
        salary_config_id=record.id,
        min_hours=form.min_hours.data,
        max_hours=form.max_hours.data,
        rate_per_order=form.rate_per_order.data,
    )
    db.session.add(commission_range)
    db.session.commit()
    return jsonify(_salary_config_json(record)), 201


@bp.route('/admin/salary-config/<supervisor_code>/ranges/<int:range_id>/delete', methods=['POST'])
def delete_commission_range(supervisor_code, range_id):
    record = SalaryConfigRecord.query.filter_by(supervisor_code=supervisor_code).first_or_404()
    commission_range = CommissionRangeRule.query.filter_by(id=range_id, salary_config_id=record.id).first_or_404()
    db.session.delete(commission_range)
    db.session.commit()
    return jsonify(_salary_config_json(record))


@bp.route('/admin/settings/<key>', methods=['POST'])
def edit_setting(key):
    setting = AppSetting.query.filter_by(key=key).first_or_404()
    form = AppSettingForm()
    if not form.validate_on_submit():
        return jsonify({'errors': form_errors(form)}), 400

    new_value = form.value.data
    if setting.value_type == 'json':
        try:
            new_value = json.dumps(json.loads(new_value), ensure_ascii=False)
        except json.JSONDecodeError:
            return error_response(f'The value for "{key}" is not valid JSON.', 400)
    elif setting.value_type in _NUMERIC_TYPES:
        try:
            _NUMERIC_TYPES[setting.value_type](new_value)
        except ValueError:
            return error_response(f'The value for "{key}" must be a number.', 400)

    setting.value = new_value
    db.session.commit()
    current_app.logger.info(f'Setting "{key}" updated.')
    return jsonify({'key': setting.key, 'value': setting.get_value()})
