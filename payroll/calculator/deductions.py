# ==============================================================================
# payroll/calculator/deductions.py
# ------------------------------------------------------------------------------
# Sums the four deduction categories charged to a supervisor within a period:
# advances, generic deductions, equipment and security inquiries.
# Every category returns its total together with the lines that make it up;
# the total is always the sum of those lines.
# ==============================================================================

import logging

from . import schema
from .records import DeductionLine, DeductionResult, DeductionSummary, EquipmentLine, EquipmentPricing
from .rows import (PERIOD_DATE, PERIOD_MONTH, Period, PERIOD_NONE, cell, cell_text, period_in_range,
                   period_label, resolve_period, to_float, to_int)

DEFAULT_SECURITY_INQUIRY_FEE = 100.0


def _matching_rows(rows, supervisor_code, columns, start, end):
    """Yields (row, period) for the supervisor's rows whose period falls in range."""
    for row in rows:
        if cell_text(cell(row, columns['supervisor_code'])) != supervisor_code:
            continue
        period = resolve_period(cell(row, columns['period']))
        if period_in_range(period, start, end):
            yield row, period


def _result(category, supervisor_code, items, count=0):
    total = sum(item.amount for item in items)
    logging.info(f"[Deductions] {category} for {supervisor_code}: {total:,.2f} ({len(items)} items)")
    return DeductionResult(total=total, items=tuple(items), count=count or len(items))


def aggregate_advances(supervisor_code, start, end, rows):
    columns = schema.ADVANCE_COLUMNS
    items = [
        DeductionLine(label=period_label(period), amount=to_float(cell(row, columns['amount'])))
        for row, period in _matching_rows(rows, supervisor_code, columns, start, end)
    ]
    return _result('advances', supervisor_code, items)


def aggregate_deductions(supervisor_code, start, end, rows):
    columns = schema.DEDUCTION_COLUMNS
    items = []
    for row, period in _matching_rows(rows, supervisor_code, columns, start, end):
        reason = cell_text(cell(row, columns['reason'])) or schema.DEFAULT_DEDUCTION_REASON
        items.append(DeductionLine(
            label=period_label(period),
            amount=to_float(cell(row, columns['amount'])),
            reason=reason,
        ))
    return _result('deductions', supervisor_code, items)


def aggregate_equipment(supervisor_code, start, end, rows, pricing=None):
    """
    Adds up equipment unit counts per kind and prices them.
    One line per kind with a non-zero quantity.
    """
    pricing = pricing or EquipmentPricing()
    columns = schema.EQUIPMENT_COLUMNS
    quantities = {kind: 0 for kind, _ in schema.EQUIPMENT_KINDS}

    for row, _ in _matching_rows(rows, supervisor_code, columns, start, end):
        for kind in quantities:
            quantities[kind] += to_int(cell(row, columns[kind]))

    items = []
    for kind, name in schema.EQUIPMENT_KINDS:
        quantity = quantities[kind]
        if not quantity:
            continue
        unit_price = getattr(pricing, kind)
        items.append(EquipmentLine(name=name, quantity=quantity, unit_price=unit_price,
                                   line_total=quantity * unit_price))
    return _result('equipment', supervisor_code, items)


def aggregate_security(supervisor_code, start, end, rows, fee=DEFAULT_SECURITY_INQUIRY_FEE):
    """
    Counts security inquiries naming the supervisor in any column and charges
    a flat fee for each. Column 0 is read as the inquiry date; rows whose
    date cannot be read are still counted.
    """
    count = 0
    for row in rows:
        if not any(cell_text(value) == supervisor_code for value in row):
            continue
        first = cell(row, schema.SECURITY_COLUMNS['period'])
        if cell_text(first) == supervisor_code:
            period = Period(PERIOD_NONE)
        else:
            period = resolve_period(first)
        if period.kind in (PERIOD_DATE, PERIOD_MONTH) and not period_in_range(period, start, end):
            continue
        count += 1

    items = []
    if count:
        items.append(DeductionLine(label=schema.SECURITY_LINE_LABEL, amount=count * fee, quantity=count))
    return _result('security', supervisor_code, items, count=count)


def summarize_deductions(advances, deductions, equipment, security):
    return DeductionSummary(
        advances=advances.total,
        deductions_generic=deductions.total,
        equipment=equipment.total,
        security=security.total,
        total=advances.total + deductions.total + equipment.total + security.total,
        advance_items=advances.items,
        deduction_items=deductions.items,
        equipment_items=equipment.items,
        security_count=security.count,
    )
