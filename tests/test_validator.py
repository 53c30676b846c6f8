# tests/test_validator.py

from payroll.calculator import schema
from payroll.calculator.validator import validate_sheet_rows

PERFORMANCE_HEADER = ["التاريخ", "كود المندوب", "ساعات", "استراحة", "تأخير", "غياب", "طلبات", "قبول", "مديونية"]


def test_valid_performance_rows_pass():
    rows = [
        PERFORMANCE_HEADER,
        ["2025-11-01", "W1", 8, 30, 0, "", 100, 0.95, 0],
        [45962, "W2", "7.5", None, "", "نعم", "1,200", "95%", None],
    ]
    data, errors = validate_sheet_rows(schema.PERFORMANCE_SHEET, rows)

    assert errors == []
    assert data == rows


def test_non_numeric_cells_are_reported_with_their_position():
    rows = [
        PERFORMANCE_HEADER,
        ["2025-11-01", "W1", 8, 30, 0, "", 100, 95, 0],
        ["2025-11-02", "W1", "eight", 30, 0, "", "many", 95, 0],
    ]
    data, errors = validate_sheet_rows(schema.PERFORMANCE_SHEET, rows)

    assert data is None
    assert len(errors) == 2
    assert "row 3" in errors[0]
    assert "'eight'" in errors[0]
    assert "column 3" in errors[0]
    assert "column 7" in errors[1]


def test_unknown_sheet_is_rejected():
    data, errors = validate_sheet_rows("Sheet1", [["a"]])
    assert data is None
    assert "Unknown sheet" in errors[0]


def test_rows_must_be_lists():
    data, errors = validate_sheet_rows(schema.ADVANCES_SHEET, {"rows": []})
    assert data is None
    assert errors

    data, errors = validate_sheet_rows(schema.ADVANCES_SHEET, [["h1", "h2", "h3"], "SUP1,11,100"])
    assert data is None


def test_nested_cells_are_rejected():
    data, errors = validate_sheet_rows(schema.ADVANCES_SHEET, [["h1", "h2", "h3"], ["SUP1", 11, [100]]])
    assert data is None
    assert "row 2" in errors[0]


def test_header_only_sheet_is_valid():
    data, errors = validate_sheet_rows(schema.SECURITY_SHEET, [["التاريخ", "المشرف"]])
    assert errors == []
    assert data == [["التاريخ", "المشرف"]]

    data, errors = validate_sheet_rows(schema.SECURITY_SHEET, [])
    assert errors == []


def test_too_few_columns_is_rejected():
    data, errors = validate_sheet_rows(schema.DEDUCTIONS_SHEET, [["a", "b"], ["SUP1", 11]])
    assert data is None
    assert "at least 4 columns" in errors[0]
