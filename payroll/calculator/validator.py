# ==============================================================================
# payroll/calculator/validator.py
# ------------------------------------------------------------------------------
# Validates the raw rows of a sheet before they are stored.
# ==============================================================================

import pandas as pd

from .schema import EXPECTED_SHEETS

_CELL_TYPES = (str, int, float, bool, type(None))


def validate_sheet_rows(sheet_name, rows):
    """
    Validates the shape and numeric columns of one sheet's rows.

    Args:
        sheet_name (str): Name of the sheet, one of EXPECTED_SHEETS.
        rows (list): Header row followed by data rows, each a list of cells.

    Returns:
        tuple: A tuple containing:
            - list: The rows if validation is successful, else None.
            - list: A list of human-readable error messages if validation fails.
    """
    errors = []

    # 1. The sheet must be known and the payload must be a list of rows
    rules = EXPECTED_SHEETS.get(sheet_name)
    if rules is None:
        return None, [f"Unknown sheet '{sheet_name}'. Expected one of: {', '.join(EXPECTED_SHEETS)}"]

    if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
        return None, [f"Sheet '{sheet_name}': rows must be a list of lists."]

    if len(rows) <= 1:
        return rows, []  # Header only (or nothing): an empty sheet is valid

    for row_number, row in enumerate(rows, start=1):
        bad_cells = [value for value in row if not isinstance(value, _CELL_TYPES)]
        if bad_cells:
            errors.append(f"Sheet '{sheet_name}', row {row_number}: cells must be text, numbers or empty.")
    if errors:
        return None, errors

    # 2. Every sheet has a minimum number of columns
    width = max(len(row) for row in rows)
    if width < rules['min_columns']:
        return None, [f"Sheet '{sheet_name}' needs at least {rules['min_columns']} columns, found {width}."]

    # 3. Numeric columns must hold numbers (blank cells are allowed)
    df = pd.DataFrame(rows[1:])
    for col in rules['numeric_columns']:
        if col >= df.shape[1]:
            continue
        series = df[col]
        text = series.astype(str).str.replace(',', '', regex=False).str.strip()
        numeric_series = pd.to_numeric(text, errors='coerce')
        invalid_rows = df[numeric_series.isna() & series.notna() & (text != '')]

        for index in invalid_rows.index:
            value = invalid_rows.loc[index, col]
            errors.append(
                f"Sheet '{sheet_name}', row {index + 2}: "
                f"value '{value}' in column {col + 1} must be a number."
            )

    if errors:
        return None, errors

    return rows, []
