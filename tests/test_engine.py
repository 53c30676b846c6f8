# tests/test_engine.py

import json
from datetime import date

import pytest

from payroll.calculator import schema
from payroll.calculator.engine import (CalculationConfig, aggregate_performance, calculate_supervisor_salary,
                                       fetch_all, performance_report, supervisor_debts, supervisors_performance_overview)
from payroll.calculator.errors import InvalidDateRange, PayrollError, SalaryConfigNotFound
from payroll.calculator.records import (METHOD_FIXED, METHOD_TYPE1, METHOD_TYPE2, SalaryConfig,
                                        WorkerAssignment)

TOLERANCE = 1e-9

START = date(2025, 11, 1)
END = date(2025, 11, 5)


@pytest.fixture
def demo_source(fake_source, make_performance_row):
    """
    One Type 1 supervisor with two workers: five days of 100 orders at an
    average of 8 hours a day, two motorcycle boxes and three t-shirts.
    """
    performance = []
    for day in range(1, 6):
        performance.append(make_performance_row(f"2025-11-0{day}", "W1", hours=5, orders=60))
        performance.append(make_performance_row(f"2025-11-0{day}", "W2", hours=3, orders=40))
    # Outside the period or belonging to someone else
    performance.append(make_performance_row("2025-11-06", "W1", orders=999))
    performance.append(make_performance_row("2025-11-03", "W9", orders=999))

    return fake_source(
        sheets={
            schema.PERFORMANCE_SHEET: performance,
            schema.EQUIPMENT_SHEET: [["SUP1", 11, 2, 0, 3, 0, 0]],
        },
        assignments=[
            WorkerAssignment("W1", "SUP1"),
            WorkerAssignment("W2", "SUP1"),
            WorkerAssignment("W9", "SUP2"),
        ],
        salary_configs={"SUP1": SalaryConfig("SUP1", METHOD_TYPE1)},
    )


def test_type1_supervisor_end_to_end(demo_source):
    """
    Commission is 500 orders x 1.0 = 500; equipment is 2 x 550 + 3 x 100 = 1,400.
    The net salary is clamped at 0 and the -900 it replaced is kept.
    """
    result = calculate_supervisor_salary(demo_source, "SUP1", START, END)

    # --- 1. Commission ---
    assert result.method == METHOD_TYPE1
    assert result.commission.rate == 1.0
    assert abs(result.commission.commission - 500) < TOLERANCE
    assert result.commission.details["total_orders"] == 500
    assert abs(result.commission.details["daily_average_hours"] - 8) < TOLERANCE

    # --- 2. Deductions ---
    assert abs(result.deductions.equipment - 1400) < TOLERANCE
    assert abs(result.deductions.total - 1400) < TOLERANCE
    assert result.deductions.advances == 0
    assert result.deductions.security == 0

    # --- 3. Net ---
    assert result.bonus == 0
    assert abs(result.raw_net + 900) < TOLERANCE
    assert result.net_salary == 0
    assert result.clamped is True
    assert len(result.warnings) == 1

    # --- 4. Daily breakdown ---
    assert len(result.daily_breakdown) == 5
    assert all(row.orders == 100 for row in result.daily_breakdown)
    assert abs(sum(row.daily_commission for row in result.daily_breakdown) - 500) < TOLERANCE


def test_same_inputs_give_identical_results(demo_source):
    first = calculate_supervisor_salary(demo_source, "SUP1", START, END)
    second = calculate_supervisor_salary(demo_source, "SUP1", START, END, max_workers=1)

    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)


def test_result_serializes_with_iso_dates(demo_source):
    data = calculate_supervisor_salary(demo_source, "SUP1", START, END).to_dict()

    assert data["period"] == {"start_date": "2025-11-01", "end_date": "2025-11-05"}
    assert data["commission"]["type"] == METHOD_TYPE1
    assert data["daily_breakdown"][0]["date"] == "2025-11-01"
    assert data["deductions"]["equipment_items"][0]["quantity"] == 2
    json.dumps(data, ensure_ascii=False)


def test_string_dates_are_accepted(demo_source):
    result = calculate_supervisor_salary(demo_source, "SUP1", "2025-11-01", "11/05/2025")
    assert result.start == START
    assert result.end == END


def test_missing_salary_config_raises(demo_source):
    with pytest.raises(SalaryConfigNotFound) as excinfo:
        calculate_supervisor_salary(demo_source, "NOBODY", START, END)
    assert excinfo.value.supervisor_code == "NOBODY"
    assert isinstance(excinfo.value, PayrollError)


def test_salary_config_lookup_failure_counts_as_missing(fake_source):
    source = fake_source(failing={"salary_config"})
    with pytest.raises(SalaryConfigNotFound):
        calculate_supervisor_salary(source, "SUP1", START, END)


def test_start_after_end_is_rejected(demo_source):
    with pytest.raises(InvalidDateRange):
        calculate_supervisor_salary(demo_source, "SUP1", END, START)
    # Callers that only know about ValueError still catch it
    with pytest.raises(ValueError):
        aggregate_performance(demo_source, "SUP1", END, START)


def test_failing_sheet_degrades_to_empty(demo_source):
    demo_source.failing = {schema.EQUIPMENT_SHEET, "pricing"}
    result = calculate_supervisor_salary(demo_source, "SUP1", START, END)

    assert result.deductions.equipment == 0
    assert abs(result.net_salary - 500) < TOLERANCE
    assert result.clamped is False


def test_supervisor_without_workers_gets_zero_commission(fake_source):
    source = fake_source(salary_configs={"SUP3": SalaryConfig("SUP3", METHOD_TYPE2)})
    result = calculate_supervisor_salary(source, "SUP3", START, END)

    assert result.commission.commission == 0
    assert result.net_salary == 0
    assert result.clamped is False


def test_fixed_salary_with_bonus_and_settings(fake_source):
    source = fake_source(
        sheets={
            schema.TARGETS_SHEET: [["SUP4", 11, "", "", 250]],
            schema.SECURITY_SHEET: [["2025-11-02", "SUP4"], ["2025-11-04", "x", "SUP4"]],
            schema.ADVANCES_SHEET: [["SUP4", 11, 1000]],
        },
        salary_configs={"SUP4": SalaryConfig("SUP4", METHOD_FIXED, fixed_amount=6000)},
    )
    config = CalculationConfig({"SECURITY_INQUIRY_FEE": 75})

    result = calculate_supervisor_salary(source, "SUP4", START, END, config=config)

    assert result.commission is None
    assert result.daily_breakdown == ()
    assert result.bonus == 250
    assert abs(result.deductions.security - 150) < TOLERANCE
    assert result.deductions.security_count == 2
    assert abs(result.net_salary - (6000 + 250 - 1000 - 150)) < TOLERANCE


def test_calculation_config_reads_settings():
    config = CalculationConfig({
        "AVERAGE_ORDER_VALUE": "80",
        "DEFAULT_TYPE1_RANGES": [{"min_hours": 0, "max_hours": 24, "rate_per_order": 2}],
    })
    assert config.AVERAGE_ORDER_VALUE == 80
    assert config.DEFAULT_TYPE1_RANGES[0].rate_per_order == 2
    assert config.SECURITY_INQUIRY_FEE == 100
    assert config.DEFAULT_TYPE2_BASE_PERCENTAGE == 11


def test_aggregate_performance_lists_every_assigned_worker(demo_source):
    demo_source.assignments.append(WorkerAssignment("W3", "SUP1"))
    workers = aggregate_performance(demo_source, "SUP1", START, END)

    assert [w.worker_code for w in workers] == ["W1", "W2", "W3"]
    assert workers[0].orders == 300
    assert workers[1].orders == 200
    assert workers[2].orders == 0


def test_performance_report_shape(demo_source):
    report = performance_report(demo_source, "SUP1", START, END)

    assert report["period"]["start_date"] == "2025-11-01"
    assert len(report["workers"]) == 2
    assert report["summary"]["total_orders"] == 500
    assert report["summary"]["orders"] == [100, 100, 100, 100, 100]


def test_fetch_all_returns_defaults_for_failures():
    def boom():
        raise RuntimeError("down")

    fetched = fetch_all({"ok": (lambda: [1], []), "broken": (boom, [])}, max_workers=2)
    assert fetched == {"ok": [1], "broken": []}


# --- Admin overview and debts ---

SUPERVISORS = [
    ["SUP1", "Hassan", "Cairo"],
    ["SUP2", "", ""],
    ["", "No code", "Giza"],
    ["SUP3", "Mona", "Giza"],
]


def test_overview_totals_every_listed_supervisor(demo_source):
    demo_source.sheets[schema.SUPERVISORS_SHEET] = SUPERVISORS
    overview = supervisors_performance_overview(demo_source, START, END)

    assert overview["period"] == {"start_date": "2025-11-01", "end_date": "2025-11-05"}
    lines = {line["code"]: line for line in overview["supervisors"]}
    assert list(lines) == ["SUP1", "SUP2", "SUP3"]

    sup1 = lines["SUP1"]
    assert sup1["name"] == "Hassan"
    assert sup1["region"] == "Cairo"
    assert sup1["subordinate_count"] == 2
    assert sup1["total_orders"] == 500
    assert abs(sup1["total_hours"] - 40) < TOLERANCE
    assert abs(sup1["avg_acceptance"] - 95) < TOLERANCE
    assert sup1["records_count"] == 10
    assert abs(sup1["orders_per_rider"] - 250) < TOLERANCE

    # A blank name falls back to the code; the 2025-11-03 row of W9 is in range
    assert lines["SUP2"]["name"] == "SUP2"
    assert lines["SUP2"]["total_orders"] == 999

    assert lines["SUP3"]["subordinate_count"] == 0
    assert lines["SUP3"]["orders_per_rider"] == 0
    assert lines["SUP3"]["avg_acceptance"] == 0

    summary = overview["summary"]
    assert summary["total_supervisors"] == 3
    assert summary["total_orders"] == 1499
    assert abs(summary["total_hours"] - 48) < TOLERANCE
    assert abs(summary["avg_acceptance"] - 95) < TOLERANCE
    assert summary["total_records"] == 11


def test_overview_rounds_to_two_decimals(fake_source, make_performance_row):
    source = fake_source(
        sheets={
            schema.SUPERVISORS_SHEET: [["SUP1", "Hassan", "Cairo"]],
            schema.PERFORMANCE_SHEET: [
                make_performance_row("2025-11-01", "W1", hours=1.005, orders=10, acceptance=90),
                make_performance_row("2025-11-02", "W1", hours=2.333, orders=0, acceptance=0),
                make_performance_row("2025-11-03", "W1", hours=0, orders=0, acceptance=91),
            ],
        },
        assignments=[WorkerAssignment(code, "SUP1") for code in ("W1", "W2", "W3")],
    )
    (line,) = supervisors_performance_overview(source, START, END)["supervisors"]

    assert line["total_hours"] == round(1.005 + 2.333, 2)
    assert line["avg_acceptance"] == 90.5
    assert line["orders_per_rider"] == 3.33


def test_overview_survives_unavailable_workers(demo_source):
    demo_source.sheets[schema.SUPERVISORS_SHEET] = SUPERVISORS
    demo_source.failing.add("assignments")
    overview = supervisors_performance_overview(demo_source, START, END)

    assert overview["summary"]["total_supervisors"] == 3
    assert overview["summary"]["total_orders"] == 0
    assert all(line["subordinate_count"] == 0 for line in overview["supervisors"])


def test_overview_without_supervisors_sheet_is_empty(demo_source):
    overview = supervisors_performance_overview(demo_source, START, END)
    assert overview["supervisors"] == []
    assert overview["summary"]["total_supervisors"] == 0
    assert overview["summary"]["avg_acceptance"] == 0

    with pytest.raises(InvalidDateRange):
        supervisors_performance_overview(demo_source, END, START)


def test_debts_are_limited_to_the_supervisors_workers(demo_source):
    demo_source.sheets[schema.DEBTS_SHEET] = [
        ["W1", 100, "2025-11-02", "fuel"],
        ["W2", "25.5"],
        ["W9", 999, "", ""],
        ["", 50, "", "no worker"],
        [1001.0, 7, "", ""],
    ]
    result = supervisor_debts(demo_source, "SUP1")

    assert result["count"] == 2
    assert abs(result["total"] - 125.5) < TOLERANCE
    assert result["debts"][0] == {"worker_code": "W1", "amount": 100.0, "date": "2025-11-02", "notes": "fuel"}
    assert result["debts"][1] == {"worker_code": "W2", "amount": 25.5, "date": "", "notes": ""}


def test_debts_with_unreadable_amounts_count_as_zero(fake_source):
    source = fake_source(
        sheets={schema.DEBTS_SHEET: [["1001", "n/a"], [1001.0, "1,200"]]},
        assignments=[WorkerAssignment("1001", "SUP1")],
    )
    result = supervisor_debts(source, "SUP1")

    assert [debt["amount"] for debt in result["debts"]] == [0.0, 1200.0]
    assert result["total"] == 1200
