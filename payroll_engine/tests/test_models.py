from datetime import date

import pytest
from pydantic import ValidationError

from payroll_engine.exceptions import InputValidationError
from payroll_engine.models import Allowance, CompensationRecord, PayrollPeriod


def test_record_totals(make_record):
    record = make_record(
        base_salary=8_000_000,
        allowances=[
            Allowance(name="Tunjangan Tetap", amount=1_000_000, contribution_base=True),
            Allowance(name="Transport", amount=700_000),
            Allowance(name="Uang Makan", amount=300_000, taxable=False),
        ],
    )
    assert record.total_allowances == 2_000_000
    assert record.gross_salary == 10_000_000
    assert record.taxable_gross == 9_700_000
    assert record.contribution_base_salary == 9_000_000


def test_record_is_frozen(make_record):
    record = make_record()
    with pytest.raises(ValidationError):
        record.base_salary = 1


def test_parse_mapping():
    record = CompensationRecord.parse(
        {"employee_id": "EMP-1", "base_salary": "5000000", "ptkp_status": "K/1", "ytd_tax_withheld": 0}
    )
    assert record.base_salary == 5_000_000
    assert CompensationRecord.parse(record) is record


@pytest.mark.parametrize(
    "data",
    [
        {"employee_id": "EMP-1", "base_salary": -1, "ptkp_status": "TK/0"},
        {"employee_id": "EMP-1", "base_salary": 1, "ptkp_status": "TK/0", "ytd_tax_withheld": -5},
        {"employee_id": "EMP-1", "base_salary": 1, "ptkp_status": "TK/0", "jkk_risk_level": 6},
        {"employee_id": "EMP-1", "base_salary": 1, "ptkp_status": "TK/0", "employment_start_month": 0},
        {"employee_id": "EMP-1", "base_salary": 1, "ptkp_status": "TK/0", "unknown": 1},
        {"employee_id": "EMP-1", "base_salary": 1},
        {
            "employee_id": "EMP-1",
            "base_salary": 1,
            "ptkp_status": "TK/0",
            "allowances": [{"name": "A", "amount": 1}, {"name": "A", "amount": 2}],
        },
    ],
)
def test_parse_rejects_invalid_records(data):
    with pytest.raises(InputValidationError) as excinfo:
        CompensationRecord.parse(data)
    assert excinfo.value.employee_id == "EMP-1"


def test_parse_without_employee_id():
    with pytest.raises(InputValidationError) as excinfo:
        CompensationRecord.parse({"base_salary": 1, "ptkp_status": "TK/0"})
    assert excinfo.value.employee_id is None
    assert "employee_id" in excinfo.value.message


def test_period_from_id():
    period = PayrollPeriod.from_id("2024-03")

    assert period.year == 2024
    assert period.month == 3
    assert period.period_id == "2024-03"
    assert period.fiscal_year == 2024
    assert period.effective_date == date(2024, 3, 1)
    assert not period.is_final_month
    assert period.name == "March 2024"
    assert period.name_id == "Maret 2024"
    assert str(period) == "2024-03"


def test_period_december():
    period = PayrollPeriod.from_id("2024-12")
    assert period.is_final_month
    assert period.name_id == "Desember 2024"


@pytest.mark.parametrize("period_id", ["2024-13", "2024-00", "March 2024", "", "1999-01"])
def test_period_from_id_rejects_invalid(period_id):
    with pytest.raises(InputValidationError):
        PayrollPeriod.from_id(period_id)


def test_variable_earnings(make_record):
    record = make_record(
        base_salary=17_300_000,
        overtime_hours="1.5",
        present_days=20,
        working_days=22,
        allowances=[Allowance(name="Uang Makan", amount=500_000, taxable=False)],
    )
    assert record.paid_base_salary == 15_727_273
    assert record.overtime_pay == 250_000
    assert record.gross_salary == 16_477_273
    assert record.taxable_gross == 15_977_273
    assert record.contribution_base_salary == 17_300_000
    assert record.has_full_attendance


def test_full_attendance_tolerance(make_record):
    assert make_record().has_full_attendance
    assert make_record(present_days=19, working_days=21).has_full_attendance
    assert not make_record(present_days=18, working_days=21).has_full_attendance


@pytest.mark.parametrize(
    "extra",
    [
        {"present_days": 10},
        {"working_days": 20},
        {"present_days": 10, "working_days": 0},
        {"overtime_hours": -2},
        {"overtime_hours": "NaN"},
        {"average_net_salary": -1},
    ],
)
def test_parse_rejects_invalid_variable_earnings(extra):
    with pytest.raises(InputValidationError) as excinfo:
        CompensationRecord.parse({"employee_id": "EMP-1", "base_salary": 1, "ptkp_status": "TK/0", **extra})
    assert excinfo.value.employee_id == "EMP-1"
