import pytest

from payroll_engine.calculator.controller import PayrollCalculator
from payroll_engine.config.rule_table import ContributionType
from payroll_engine.config.settings import AnnualizationPolicy, EngineSettings, WithholdingPolicy
from payroll_engine.exceptions import InputValidationError
from payroll_engine.models import PayrollPeriod


def test_calculate_from_mapping(simple_rule_table):
    payslip = PayrollCalculator(simple_rule_table).calculate(
        {"employee_id": "EMP-009", "base_salary": 10_000_000, "ptkp_status": "TK/0"},
        PayrollPeriod.from_id("2024-01"),
    )
    assert payslip.employee_id == "EMP-009"
    assert payslip.monthly_tax == 280_000


def test_allowances(rule_table_2024, make_record):
    record = make_record(
        base_salary=8_000_000,
        allowances=[
            {"name": "Tunjangan Jabatan", "amount": 1_000_000, "contribution_base": True},
            {"name": "Transport", "amount": 1_000_000},
            {"name": "Uang Makan", "amount": 500_000, "taxable": False},
        ],
    )
    payslip = PayrollCalculator(rule_table_2024).calculate(record, PayrollPeriod.from_id("2024-02"))
    kesehatan = [c for c in payslip.contributions if c.type == ContributionType.KESEHATAN][0]

    assert payslip.gross_salary == 10_500_000
    assert payslip.taxable_gross == 10_000_000
    assert kesehatan.base == 9_000_000
    assert kesehatan.employee_amount == 90_000
    assert payslip.net_salary + payslip.total_deductions == payslip.gross_salary


def test_unknown_status_carries_employee_id(simple_rule_table, make_record):
    with pytest.raises(InputValidationError) as excinfo:
        PayrollCalculator(simple_rule_table).calculate(
            make_record(employee_id="EMP-404", ptkp_status="X/1"), PayrollPeriod.from_id("2024-01")
        )
    assert excinfo.value.employee_id == "EMP-404"
    assert str(excinfo.value).startswith("[EMP-404]")


def test_period_before_employment_start(simple_rule_table, make_record):
    with pytest.raises(InputValidationError):
        PayrollCalculator(simple_rule_table).calculate(
            make_record(employment_start_month=5), PayrollPeriod.from_id("2024-03")
        )


def test_prorated_annualization(simple_rule_table, make_record):
    settings = EngineSettings(annualization_policy=AnnualizationPolicy.PRORATED)
    payslip = PayrollCalculator(simple_rule_table, settings).calculate(
        make_record(employment_start_month=7), PayrollPeriod.from_id("2024-07")
    )
    computation = payslip.tax_computation

    assert computation.annualization_months == 6
    assert computation.annual_gross == 60_000_000
    # 60,000,000 - 1,800,000 - 54,000,000
    assert computation.taxable_income == 4_200_000
    assert computation.annual_tax == 210_000
    assert payslip.monthly_tax == 35_000


def test_flat_withholding_policy(simple_rule_table, make_record):
    settings = EngineSettings(withholding_policy=WithholdingPolicy.FLAT)
    payslip = PayrollCalculator(simple_rule_table, settings).calculate(
        make_record(ytd_tax_withheld=280_000 * 6), PayrollPeriod.from_id("2024-07")
    )
    assert payslip.tax_computation.withholding_policy == WithholdingPolicy.FLAT
    assert payslip.monthly_tax == 280_000


def test_over_withheld_logged(simple_rule_table, make_record, caplog):
    payslip = PayrollCalculator(simple_rule_table).calculate(
        make_record(ytd_tax_withheld=3_000_000), PayrollPeriod.from_id("2024-03")
    )
    assert payslip.monthly_tax == 0
    assert payslip.tax_computation.over_withheld == 2_160_000
    assert "withheld beyond the tax due" in caplog.text


def test_overtime_flows_into_gross_and_tax(simple_rule_table, make_record):
    record = make_record(base_salary=17_300_000, overtime_hours=3)
    payslip = PayrollCalculator(simple_rule_table).calculate(record, PayrollPeriod.from_id("2024-01"))

    assert payslip.overtime_pay == 550_000
    assert payslip.gross_salary == 17_850_000
    assert payslip.taxable_gross == 17_850_000
    # overtime is not part of the BPJS base
    assert payslip.total_employee_contributions == 519_000
    assert payslip.tax_computation.taxable_income == 153_972_000
    assert payslip.monthly_tax == 1_424_650
    assert payslip.as_dict()["overtime_pay"] == 550_000


def test_attendance_prorates_base_salary(simple_rule_table, make_record):
    record = make_record(present_days=15, working_days=20)
    payslip = PayrollCalculator(simple_rule_table).calculate(record, PayrollPeriod.from_id("2024-01"))

    assert payslip.base_salary == 7_500_000
    assert payslip.gross_salary == 7_500_000
    assert payslip.total_employee_contributions == 300_000
    assert payslip.monthly_tax == 135_000
    assert payslip.net_salary == 7_065_000


def test_result_types_exported_from_calculator_package(simple_rule_table):
    from payroll_engine import calculator

    contributions = calculator.calculate_contributions(10_000_000, simple_rule_table)
    summary = calculator.summarize_contributions(contributions)
    taxable = calculator.compute_taxable_income(10_000_000, summary.deductible_employee, "TK/0", simple_rule_table)
    tax = calculator.calculate_progressive_tax(taxable.taxable_income, simple_rule_table.tax_brackets)
    withholding = calculator.allocate_monthly_withholding(tax.annual_tax, 0, 1)

    assert isinstance(summary, calculator.ContributionSummary)
    assert isinstance(taxable, calculator.TaxableIncome)
    assert isinstance(tax, calculator.ProgressiveTax)
    assert isinstance(withholding, calculator.Withholding)
    assert withholding.amount == 280_000
