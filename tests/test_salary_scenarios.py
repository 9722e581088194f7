import pytest

from payroll_engine.calculator.controller import PayrollCalculator
from payroll_engine.config.settings import AnnualizationPolicy, EngineSettings, WithholdingPolicy
from payroll_engine.models import PayrollPeriod
from payroll_engine.payroll_run import RunState, run_payroll


def test_scenario_single_employee(simple_rule_table, make_record):
    result = run_payroll("2024-01", [make_record()], simple_rule_table)
    payslip = result.payslips[0]
    computation = payslip.tax_computation

    assert result.state == RunState.COMPLETED
    assert computation.annual_gross == 120_000_000
    assert computation.annual_allowed_deductions == 3_600_000
    assert computation.annual_net == 116_400_000
    assert computation.taxable_income == 62_400_000
    assert computation.annual_tax == 3_360_000
    assert payslip.monthly_tax == 280_000
    assert payslip.total_employee_contributions == 300_000
    assert payslip.net_salary == 9_420_000


def test_scenario_income_below_ptkp(simple_rule_table, make_record):
    result = run_payroll("2024-01", [make_record(base_salary=4_000_000)], simple_rule_table)
    payslip = result.payslips[0]

    assert payslip.tax_computation.taxable_income == 0
    assert payslip.tax_computation.annual_tax == 0
    assert payslip.monthly_tax == 0
    assert payslip.net_salary == 3_880_000


def test_idempotent(rule_table_2024, make_record):
    calculator = PayrollCalculator(rule_table_2024)
    period = PayrollPeriod.from_id("2024-05")
    record = make_record(base_salary=17_333_333, ptkp_status="K/2", ytd_tax_withheld=1_000_000)

    assert calculator.calculate(record, period) == calculator.calculate(record, period)


@pytest.mark.parametrize("policy", [WithholdingPolicy.CUMULATIVE, WithholdingPolicy.FLAT])
@pytest.mark.parametrize("salary", [4_000_000, 10_000_000, 17_333_333, 95_000_001])
def test_twelve_months_sum_to_annual_tax(rule_table_2024, make_record, policy, salary):
    calculator = PayrollCalculator(rule_table_2024, EngineSettings(withholding_policy=policy))
    ytd = 0
    annual_tax = None
    for month in range(1, 13):
        payslip = calculator.calculate(
            make_record(base_salary=salary, ytd_tax_withheld=ytd), PayrollPeriod(year=2024, month=month)
        )
        annual_tax = payslip.tax_computation.annual_tax
        ytd += payslip.monthly_tax
        assert payslip.net_salary + payslip.total_employee_contributions + payslip.monthly_tax == payslip.gross_salary

    assert ytd == annual_tax


@pytest.mark.parametrize("policy", [AnnualizationPolicy.CALENDAR, AnnualizationPolicy.PRORATED])
def test_mid_year_hire(rule_table_2024, make_record, policy):
    calculator = PayrollCalculator(rule_table_2024, EngineSettings(annualization_policy=policy))
    ytd = 0
    last = None
    for month in range(7, 13):
        last = calculator.calculate(
            make_record(ytd_tax_withheld=ytd, employment_start_month=7), PayrollPeriod(year=2024, month=month)
        )
        ytd += last.monthly_tax

    if policy == AnnualizationPolicy.PRORATED:
        assert last.tax_computation.annualization_months == 6
        assert ytd == last.tax_computation.annual_tax
    else:
        assert last.tax_computation.annualization_months == 12
        assert ytd == last.tax_computation.annual_tax // 2
