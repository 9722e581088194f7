import pytest

from payroll_engine.calculator.controller import PayrollCalculator
from payroll_engine.config.settings import EngineSettings
from payroll_engine.models import PayrollPeriod
from payroll_engine.payslip_checks import check_payslip

PERIOD = PayrollPeriod(year=2024, month=1)


@pytest.fixture
def calculate(simple_rule_table):
    calculator = PayrollCalculator(simple_rule_table)
    return lambda record: calculator.calculate(record, PERIOD)


def test_clean_payslip_has_no_warnings(calculate, make_record):
    record = make_record()
    payslip = calculate(record)

    assert check_payslip(record, payslip, minimum_wage=5_000_000) == ()
    assert payslip.warnings == ()


def test_present_days_above_working_days(calculate, make_record):
    record = make_record(present_days=23, working_days=22)
    warnings = check_payslip(record, calculate(record))

    assert warnings == ("Present days (23) exceed working days (22)",)


@pytest.mark.parametrize(
    "average,flagged",
    [
        (9_420_000, False),
        (7_300_000, False),
        (7_000_000, True),
        (14_000_000, True),
    ],
)
def test_net_salary_variance(calculate, make_record, average, flagged):
    record = make_record(average_net_salary=average, payrolls_processed=6)
    warnings = check_payslip(record, calculate(record))

    assert bool(warnings) is flagged
    if flagged:
        assert "from the historical average" in warnings[0]


def test_variance_needs_enough_history(calculate, make_record):
    record = make_record(average_net_salary=1_000_000, payrolls_processed=2)
    assert check_payslip(record, calculate(record)) == ()


def test_minimum_wage_for_full_month(calculate, make_record):
    record = make_record(base_salary=4_000_000, present_days=20, working_days=22)
    warnings = check_payslip(record, calculate(record), minimum_wage=4_500_000)

    assert len(warnings) == 1
    assert "below the minimum wage 4500000" in warnings[0]


def test_minimum_wage_skipped_for_partial_month(calculate, make_record):
    record = make_record(base_salary=4_000_000, present_days=10, working_days=22)
    assert check_payslip(record, calculate(record), minimum_wage=4_500_000) == ()


def test_calculator_attaches_warnings(simple_rule_table, make_record, caplog):
    calculator = PayrollCalculator(simple_rule_table, EngineSettings(minimum_wage=4_500_000))
    record = make_record(employee_id="EMP-077", base_salary=4_000_000)

    with caplog.at_level("WARNING", logger="payroll_engine"):
        payslip = calculator.calculate(record, PERIOD)

    assert len(payslip.warnings) == 1
    assert payslip.as_dict()["warnings"] == list(payslip.warnings)
    assert "[EMP-077] 2024-01: Net salary" in caplog.text
