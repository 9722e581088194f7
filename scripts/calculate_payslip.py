from __future__ import annotations

import argparse
import json
import os
import sys

from payroll_engine.calculator.controller import PayrollCalculator
from payroll_engine.config.rule_table import load_rule_tables
from payroll_engine.config.settings import EngineSettings
from payroll_engine.exceptions import PayrollEngineError
from payroll_engine.log_utils import configure_logging
from payroll_engine.models import PayrollPeriod


def parse_allowance(value: str) -> dict:
    """NAME=AMOUNT[:nontax][:base]"""
    name, _, rest = value.partition("=")
    amount, *flags = rest.split(":")
    if not name or not amount.isdigit():
        raise argparse.ArgumentTypeError(f"allowance must look like NAME=AMOUNT[:nontax][:base] (got {value!r})")
    return {
        "name": name,
        "amount": int(amount),
        "taxable": "nontax" not in flags,
        "contribution_base": "base" in flags,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Calculate one payslip and print it as JSON")
    parser.add_argument("--period", required=True, help="Payroll period, YYYY-MM")
    parser.add_argument("--employee-id", default="EMP-CLI")
    parser.add_argument("--salary", type=int, required=True, help="Monthly base salary")
    parser.add_argument("--status", default="TK/0", help="PTKP status, e.g. TK/0 or K/1")
    parser.add_argument("--ytd-tax", type=int, default=0, help="PPh 21 already withheld this year")
    parser.add_argument("--start-month", type=int, default=1, help="First month of employment this year")
    parser.add_argument("--jkk-risk", type=int, default=1, help="JKK risk level 1-5")
    parser.add_argument("--overtime-hours", default="0", help="Overtime hours worked this month")
    parser.add_argument("--present-days", type=int, help="Days present; prorates the base salary with --working-days")
    parser.add_argument("--working-days", type=int, help="Working days in the period")
    parser.add_argument(
        "--allowance",
        action="append",
        type=parse_allowance,
        default=[],
        help="Allowance NAME=AMOUNT[:nontax][:base]; may be repeated",
    )
    parser.add_argument("--env-file", default=os.getenv("PAYROLL_ENV_FILE"), help="Optional .env file")
    args = parser.parse_args()

    try:
        settings = EngineSettings.from_env(args.env_file)
        configure_logging(settings.log_level)
        period = PayrollPeriod.from_id(args.period)
        rule_table = load_rule_tables(settings.rules_path).for_date(period.effective_date)
        payslip = PayrollCalculator(rule_table, settings).calculate(
            {
                "employee_id": args.employee_id,
                "base_salary": args.salary,
                "allowances": args.allowance,
                "ptkp_status": args.status,
                "ytd_tax_withheld": args.ytd_tax,
                "employment_start_month": args.start_month,
                "jkk_risk_level": args.jkk_risk,
                "overtime_hours": args.overtime_hours,
                "present_days": args.present_days,
                "working_days": args.working_days,
            },
            period,
        )
    except PayrollEngineError as e:
        print(f"error: {e}")
        sys.exit(1)

    print(json.dumps(payslip.as_dict(), indent=2))


if __name__ == "__main__":
    main()
