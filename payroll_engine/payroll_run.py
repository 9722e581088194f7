# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Payroll run orchestration.

A run processes every employee of one period:

    DRAFT -> PROCESSING -> COMPLETED
                        -> PARTIALLY_FAILED   (one or more employees failed)
                        -> CANCELLED          (cancel() called during the run)

Employees are calculated independently on a thread pool; each task writes
only its own result slot. Payslips are versioned in a PayslipLedger after all
tasks have finished, so reprocessing a period adds version n+1 and keeps
version n.
"""

import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from payroll_engine.calculator import ContributionSummary
from payroll_engine.calculator.controller import PayrollCalculator
from payroll_engine.config.rule_table import ContributionType, RuleTable, RuleTableRegistry, load_rule_tables
from payroll_engine.config.settings import EngineSettings
from payroll_engine.exceptions import (
    ConfigurationError,
    InputValidationError,
    InvariantViolationError,
    PayrollEngineError,
)
from payroll_engine.log_utils import configure_logging, get_logger
from payroll_engine.models import CompensationRecord, PayrollPeriod
from payroll_engine.payslip import Payslip

__all__ = [
    "RunState",
    "EmployeeFailure",
    "RunResult",
    "PayslipLedger",
    "PayrollRunOrchestrator",
    "run_payroll",
]

logger = get_logger(__name__)

EmployeeInput = Union[CompensationRecord, Mapping[str, Any]]


class RunState(str, Enum):
    DRAFT = "Draft"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    PARTIALLY_FAILED = "Partially Failed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class EmployeeFailure:
    employee_id: Optional[str]
    index: int
    error_type: str
    reason: str


@dataclass(frozen=True)
class RunResult:
    period: PayrollPeriod
    state: RunState
    payslips: Tuple[Payslip, ...] = ()
    failures: Tuple[EmployeeFailure, ...] = ()
    rule_table_effective_from: Optional[date] = None

    def payslip_for(self, employee_id: str) -> Optional[Payslip]:
        for payslip in self.payslips:
            if payslip.employee_id == employee_id:
                return payslip
        return None

    def summary(self) -> Dict[str, Any]:
        """Period totals over the successful payslips."""
        return {
            "period_id": self.period.period_id,
            "period_name": self.period.name,
            "state": self.state.value,
            "employees": len(self.payslips),
            "failures": len(self.failures),
            "total_gross": sum(p.gross_salary for p in self.payslips),
            "total_employee_contributions": sum(p.total_employee_contributions for p in self.payslips),
            "total_employer_contributions": sum(p.total_employer_contributions for p in self.payslips),
            "total_tax": sum(p.monthly_tax for p in self.payslips),
            "total_net": sum(p.net_salary for p in self.payslips),
            "total_employer_cost": sum(p.employer_cost for p in self.payslips),
            "warnings": sum(len(p.warnings) for p in self.payslips),
        }

    def contribution_summary(self) -> Dict[ContributionType, ContributionSummary]:
        """Employee and employer totals per BPJS program, e.g. for the monthly BPJS report."""
        employee: Dict[ContributionType, int] = defaultdict(int)
        employer: Dict[ContributionType, int] = defaultdict(int)
        deductible: Dict[ContributionType, int] = defaultdict(int)
        for payslip in self.payslips:
            for c in payslip.contributions:
                employee[c.type] += c.employee_amount
                employer[c.type] += c.employer_amount
                if c.tax_deductible:
                    deductible[c.type] += c.employee_amount

        return {
            t: ContributionSummary(
                total_employee=employee[t],
                total_employer=employer[t],
                deductible_employee=deductible[t],
            )
            for t in ContributionType
            if t in employee or t in employer
        }


class PayslipLedger:
    """In-memory payslip versions per (employee, period)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Dict[Tuple[str, str], List[Payslip]] = {}

    def record(self, payslip: Payslip) -> Payslip:
        """Store a payslip as the newest version and return it as stored."""
        key = (payslip.employee_id, payslip.period_id)
        with self._lock:
            versions = self._versions.setdefault(key, [])
            if versions:
                payslip = versions[-1].supersede(payslip)
            versions.append(payslip)
        return payslip

    def history(self, employee_id: str, period_id: str) -> Tuple[Payslip, ...]:
        with self._lock:
            return tuple(self._versions.get((employee_id, period_id), ()))

    def latest(self, employee_id: str, period_id: str) -> Optional[Payslip]:
        history = self.history(employee_id, period_id)
        return history[-1] if history else None

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._versions.values())


def _raw_employee_id(employee: Any) -> Optional[str]:
    if isinstance(employee, Mapping):
        value = employee.get("employee_id")
    else:
        value = getattr(employee, "employee_id", None)
    return str(value) if value else None


class PayrollRunOrchestrator:
    """
    Runs the payroll pipeline for every employee of a period.

    An orchestrator runs one payroll at a time; state and cancel() refer to
    the run in progress. Starting a second run while one is in progress
    raises PayrollEngineError. Concurrent runs use one orchestrator each and
    may share a PayslipLedger.

    Args:
        rule_tables: RuleTableRegistry (or a single RuleTable)
        settings: EngineSettings; defaults are used when omitted
        ledger: PayslipLedger shared between runs; a new one when omitted
    """

    def __init__(
        self,
        rule_tables: Union[RuleTableRegistry, RuleTable],
        settings: Optional[EngineSettings] = None,
        ledger: Optional[PayslipLedger] = None,
    ):
        if isinstance(rule_tables, RuleTable):
            rule_tables = RuleTableRegistry([rule_tables])
        self.rule_tables = rule_tables
        self.settings = settings or EngineSettings()
        self.ledger = ledger if ledger is not None else PayslipLedger()
        self._cancel_event = threading.Event()
        self._run_lock = threading.Lock()
        self._state = RunState.DRAFT

    @property
    def state(self) -> RunState:
        return self._state

    def cancel(self) -> None:
        """Stop launching employee tasks and discard the results of the current run."""
        if self._state == RunState.PROCESSING:
            logger.info("Cancellation requested for the running payroll")
        self._cancel_event.set()

    def _transition(self, period: PayrollPeriod, state: RunState) -> None:
        logger.info(f"Payroll run {period.period_id}: {self._state.value} -> {state.value}")
        self._state = state

    def run_payroll(
        self, period: Union[PayrollPeriod, str], employees: Iterable[EmployeeInput]
    ) -> RunResult:
        """
        Process all employees of a period.

        Args:
            period: PayrollPeriod or a "YYYY-MM" id
            employees: CompensationRecord instances or mappings

        Returns:
            RunResult

        Raises:
            ConfigurationError: no rule table is in force for the period
            PayrollEngineError: another run is in progress on this orchestrator
        """
        if not self._run_lock.acquire(blocking=False):
            raise PayrollEngineError("A payroll run is already in progress on this orchestrator")
        try:
            return self._run(PayrollPeriod.from_id(period), employees)
        finally:
            self._run_lock.release()

    def _run(self, period: PayrollPeriod, employees: Iterable[EmployeeInput]) -> RunResult:
        employees = list(employees)
        self._state = RunState.DRAFT
        self._cancel_event.clear()

        try:
            rule_table = self.rule_tables.for_date(period.effective_date)
        except ConfigurationError as e:
            logger.error(f"Payroll run {period.period_id} aborted: {e}")
            raise

        calculator = PayrollCalculator(rule_table, self.settings)
        self._transition(period, RunState.PROCESSING)
        logger.info(
            f"Processing {len(employees)} employee(s) for {period.name} "
            f"with rule table effective {rule_table.effective_from}"
        )

        slots: List[Optional[Union[Payslip, EmployeeFailure]]] = [None] * len(employees)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            futures = {}
            for index, employee in enumerate(employees):
                if self._cancel_event.is_set():
                    break
                futures[executor.submit(self._process_employee, calculator, period, index, employee)] = index

            for future in as_completed(futures):
                if self._cancel_event.is_set():
                    for pending in futures:
                        pending.cancel()
                    break
                slots[futures[future]] = future.result()

        if self._cancel_event.is_set():
            self._transition(period, RunState.CANCELLED)
            return RunResult(
                period=period,
                state=RunState.CANCELLED,
                rule_table_effective_from=rule_table.effective_from,
            )

        payslips, failures = self._aggregate(slots)
        final_state = RunState.PARTIALLY_FAILED if failures else RunState.COMPLETED
        self._transition(period, final_state)

        result = RunResult(
            period=period,
            state=final_state,
            payslips=tuple(payslips),
            failures=tuple(failures),
            rule_table_effective_from=rule_table.effective_from,
        )
        logger.info(
            f"Payroll run {period.period_id} finished: {len(payslips)} payslip(s), {len(failures)} failure(s)"
        )
        return result

    def _process_employee(
        self, calculator: PayrollCalculator, period: PayrollPeriod, index: int, employee: EmployeeInput
    ) -> Optional[Union[Payslip, EmployeeFailure]]:
        if self._cancel_event.is_set():
            return None

        try:
            return calculator.calculate(employee, period)
        except (InputValidationError, InvariantViolationError) as e:
            employee_id = e.employee_id or _raw_employee_id(employee)
            logger.warning(f"Employee #{index} ({employee_id or 'unknown'}) failed: {e.message}")
            return EmployeeFailure(
                employee_id=employee_id,
                index=index,
                error_type=type(e).__name__,
                reason=e.message,
            )

    def _aggregate(
        self, slots: List[Optional[Union[Payslip, EmployeeFailure]]]
    ) -> Tuple[List[Payslip], List[EmployeeFailure]]:
        payslips: List[Payslip] = []
        failures: List[EmployeeFailure] = []
        seen = set()

        for index, outcome in enumerate(slots):
            if isinstance(outcome, EmployeeFailure):
                failures.append(outcome)
            elif isinstance(outcome, Payslip):
                if outcome.employee_id in seen:
                    reason = "Employee appears more than once in the run"
                    logger.warning(f"Employee #{index} ({outcome.employee_id}) failed: {reason}")
                    failures.append(
                        EmployeeFailure(
                            employee_id=outcome.employee_id,
                            index=index,
                            error_type=InputValidationError.__name__,
                            reason=reason,
                        )
                    )
                    continue
                seen.add(outcome.employee_id)
                payslips.append(self.ledger.record(outcome))

        return payslips, failures


def run_payroll(
    period_id: Union[PayrollPeriod, str],
    employees: Iterable[EmployeeInput],
    rule_tables: Optional[Union[RuleTableRegistry, RuleTable]] = None,
    settings: Optional[EngineSettings] = None,
    ledger: Optional[PayslipLedger] = None,
) -> RunResult:
    """
    Batch entry point: process one period.

    When rule_tables is omitted they are loaded from settings.rules_path, or
    from the bundled rule_tables.json.
    """
    settings = settings or EngineSettings()
    configure_logging(settings.log_level)
    if rule_tables is None:
        rule_tables = load_rule_tables(settings.rules_path)

    orchestrator = PayrollRunOrchestrator(rule_tables, settings=settings, ledger=ledger)
    return orchestrator.run_payroll(period_id, employees)
