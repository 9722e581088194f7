__version__ = "1.0.0"

from payroll_engine.exceptions import (
    ConfigurationError,
    InputValidationError,
    InvariantViolationError,
    PayrollEngineError,
)
from payroll_engine.models import Allowance, CompensationRecord, PayrollPeriod
from payroll_engine.payroll_run import PayrollRunOrchestrator, RunResult, RunState, run_payroll

__all__ = [
    "__version__",
    "Allowance",
    "CompensationRecord",
    "ConfigurationError",
    "InputValidationError",
    "InvariantViolationError",
    "PayrollEngineError",
    "PayrollPeriod",
    "PayrollRunOrchestrator",
    "RunResult",
    "RunState",
    "run_payroll",
]
