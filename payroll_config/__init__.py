"""
Payroll Configuration (``payroll_config``).

Public entry points:

    from payroll_config import load_payroll_rules, PayrollRules

    rules = load_payroll_rules()                   # packaged defaults
    rules = load_payroll_rules("/etc/payroll.yaml")

Rules are passed explicitly to ``PayrollOrchestrator``; nothing in this
package keeps a process-wide "current" configuration.
"""

from payroll_config.loader import (
    DEFAULT_RULES_PATH,
    compute_checksum,
    load_payroll_rules,
    parse_payroll_rules,
)
from payroll_config.schema import MissingTimesheetPolicy, PayrollRules

__all__ = [
    "DEFAULT_RULES_PATH",
    "MissingTimesheetPolicy",
    "PayrollRules",
    "compute_checksum",
    "load_payroll_rules",
    "parse_payroll_rules",
]
