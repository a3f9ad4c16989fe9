"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll runs are processed in batches and the batch boundary must turn each
employee's failure into a structured failure entry. That only works when
callers catch by TYPE and report a machine-readable CODE, never by parsing
message strings:

    try:
        payslip = orchestrator.compute_single(employee_id, month, year)
    except NotFoundError as e:
        api_response(code=e.code, employee=e.employee_id)

Every exception has:
  1. A typed class (catch by type, not message)
  2. A ``code`` class attribute (machine-readable, API-safe)
  3. Structured attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidBracketTableError
    |
    +-- NotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- TimesheetNotFoundError
    |
    +-- ValidationError
    |   +-- InvalidPeriodError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                     | When Raised
----------------|--------------------------|------------------------------------------
Configuration   | CONFIGURATION_ERROR      | Negative monetary input, invalid rules
                | INVALID_BRACKET_TABLE    | Table unsorted, gapped, overlapping, ...
----------------|--------------------------|------------------------------------------
Not found       | EMPLOYEE_NOT_FOUND       | Unknown employee id
                | TIMESHEET_NOT_FOUND      | No timesheet summary for the period
----------------|--------------------------|------------------------------------------
Validation      | VALIDATION_ERROR         | Negative hours/dependents, bad contract
                | INVALID_PERIOD           | Month outside 1-12 or non-positive year
----------------|--------------------------|------------------------------------------
Immutability    | IMMUTABILITY_VIOLATION   | UPDATE of a stored payslip row

Configuration, not-found and validation errors abort the computation of ONE
employee. The batch orchestrator converts them into per-employee failure
entries; they never abort sibling computations.
"""


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


# Configuration-related exceptions


class ConfigurationError(PayrollEngineError):
    """Engine configuration or monetary input is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, reason: str, field: str | None = None):
        self.reason = reason
        self.field = field
        if field:
            super().__init__(f"Invalid configuration for {field}: {reason}")
        else:
            super().__init__(f"Invalid configuration: {reason}")


class InvalidBracketTableError(ConfigurationError):
    """Bracket table violates the sorted/contiguous/unbounded-last invariant."""

    code: str = "INVALID_BRACKET_TABLE"

    def __init__(self, reason: str, range_index: int | None = None):
        self.range_index = range_index
        location = f" (range {range_index})" if range_index is not None else ""
        super().__init__(f"{reason}{location}", field="bracket_table")


# Not-found exceptions


class NotFoundError(PayrollEngineError):
    """Base exception for records missing from a repository."""

    code: str = "NOT_FOUND"


class EmployeeNotFoundError(NotFoundError):
    """Employee with given ID was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class TimesheetNotFoundError(NotFoundError):
    """No timesheet summary exists for the employee and period."""

    code: str = "TIMESHEET_NOT_FOUND"

    def __init__(self, employee_id: str, month: int, year: int):
        self.employee_id = employee_id
        self.month = month
        self.year = year
        super().__init__(
            f"Timesheet not found for employee {employee_id} in {month:02d}/{year}"
        )


# Validation exceptions


class ValidationError(PayrollEngineError):
    """Input data for one employee is invalid."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidPeriodError(ValidationError):
    """Month/year pair does not identify a payroll period."""

    code: str = "INVALID_PERIOD"

    def __init__(self, month: int, year: int):
        self.month = month
        self.year = year
        super().__init__("period", f"{month}/{year} is not a valid month/year")


# Immutability exceptions


class ImmutabilityError(PayrollEngineError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify a stored payslip in place.

    Payslips are superseded by replacement, never edited.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
