"""
Pure domain layer.

Clock abstraction and Decimal helpers with NO dependencies on the ORM,
the database or I/O.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.money import (
    CENT,
    HUNDRED,
    ZERO,
    percent_of,
    round_money,
    to_decimal,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CENT",
    "HUNDRED",
    "ZERO",
    "percent_of",
    "round_money",
    "to_decimal",
]
