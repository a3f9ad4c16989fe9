"""
Payroll Kernel

Shared infrastructure for the payroll engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock and Decimal helpers
- SQLAlchemy base, engine and immutability listeners
"""

__version__ = "0.1.0"
