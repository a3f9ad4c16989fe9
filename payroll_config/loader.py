"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads YAML rule files and parses them into a validated
``payroll_config.schema.PayrollRules``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass; bracket tables go through
  ``BracketTable.from_ranges`` and are validated on construction.
* YAML numbers are converted with ``Decimal(str(value))`` so unquoted
  values such as ``7.5`` never pass through binary floating point.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed document, identifying the active configuration in logs.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import MissingTimesheetPolicy, PayrollRules
from payroll_engines.brackets import BracketTable
from payroll_engines.premiums import NightShiftPolicy
from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.loader")

DEFAULT_RULES_PATH = Path(__file__).parent / "defaults" / "payroll_rules.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a YAML scalar (int, float, str) into ``Decimal``."""
    if value is None or isinstance(value, bool):
        raise ConfigurationError(f"expected a number, got {value!r}", field=field)
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigurationError(f"expected a number, got {value!r}", field=field) from e


def _require(data: dict[str, Any], key: str, section: str) -> Any:
    if key not in data:
        raise ConfigurationError("missing required key", field=f"{section}.{key}")
    return data[key]


def parse_bracket_table(raw: list[dict[str, Any]], name: str) -> BracketTable:
    """
    Parse a list of range dicts into a ``BracketTable``.

    ``upper_bound`` may be omitted or null on the last range.
    """
    if not isinstance(raw, list):
        raise ConfigurationError("brackets must be a list", field=f"{name}.brackets")
    ranges = []
    for index, item in enumerate(raw):
        where = f"{name}.brackets[{index}]"
        upper = item.get("upper_bound")
        ranges.append(
            {
                "lower_bound": parse_decimal(_require(item, "lower_bound", where), where),
                "upper_bound": None if upper is None else parse_decimal(upper, where),
                "rate": parse_decimal(_require(item, "rate", where), where),
                "deduction": parse_decimal(item.get("deduction", 0), where),
            }
        )
    return BracketTable.from_ranges(ranges, name=name)


def parse_payroll_rules(data: dict[str, Any]) -> PayrollRules:
    """
    Parse a ``PayrollRules`` from a dict.

    Preconditions:
        - ``data`` contains ``contribution`` (``ceiling``, ``brackets``) and
          ``withholding`` (``per_dependent_deduction``, ``brackets``).
          Every other section is optional and falls back to the schema
          defaults.
    Raises:
        ConfigurationError: if required keys are missing or values invalid.
    """
    contribution = _require(data, "contribution", "rules")
    withholding = _require(data, "withholding", "rules")
    hours = data.get("hours", {})
    benefits = data.get("benefits", {})
    employer = data.get("employer", {})
    processing = data.get("processing", {})

    kwargs: dict[str, Any] = {
        "name": str(data.get("name", "default")),
        "contribution_table": parse_bracket_table(
            _require(contribution, "brackets", "contribution"), "contribution"
        ),
        "contribution_ceiling": parse_decimal(
            _require(contribution, "ceiling", "contribution"), "contribution.ceiling"
        ),
        "withholding_table": parse_bracket_table(
            _require(withholding, "brackets", "withholding"), "withholding"
        ),
        "per_dependent_deduction": parse_decimal(
            _require(withholding, "per_dependent_deduction", "withholding"),
            "withholding.per_dependent_deduction",
        ),
    }

    optional_decimals = {
        "hours_per_month": (hours, "hours_per_month"),
        "overtime_premium_percent": (hours, "overtime_premium_percent"),
        "night_shift_premium_percent": (hours, "night_shift_premium_percent"),
        "transport_allowance_cap_percent": (benefits, "transport_allowance_cap_percent"),
        "employer_deposit_percent": (employer, "deposit_percent"),
    }
    for target, (section, key) in optional_decimals.items():
        if key in section:
            kwargs[target] = parse_decimal(section[key], key)

    try:
        if "night_shift_policy" in hours:
            kwargs["night_shift_policy"] = NightShiftPolicy(hours["night_shift_policy"])
        if "missing_timesheet_policy" in processing:
            kwargs["missing_timesheet_policy"] = MissingTimesheetPolicy(
                processing["missing_timesheet_policy"]
            )
    except ValueError as e:
        raise ConfigurationError(str(e), field="policy") from e

    if "max_workers" in processing:
        kwargs["max_workers"] = int(processing["max_workers"])

    return PayrollRules(**kwargs)


def load_payroll_rules(path: Path | str | None = None) -> PayrollRules:
    """
    Load rules from a YAML file (the packaged defaults when ``path`` is None).
    """
    rules_path = Path(path) if path is not None else DEFAULT_RULES_PATH
    data = load_yaml_file(rules_path)
    rules = parse_payroll_rules(data)
    logger.info(
        "payroll_rules_loaded",
        extra={
            "path": str(rules_path),
            "rules": rules.name,
            "checksum": compute_checksum(data),
        },
    )
    return rules


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed rules document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
