"""
Configuration Loader (``farm_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``farm_config.schema.EngineConfig``.  Build/test tooling: runtime callers
use ``farm_config.get_active_config()``.

Invariants enforced
-------------------
* Decimal fields are parsed through ``str`` so YAML floats never leak
  binary noise into the engines.
* Structural violations raise ``ValueError`` with a descriptive message.
* ``compute_checksum`` is a deterministic SHA-256 of the canonical JSON.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required section  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from farm_config.schema import (
    CommodityPricing,
    EngineConfig,
    InsuranceSettings,
    LoanPolicy,
    ScenarioPolicy,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Compute SHA-256 checksum of canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{field_name}: expected a number, got {value!r}") from exc


def parse_loans(data: dict[str, Any]) -> LoanPolicy:
    policy = LoanPolicy(
        simple_mode_interest_share=parse_decimal(
            data.get("simple_mode_interest_share", "0.40"), "loans.simple_mode_interest_share"
        ),
        day_count_basis=int(data.get("day_count_basis", 365)),
    )
    if not Decimal("0") <= policy.simple_mode_interest_share <= Decimal("1"):
        raise ValueError("loans.simple_mode_interest_share must be between 0 and 1")
    if policy.day_count_basis <= 0:
        raise ValueError("loans.day_count_basis must be positive")
    return policy


def parse_scenarios(data: dict[str, Any]) -> ScenarioPolicy:
    policy = ScenarioPolicy(
        default_steps=int(data.get("default_steps", 7)),
        yield_low_pct=parse_decimal(data.get("yield_low_pct", "0.50"), "scenarios.yield_low_pct"),
        yield_high_pct=parse_decimal(data.get("yield_high_pct", "1.20"), "scenarios.yield_high_pct"),
        aph_fallback_start=parse_decimal(
            data.get("aph_fallback_start", "100"), "scenarios.aph_fallback_start"
        ),
        aph_fallback_step=parse_decimal(
            data.get("aph_fallback_step", "20"), "scenarios.aph_fallback_step"
        ),
        price_low_pct=parse_decimal(data.get("price_low_pct", "0.60"), "scenarios.price_low_pct"),
        price_high_pct=parse_decimal(data.get("price_high_pct", "1.40"), "scenarios.price_high_pct"),
    )
    if policy.default_steps < 2:
        raise ValueError("scenarios.default_steps must be at least 2")
    if policy.yield_low_pct >= policy.yield_high_pct:
        raise ValueError("scenarios.yield_low_pct must be below yield_high_pct")
    if policy.price_low_pct >= policy.price_high_pct:
        raise ValueError("scenarios.price_low_pct must be below price_high_pct")
    return policy


def parse_commodity(name: str, data: dict[str, Any]) -> CommodityPricing:
    pricing = CommodityPricing(
        commodity=name,
        default_price=parse_decimal(data["default_price"], f"{name}.default_price"),
        price_increment=parse_decimal(data["price_increment"], f"{name}.price_increment"),
    )
    if pricing.price_increment <= 0:
        raise ValueError(f"{name}.price_increment must be positive")
    if pricing.default_price <= 0:
        raise ValueError(f"{name}.default_price must be positive")
    return pricing


def parse_config(data: dict[str, Any]) -> EngineConfig:
    """Parse a full configuration dict into an ``EngineConfig``."""
    commodities = tuple(
        parse_commodity(name, entry) for name, entry in sorted(data.get("commodities", {}).items())
    )
    return EngineConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        loans=parse_loans(data.get("loans", {})),
        scenarios=parse_scenarios(data.get("scenarios", {})),
        commodities=commodities,
        fallback_commodity=parse_commodity("*", data["fallback_commodity"]),
        insurance=InsuranceSettings(
            sco_top_level=parse_decimal(
                data.get("insurance", {}).get("sco_top_level", "0.86"), "insurance.sco_top_level"
            ),
        ),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> EngineConfig:
    return parse_config(load_yaml_file(path))
