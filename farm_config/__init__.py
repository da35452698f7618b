"""
farm_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain engine constants at runtime through
    ``get_active_config()``, returning a frozen ``EngineConfig`` compiled
    from a YAML set under ``farm_config/sets/``.

Architecture position:
    Configuration.  Sits above ``farm_kernel`` and ``farm_engines`` and
    below ``farm_services``.  Engines receive the values as constructor
    arguments and never import this package.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with that name.
    - ``ValueError`` -- schema violations.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``FARM_CONFIG_TRACE`` log entry with config_id, version and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from farm_config.loader import load_config
from farm_config.schema import (
    CommodityPricing,
    EngineConfig,
    InsuranceSettings,
    LoanPolicy,
    ScenarioPolicy,
)

_logger = logging.getLogger("farm_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(name: str = "default", config_dir: Path | None = None) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        name: Configuration set name (file stem under ``config_dir``).
        config_dir: Override path to the sets directory.

    Raises:
        FileNotFoundError: If ``<config_dir>/<name>.yaml`` does not exist.
        ValueError: If the configuration fails validation.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set not found: {path}")

    config = load_config(path)

    _logger.info(
        "FARM_CONFIG_TRACE",
        extra={
            "trace_type": "FARM_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "commodity_count": len(config.commodities),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "EngineConfig",
    "LoanPolicy",
    "ScenarioPolicy",
    "CommodityPricing",
    "InsuranceSettings",
]
