"""
Module: farm_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import farm_kernel.domain, farm_kernel.exceptions and
    farm_kernel.logging_config.  MUST NOT import farm_config or
    farm_services.

Invariants enforced:
    - Purity: engines NEVER read the clock.  ``today`` is a parameter.
    - Decimal-only arithmetic; floats are forbidden.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are wrapped by ``@traced_engine`` and emit
    FARM_ENGINE_TRACE records.
"""

from farm_engines.cost_allocator import CostAllocator
from farm_engines.cost_basis import CostBasisBuilder
from farm_engines.indemnity import CropInsuranceIndemnityCalculator
from farm_engines.interest_allocation import LoanInterestAllocationEngine
from farm_engines.profit_matrix import ProfitMatrixEngine, effective_price
from farm_engines.scenario_grid import ScenarioGridBuilder
from farm_engines.tracer import traced_engine

__all__ = [
    "CostAllocator",
    "CostBasisBuilder",
    "CropInsuranceIndemnityCalculator",
    "LoanInterestAllocationEngine",
    "ProfitMatrixEngine",
    "ScenarioGridBuilder",
    "effective_price",
    "traced_engine",
]
