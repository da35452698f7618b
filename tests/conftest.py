"""
Pytest fixtures for the farm finance test suite.

Provides:
- Structured logging capture
- In-memory SQLite sessions for selector and ledger tests
- An in-memory FarmRepository for service tests
- Record factories (make_farm, make_land_loan, ...)
- A seeded ORM graph (one business, two entities, parcels, loans, farms)
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from farm_config import EngineConfig, get_active_config
from farm_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from farm_kernel.domain.clock import DeterministicClock
from farm_kernel.domain.records import (
    CommodityType,
    ContractAllocation,
    EquipmentLoan,
    Farm,
    FinancingType,
    GrainContract,
    InsurancePlanType,
    InsurancePolicy,
    LandLoan,
    LandParcel,
    OperatingLoan,
)
from farm_kernel.domain.values import ZERO
from farm_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from farm_kernel import models

TEST_BUSINESS_ID = str(uuid4())
TEST_ENTITY_ID = str(uuid4())
TEST_PARCEL_ID = str(uuid4())


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture farm_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            engine.allocate(...)
            logs = captured_logs()
            assert any(r["message"] == "interest_allocation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("farm_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Configuration and clock
# =============================================================================


@pytest.fixture(scope="session")
def engine_config() -> EngineConfig:
    return get_active_config()


@pytest.fixture
def clock() -> DeterministicClock:
    """Mid-season clock: 2024-07-01 is day 183 of a leap year."""
    return DeterministicClock(datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite schema per test."""
    init_engine_from_url("sqlite://")
    create_tables()
    sess = get_session()
    try:
        yield sess
    finally:
        sess.close()
        drop_tables()
        reset_engine()


# =============================================================================
# Record factories
# =============================================================================


def make_farm(**overrides) -> Farm:
    values = dict(
        id=str(uuid4()),
        name="North 80",
        business_id=TEST_BUSINESS_ID,
        grain_entity_id=TEST_ENTITY_ID,
        acres=Decimal("100"),
        aph=Decimal("180"),
        projected_yield=Decimal("180"),
        commodity_type=CommodityType.CORN,
        year=2024,
    )
    values.update(overrides)
    return Farm(**values)


def make_land_loan(**overrides) -> LandLoan:
    values = dict(
        id=str(uuid4()),
        land_parcel_id=TEST_PARCEL_ID,
        lender="Farm Credit",
        principal=Decimal("500000"),
        interest_rate=Decimal("0.05"),
        term_months=240,
        monthly_payment=Decimal("3300"),
        remaining_balance=Decimal("400000"),
    )
    values.update(overrides)
    return LandLoan(**values)


def make_equipment_loan(**overrides) -> EquipmentLoan:
    values = dict(
        id=str(uuid4()),
        equipment_id=str(uuid4()),
        lender="Deere Financial",
        financing_type=FinancingType.LOAN,
        remaining_balance=Decimal("200000"),
        interest_rate=Decimal("0.06"),
        monthly_payment=Decimal("3000"),
        include_in_breakeven=True,
    )
    values.update(overrides)
    return EquipmentLoan(**values)


def make_operating_loan(**overrides) -> OperatingLoan:
    values = dict(
        id=str(uuid4()),
        grain_entity_id=TEST_ENTITY_ID,
        grain_entity_name="Smith Grain LLC",
        lender="First State Bank",
        credit_limit=Decimal("500000"),
        interest_rate=Decimal("0.073"),
        current_balance=Decimal("100000"),
        year=2024,
    )
    values.update(overrides)
    return OperatingLoan(**values)


def make_contract_allocation(bushels, **contract_fields) -> ContractAllocation:
    values = dict(
        id=str(uuid4()),
        commodity_type=CommodityType.CORN,
        year=2024,
    )
    values.update(contract_fields)
    return ContractAllocation(contract=GrainContract(**values), allocated_bushels=Decimal(bushels))


def make_policy(**overrides) -> InsurancePolicy:
    values = dict(
        farm_id=str(uuid4()),
        plan_type=InsurancePlanType.RP,
        coverage_level=Decimal("80"),
        projected_price=Decimal("4.66"),
        premium_per_acre=Decimal("18.50"),
    )
    values.update(overrides)
    return InsurancePolicy(**values)


# =============================================================================
# In-memory repository
# =============================================================================


@dataclass
class InMemoryFarmRepository:
    """
    Dict-backed FarmRepository for service tests.

    Mirrors the selector's filtering: inactive loans are dropped, and
    ``find_equipment_loans`` returns only include_in_breakeven loans.
    """

    farms: dict[str, Farm] = field(default_factory=dict)
    parcels: dict[str, LandParcel] = field(default_factory=dict)
    operating_loans: list[OperatingLoan] = field(default_factory=list)
    equipment_loans: dict[str, list[EquipmentLoan]] = field(default_factory=dict)
    policies: dict[str, InsurancePolicy] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def add_farm(self, farm: Farm) -> Farm:
        self.farms[farm.id] = farm
        return farm

    def find_farm(self, farm_id, business_id=None):
        self.calls.append("find_farm")
        farm = self.farms.get(str(farm_id))
        if farm is None:
            return None
        if business_id is not None and farm.business_id != str(business_id):
            return None
        return farm

    def find_land_parcel_loans(self, land_parcel_id):
        parcel = self.parcels.get(str(land_parcel_id))
        if parcel is None:
            return ()
        return tuple(loan for loan in parcel.loans if loan.is_active)

    def find_operating_loans(self, grain_entity_id, year):
        return tuple(
            loan for loan in self.operating_loans
            if loan.grain_entity_id == grain_entity_id and loan.year == year and loan.is_active
        )

    def find_equipment_loans(self, business_id, year=None, include_in_breakeven=True):
        return tuple(
            loan for loan in self.equipment_loans.get(str(business_id), [])
            if loan.is_active and (loan.include_in_breakeven or not include_in_breakeven)
        )

    def sum_farm_acres(self, year, grain_entity_id=None, business_id=None):
        total = ZERO
        for farm in self.farms.values():
            if farm.year != year:
                continue
            if grain_entity_id is not None and farm.grain_entity_id != grain_entity_id:
                continue
            if business_id is not None and farm.business_id != business_id:
                continue
            total += farm.acres
        return total

    def get_insurance_policy(self, farm_id, business_id=None):
        farm = self.find_farm(farm_id, business_id)
        if farm is None:
            return None
        return self.policies.get(farm.id)

    def find_land_parcels(self, business_id):
        return tuple(p for p in self.parcels.values() if p.business_id == business_id)

    def find_business_operating_loans(self, business_id, year):
        entity_ids = {f.grain_entity_id for f in self.farms.values() if f.business_id == business_id}
        return tuple(
            loan for loan in self.operating_loans
            if loan.grain_entity_id in entity_ids and loan.year == year and loan.is_active
        )


@pytest.fixture
def farm_repository() -> InMemoryFarmRepository:
    return InMemoryFarmRepository()


# =============================================================================
# Seeded ORM graph
# =============================================================================


@dataclass
class SeededFarmGraph:
    business_id: str
    other_business_id: str
    entity_id: str
    other_entity_id: str
    parcel_id: str
    farm_id: str
    second_farm_id: str
    deleted_farm_id: str
    other_business_farm_id: str
    land_loan_id: str
    operating_loan_id: str
    equipment_loan_id: str


@pytest.fixture
def seeded_graph(session) -> SeededFarmGraph:
    """
    One business with two grain entities, a land parcel carrying one live
    and one soft-deleted loan, operating and equipment loans, and three 2024
    corn farms.  A second business owns one more farm.
    """
    business = models.Business(name="Smith Farms", trucking_fee_per_bushel=Decimal("0.15"))
    other_business = models.Business(name="Jones Farms")
    session.add_all([business, other_business])
    session.flush()

    entity = models.GrainEntity(business_id=business.id, name="Smith Grain LLC")
    other_entity = models.GrainEntity(business_id=business.id, name="Smith Partners")
    foreign_entity = models.GrainEntity(business_id=other_business.id, name="Jones Grain")
    session.add_all([entity, other_entity, foreign_entity])
    session.flush()

    parcel = models.LandParcel(business_id=business.id, name="Home Quarter", total_acres=Decimal("160"))
    session.add(parcel)
    session.flush()

    land_loan = models.LandLoan(
        land_parcel_id=parcel.id,
        lender="Farm Credit",
        remaining_balance=Decimal("400000"),
        interest_rate=Decimal("0.05"),
        monthly_payment=Decimal("3300"),
    )
    deleted_land_loan = models.LandLoan(
        land_parcel_id=parcel.id,
        lender="Old Bank",
        use_simple_mode=True,
        annual_payment=Decimal("10000"),
        deleted_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
    )
    session.add_all([land_loan, deleted_land_loan])

    operating = models.OperatingLoan(
        grain_entity_id=entity.id,
        lender="First State Bank",
        credit_limit=Decimal("500000"),
        interest_rate=Decimal("0.073"),
        current_balance=Decimal("100000"),
        year=2024,
    )
    inactive_operating = models.OperatingLoan(
        grain_entity_id=entity.id,
        lender="Closed Line",
        credit_limit=Decimal("100000"),
        interest_rate=Decimal("0.08"),
        current_balance=Decimal("50000"),
        year=2024,
        is_active=False,
    )
    session.add_all([operating, inactive_operating])

    tractor = models.Equipment(business_id=business.id, name="8R 370", equipment_type="TRACTOR")
    retired = models.Equipment(business_id=business.id, name="Old combine", is_active=False)
    session.add_all([tractor, retired])
    session.flush()

    equipment_loan = models.EquipmentLoan(
        equipment_id=tractor.id,
        lender="Deere Financial",
        remaining_balance=Decimal("200000"),
        interest_rate=Decimal("0.06"),
        monthly_payment=Decimal("3000"),
        include_in_breakeven=True,
    )
    excluded_loan = models.EquipmentLoan(
        equipment_id=tractor.id,
        lender="Dealer",
        use_simple_mode=True,
        annual_payment=Decimal("5000"),
        include_in_breakeven=False,
    )
    retired_loan = models.EquipmentLoan(
        equipment_id=retired.id,
        lender="Case Credit",
        use_simple_mode=True,
        annual_payment=Decimal("9000"),
        include_in_breakeven=True,
    )
    session.add_all([equipment_loan, excluded_loan, retired_loan])

    fertilizer = models.Fertilizer(
        business_id=business.id, name="Anhydrous", price_per_unit=Decimal("0.55"), unit="LB"
    )
    chemical = models.Chemical(
        business_id=business.id, name="Atrazine", price_per_unit=Decimal("12.00"), unit="GAL"
    )
    hybrid = models.SeedHybrid(
        business_id=business.id, name="P1197", commodity_type="CORN", price_per_bag=Decimal("300")
    )
    session.add_all([fertilizer, chemical, hybrid])
    session.flush()

    farm = models.Farm(
        grain_entity_id=entity.id,
        land_parcel_id=parcel.id,
        name="North 80",
        acres=Decimal("100"),
        aph=Decimal("180"),
        projected_yield=Decimal("190"),
        commodity_type="CORN",
        year=2024,
    )
    farm.fertilizer_usage = [models.FarmFertilizerUsage(fertilizer_id=fertilizer.id, amount_used=Decimal("18000"))]
    farm.chemical_usage = [
        models.FarmChemicalUsage(chemical_id=chemical.id, amount_used=Decimal("200")),
        models.FarmChemicalUsage(
            chemical_id=chemical.id,
            amount_used=Decimal("999"),
            deleted_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ),
    ]
    farm.seed_usage = [models.FarmSeedUsage(seed_hybrid_id=hybrid.id, bags_used=Decimal("40"))]
    farm.other_costs = [
        models.FarmOtherCost(cost_type="LAND_RENT", amount=Decimal("250"), is_per_acre=True),
        models.FarmOtherCost(cost_type="INSURANCE", amount=Decimal("2000")),
        models.FarmOtherCost(cost_type="HAULING", amount=Decimal("500")),
    ]
    second_farm = models.Farm(
        grain_entity_id=entity.id,
        name="South 60",
        acres=Decimal("60"),
        aph=Decimal("170"),
        projected_yield=Decimal("175"),
        commodity_type="CORN",
        year=2024,
        trucking_fee_per_bushel=Decimal("0.20"),
    )
    deleted_farm = models.Farm(
        grain_entity_id=entity.id,
        name="Sold Field",
        acres=Decimal("500"),
        commodity_type="CORN",
        year=2024,
        deleted_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )
    partner_farm = models.Farm(
        grain_entity_id=other_entity.id,
        name="Partner 40",
        acres=Decimal("40"),
        commodity_type="SOYBEANS",
        year=2024,
    )
    foreign_farm = models.Farm(
        grain_entity_id=foreign_entity.id,
        name="Jones Home",
        acres=Decimal("300"),
        commodity_type="CORN",
        year=2024,
    )
    session.add_all([farm, second_farm, deleted_farm, partner_farm, foreign_farm])
    session.flush()

    contract = models.GrainContract(
        grain_entity_id=entity.id,
        buyer="Elevator Co",
        commodity_type="CORN",
        year=2024,
        total_bushels=Decimal("10000"),
        futures_price=Decimal("4.80"),
        basis_price=Decimal("-0.30"),
    )
    session.add(contract)
    session.flush()
    session.add(
        models.FarmContractAllocation(
            farm_id=farm.id, grain_contract_id=contract.id, allocated_bushels=Decimal("5000")
        )
    )

    session.add(
        models.CropInsurancePolicy(
            farm_id=farm.id,
            plan_type="RP",
            coverage_level=Decimal("80"),
            projected_price=Decimal("4.66"),
            premium_per_acre=Decimal("18.50"),
            has_sco=True,
            sco_premium_per_acre=Decimal("6.00"),
        )
    )
    session.commit()

    graph = SeededFarmGraph(
        business_id=str(business.id),
        other_business_id=str(other_business.id),
        entity_id=str(entity.id),
        other_entity_id=str(other_entity.id),
        parcel_id=str(parcel.id),
        farm_id=str(farm.id),
        second_farm_id=str(second_farm.id),
        deleted_farm_id=str(deleted_farm.id),
        other_business_farm_id=str(foreign_farm.id),
        land_loan_id=str(land_loan.id),
        operating_loan_id=str(operating.id),
        equipment_loan_id=str(equipment_loan.id),
    )
    session.expire_all()
    return graph
