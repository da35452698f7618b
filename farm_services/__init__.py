"""Farm finance services -- imperative shell over the engines."""

from farm_services.farm_finance_service import FarmFinanceService, build_engines

__all__ = ["FarmFinanceService", "build_engines"]
