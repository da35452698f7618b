"""Read-only query selectors."""

from farm_kernel.selectors.base import BaseSelector
from farm_kernel.selectors.farm_selector import FarmSelector

__all__ = ["BaseSelector", "FarmSelector"]
