"""
Farm Kernel

Persistence, value objects and typed errors underneath the farm
cost-allocation and profit-scenario engines:
- Decimal-only money arithmetic with explicit 2-decimal rounding
- Read-only repository selectors returning frozen value objects
- Atomic, row-locked loan ledger writes
- Structured JSON logging
"""

__version__ = "0.1.0"
