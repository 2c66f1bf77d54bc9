"""
Stock Kernel

Inventory movement bookkeeping for an e-commerce stock tracker:
- Stock movements with single-currency price, retail price and discount totals
- Net (effective) movement per order line
- Validation of quantity sign conventions per movement type
- SQLAlchemy persistence of validated movements
"""

__version__ = "0.1.0"
