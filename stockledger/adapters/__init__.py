"""
Stockledger Adapters.

Implementations of protocols for external systems.
"""

from stockledger.adapters.catalog import (
    get_product_validator,
    reset_product_validator,
)
from stockledger.adapters.noop import NoopProductValidator

__all__ = [
    "NoopProductValidator",
    "get_product_validator",
    "reset_product_validator",
]
