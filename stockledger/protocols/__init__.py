"""
Stockledger Protocols.

Defines interfaces for external system integration.
"""

from stockledger.protocols.product import (
    ProductValidationResult,
    ProductValidator,
)

__all__ = [
    "ProductValidationResult",
    "ProductValidator",
]
