"""
Stockledger Models.

Core models for stock management:
- Warehouse: Where stock exists
- StockLevel: Quantity cache per product and warehouse
- StockMovement: Immutable ledger of changes
"""

from stockledger.models.enums import MovementType, StockStatus
from stockledger.models.level import StockLevel
from stockledger.models.movement import StockMovement
from stockledger.models.warehouse import Warehouse

__all__ = [
    'MovementType',
    'StockStatus',
    'Warehouse',
    'StockLevel',
    'StockMovement',
]
