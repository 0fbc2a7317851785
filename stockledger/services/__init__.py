"""
Inventory services — modular organization of stock operations.

    from stockledger.services import (
        WarehouseRegistry, StockLevels, MovementApplier, InventoryQueries,
    )
"""

from stockledger.services.levels import StockLevels
from stockledger.services.movements import MovementApplier, MovementRequest
from stockledger.services.queries import InventoryQueries
from stockledger.services.warehouses import WarehouseRegistry

__all__ = [
    'WarehouseRegistry',
    'StockLevels',
    'MovementApplier',
    'MovementRequest',
    'InventoryQueries',
]
