"""
Django Stockledger — multi-tenant inventory stock ledger.

Usage:
    from stockledger import inventory, StockError

    inventory.apply_movement(request)
    inventory.get_stock_levels('acme', warehouse_id=main.pk)
    inventory.get_out_of_stock_products('acme')
"""

_EXCEPTIONS = {
    'StockError',
    'ValidationError',
    'ConflictError',
    'InsufficientStockError',
    'InvariantViolationError',
    'NotFoundError',
    'InfrastructureError',
}


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'inventory':
        from stockledger.service import Inventory
        return Inventory
    elif name == 'MovementRequest':
        from stockledger.services.movements import MovementRequest
        return MovementRequest
    elif name in _EXCEPTIONS:
        from stockledger import exceptions
        return getattr(exceptions, name)
    elif name == 'Warehouse':
        from stockledger.models.warehouse import Warehouse
        return Warehouse
    elif name == 'StockLevel':
        from stockledger.models.level import StockLevel
        return StockLevel
    elif name == 'StockMovement':
        from stockledger.models.movement import StockMovement
        return StockMovement
    elif name == 'MovementType':
        from stockledger.models.enums import MovementType
        return MovementType
    elif name == 'StockStatus':
        from stockledger.models.enums import StockStatus
        return StockStatus
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'inventory',
    'MovementRequest',
    'StockError',
    'ValidationError',
    'ConflictError',
    'InsufficientStockError',
    'InvariantViolationError',
    'NotFoundError',
    'InfrastructureError',
    'Warehouse',
    'StockLevel',
    'StockMovement',
    'MovementType',
    'StockStatus',
]

__version__ = '0.1.0'
