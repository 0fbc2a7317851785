"""
Inventory Service — The single public interface for all stock operations.

Usage:
    from stockledger import inventory, StockError

    main = inventory.create_warehouse('acme', name='Main', code='MAIN')
    inventory.apply_movement({
        'tenant_id': 'acme', 'product_id': 'SKU-1',
        'movement_type': 'purchase', 'quantity': 10, 'warehouse_id': main.pk,
    })
    inventory.get_low_stock_products('acme')
"""

from stockledger.services.levels import StockLevels
from stockledger.services.movements import MovementApplier
from stockledger.services.queries import InventoryQueries
from stockledger.services.warehouses import WarehouseRegistry


class Inventory(WarehouseRegistry, StockLevels, MovementApplier, InventoryQueries):
    """
    Single interface for all inventory operations.

    apply_movement() is the only way stock quantities change. Every
    state-changing method runs in transaction.atomic(); see each
    method's docstring for its locking.
    """
