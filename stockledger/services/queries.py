"""
Inventory queries — read-only operations.

All methods are classmethod on Inventory and use no locking. Dashboard
reads may lag in-flight movements; the Movement Applier always re-reads
under lock before deciding.
"""

from decimal import Decimal

from django.db.models import Count, DecimalField, Sum
from django.db.models.functions import Coalesce

from stockledger.classifier import status_q
from stockledger.conf import stockledger_settings
from stockledger.models.enums import StockStatus
from stockledger.models.level import StockLevel
from stockledger.models.movement import StockMovement
from stockledger.services.levels import StockLevels


class InventoryQueries:
    """Read-only stock and ledger query methods."""

    @classmethod
    def get_stock_levels(cls, tenant_id, **filters):
        """Stock levels for a tenant (see StockLevels.list_stock_levels for filters)."""
        return StockLevels.list_stock_levels(tenant_id, **filters)

    @classmethod
    def get_low_stock_products(cls, tenant_id, warehouse_id=None):
        """
        Stock levels classified low_stock, lowest available first.

        Out-of-stock rows are reported by get_out_of_stock_products().
        """
        qs = StockLevel.objects.for_tenant(tenant_id).low_stock().select_related('warehouse')
        if warehouse_id is not None:
            qs = qs.at_warehouse(warehouse_id)
        return qs.order_by_available()

    @classmethod
    def get_out_of_stock_products(cls, tenant_id, warehouse_id=None):
        """Stock levels with nothing available, most recently updated first."""
        qs = StockLevel.objects.for_tenant(tenant_id).out_of_stock().select_related('warehouse')
        if warehouse_id is not None:
            qs = qs.at_warehouse(warehouse_id)
        return qs.order_by('-updated_at', '-pk')

    @classmethod
    def get_stock_summary(cls, tenant_id, warehouse_id=None) -> dict:
        """
        Dashboard totals.

        Returns:
            {'total': n, 'in_stock': n, 'low_stock': n, 'out_of_stock': n,
             'overstock': n, 'total_quantity': Decimal, 'total_reserved': Decimal}
        """
        qs = StockLevel.objects.for_tenant(tenant_id)
        if warehouse_id is not None:
            qs = qs.at_warehouse(warehouse_id)

        decimal = DecimalField(max_digits=16, decimal_places=3)
        aggregates = {
            status: Count('pk', filter=status_q(status))
            for status in StockStatus.values
        }
        result = qs.aggregate(
            total=Count('pk'),
            total_quantity=Coalesce(Sum('quantity'), Decimal('0'), output_field=decimal),
            total_reserved=Coalesce(Sum('reserved_quantity'), Decimal('0'), output_field=decimal),
            **aggregates,
        )
        return result

    @classmethod
    def get_stock_movements(cls, tenant_id, warehouse_id=None, product_id=None,
                            movement_type=None, reference_type=None,
                            reference_id=None, limit=None):
        """
        Ledger entries for a tenant, newest first.

        Args:
            limit: Max rows (None = STOCKLEDGER['MOVEMENT_LIST_LIMIT'], 0 = all)
        """
        qs = StockMovement.objects.for_tenant(tenant_id).select_related(
            'warehouse', 'related_warehouse',
        )

        if warehouse_id is not None:
            qs = qs.filter(warehouse_id=warehouse_id)

        if product_id is not None:
            qs = qs.filter(product_id=product_id)

        if movement_type is not None:
            qs = qs.filter(movement_type=movement_type)

        if reference_type is not None:
            qs = qs.filter(reference_type=reference_type)

        if reference_id is not None:
            qs = qs.filter(reference_id=str(reference_id))

        qs = qs.order_by('-created_at', '-pk')

        if limit is None:
            limit = stockledger_settings.MOVEMENT_LIST_LIMIT
        if limit:
            qs = qs[:limit]

        return qs
