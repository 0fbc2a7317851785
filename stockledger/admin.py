"""
Stockledger Admin — read-only views for production debugging.

- Warehouse: list + edit
- StockLevel: read-only (product, warehouse, on hand, reserved, available, status)
- StockMovement: read-only audit trail
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.models import StockLevel, StockMovement, Warehouse


class ReadOnlyAdmin(admin.ModelAdmin):
    """Nothing can be added, changed or deleted from the admin."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    """Warehouse admin — editable. Deletion goes through the registry."""

    list_display = ['code', 'name', 'tenant_id', 'is_active', 'is_primary']
    list_filter = ['is_active', 'is_primary', 'tenant_id']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockLevel)
class StockLevelAdmin(ReadOnlyAdmin):
    """StockLevel admin — read-only. Stock only changes via apply_movement()."""

    list_display = ['product_id', 'warehouse', 'tenant_id', 'quantity',
                    'reserved_quantity', 'available_display', 'status_display']
    list_filter = ['tenant_id', 'warehouse']
    search_fields = ['product_id', 'bin']

    @admin.display(description=_('Available'))
    def available_display(self, obj):
        return obj.available_quantity

    @admin.display(description=_('Status'))
    def status_display(self, obj):
        return obj.status.label


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    """StockMovement admin — read-only. Immutable audit trail."""

    list_display = ['created_at', 'movement_type', 'product_id', 'warehouse',
                    'quantity', 'quantity_before', 'quantity_after', 'created_by']
    list_filter = ['movement_type', 'tenant_id', 'warehouse']
    search_fields = ['product_id', 'reference_id', 'reference_number']
    date_hierarchy = 'created_at'
