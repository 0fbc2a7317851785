"""
Warehouse model — Where stock exists.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class WarehouseQuerySet(models.QuerySet):

    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def active(self):
        return self.filter(is_active=True)


class Warehouse(models.Model):
    """
    A tenant's stock-holding site.

    Warehouses are stable entities managed through WarehouseRegistry.
    They cannot be deleted while any StockLevel references them
    (enforced by the registry and by on_delete=PROTECT).

    Example:
        inventory.create_warehouse('acme', name='Main Depot', code='MAIN', is_primary=True)
    """

    tenant_id = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Tenant'),
    )
    code = models.CharField(
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Unique per tenant (e.g. MAIN, EU-01)'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    description = models.TextField(blank=True, default='', verbose_name=_('Description'))

    # Contact / address
    address = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Address'))
    city = models.CharField(max_length=100, blank=True, default='', verbose_name=_('City'))
    state = models.CharField(max_length=100, blank=True, default='', verbose_name=_('State'))
    country = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Country'))
    postal_code = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Postal code'))
    phone = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Phone'))
    email = models.EmailField(blank=True, default='', verbose_name=_('Email'))
    manager_name = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Manager'))

    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active'),
        help_text=_('Inactive warehouses reject new movements.'),
    )
    is_primary = models.BooleanField(
        default=False,
        verbose_name=_('Primary'),
    )

    # Capacity (informational)
    total_capacity = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Total capacity'),
    )
    current_usage = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Current usage'),
    )

    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = WarehouseQuerySet.as_manager()

    class Meta:
        verbose_name = _('Warehouse')
        verbose_name_plural = _('Warehouses')
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'code'],
                name='unique_warehouse_code_per_tenant',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
