"""
StockLevel model — Quantity cache per (tenant, product, warehouse).
"""

import logging
from decimal import Decimal

from django.db import models
from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import InvariantViolationError
from stockledger.models.enums import MovementType, StockStatus

logger = logging.getLogger('stockledger')

AVAILABLE = ExpressionWrapper(
    F('quantity') - F('reserved_quantity'),
    output_field=DecimalField(max_digits=12, decimal_places=3),
)


class StockLevelQuerySet(models.QuerySet):
    """QuerySet with helper methods for StockLevel queries."""

    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def at_warehouse(self, warehouse_id):
        return self.filter(warehouse_id=warehouse_id)

    def with_status(self, status):
        from stockledger.classifier import filter_by_status
        return filter_by_status(self, status)

    def low_stock(self):
        return self.with_status(StockStatus.LOW_STOCK)

    def out_of_stock(self):
        return self.with_status(StockStatus.OUT_OF_STOCK)

    def non_empty(self):
        return self.filter(quantity__gt=0)

    def order_by_available(self):
        return self.alias(_available=AVAILABLE).order_by('_available', 'product_id')


class StockLevel(models.Model):
    """
    Current quantity of one product in one warehouse.

    Performance:
    - quantity / reserved_quantity are a cache of the StockMovement ledger
    - Read is O(1), not O(N)
    - Use recalculate() for audit/correction

    Only the Movement Applier changes quantity and reserved_quantity.
    """

    tenant_id = models.CharField(
        max_length=64,
        db_index=True,
        verbose_name=_('Tenant'),
    )
    product_id = models.CharField(
        max_length=64,
        verbose_name=_('Product ID'),
    )
    warehouse = models.ForeignKey(
        'stockledger.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_levels',
        verbose_name=_('Warehouse'),
    )

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('On hand'),
    )
    reserved_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Reserved'),
    )
    minimum_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Reorder point'),
        help_text=_('Available at or below this value is low stock.'),
    )
    maximum_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Overstock ceiling'),
    )

    # Storage location
    aisle = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Aisle'))
    rack = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Rack'))
    shelf = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Shelf'))
    bin = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Bin'))

    last_counted_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Last counted at'))
    last_counted_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_('Last counted quantity'),
    )

    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockLevelQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock level')
        verbose_name_plural = _('Stock levels')
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'product_id', 'warehouse'],
                name='unique_stock_level_per_product_warehouse',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='stock_level_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(reserved_quantity__gte=0),
                name='stock_level_reserved_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(reserved_quantity__lte=F('quantity')),
                name='stock_level_reserved_within_quantity',
            ),
            models.CheckConstraint(
                condition=Q(minimum_quantity__gte=0),
                name='stock_level_minimum_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant_id', 'product_id'], name='stocklevel_tenant_product_idx'),
            models.Index(fields=['tenant_id', 'warehouse'], name='stocklevel_tenant_wh_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def available_quantity(self) -> Decimal:
        """On hand minus reserved."""
        return self.quantity - self.reserved_quantity

    @property
    def status(self) -> StockStatus:
        from stockledger.classifier import stock_status
        return stock_status(self)

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def ledger(self):
        """Movements recorded against this product/warehouse pair."""
        from stockledger.models.movement import StockMovement

        return StockMovement.objects.filter(
            tenant_id=self.tenant_id,
            product_id=self.product_id,
            warehouse_id=self.warehouse_id,
        )

    def replayed_totals(self) -> tuple[Decimal, Decimal]:
        """(quantity, reserved_quantity) as implied by the ledger."""
        decimal = DecimalField(max_digits=14, decimal_places=3)
        totals = self.ledger().aggregate(
            ledger_quantity=Coalesce(
                Sum(F('quantity_after') - F('quantity_before'), output_field=decimal),
                Decimal('0'),
                output_field=decimal,
            ),
            ledger_reserved=Coalesce(
                Sum('quantity', filter=Q(movement_type=MovementType.RESERVATION)),
                Decimal('0'),
                output_field=decimal,
            ),
            ledger_released=Coalesce(
                Sum('quantity', filter=Q(movement_type=MovementType.RELEASE)),
                Decimal('0'),
                output_field=decimal,
            ),
        )
        return (
            totals['ledger_quantity'],
            totals['ledger_reserved'] - totals['ledger_released'],
        )

    def recalculate(self, commit: bool = True) -> bool:
        """
        Recalculate quantity and reserved_quantity from the ledger.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            True if the cached values drifted from the ledger

        Raises:
            InvariantViolationError: the ledger replays to values no stock
                level may hold (negative, or reserved above quantity);
                nothing is saved
        """
        quantity, reserved = self.replayed_totals()

        if quantity == self.quantity and reserved == self.reserved_quantity:
            return False

        if quantity < 0 or reserved < 0 or reserved > quantity:
            logger.error(
                "stock.level.unreplayable",
                extra={
                    "stock_level_id": self.pk,
                    "ledger_quantity": str(quantity),
                    "ledger_reserved": str(reserved),
                },
            )
            raise InvariantViolationError(
                'RESERVED_EXCEEDS_QUANTITY',
                'Ledger replays to an invalid stock level',
                stock_level_id=self.pk,
                quantity=quantity,
                reserved=reserved,
            )

        logger.warning(
            "stock.level.drift",
            extra={
                "stock_level_id": self.pk,
                "cached_quantity": str(self.quantity),
                "ledger_quantity": str(quantity),
                "cached_reserved": str(self.reserved_quantity),
                "ledger_reserved": str(reserved),
                "committed": commit,
            },
        )
        if commit:
            self.quantity = quantity
            self.reserved_quantity = reserved
            self.save(update_fields=['quantity', 'reserved_quantity', 'updated_at'])
        return True

    def __str__(self) -> str:
        return f"{self.product_id} [{self.warehouse_id}]: {self.quantity} ({self.reserved_quantity} reserved)"
