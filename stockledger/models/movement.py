"""
StockMovement model — Immutable ledger of quantity changes.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import MovementType


class StockMovementQuerySet(models.QuerySet):

    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def for_reference(self, reference_type, reference_id):
        return self.filter(reference_type=reference_type, reference_id=reference_id)


class StockMovement(models.Model):
    """
    Immutable record of one quantity-changing event.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements
    - quantity_before / quantity_after snapshot the on-hand quantity
      of `warehouse` around this event

    Rows are written only by the Movement Applier, inside the same
    transaction that updates the StockLevel.
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
        related_name='movements',
        verbose_name=_('Warehouse'),
    )
    movement_type = models.CharField(
        max_length=20,
        choices=MovementType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity'),
        help_text=_('Magnitude of the event, never negative.'),
    )
    related_warehouse = models.ForeignKey(
        'stockledger.Warehouse',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Transfer counterpart'),
    )

    # External reference (order, purchase order, count sheet...)
    reference_type = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Reference type'))
    reference_id = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Reference ID'))
    reference_number = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Reference number'))

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Unit cost'),
    )
    total_cost = models.DecimalField(
        max_digits=16,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Total cost'),
    )

    quantity_before = models.DecimalField(max_digits=12, decimal_places=3, verbose_name=_('Quantity before'))
    quantity_after = models.DecimalField(max_digits=12, decimal_places=3, verbose_name=_('Quantity after'))

    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    idempotency_key = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Idempotency key'),
        help_text=_('Caller-supplied key; re-sending it returns the original movement.'),
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Created by'),
    )

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock movement')
        verbose_name_plural = _('Stock movements')
        ordering = ['created_at', 'pk']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'idempotency_key'],
                condition=~Q(idempotency_key=''),
                name='unique_movement_idempotency_key',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant_id', 'product_id', 'warehouse'], name='movement_tenant_product_wh_idx'),
            models.Index(fields=['tenant_id', 'created_at'], name='movement_tenant_created_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
        ]

    @property
    def delta(self):
        """Signed change of on-hand quantity."""
        return self.quantity_after - self.quantity_before

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Stock movements are immutable. "
                "To correct, apply a new movement."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse, apply a new movement."
        )

    def __str__(self) -> str:
        return f"{self.movement_type} {self.quantity} | {self.product_id} @ {self.warehouse_id}"
