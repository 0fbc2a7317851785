"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementType(models.TextChoices):
    """
    Kind of quantity-changing event recorded in the ledger.

    TRANSFER_IN / TRANSFER_OUT are written in pairs by a transfer request;
    RESERVATION / RELEASE move reserved_quantity, never on-hand quantity.
    """
    PURCHASE = 'purchase', _('Purchase')
    SALE = 'sale', _('Sale')
    TRANSFER_IN = 'transfer_in', _('Transfer in')
    TRANSFER_OUT = 'transfer_out', _('Transfer out')
    ADJUSTMENT = 'adjustment', _('Adjustment')
    RETURN = 'return', _('Return')
    PRODUCTION = 'production', _('Production')
    DAMAGE = 'damage', _('Damage')
    COUNT = 'count', _('Physical count')
    RESERVATION = 'reservation', _('Reservation')
    RELEASE = 'release', _('Release')


class StockStatus(models.TextChoices):
    """Derived status of a stock level (see stockledger.classifier)."""
    IN_STOCK = 'in_stock', _('In stock')
    LOW_STOCK = 'low_stock', _('Low stock')
    OUT_OF_STOCK = 'out_of_stock', _('Out of stock')
    OVERSTOCK = 'overstock', _('Overstock')
