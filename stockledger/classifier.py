"""
Stock classification — isolated, testable, reusable.

Derives a StockStatus from a stock level's current numbers. Precedence:

    out_of_stock   available == 0
    low_stock      available <= minimum_quantity
    overstock      maximum_quantity set and quantity > maximum_quantity
    in_stock       otherwise

Examples:
    - qty=10, reserved=10, min=0            -> out_of_stock
    - qty=10, reserved=2,  min=8            -> low_stock
    - qty=50, reserved=0,  min=5,  max=40   -> overstock
"""

from django.db.models import F, Q

from stockledger.models.enums import StockStatus


def stock_status(level) -> StockStatus:
    """
    Classify a single stock level.

    Args:
        level: StockLevel instance (needs .quantity, .reserved_quantity,
               .minimum_quantity and .maximum_quantity)

    Returns:
        StockStatus
    """
    available = level.quantity - level.reserved_quantity

    if available == 0:
        return StockStatus.OUT_OF_STOCK
    if available <= level.minimum_quantity:
        return StockStatus.LOW_STOCK
    if level.maximum_quantity is not None and level.quantity > level.maximum_quantity:
        return StockStatus.OVERSTOCK
    return StockStatus.IN_STOCK


def status_q(status) -> Q:
    """
    Q expression matching exactly the rows stock_status() puts in `status`.

    available is expanded inline (quantity - reserved_quantity) so the
    expression works on any StockLevel queryset without an annotation.
    """
    above_minimum = Q(quantity__gt=F('reserved_quantity') + F('minimum_quantity'))
    over_maximum = Q(maximum_quantity__isnull=False, quantity__gt=F('maximum_quantity'))

    if status == StockStatus.OUT_OF_STOCK:
        return Q(quantity=F('reserved_quantity'))
    if status == StockStatus.LOW_STOCK:
        return (
            Q(quantity__gt=F('reserved_quantity'))
            & Q(quantity__lte=F('reserved_quantity') + F('minimum_quantity'))
        )
    if status == StockStatus.OVERSTOCK:
        return above_minimum & over_maximum
    if status == StockStatus.IN_STOCK:
        return above_minimum & ~over_maximum
    raise ValueError(f"Unknown stock status: {status!r}")


def filter_by_status(levels, status):
    """
    Filter a StockLevel queryset to one status.

    This is the queryset-level version of stock_status(), used by
    list and report queries.
    """
    return levels.filter(status_q(status))
