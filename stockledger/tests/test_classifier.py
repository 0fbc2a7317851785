"""
Tests for stock status classification.
"""

from decimal import Decimal

import pytest

from stockledger.classifier import filter_by_status, status_q, stock_status
from stockledger.models import StockLevel, StockStatus


def make(quantity, reserved=0, minimum=0, maximum=None):
    """Unsaved StockLevel with the given numbers."""
    return StockLevel(
        quantity=Decimal(str(quantity)),
        reserved_quantity=Decimal(str(reserved)),
        minimum_quantity=Decimal(str(minimum)),
        maximum_quantity=None if maximum is None else Decimal(str(maximum)),
    )


CASES = [
    # quantity, reserved, minimum, maximum, expected
    (0, 0, 0, None, StockStatus.OUT_OF_STOCK),
    (10, 10, 0, None, StockStatus.OUT_OF_STOCK),
    (0, 0, 5, 1, StockStatus.OUT_OF_STOCK),
    (10, 2, 8, None, StockStatus.LOW_STOCK),
    (5, 0, 5, None, StockStatus.LOW_STOCK),
    (5, 0, 5, 2, StockStatus.LOW_STOCK),
    (50, 0, 5, 40, StockStatus.OVERSTOCK),
    (50, 0, 5, None, StockStatus.IN_STOCK),
    (40, 0, 5, 40, StockStatus.IN_STOCK),
    (1, 0, 0, None, StockStatus.IN_STOCK),
]


class TestStockStatus:

    @pytest.mark.parametrize('quantity, reserved, minimum, maximum, expected', CASES)
    def test_classification(self, quantity, reserved, minimum, maximum, expected):
        assert stock_status(make(quantity, reserved, minimum, maximum)) == expected

    def test_property(self):
        assert make(3, 3).status == StockStatus.OUT_OF_STOCK

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            status_q('plenty')


@pytest.mark.django_db
class TestFilterByStatus:
    """The queryset filter agrees with stock_status() on every row."""

    def test_matches_python_classification(self, main):
        for index, (quantity, reserved, minimum, maximum, _) in enumerate(CASES):
            level = make(quantity, reserved, minimum, maximum)
            level.tenant_id = 'acme'
            level.product_id = f'SKU-{index}'
            level.warehouse = main
            level.save()

        levels = StockLevel.objects.all()
        for status in StockStatus.values:
            expected = {level.pk for level in levels if level.status == status}
            assert set(filter_by_status(levels, status).values_list('pk', flat=True)) == expected

    def test_statuses_are_exclusive(self, main):
        for index, (quantity, reserved, minimum, maximum, _) in enumerate(CASES):
            level = make(quantity, reserved, minimum, maximum)
            level.tenant_id = 'acme'
            level.product_id = f'SKU-{index}'
            level.warehouse = main
            level.save()

        total = sum(StockLevel.objects.with_status(status).count() for status in StockStatus.values)
        assert total == len(CASES)
