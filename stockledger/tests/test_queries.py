"""
Tests for reporting reads.
"""

from decimal import Decimal

import pytest

from stockledger import inventory
from stockledger.models import MovementType


pytestmark = pytest.mark.django_db


@pytest.fixture
def shelf(main, annex, move):
    """A small mixed inventory built through movements."""
    move('purchase', 50, main, product_id='BREAD')
    move('purchase', 4, main, product_id='MILK')
    move('purchase', 2, main, product_id='JAM')
    move('purchase', 3, annex, product_id='EGGS')
    move('sale', 3, annex, product_id='EGGS')
    move('purchase', 100, annex, product_id='FLOUR')
    move('reservation', 10, annex, product_id='FLOUR')

    for product_id, warehouse in [('MILK', main), ('JAM', main), ('FLOUR', annex)]:
        level = inventory.get_stock_level('acme', product_id, warehouse.pk)
        inventory.update_stock_level('acme', level.pk, minimum_quantity=5)
    level = inventory.get_stock_level('acme', 'BREAD', main.pk)
    inventory.update_stock_level('acme', level.pk, maximum_quantity=40)


class TestLowStock:

    def test_lowest_available_first(self, shelf):
        products = [level.product_id for level in inventory.get_low_stock_products('acme')]

        assert products == ['JAM', 'MILK']

    def test_excludes_out_of_stock(self, shelf):
        products = {level.product_id for level in inventory.get_low_stock_products('acme')}

        assert 'EGGS' not in products

    def test_by_warehouse(self, shelf, annex):
        assert not inventory.get_low_stock_products('acme', warehouse_id=annex.pk).exists()


class TestOutOfStock:

    def test_out_of_stock(self, shelf, annex):
        levels = list(inventory.get_out_of_stock_products('acme'))

        assert [level.product_id for level in levels] == ['EGGS']
        assert levels[0].warehouse == annex

    def test_fully_reserved_is_out_of_stock(self, shelf, annex, move):
        move('reservation', 90, annex, product_id='FLOUR')

        products = {level.product_id for level in inventory.get_out_of_stock_products('acme')}
        assert products == {'EGGS', 'FLOUR'}

    def test_other_tenant_sees_nothing(self, shelf):
        assert not inventory.get_out_of_stock_products('globex').exists()


class TestStockSummary:

    def test_summary(self, shelf):
        summary = inventory.get_stock_summary('acme')

        assert summary['total'] == 5
        assert summary['in_stock'] == 1
        assert summary['low_stock'] == 2
        assert summary['out_of_stock'] == 1
        assert summary['overstock'] == 1
        assert summary['total_quantity'] == Decimal('156')
        assert summary['total_reserved'] == Decimal('10')

    def test_summary_by_warehouse(self, shelf, main):
        summary = inventory.get_stock_summary('acme', warehouse_id=main.pk)

        assert summary['total'] == 3
        assert summary['overstock'] == 1
        assert summary['total_quantity'] == Decimal('56')

    def test_empty_tenant(self, db):
        summary = inventory.get_stock_summary('nobody')

        assert summary['total'] == 0
        assert summary['total_quantity'] == Decimal('0')


class TestStockMovements:

    def test_newest_first(self, shelf):
        movements = list(inventory.get_stock_movements('acme'))

        assert len(movements) == 7
        assert movements[0].movement_type == MovementType.RESERVATION

    def test_filters(self, shelf, annex):
        assert inventory.get_stock_movements('acme', product_id='EGGS').count() == 2
        assert inventory.get_stock_movements('acme', warehouse_id=annex.pk).count() == 4
        assert inventory.get_stock_movements('acme', movement_type='sale').count() == 1

    def test_reference_filter(self, main, move):
        move('purchase', 1, main, reference_type='purchase_order', reference_id='7')
        move('purchase', 1, main, reference_type='purchase_order', reference_id='8')

        movements = inventory.get_stock_movements('acme', reference_type='purchase_order', reference_id=7)
        assert [m.reference_id for m in movements] == ['7']

    def test_limit(self, shelf):
        assert len(inventory.get_stock_movements('acme', limit=3)) == 3
        assert len(inventory.get_stock_movements('acme', limit=0)) == 7

    def test_default_limit_from_settings(self, shelf, settings):
        settings.STOCKLEDGER = {**settings.STOCKLEDGER, 'MOVEMENT_LIST_LIMIT': 2}

        assert len(inventory.get_stock_movements('acme')) == 2
