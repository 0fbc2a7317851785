"""
Pytest fixtures for Stockledger tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from stockledger import inventory
from stockledger.adapters import reset_product_validator
from stockledger.services.movements import MovementRequest


User = get_user_model()

TENANT = 'acme'
OTHER_TENANT = 'globex'


@pytest.fixture(autouse=True)
def _fresh_product_validator():
    """Validators are cached per process; tests may swap them via settings."""
    reset_product_validator()
    yield
    reset_product_validator()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


@pytest.fixture
def tenant():
    return TENANT


@pytest.fixture
def main(db):
    """Main warehouse (W1)."""
    return inventory.create_warehouse(TENANT, name='Main', code='MAIN', is_primary=True)


@pytest.fixture
def annex(db):
    """Second warehouse (W2)."""
    return inventory.create_warehouse(TENANT, name='Annex', code='ANNEX')


@pytest.fixture
def foreign(db):
    """Warehouse belonging to another tenant."""
    return inventory.create_warehouse(OTHER_TENANT, name='Main', code='MAIN')


@pytest.fixture
def move():
    """Apply a movement for TENANT: move('sale', 5, main, product_id='SKU-1')."""

    def _move(movement_type, quantity, warehouse=None, product_id='SKU-1', **kwargs):
        if warehouse is not None:
            kwargs['warehouse_id'] = warehouse.pk
        request = MovementRequest(
            tenant_id=kwargs.pop('tenant_id', TENANT),
            product_id=product_id,
            movement_type=movement_type,
            quantity=Decimal(str(quantity)),
            **kwargs,
        )
        return inventory.apply_movement(request)

    return _move


@pytest.fixture
def stocked(main):
    """StockLevel(MAIN, SKU-1, qty=10, reserved=2)."""
    return inventory.create_stock_level(
        TENANT, 'SKU-1', main.pk,
        quantity=Decimal('10'),
        reserved_quantity=Decimal('2'),
    )
