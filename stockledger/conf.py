"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "PRODUCT_VALIDATOR": "catalog.adapters.CatalogProductValidator",
        "VALIDATE_PRODUCTS": True,
        "ALLOW_INACTIVE_WAREHOUSES": False,
        "MOVEMENT_LIST_LIMIT": 500,
        "RECONCILE_BATCH_SIZE": 200,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockledgerSettings:
    """Stockledger configuration settings."""

    # Product validation backend (dotted path)
    PRODUCT_VALIDATOR: str = ""

    # Validate products via external backend before applying movements
    VALIDATE_PRODUCTS: bool = False

    # Accept movements targeting warehouses with is_active=False
    ALLOW_INACTIVE_WAREHOUSES: bool = False

    # Default row limit for ledger reads (0 = no limit)
    MOVEMENT_LIST_LIMIT: int = 0

    # Batch size for reconcile_stock_levels
    RECONCILE_BATCH_SIZE: int = 200


def get_stockledger_settings() -> StockledgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockledgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockledgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()
