"""
Noop Product Validator — Stub adapter for development and testing.

Every product is considered valid and active.

Usage in settings.py:
    STOCKLEDGER = {
        "PRODUCT_VALIDATOR": "stockledger.adapters.noop.NoopProductValidator",
    }

WARNING: Do NOT use in production. This adapter performs no real validation
and will accept any product ID, including nonexistent ones.
"""

from __future__ import annotations

from stockledger.protocols.product import ProductValidationResult


class NoopProductValidator:
    """
    No-operation product validator.

    Implements the ``ProductValidator`` protocol without any external
    dependencies, for local development, tests and CI runs without a
    catalog service.
    """

    def validate_product(self, tenant_id: str, product_id: str) -> ProductValidationResult:
        return ProductValidationResult(
            valid=True,
            product_id=product_id,
            product_name=product_id,
            is_active=True,
        )
