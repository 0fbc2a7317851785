"""
Product Validation Protocol — Interface for catalog validation.

Stockledger defines this protocol, the product catalog implements it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductValidationResult:
    """Result of product validation."""

    valid: bool
    product_id: str
    message: str | None = None
    product_name: str | None = None
    is_active: bool = True
    error_code: str | None = None  # "not_found", "inactive", etc.


@runtime_checkable
class ProductValidator(Protocol):
    """
    Protocol for product validation.

    Implementations confirm that a product exists, belongs to the tenant
    and is active before stock is moved for it.
    """

    def validate_product(self, tenant_id: str, product_id: str) -> ProductValidationResult:
        """
        Validate if a product exists and is active for the tenant.

        Args:
            tenant_id: Owning tenant
            product_id: Product identifier

        Returns:
            ProductValidationResult with status and details
        """
        ...
