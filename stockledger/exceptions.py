"""
Exceptions for Stockledger.

Every business-rule failure is a StockError subclass with a structured code
for programmatic handling. Persistence failures are not wrapped: they surface
as Django's own DatabaseError hierarchy (re-exported as InfrastructureError).
"""

from decimal import Decimal
from typing import Any

from django.db import DatabaseError


class StockError(Exception):
    """
    Structured exception for stock operations.

    Usage:
        try:
            inventory.apply_movement(request)
        except InsufficientStockError as e:
            if e.code == 'INSUFFICIENT_AVAILABLE':
                print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, /, **data: Any):
        self.code = code
        self.message = message or self._lookup_message(code)
        self.data = data
        super().__init__(self.message)

    @classmethod
    def _lookup_message(cls, code: str) -> str:
        for klass in cls.__mro__:
            messages = klass.__dict__.get('_default_messages', {})
            if code in messages:
                return messages[code]
        return code

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'type': type(self).__name__,
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"


class ValidationError(StockError):
    """Missing or malformed request fields. Raised before any write."""

    _default_messages = {
        'TENANT_REQUIRED': 'Tenant ID is required',
        'PRODUCT_REQUIRED': 'Product ID is required',
        'PRODUCT_INVALID': 'Product is unknown or inactive',
        'MOVEMENT_TYPE_REQUIRED': 'Movement type is required',
        'INVALID_MOVEMENT_TYPE': 'Movement type is not recognized',
        'INVALID_QUANTITY': 'Quantity must be greater than 0',
        'WAREHOUSE_REQUIRED': 'Warehouse is required for this movement',
        'TRANSFER_WAREHOUSES_REQUIRED': 'Both source and destination warehouses are required for transfer',
        'TRANSFER_SAME_WAREHOUSE': 'Source and destination warehouses must differ',
        'WAREHOUSE_INACTIVE': 'Warehouse is inactive',
        'NAME_REQUIRED': 'Warehouse name is required',
        'CODE_REQUIRED': 'Warehouse code is required',
        'NEGATIVE_VALUE': 'Value cannot be negative',
        'INVALID_VALUE': 'Value is not a valid number',
        'UNKNOWN_FIELD': 'Field cannot be set through this operation',
    }


class ConflictError(StockError):
    """State conflict: duplicate rows or deleting something still in use."""

    _default_messages = {
        'DUPLICATE_WAREHOUSE_CODE': 'A warehouse with this code already exists',
        'DUPLICATE_STOCK_LEVEL': 'Stock level already exists for this product and warehouse',
        'WAREHOUSE_HAS_STOCK': 'Cannot delete warehouse with existing stock levels',
        'WAREHOUSE_HAS_MOVEMENTS': 'Cannot delete warehouse referenced by stock movements',
        'STOCK_LEVEL_NOT_EMPTY': 'Cannot delete a stock level holding stock',
        'IDEMPOTENCY_KEY_REUSED': 'Idempotency key was already used for a different movement',
    }


class InsufficientStockError(StockError):
    """A movement would drive quantity or reserved quantity negative."""

    _default_messages = {
        'INSUFFICIENT_AVAILABLE': 'Insufficient stock for this operation',
        'INSUFFICIENT_RESERVED': 'Cannot release more than is reserved',
    }


class InvariantViolationError(StockError):
    """Reserved quantity would exceed on-hand quantity."""

    _default_messages = {
        'RESERVED_EXCEEDS_QUANTITY': 'Reserved quantity cannot exceed on-hand quantity',
    }


class NotFoundError(StockError):
    """A referenced warehouse or stock level does not exist."""

    _default_messages = {
        'WAREHOUSE_NOT_FOUND': 'Warehouse not found',
        'STOCK_LEVEL_NOT_FOUND': 'Cannot create negative stock level',
    }


# Persistence failures propagate unmodified; this alias lets callers catch them
# next to the business errors without importing django.db.
InfrastructureError = DatabaseError
