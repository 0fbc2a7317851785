"""
Stock level store — current quantity/reservation rows.

Direct writes here bypass the ledger: they exist for setup (reorder points,
locations, opening rows). Quantity changes belong to the Movement Applier.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Q

from stockledger.exceptions import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from stockledger.models.enums import StockStatus
from stockledger.models.level import StockLevel
from stockledger.models.warehouse import Warehouse

logger = logging.getLogger('stockledger')

QUANTITY_FIELDS = ('quantity', 'reserved_quantity', 'minimum_quantity', 'maximum_quantity')
EDITABLE_FIELDS = frozenset(QUANTITY_FIELDS) | {
    'aisle', 'rack', 'shelf', 'bin', 'metadata',
}


def coerce_decimal(value, field: str, max_digits: int = 12, decimal_places: int = 3) -> Decimal:
    """
    Parse `value` as a Decimal that fits DecimalField(max_digits, decimal_places).

    Values the column would round or overflow raise
    ValidationError('INVALID_VALUE'), as do non-numbers and non-finite values.
    """
    if isinstance(value, bool):
        raise ValidationError('INVALID_VALUE', field=field, value=value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError('INVALID_VALUE', field=field, value=value) from None
    if not result.is_finite():
        raise ValidationError('INVALID_VALUE', field=field, value=value)

    try:
        fitted = result.quantize(Decimal(1).scaleb(-decimal_places))
    except InvalidOperation:
        fitted = None
    if fitted is None or fitted != result or fitted.adjusted() >= max_digits - decimal_places:
        raise ValidationError(
            'INVALID_VALUE',
            f'{field} must fit {max_digits} digits with {decimal_places} decimal places',
            field=field,
            value=value,
        )
    return fitted


def _clean_quantities(fields: dict) -> None:
    """Coerce quantity fields in place and reject negatives."""
    for name in QUANTITY_FIELDS:
        if name not in fields:
            continue
        if name == 'maximum_quantity' and fields[name] is None:
            continue
        value = coerce_decimal(fields[name], name)
        if value < 0:
            raise ValidationError('NEGATIVE_VALUE', field=name, value=value)
        fields[name] = value


def _check_reserved(quantity: Decimal, reserved: Decimal) -> None:
    if reserved > quantity:
        raise InvariantViolationError(
            'RESERVED_EXCEEDS_QUANTITY',
            quantity=quantity,
            reserved=reserved,
        )


class StockLevels:
    """Stock level CRUD and listing."""

    @classmethod
    def get_stock_level(cls, tenant_id, product_id, warehouse_id) -> StockLevel | None:
        """Get the row for a (tenant, product, warehouse) tuple, or None."""
        return StockLevel.objects.filter(
            tenant_id=tenant_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
        ).select_related('warehouse').first()

    @classmethod
    def create_stock_level(cls, tenant_id, product_id, warehouse_id, **fields) -> StockLevel:
        """
        Create a stock level row.

        Raises:
            ValidationError: missing product, unknown field or negative value
            NotFoundError('WAREHOUSE_NOT_FOUND')
            ConflictError('DUPLICATE_STOCK_LEVEL')
            InvariantViolationError('RESERVED_EXCEEDS_QUANTITY')
        """
        if not tenant_id:
            raise ValidationError('TENANT_REQUIRED')
        if not product_id:
            raise ValidationError('PRODUCT_REQUIRED')
        unknown = sorted(set(fields) - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError('UNKNOWN_FIELD', fields=unknown)
        _clean_quantities(fields)
        _check_reserved(
            fields.get('quantity', Decimal('0')),
            fields.get('reserved_quantity', Decimal('0')),
        )

        with transaction.atomic():
            if not Warehouse.objects.for_tenant(tenant_id).filter(pk=warehouse_id).exists():
                raise NotFoundError('WAREHOUSE_NOT_FOUND', warehouse_id=warehouse_id)

            exists = StockLevel.objects.filter(
                tenant_id=tenant_id,
                product_id=product_id,
                warehouse_id=warehouse_id,
            ).exists()
            if exists:
                raise ConflictError(
                    'DUPLICATE_STOCK_LEVEL',
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                )

            level = StockLevel.objects.create(
                tenant_id=tenant_id,
                product_id=product_id,
                warehouse_id=warehouse_id,
                **fields,
            )

        logger.info(
            "stock.level.created",
            extra={
                "tenant_id": tenant_id,
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "stock_level_id": level.pk,
            },
        )
        return level

    @classmethod
    def update_stock_level(cls, tenant_id, stock_level_id, **patch) -> StockLevel:
        """
        Update a stock level row.

        Raises:
            ValidationError: unknown field or negative value
            NotFoundError('STOCK_LEVEL_NOT_FOUND')
            InvariantViolationError('RESERVED_EXCEEDS_QUANTITY')
        """
        unknown = sorted(set(patch) - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError('UNKNOWN_FIELD', fields=unknown)
        _clean_quantities(patch)

        with transaction.atomic():
            try:
                level = StockLevel.objects.for_tenant(tenant_id).select_for_update().get(pk=stock_level_id)
            except StockLevel.DoesNotExist:
                raise NotFoundError(
                    'STOCK_LEVEL_NOT_FOUND',
                    'Stock level not found',
                    stock_level_id=stock_level_id,
                ) from None

            _check_reserved(
                patch.get('quantity', level.quantity),
                patch.get('reserved_quantity', level.reserved_quantity),
            )
            for field, value in patch.items():
                setattr(level, field, value)
            level.save()

        logger.info(
            "stock.level.updated",
            extra={
                "tenant_id": tenant_id,
                "stock_level_id": level.pk,
                "fields": sorted(patch),
            },
        )
        return level

    @classmethod
    def delete_stock_level(cls, tenant_id, stock_level_id) -> None:
        """
        Delete an empty stock level row.

        Raises:
            NotFoundError('STOCK_LEVEL_NOT_FOUND')
            ConflictError('STOCK_LEVEL_NOT_EMPTY'): quantity or reservations remain
        """
        with transaction.atomic():
            try:
                level = StockLevel.objects.for_tenant(tenant_id).select_for_update().get(pk=stock_level_id)
            except StockLevel.DoesNotExist:
                raise NotFoundError(
                    'STOCK_LEVEL_NOT_FOUND',
                    'Stock level not found',
                    stock_level_id=stock_level_id,
                ) from None

            if level.quantity > 0 or level.reserved_quantity > 0:
                raise ConflictError(
                    'STOCK_LEVEL_NOT_EMPTY',
                    stock_level_id=level.pk,
                    quantity=level.quantity,
                    reserved=level.reserved_quantity,
                )
            level.delete()

        logger.info(
            "stock.level.deleted",
            extra={"tenant_id": tenant_id, "stock_level_id": stock_level_id},
        )

    @classmethod
    def list_stock_levels(cls, tenant_id, warehouse_id=None, product_id=None,
                          status=None, low_stock=False, search='',
                          include_empty=True):
        """
        List stock levels with filters, newest first.

        Args:
            status: StockStatus value (see stockledger.classifier)
            low_stock: Shortcut for status=low_stock
            search: Case-insensitive match on product ID or location fields
            include_empty: False drops rows with zero on-hand quantity
        """
        qs = StockLevel.objects.for_tenant(tenant_id).select_related('warehouse')

        if warehouse_id is not None:
            qs = qs.at_warehouse(warehouse_id)

        if product_id is not None:
            qs = qs.filter(product_id=product_id)

        if low_stock:
            qs = qs.with_status(StockStatus.LOW_STOCK)

        if status:
            if status not in StockStatus.values:
                raise ValidationError('INVALID_VALUE', field='status', value=status)
            qs = qs.with_status(status)

        search = (search or '').strip()
        if search:
            qs = qs.filter(
                Q(product_id__icontains=search)
                | Q(aisle__icontains=search)
                | Q(rack__icontains=search)
                | Q(shelf__icontains=search)
                | Q(bin__icontains=search)
            )

        if not include_empty:
            qs = qs.non_empty()

        return qs.order_by('-created_at', '-pk')
