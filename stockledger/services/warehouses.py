"""
Warehouse registry — lifecycle of warehouse records.

Deletion is blocked while stock levels (or ledger rows) reference the
warehouse.
"""

import logging

from django.db import transaction

from stockledger.exceptions import ConflictError, NotFoundError, ValidationError
from stockledger.models.level import StockLevel
from stockledger.models.movement import StockMovement
from stockledger.models.warehouse import Warehouse

logger = logging.getLogger('stockledger')

EDITABLE_FIELDS = frozenset({
    'name', 'code', 'description', 'address', 'city', 'state', 'country',
    'postal_code', 'phone', 'email', 'manager_name', 'is_active',
    'is_primary', 'total_capacity', 'current_usage', 'metadata',
})


def _clean_required(fields: dict, name: str, code: str) -> None:
    """Trim `name` in place; raise `code` if it ends up empty."""
    value = (fields.get(name) or '').strip()
    if not value:
        raise ValidationError(code, field=name)
    fields[name] = value


def _check_fields(fields: dict) -> None:
    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError('UNKNOWN_FIELD', fields=unknown)


def _require_warehouse(tenant_id, warehouse_id, lock=False) -> Warehouse:
    qs = Warehouse.objects.for_tenant(tenant_id)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=warehouse_id)
    except (Warehouse.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('WAREHOUSE_NOT_FOUND', warehouse_id=warehouse_id) from None


class WarehouseRegistry:
    """Warehouse CRUD with stock-aware deletion."""

    @classmethod
    def get_warehouse(cls, tenant_id, warehouse_id) -> Warehouse | None:
        """Get a tenant's warehouse, or None."""
        try:
            return Warehouse.objects.for_tenant(tenant_id).filter(pk=warehouse_id).first()
        except (ValueError, TypeError):
            return None

    @classmethod
    def list_warehouses(cls, tenant_id, include_inactive=True):
        """List a tenant's warehouses ordered by name."""
        qs = Warehouse.objects.for_tenant(tenant_id)
        if not include_inactive:
            qs = qs.active()
        return qs.order_by('name', 'code')

    @classmethod
    def create_warehouse(cls, tenant_id, name, code, **fields) -> Warehouse:
        """
        Register a warehouse.

        Raises:
            ValidationError('NAME_REQUIRED' | 'CODE_REQUIRED' | 'UNKNOWN_FIELD')
            ConflictError('DUPLICATE_WAREHOUSE_CODE')
        """
        if not tenant_id:
            raise ValidationError('TENANT_REQUIRED')
        fields = {**fields, 'name': name, 'code': code}
        _check_fields(fields)
        _clean_required(fields, 'name', 'NAME_REQUIRED')
        _clean_required(fields, 'code', 'CODE_REQUIRED')

        with transaction.atomic():
            if Warehouse.objects.for_tenant(tenant_id).filter(code=fields['code']).exists():
                raise ConflictError('DUPLICATE_WAREHOUSE_CODE', warehouse_code=fields['code'])

            warehouse = Warehouse.objects.create(tenant_id=tenant_id, **fields)

        logger.info(
            "stock.warehouse.created",
            extra={
                "tenant_id": tenant_id,
                "warehouse_id": warehouse.pk,
                "code": warehouse.code,
            },
        )
        return warehouse

    @classmethod
    def update_warehouse(cls, tenant_id, warehouse_id, **patch) -> Warehouse:
        """
        Update warehouse fields.

        Raises:
            NotFoundError('WAREHOUSE_NOT_FOUND')
            ValidationError('NAME_REQUIRED' | 'CODE_REQUIRED' | 'UNKNOWN_FIELD')
            ConflictError('DUPLICATE_WAREHOUSE_CODE')
        """
        _check_fields(patch)
        if 'name' in patch:
            _clean_required(patch, 'name', 'NAME_REQUIRED')
        if 'code' in patch:
            _clean_required(patch, 'code', 'CODE_REQUIRED')

        with transaction.atomic():
            warehouse = _require_warehouse(tenant_id, warehouse_id, lock=True)

            if 'code' in patch and patch['code'] != warehouse.code:
                clash = (
                    Warehouse.objects.for_tenant(tenant_id)
                    .filter(code=patch['code'])
                    .exclude(pk=warehouse.pk)
                    .exists()
                )
                if clash:
                    raise ConflictError('DUPLICATE_WAREHOUSE_CODE', warehouse_code=patch['code'])

            for field, value in patch.items():
                setattr(warehouse, field, value)
            warehouse.save()

        logger.info(
            "stock.warehouse.updated",
            extra={
                "tenant_id": tenant_id,
                "warehouse_id": warehouse.pk,
                "fields": sorted(patch),
            },
        )
        return warehouse

    @classmethod
    def delete_warehouse(cls, tenant_id, warehouse_id) -> None:
        """
        Delete a warehouse that holds no stock.

        Raises:
            NotFoundError('WAREHOUSE_NOT_FOUND')
            ConflictError('WAREHOUSE_HAS_STOCK'): stock levels still reference it
            ConflictError('WAREHOUSE_HAS_MOVEMENTS'): the ledger references it
        """
        with transaction.atomic():
            warehouse = _require_warehouse(tenant_id, warehouse_id, lock=True)

            levels = StockLevel.objects.for_tenant(tenant_id).at_warehouse(warehouse.pk).count()
            if levels:
                raise ConflictError('WAREHOUSE_HAS_STOCK', warehouse_id=warehouse.pk, stock_levels=levels)

            referenced = StockMovement.objects.filter(warehouse=warehouse).exists() or (
                StockMovement.objects.filter(related_warehouse=warehouse).exists()
            )
            if referenced:
                raise ConflictError('WAREHOUSE_HAS_MOVEMENTS', warehouse_id=warehouse.pk)

            warehouse.delete()

        logger.info(
            "stock.warehouse.deleted",
            extra={"tenant_id": tenant_id, "warehouse_id": warehouse_id},
        )
