"""
Stock movements — the single mutation path for stock quantities.

apply_movement() validates a MovementRequest, then inside one
transaction.atomic() block locks the involved StockLevel rows
(select_for_update, ascending warehouse id), computes the new numbers,
writes the rows and appends the ledger entries. Any failure rolls the
whole unit back.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any

from django.db import models, transaction
from django.utils import timezone

from stockledger.adapters.catalog import get_product_validator
from stockledger.conf import stockledger_settings
from stockledger.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from stockledger.models.enums import MovementType
from stockledger.models.level import StockLevel
from stockledger.models.movement import StockMovement
from stockledger.models.warehouse import Warehouse
from stockledger.services.levels import coerce_decimal

logger = logging.getLogger('stockledger')

TRANSFER = 'transfer'
COST_STEP = Decimal('0.0001')

# Value strings, matched against normalized request input
INBOUND = frozenset({MovementType.PURCHASE.value, MovementType.RETURN.value, MovementType.PRODUCTION.value})
OUTBOUND = frozenset({MovementType.SALE.value, MovementType.DAMAGE.value})
ABSOLUTE = frozenset({MovementType.ADJUSTMENT.value, MovementType.COUNT.value})

# Shorthands accepted from callers
ALIASES = {
    'in': MovementType.PURCHASE.value,
    'out': MovementType.SALE.value,
}

REQUEST_TYPES = INBOUND | OUTBOUND | ABSOLUTE | {
    MovementType.RESERVATION.value,
    MovementType.RELEASE.value,
    TRANSFER,
}


@dataclass(frozen=True)
class MovementRequest:
    """
    A caller's request to change stock.

    For transfers, related_warehouse_id is the source and warehouse_id the
    destination. For adjustment/count, quantity is the target on-hand
    quantity, not a delta.
    """

    tenant_id: str
    product_id: str
    movement_type: str
    quantity: Any
    warehouse_id: Any = None
    related_warehouse_id: Any = None
    reference_type: str = ''
    reference_id: str = ''
    reference_number: str = ''
    unit_cost: Any = None
    notes: str = ''
    idempotency_key: str = ''
    created_by: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> 'MovementRequest':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError('UNKNOWN_FIELD', fields=unknown)
        values = {name: data.get(name) for name in ('tenant_id', 'product_id', 'movement_type', 'quantity')}
        values.update({k: v for k, v in data.items() if k not in values and v is not None})
        return cls(**values)


@dataclass
class MovementPlan:
    """A validated request, ready to apply."""

    request: MovementRequest
    kind: str
    movement_type: str
    quantity: Decimal
    warehouse: Warehouse
    source: Warehouse | None = None
    unit_cost: Decimal | None = None
    levels: dict = field(default_factory=dict)

    @property
    def tenant_id(self):
        return self.request.tenant_id

    @property
    def product_id(self):
        return self.request.product_id

    @property
    def primary_type(self):
        if self.kind == TRANSFER:
            return MovementType.TRANSFER_IN
        return self.movement_type


def _classify(movement_type) -> tuple[str, str]:
    """Return (kind, normalized movement type)."""
    if not movement_type:
        raise ValidationError('MOVEMENT_TYPE_REQUIRED')
    normalized = ALIASES.get(str(movement_type).strip().lower(), str(movement_type).strip().lower())
    if normalized not in REQUEST_TYPES:
        raise ValidationError(
            'INVALID_MOVEMENT_TYPE',
            movement_type=movement_type,
            accepted=sorted(REQUEST_TYPES | set(ALIASES)),
        )
    if normalized == TRANSFER:
        return TRANSFER, TRANSFER
    if normalized in INBOUND:
        return 'inbound', normalized
    if normalized in OUTBOUND:
        return 'outbound', normalized
    if normalized in ABSOLUTE:
        return 'absolute', normalized
    return normalized, normalized  # reservation / release


def _resolve_warehouse(tenant_id, warehouse_id) -> Warehouse:
    try:
        warehouse = Warehouse.objects.for_tenant(tenant_id).filter(pk=warehouse_id).first()
    except (ValueError, TypeError):
        warehouse = None
    if warehouse is None:
        raise NotFoundError('WAREHOUSE_NOT_FOUND', warehouse_id=warehouse_id)
    if not warehouse.is_active and not stockledger_settings.ALLOW_INACTIVE_WAREHOUSES:
        raise ValidationError('WAREHOUSE_INACTIVE', warehouse_id=warehouse.pk)
    return warehouse


def _validate_product(tenant_id, product_id) -> None:
    if not stockledger_settings.VALIDATE_PRODUCTS:
        return
    result = get_product_validator().validate_product(tenant_id, product_id)
    if not result.valid:
        raise ValidationError(
            'PRODUCT_INVALID',
            result.message,
            product_id=product_id,
            reason=result.error_code,
        )


def _user_kwargs(created_by) -> dict:
    if created_by is None:
        return {}
    if isinstance(created_by, models.Model):
        return {'created_by': created_by}
    return {'created_by_id': created_by}


class MovementApplier:
    """Validation and atomic application of stock movements."""

    @classmethod
    def validate(cls, request) -> MovementPlan:
        """
        Check a request without writing anything.

        Raises:
            ValidationError: missing/malformed fields, inactive warehouse,
                rejected product
            NotFoundError('WAREHOUSE_NOT_FOUND')
        """
        if isinstance(request, Mapping):
            request = MovementRequest.from_mapping(request)

        if not request.tenant_id:
            raise ValidationError('TENANT_REQUIRED')
        if not request.product_id:
            raise ValidationError('PRODUCT_REQUIRED')

        kind, movement_type = _classify(request.movement_type)

        if request.quantity is None or request.quantity == '':
            raise ValidationError('INVALID_QUANTITY', requested=request.quantity)
        quantity = coerce_decimal(request.quantity, 'quantity')
        if kind == 'absolute':
            if quantity < 0:
                raise ValidationError(
                    'INVALID_QUANTITY',
                    'Target quantity cannot be negative',
                    requested=quantity,
                )
        elif quantity <= 0:
            raise ValidationError('INVALID_QUANTITY', requested=quantity)

        if kind == TRANSFER:
            if request.warehouse_id in (None, '') or request.related_warehouse_id in (None, ''):
                raise ValidationError('TRANSFER_WAREHOUSES_REQUIRED')
            if str(request.warehouse_id) == str(request.related_warehouse_id):
                raise ValidationError('TRANSFER_SAME_WAREHOUSE', warehouse_id=request.warehouse_id)
        elif request.warehouse_id in (None, ''):
            raise ValidationError('WAREHOUSE_REQUIRED', movement_type=str(movement_type))

        unit_cost = None
        if request.unit_cost is not None:
            unit_cost = coerce_decimal(request.unit_cost, 'unit_cost', decimal_places=4)
            if unit_cost < 0:
                raise ValidationError('NEGATIVE_VALUE', field='unit_cost', value=unit_cost)

        warehouse = _resolve_warehouse(request.tenant_id, request.warehouse_id)
        source = None
        if kind == TRANSFER:
            source = _resolve_warehouse(request.tenant_id, request.related_warehouse_id)

        _validate_product(request.tenant_id, request.product_id)

        return MovementPlan(
            request=request,
            kind=kind,
            movement_type=movement_type,
            quantity=quantity,
            warehouse=warehouse,
            source=source,
            unit_cost=unit_cost,
        )

    @classmethod
    def apply_movement(cls, request) -> StockMovement:
        """
        Apply a movement and return its (primary) ledger entry.

        Raises:
            ValidationError / NotFoundError: see validate(); NotFoundError
                also when a decrement targets a missing stock level
            InsufficientStockError: sale/damage/transfer beyond available,
                release beyond reserved
            InvariantViolationError: reserved would exceed on-hand quantity
            ConflictError('IDEMPOTENCY_KEY_REUSED')

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on every touched StockLevel,
              taken in ascending warehouse id order
            - No implicit retry; persistence errors propagate as-is
        """
        plan = cls.validate(request)

        with transaction.atomic():
            replayed = cls._replay(plan)
            if replayed is not None:
                return replayed

            cls._lock_levels(plan)
            movement = _HANDLERS[plan.kind](plan)

        logger.info(
            "stock.movement.applied",
            extra={
                "tenant_id": plan.tenant_id,
                "product_id": plan.product_id,
                "movement_type": movement.movement_type,
                "qty": str(movement.quantity),
                "warehouse_id": movement.warehouse_id,
                "related_warehouse_id": movement.related_warehouse_id,
                "before": str(movement.quantity_before),
                "after": str(movement.quantity_after),
                "movement_id": movement.pk,
            },
        )
        return movement

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _replay(cls, plan: MovementPlan) -> StockMovement | None:
        """Return the movement already recorded under the request's idempotency key."""
        key = plan.request.idempotency_key
        if not key:
            return None

        existing = StockMovement.objects.for_tenant(plan.tenant_id).filter(idempotency_key=key).first()
        if existing is None:
            return None

        # Absolute types record |delta|; their request quantity is the target
        recorded = existing.quantity_after if plan.kind == 'absolute' else existing.quantity
        same = (
            existing.product_id == plan.product_id
            and existing.movement_type == plan.primary_type
            and existing.warehouse_id == plan.warehouse.pk
            and recorded == plan.quantity
        )
        if not same:
            raise ConflictError(
                'IDEMPOTENCY_KEY_REUSED',
                idempotency_key=key,
                movement_id=existing.pk,
            )

        logger.info(
            "stock.movement.replayed",
            extra={"idempotency_key": key, "movement_id": existing.pk},
        )
        return existing

    @classmethod
    def _creatable(cls, plan: MovementPlan, warehouse: Warehouse) -> bool:
        """May a missing row at `warehouse` be created by this movement?"""
        if plan.kind == 'inbound':
            return True
        if plan.kind == TRANSFER:
            return warehouse.pk == plan.warehouse.pk
        if plan.kind == 'absolute':
            return plan.quantity > 0
        return False

    @classmethod
    def _lock_levels(cls, plan: MovementPlan) -> None:
        """
        Lock (or create) every involved row in ascending warehouse id order.

        Fills plan.levels {warehouse_id: StockLevel | None}.
        """
        warehouses = [plan.warehouse] + ([plan.source] if plan.source else [])

        for warehouse in sorted(warehouses, key=lambda w: w.pk):
            lookup = {
                'tenant_id': plan.tenant_id,
                'product_id': plan.product_id,
                'warehouse': warehouse,
            }
            if cls._creatable(plan, warehouse):
                level, created = StockLevel.objects.get_or_create(**lookup)
                if not created:
                    level = StockLevel.objects.select_for_update().get(pk=level.pk)
            else:
                level = StockLevel.objects.select_for_update().filter(**lookup).first()
            plan.levels[warehouse.pk] = level

    @classmethod
    def _require_level(cls, plan: MovementPlan, warehouse: Warehouse) -> StockLevel:
        level = plan.levels.get(warehouse.pk)
        if level is None:
            raise NotFoundError(
                'STOCK_LEVEL_NOT_FOUND',
                product_id=plan.product_id,
                warehouse_id=warehouse.pk,
            )
        return level


def _save_level(level: StockLevel) -> None:
    # Inbound totals can outgrow the column
    coerce_decimal(level.quantity, 'quantity')
    level.save(update_fields=[
        'quantity', 'reserved_quantity', 'last_counted_at',
        'last_counted_quantity', 'updated_at',
    ])


def _record(plan: MovementPlan, warehouse, movement_type, quantity, before, after,
            related=None, primary=True) -> StockMovement:
    request = plan.request
    total_cost = None
    if plan.unit_cost is not None:
        total_cost = coerce_decimal(
            (plan.unit_cost * quantity).quantize(COST_STEP), 'total_cost', max_digits=16, decimal_places=4,
        )

    return StockMovement.objects.create(
        tenant_id=plan.tenant_id,
        product_id=plan.product_id,
        warehouse=warehouse,
        movement_type=movement_type,
        quantity=quantity,
        related_warehouse=related,
        reference_type=request.reference_type or '',
        reference_id=str(request.reference_id or ''),
        reference_number=request.reference_number or '',
        unit_cost=plan.unit_cost,
        total_cost=total_cost,
        quantity_before=before,
        quantity_after=after,
        notes=request.notes or '',
        idempotency_key=(request.idempotency_key or '') if primary else '',
        **_user_kwargs(request.created_by),
    )


def _check_available(plan: MovementPlan, level: StockLevel) -> None:
    if plan.quantity > level.available_quantity:
        raise InsufficientStockError(
            'INSUFFICIENT_AVAILABLE',
            available=level.available_quantity,
            requested=plan.quantity,
            on_hand=level.quantity,
            reserved=level.reserved_quantity,
            warehouse_id=level.warehouse_id,
        )


def _apply_inbound(plan: MovementPlan) -> StockMovement:
    level = MovementApplier._require_level(plan, plan.warehouse)
    before = level.quantity
    level.quantity = before + plan.quantity
    _save_level(level)
    return _record(plan, plan.warehouse, plan.movement_type, plan.quantity, before, level.quantity)


def _apply_outbound(plan: MovementPlan) -> StockMovement:
    level = MovementApplier._require_level(plan, plan.warehouse)
    _check_available(plan, level)
    before = level.quantity
    level.quantity = before - plan.quantity
    _save_level(level)
    return _record(plan, plan.warehouse, plan.movement_type, plan.quantity, before, level.quantity)


def _apply_transfer(plan: MovementPlan) -> StockMovement:
    source = MovementApplier._require_level(plan, plan.source)
    destination = MovementApplier._require_level(plan, plan.warehouse)
    _check_available(plan, source)

    source_before = source.quantity
    destination_before = destination.quantity
    source.quantity = source_before - plan.quantity
    destination.quantity = destination_before + plan.quantity
    _save_level(source)
    _save_level(destination)

    _record(
        plan, plan.source, MovementType.TRANSFER_OUT, plan.quantity,
        source_before, source.quantity, related=plan.warehouse, primary=False,
    )
    return _record(
        plan, plan.warehouse, MovementType.TRANSFER_IN, plan.quantity,
        destination_before, destination.quantity, related=plan.source,
    )


def _apply_absolute(plan: MovementPlan) -> StockMovement:
    level = MovementApplier._require_level(plan, plan.warehouse)
    target = plan.quantity
    if target < level.reserved_quantity:
        raise InvariantViolationError(
            'RESERVED_EXCEEDS_QUANTITY',
            quantity=target,
            reserved=level.reserved_quantity,
        )

    before = level.quantity
    level.quantity = target
    if plan.movement_type == MovementType.COUNT:
        level.last_counted_at = timezone.now()
        level.last_counted_quantity = target
    _save_level(level)
    return _record(plan, plan.warehouse, plan.movement_type, abs(target - before), before, target)


def _apply_reservation(plan: MovementPlan) -> StockMovement:
    level = MovementApplier._require_level(plan, plan.warehouse)
    if level.reserved_quantity + plan.quantity > level.quantity:
        raise InvariantViolationError(
            'RESERVED_EXCEEDS_QUANTITY',
            available=level.available_quantity,
            requested=plan.quantity,
            quantity=level.quantity,
            reserved=level.reserved_quantity,
        )
    level.reserved_quantity += plan.quantity
    _save_level(level)
    return _record(plan, plan.warehouse, plan.movement_type, plan.quantity, level.quantity, level.quantity)


def _apply_release(plan: MovementPlan) -> StockMovement:
    level = MovementApplier._require_level(plan, plan.warehouse)
    if plan.quantity > level.reserved_quantity:
        raise InsufficientStockError(
            'INSUFFICIENT_RESERVED',
            available=level.reserved_quantity,
            requested=plan.quantity,
        )
    level.reserved_quantity -= plan.quantity
    _save_level(level)
    return _record(plan, plan.warehouse, plan.movement_type, plan.quantity, level.quantity, level.quantity)


_HANDLERS = {
    'inbound': _apply_inbound,
    'outbound': _apply_outbound,
    TRANSFER: _apply_transfer,
    'absolute': _apply_absolute,
    MovementType.RESERVATION.value: _apply_reservation,
    MovementType.RELEASE.value: _apply_release,
}
