"""Row-locked stock movements for items."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.apps import apps
from django.db import transaction

from ..exceptions import InsufficientStock, LedgerValidationError, NotFound
from .units import quantize_quantity

__all__ = ["adjust", "decrease", "increase", "set_level"]

INCREASE = "INCREASE"
DECREASE = "DECREASE"


def _positive(quantity) -> Decimal:
    value = quantize_quantity(quantity)
    if value <= 0:
        raise LedgerValidationError("Quantity must be greater than zero.", field="quantity")
    return value


def _lock_item(account_id: int, item_id: Optional[int]):
    Item = apps.get_model("retail", "Item")
    try:
        return Item.objects.select_for_update().get(pk=item_id, account_id=account_id)
    except (Item.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Item {item_id} not found.", item_id=item_id)


def _take(item, quantity: Decimal) -> Decimal:
    remaining = quantize_quantity(item.quantity - quantity)
    if remaining < 0:
        raise InsufficientStock(
            f"Insufficient stock for {item.name}. Available: {item.quantity}, requested: {quantity}.",
            item_id=item.pk,
            available=item.quantity,
            requested=quantity,
        )
    return remaining


def _reason(reason) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise LedgerValidationError("A reason is required for stock adjustments.", field="reason")
    return reason


def _record(item, previous, adjustment_type, quantity, reason, user_id, idempotency_key=None):
    item.save(update_fields=["quantity", "updated_at"])
    StockAdjustment = apps.get_model("retail", "StockAdjustment")
    return StockAdjustment.objects.create(
        account_id=item.account_id,
        item=item,
        adjustment_type=adjustment_type,
        quantity=quantity,
        previous_quantity=previous,
        new_quantity=item.quantity,
        reason=reason,
        idempotency_key=idempotency_key,
        created_by_id=user_id,
    )


def increase(account_id: int, item_id: int, quantity) -> Decimal:
    """Add ``quantity`` to the item's stock and return the new quantity."""

    quantity = _positive(quantity)
    with transaction.atomic():
        item = _lock_item(account_id, item_id)
        item.quantity = quantize_quantity(item.quantity + quantity)
        item.save(update_fields=["quantity", "updated_at"])
        return item.quantity


def decrease(account_id: int, item_id: int, quantity) -> Decimal:
    """Remove ``quantity`` from the item's stock and return the new quantity."""

    quantity = _positive(quantity)
    with transaction.atomic():
        item = _lock_item(account_id, item_id)
        item.quantity = _take(item, quantity)
        item.save(update_fields=["quantity", "updated_at"])
        return item.quantity


def adjust(
    account_id: int,
    item_id: int,
    adjustment_type: str,
    quantity,
    *,
    reason: str,
    user_id: Optional[int],
    idempotency_key: Optional[str] = None,
):
    """Apply a manual correction and record it as a ``StockAdjustment``."""

    if adjustment_type not in (INCREASE, DECREASE):
        raise LedgerValidationError(
            "Adjustment type must be INCREASE or DECREASE.", field="adjustment_type"
        )
    reason = _reason(reason)
    quantity = _positive(quantity)

    with transaction.atomic():
        item = _lock_item(account_id, item_id)
        previous = item.quantity
        if adjustment_type == INCREASE:
            item.quantity = quantize_quantity(previous + quantity)
        else:
            item.quantity = _take(item, quantity)
        return _record(item, previous, adjustment_type, quantity, reason, user_id, idempotency_key)


def set_level(account_id: int, item_id: int, target, *, reason: str, user_id: Optional[int]):
    """Bring the item to ``target`` and record the difference.

    The difference is taken from the locked row, so movements committed just
    before the lock is granted are accounted for.  Returns ``None`` when the
    item already holds ``target``.
    """

    reason = _reason(reason)
    target = quantize_quantity(target)
    if target < 0:
        raise LedgerValidationError("Stock level cannot be negative.", field="quantity")

    with transaction.atomic():
        item = _lock_item(account_id, item_id)
        previous = item.quantity
        difference = quantize_quantity(target - previous)
        if not difference:
            return None
        adjustment_type = INCREASE if difference > 0 else DECREASE
        item.quantity = target
        return _record(item, previous, adjustment_type, abs(difference), reason, user_id)
