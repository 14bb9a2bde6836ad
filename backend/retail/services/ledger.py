"""Shared helpers for posting balance movements.

These helpers take explicit row-level locks before mutating a customer or
supplier balance, use consistent rounding rules and always run inside the
caller's transaction (each call opens a savepoint).  Amounts are expressed in
the system's base precision (two decimal places); positive deltas increase
what the counterparty owes (customer) or is owed (supplier).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from django.apps import apps
from django.db import transaction
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce

from ..conf import ledger_setting
from ..exceptions import LedgerError, LedgerValidationError, NegativeBalanceGuard, NotFound

__all__ = [
    "KINDS",
    "MONEY_QUANTIZER",
    "apply_delta",
    "bulk_set_absolute",
    "expected_balance",
    "set_absolute",
    "to_money",
]

MONEY_QUANTIZER = Decimal("0.01")

KINDS = {
    "customer": "Customer",
    "supplier": "Supplier",
}


def to_money(amount: Optional[Decimal | int | float | str], field: str = "amount") -> Decimal:
    """Normalise *amount* to a Decimal with the project's rounding rules."""

    if amount in (None, ""):
        return Decimal("0.00")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise LedgerValidationError(f"{field} must be a number.", field=field)
    if not value.is_finite():
        raise LedgerValidationError(f"{field} must be a number.", field=field)
    return value.quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP)


def _model_for(kind: str):
    try:
        return apps.get_model("retail", KINDS[kind])
    except KeyError:
        raise LedgerValidationError(
            f"kind must be one of: {', '.join(KINDS)}.", field="kind"
        )


def _lock(account_id: int, kind: str, entity_id: Optional[int]):
    model = _model_for(kind)
    try:
        return model.objects.select_for_update().get(pk=entity_id, account_id=account_id)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{kind.capitalize()} {entity_id} not found.", kind=kind, id=entity_id)


def apply_delta(
    account_id: int,
    kind: str,
    entity_id: int,
    delta: Decimal | int | float | str,
    *,
    allow_negative: bool = False,
) -> Decimal:
    """Add ``delta`` to the balance of a customer or supplier.

    A negative delta that would leave the balance below zero raises
    :class:`NegativeBalanceGuard` unless ``allow_negative`` is set.  The new
    balance is returned.
    """

    delta = to_money(delta, "delta")

    with transaction.atomic():
        obj = _lock(account_id, kind, entity_id)
        current = Decimal(obj.balance or 0)
        new_value = (current + delta).quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP)
        if delta < 0 and new_value < 0 and not allow_negative:
            raise NegativeBalanceGuard(
                f"Balance of {obj.name} cannot drop below zero.",
                kind=kind,
                id=obj.pk,
                balance=current,
            )
        obj.balance = new_value
        obj.save(update_fields=["balance", "updated_at"])
        return new_value


def set_absolute(
    account_id: int,
    kind: str,
    entity_id: int,
    new_balance: Decimal | int | float | str,
    *,
    reason: str = "",
    user_id: Optional[int] = None,
):
    """Overwrite a balance and record the override.

    Deliberately skips reconciliation: the override becomes the new baseline
    for :func:`expected_balance`.
    """

    if new_balance in (None, ""):
        raise LedgerValidationError("balance is required.", field="balance")
    value = to_money(new_balance, "balance")
    if value < 0:
        raise LedgerValidationError("Balance cannot be negative.", field="balance")

    BalanceAdjustment = apps.get_model("retail", "BalanceAdjustment")

    with transaction.atomic():
        obj = _lock(account_id, kind, entity_id)
        previous = Decimal(obj.balance or 0)
        obj.balance = value
        obj.save(update_fields=["balance", "updated_at"])
        return BalanceAdjustment.objects.create(
            account_id=account_id,
            previous_balance=previous,
            new_balance=value,
            reason=(reason or "").strip(),
            created_by_id=user_id,
            **{kind: obj},
        )


def bulk_set_absolute(
    account_id: int,
    kind: str,
    rows: Iterable[Dict[str, Any]],
    *,
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Apply many overrides; a failing row is reported and skipped."""

    rows = list(rows or [])
    limit = ledger_setting("BULK_ADJUSTMENT_LIMIT")
    if not rows:
        raise LedgerValidationError("No adjustments provided.", field="adjustments")
    if len(rows) > limit:
        raise LedgerValidationError(
            f"Maximum {limit} adjustments allowed at once.", field="adjustments", limit=limit
        )
    _model_for(kind)

    result: Dict[str, Any] = {"updated": 0, "skipped": 0, "errors": [], "adjustments": []}
    for index, row in enumerate(rows, start=1):
        try:
            with transaction.atomic():
                adjustment = set_absolute(
                    account_id,
                    kind,
                    row.get("id"),
                    row.get("balance"),
                    reason=row.get("reason") or "",
                    user_id=user_id,
                )
        except LedgerError as exc:
            result["skipped"] += 1
            result["errors"].append(f"Row {index}: {exc.message}")
            continue
        result["updated"] += 1
        result["adjustments"].append(adjustment)
    return result


def expected_balance(entity) -> Decimal:
    """Recompute what ``entity``'s balance should be from its history.

    The latest override is the baseline.  Unpaid remainders of sales or
    purchases recorded after it are added; payments and CREDIT returns are
    subtracted.
    """

    kind = entity._meta.model_name
    if kind not in KINDS:
        raise LedgerValidationError(f"Cannot reconcile a {kind}.", field="kind")

    money = DecimalField(max_digits=14, decimal_places=2)
    zero = Value(Decimal("0.00"), output_field=money)

    if kind == "customer":
        documents = entity.sales.all()
        returns = apps.get_model("retail", "CustomerReturn").objects.filter(
            sale_item__sale__customer=entity
        )
    else:
        documents = entity.purchases.all()
        returns = apps.get_model("retail", "SupplierReturn").objects.filter(
            purchase_item__purchase__supplier=entity
        )
    returns = returns.filter(return_type="CREDIT")
    payments = entity.payments.all()

    baseline = Decimal("0.00")
    override = entity.balance_adjustments.order_by("-created_at", "-id").first()
    if override is not None:
        baseline = override.new_balance
        documents = documents.filter(created_at__gt=override.created_at)
        returns = returns.filter(created_at__gt=override.created_at)
        payments = payments.filter(created_at__gt=override.created_at)

    credit = documents.aggregate(
        total=Coalesce(Sum(F("total_amount") - F("paid_amount"), output_field=money), zero)
    )["total"]
    paid = payments.aggregate(total=Coalesce(Sum("amount"), zero))["total"]
    returned = returns.aggregate(total=Coalesce(Sum("amount"), zero))["total"]

    return to_money(Decimal(baseline) + to_money(credit) - to_money(paid) - to_money(returned))
