"""Atomic entry points for every movement of money or goods.

Each public function runs in a single ``transaction.atomic()`` block: stock
and balance writes, the document rows and the activity entry either all
commit or all roll back.  Callers pass the tenant explicitly as
``account_id``; nothing here reads request state.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional

from django.db import IntegrityError, OperationalError, transaction
from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from ..activity_logger import log_activity
from ..conf import ledger_setting
from ..exceptions import (
    ConcurrencyConflict,
    LedgerError,
    LedgerValidationError,
    NegativeBalanceGuard,
    NotFound,
    OverpaymentNotAllowed,
    ReturnExceedsOriginal,
)
from ..models import (
    Account,
    Customer,
    CustomerReturn,
    Item,
    Payment,
    PAYMENT_METHOD_CHOICES,
    PAYMENT_TYPE_CASH,
    PAYMENT_TYPE_CREDIT,
    Purchase,
    PurchaseItem,
    RETURN_CREDIT,
    RETURN_TYPE_CHOICES,
    Sale,
    SaleItem,
    StockAdjustment,
    Supplier,
    SupplierReturn,
    TIER_DEFAULT,
)
from . import ledger, pricing, stock, units

logger = logging.getLogger(__name__)

__all__ = [
    "adjust_balance",
    "adjust_stock",
    "bulk_adjust_balance",
    "bulk_adjust_stock",
    "create_purchase",
    "create_sale",
    "process_customer_return",
    "process_supplier_return",
    "record_payment",
    "set_stock_level",
]

ZERO = Decimal("0.00")
PAYMENT_TYPES = (PAYMENT_TYPE_CASH, PAYMENT_TYPE_CREDIT)
PAYMENT_METHODS = tuple(choice for choice, _ in PAYMENT_METHOD_CHOICES)
RETURN_TYPES = tuple(choice for choice, _ in RETURN_TYPE_CHOICES)
BULK_STOCK_TYPES = ("add", "remove", "set")


def _atomic(func):
    """Run ``func`` in one transaction and surface lock failures as conflicts."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except OperationalError as exc:
            logger.warning("Concurrency conflict during %s: %s", func.__name__, exc)
            raise ConcurrencyConflict(operation=func.__name__) from exc

    return wrapper


def _get_account(account_id) -> Account:
    try:
        return Account.objects.get(pk=account_id, is_active=True)
    except (Account.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Account {account_id} not found.", account_id=account_id)


def _get_scoped(model, account: Account, pk, label: str):
    try:
        return model.objects.get(pk=pk, account=account)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} {pk} not found.", id=pk)


def _order_discount(discount: Optional[Dict[str, Any]], account: Account):
    if not discount:
        return "", ZERO
    discount_type = discount.get("type") or ""
    value = ledger.to_money(discount.get("value"), "discount_value")
    if not discount_type and not value:
        return "", ZERO
    if discount_type not in (pricing.DISCOUNT_PERCENT, pricing.DISCOUNT_AMOUNT):
        raise LedgerValidationError(
            f"Unknown discount type '{discount_type}'.", field="discount_type"
        )
    if value < 0:
        raise LedgerValidationError("Discount value cannot be negative.", field="discount_value")
    if value and not account.enable_discounts:
        raise LedgerValidationError("Discounts are disabled for this account.", field="discount")
    return discount_type, value


def _line_discount(line: Dict[str, Any], account: Account) -> Decimal:
    value = ledger.to_money(line.get("discount"), "discount")
    if value < 0:
        raise LedgerValidationError("Line discount cannot be negative.", field="discount")
    if value and not account.enable_discounts:
        raise LedgerValidationError("Discounts are disabled for this account.", field="discount")
    return value


def _item_id(value) -> int:
    if value in (None, "") or isinstance(value, bool):
        raise LedgerValidationError("Every line needs an item_id.", field="items")
    try:
        return int(value)
    except (ValueError, TypeError):
        raise LedgerValidationError("item_id must be an integer.", field="items")


def _load_items(account: Account, lines: List[Dict[str, Any]]) -> List[Item]:
    """Return the item of each line, in line order."""

    if not lines:
        raise LedgerValidationError("At least one item is required.", field="items")
    item_ids = [_item_id(line.get("item_id")) for line in lines]
    if len(set(item_ids)) != len(item_ids):
        raise LedgerValidationError(
            "Each item may appear only once per transaction.", field="items"
        )
    items = Item.objects.filter(account=account).in_bulk(item_ids)
    for item_id in item_ids:
        if item_id not in items:
            raise NotFound(f"Item {item_id} not found.", item_id=item_id)
    return [items[item_id] for item_id in item_ids]


def _line_quantity(item: Item, line: Dict[str, Any], account: Account) -> Decimal:
    quantity = units.resolve_line_quantity(
        item,
        line.get("quantity"),
        line.get("cartons"),
        line.get("pieces"),
        unit_system=account.use_unit_system,
    )
    if quantity <= 0:
        raise LedgerValidationError(
            f"Quantity for {item.name} must be greater than zero.", field="quantity", item_id=item.pk
        )
    return quantity


def _settle(payment_type: str, paid_amount, total: Decimal) -> Decimal:
    if payment_type == PAYMENT_TYPE_CASH:
        return total
    paid = ledger.to_money(paid_amount, "paid_amount")
    return min(max(ZERO, paid), total)


def _check_payment_terms(payment_type: str, payment_method: str) -> None:
    if payment_type not in PAYMENT_TYPES:
        raise LedgerValidationError(
            "payment_type must be CASH or CREDIT.", field="payment_type"
        )
    if payment_method not in PAYMENT_METHODS:
        raise LedgerValidationError(
            "payment_method must be CASH, MOMO or BANK.", field="payment_method"
        )


@_atomic
def create_sale(
    account_id: int,
    *,
    items: Iterable[Dict[str, Any]],
    payment_type: str,
    paid_amount=ZERO,
    customer_id: Optional[int] = None,
    payment_method: str = "CASH",
    discount: Optional[Dict[str, Any]] = None,
    user_id: Optional[int] = None,
) -> Sale:
    """Record a sale, take its goods out of stock and charge any credit."""

    account = _get_account(account_id)
    _check_payment_terms(payment_type, payment_method)
    lines = list(items or [])

    if payment_type == PAYMENT_TYPE_CREDIT:
        if not customer_id:
            raise LedgerValidationError(
                "Credit sales require a customer.", field="customer_id"
            )
        if not account.enable_credit_sales:
            raise LedgerValidationError(
                "Credit sales are disabled for this account.", field="payment_type"
            )
    customer = _get_scoped(Customer, account, customer_id, "Customer") if customer_id else None

    catalogue = _load_items(account, lines)
    discount_type, discount_value = _order_discount(discount, account)

    priced = []
    subtotal = ZERO
    for line, item in zip(lines, catalogue):
        quantity = _line_quantity(item, line, account)
        tier = line.get("price_tier") or TIER_DEFAULT
        unit_price = pricing.resolve_unit_price(item, tier, account)
        line_total = pricing.apply_line_discount(unit_price, quantity, _line_discount(line, account))
        gross = ledger.to_money(unit_price * quantity)
        priced.append((item, quantity, tier, unit_price, gross - line_total, line_total))
        subtotal += line_total

    total = (
        pricing.apply_order_discount(subtotal, discount_type, discount_value)
        if discount_type
        else subtotal
    )

    for item, quantity, *_ in sorted(priced, key=lambda entry: entry[0].pk):
        stock.decrease(account.pk, item.pk, quantity)

    paid = _settle(payment_type, paid_amount, total)
    sale = Sale.objects.create(
        account=account,
        customer=customer,
        payment_type=payment_type,
        payment_method=payment_method,
        subtotal_amount=subtotal,
        discount_type=discount_type,
        discount_value=discount_value,
        order_discount=subtotal - total,
        total_amount=total,
        paid_amount=paid,
        created_by_id=user_id,
    )
    SaleItem.objects.bulk_create(
        [
            SaleItem(
                sale=sale,
                item=item,
                quantity=quantity,
                price_tier=tier,
                unit_price=unit_price,
                line_discount=line_discount,
                line_total=line_total,
            )
            for item, quantity, tier, unit_price, line_discount, line_total in priced
        ]
    )

    remainder = total - paid
    if customer is not None and remainder > 0:
        ledger.apply_delta(account.pk, "customer", customer.pk, remainder)

    log_activity(user_id, "created", sale)
    logger.info(
        "Sale %s created for account %s: total=%s paid=%s lines=%d",
        sale.pk, account.pk, total, paid, len(priced),
    )
    return sale


@_atomic
def create_purchase(
    account_id: int,
    *,
    supplier_id: int,
    items: Iterable[Dict[str, Any]],
    payment_type: str,
    paid_amount=ZERO,
    payment_method: str = "CASH",
    discount: Optional[Dict[str, Any]] = None,
    user_id: Optional[int] = None,
) -> Purchase:
    """Record a purchase, put its goods into stock and credit the supplier."""

    account = _get_account(account_id)
    _check_payment_terms(payment_type, payment_method)
    if not supplier_id:
        raise LedgerValidationError("A supplier is required.", field="supplier_id")
    supplier = _get_scoped(Supplier, account, supplier_id, "Supplier")
    lines = list(items or [])

    catalogue = _load_items(account, lines)
    discount_type, discount_value = _order_discount(discount, account)

    priced = []
    subtotal = ZERO
    for line, item in zip(lines, catalogue):
        quantity = _line_quantity(item, line, account)
        if line.get("unit_cost") in (None, ""):
            unit_cost = ledger.to_money(item.cost_price, "unit_cost")
        else:
            unit_cost = ledger.to_money(line["unit_cost"], "unit_cost")
        if unit_cost < 0:
            raise LedgerValidationError("Unit cost cannot be negative.", field="unit_cost")
        line_total = pricing.apply_line_discount(unit_cost, quantity, _line_discount(line, account))
        gross = ledger.to_money(unit_cost * quantity)
        priced.append((item, quantity, unit_cost, gross - line_total, line_total))
        subtotal += line_total

    total = (
        pricing.apply_order_discount(subtotal, discount_type, discount_value)
        if discount_type
        else subtotal
    )

    for item, quantity, unit_cost, *_ in sorted(priced, key=lambda entry: entry[0].pk):
        stock.increase(account.pk, item.pk, quantity)
        if item.cost_price != unit_cost:
            Item.objects.filter(pk=item.pk, account=account).update(cost_price=unit_cost)

    paid = _settle(payment_type, paid_amount, total)
    purchase = Purchase.objects.create(
        account=account,
        supplier=supplier,
        payment_type=payment_type,
        payment_method=payment_method,
        subtotal_amount=subtotal,
        discount_type=discount_type,
        discount_value=discount_value,
        order_discount=subtotal - total,
        total_amount=total,
        paid_amount=paid,
        created_by_id=user_id,
    )
    PurchaseItem.objects.bulk_create(
        [
            PurchaseItem(
                purchase=purchase,
                item=item,
                quantity=quantity,
                unit_cost=unit_cost,
                line_discount=line_discount,
                line_total=line_total,
            )
            for item, quantity, unit_cost, line_discount, line_total in priced
        ]
    )

    remainder = total - paid
    if remainder > 0:
        ledger.apply_delta(account.pk, "supplier", supplier.pk, remainder)

    log_activity(user_id, "created", purchase)
    logger.info(
        "Purchase %s created for account %s: total=%s paid=%s lines=%d",
        purchase.pk, account.pk, total, paid, len(priced),
    )
    return purchase


def _returnable(line, quantity) -> Decimal:
    if quantity in (None, ""):
        raise LedgerValidationError("quantity is required.", field="quantity")
    quantity = units.resolve_line_quantity(line.item, quantity)
    if quantity <= 0:
        raise LedgerValidationError("Return quantity must be greater than zero.", field="quantity")
    already = line.returns.aggregate(
        total=Coalesce(
            Sum("quantity"),
            Value(Decimal("0"), output_field=DecimalField(max_digits=18, decimal_places=6)),
        )
    )["total"]
    remaining = units.quantize_quantity(line.quantity - units.quantize_quantity(already))
    if quantity > remaining:
        raise ReturnExceedsOriginal(
            f"Cannot return {quantity} of {line.item.name}; only {remaining} remaining.",
            item_id=line.item_id,
            remaining=remaining,
            requested=quantity,
        )
    return quantity


def _return_terms(return_type: str, amount) -> Decimal:
    if return_type not in RETURN_TYPES:
        raise LedgerValidationError(
            "return_type must be CASH, CREDIT or EXCHANGE.", field="return_type"
        )
    amount = ledger.to_money(amount, "amount")
    if amount < 0:
        raise LedgerValidationError("Return amount cannot be negative.", field="amount")
    return amount


@_atomic
def process_customer_return(
    account_id: int,
    *,
    sale_id: int,
    item_id: int,
    quantity,
    return_type: str,
    amount=ZERO,
    reason: str = "",
    user_id: Optional[int] = None,
) -> CustomerReturn:
    """Take goods back from a customer against one line of a sale."""

    account = _get_account(account_id)
    amount = _return_terms(return_type, amount)
    sale = _get_scoped(Sale, account, sale_id, "Sale")
    if return_type == RETURN_CREDIT and sale.customer_id is None:
        raise LedgerValidationError(
            "Walk-in sales cannot be refunded as customer credit.", field="return_type"
        )
    try:
        line = SaleItem.objects.select_for_update().select_related("item").get(
            sale=sale, item_id=item_id
        )
    except (SaleItem.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Item {item_id} is not part of sale {sale.pk}.", item_id=item_id)

    quantity = _returnable(line, quantity)
    stock.increase(account.pk, line.item_id, quantity)

    if return_type == RETURN_CREDIT and amount:
        ledger.apply_delta(
            account.pk,
            "customer",
            sale.customer_id,
            -amount,
            allow_negative=ledger_setting("ALLOW_CREDIT_NOTES"),
        )

    customer_return = CustomerReturn.objects.create(
        account=account,
        sale_item=line,
        item_id=line.item_id,
        quantity=quantity,
        return_type=return_type,
        amount=amount,
        reason=(reason or "").strip(),
        created_by_id=user_id,
    )
    log_activity(user_id, "created", customer_return)
    logger.info(
        "Customer return %s on sale %s: item=%s quantity=%s type=%s amount=%s",
        customer_return.pk, sale.pk, line.item_id, quantity, return_type, amount,
    )
    return customer_return


@_atomic
def process_supplier_return(
    account_id: int,
    *,
    purchase_id: int,
    item_id: int,
    quantity,
    return_type: str,
    amount=ZERO,
    reason: str = "",
    user_id: Optional[int] = None,
) -> SupplierReturn:
    """Send goods back to a supplier against one line of a purchase."""

    account = _get_account(account_id)
    amount = _return_terms(return_type, amount)
    purchase = _get_scoped(Purchase, account, purchase_id, "Purchase")
    try:
        line = PurchaseItem.objects.select_for_update().select_related("item").get(
            purchase=purchase, item_id=item_id
        )
    except (PurchaseItem.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Item {item_id} is not part of purchase {purchase.pk}.", item_id=item_id)

    quantity = _returnable(line, quantity)
    stock.decrease(account.pk, line.item_id, quantity)

    if return_type == RETURN_CREDIT and amount:
        ledger.apply_delta(
            account.pk,
            "supplier",
            purchase.supplier_id,
            -amount,
            allow_negative=ledger_setting("ALLOW_CREDIT_NOTES"),
        )

    supplier_return = SupplierReturn.objects.create(
        account=account,
        purchase_item=line,
        item_id=line.item_id,
        quantity=quantity,
        return_type=return_type,
        amount=amount,
        reason=(reason or "").strip(),
        created_by_id=user_id,
    )
    log_activity(user_id, "created", supplier_return)
    logger.info(
        "Supplier return %s on purchase %s: item=%s quantity=%s type=%s amount=%s",
        supplier_return.pk, purchase.pk, line.item_id, quantity, return_type, amount,
    )
    return supplier_return


@_atomic
def record_payment(
    account_id: int,
    *,
    kind: str,
    entity_id: int,
    amount,
    method: str,
    notes: str = "",
    user_id: Optional[int] = None,
) -> Payment:
    """Settle part of a customer's or supplier's balance.

    The returned payment carries ``previous_balance`` and ``new_balance``
    attributes for the caller's response.
    """

    account = _get_account(account_id)
    if kind not in ledger.KINDS:
        raise LedgerValidationError("kind must be customer or supplier.", field="kind")
    amount = ledger.to_money(amount, "amount")
    if amount <= 0:
        raise LedgerValidationError("Payment amount must be greater than zero.", field="amount")
    if method not in PAYMENT_METHODS:
        raise LedgerValidationError("method must be CASH, MOMO or BANK.", field="method")

    try:
        new_balance = ledger.apply_delta(account.pk, kind, entity_id, -amount)
    except NegativeBalanceGuard as exc:
        balance = exc.detail.get("balance")
        raise OverpaymentNotAllowed(
            f"Payment amount ({amount}) exceeds the outstanding balance ({balance}).",
            balance=balance,
            amount=amount,
        ) from exc

    payment = Payment.objects.create(
        account=account,
        amount=amount,
        method=method,
        notes=(notes or "").strip(),
        created_by_id=user_id,
        **{f"{kind}_id": entity_id},
    )
    payment.previous_balance = new_balance + amount
    payment.new_balance = new_balance

    log_activity(user_id, "created", payment)
    logger.info(
        "Payment %s of %s recorded for %s %s: balance %s -> %s",
        payment.pk, amount, kind, entity_id, payment.previous_balance, new_balance,
    )
    return payment


def _replay(existing: StockAdjustment, item_id, adjustment_type, quantity) -> StockAdjustment:
    same = (
        str(existing.item_id) == str(item_id)
        and existing.adjustment_type == adjustment_type
        and existing.quantity == units.quantize_quantity(quantity)
    )
    if not same:
        raise LedgerValidationError(
            "This idempotency key was already used for a different adjustment.",
            field="idempotency_key",
            adjustment_id=existing.pk,
        )
    existing.replayed = True
    logger.info("Stock adjustment %s replayed for key %s", existing.pk, existing.idempotency_key)
    return existing


@_atomic
def adjust_stock(
    account_id: int,
    *,
    item_id: int,
    adjustment_type: str,
    quantity,
    reason: str,
    user_id: Optional[int],
    idempotency_key: Optional[str] = None,
) -> StockAdjustment:
    """Apply a manual stock correction.

    Submitting the same ``idempotency_key`` again returns the adjustment
    recorded the first time instead of applying it twice.
    """

    account = _get_account(account_id)
    key = (idempotency_key or "").strip() or None

    if key:
        existing = StockAdjustment.objects.filter(account=account, idempotency_key=key).first()
        if existing is not None:
            return _replay(existing, item_id, adjustment_type, quantity)

    item = _get_scoped(Item, account, item_id, "Item")
    if quantity in (None, ""):
        raise LedgerValidationError("quantity is required.", field="quantity")
    quantity = units.resolve_line_quantity(item, quantity, unit_system=account.use_unit_system)

    try:
        with transaction.atomic():
            adjustment = stock.adjust(
                account.pk,
                item.pk,
                adjustment_type,
                quantity,
                reason=reason,
                user_id=user_id,
                idempotency_key=key,
            )
    except IntegrityError:
        # A concurrent request committed the same key first.
        existing = (
            StockAdjustment.objects.filter(account=account, idempotency_key=key).first()
            if key
            else None
        )
        if existing is None:
            raise
        return _replay(existing, item_id, adjustment_type, quantity)

    adjustment.replayed = False
    log_activity(user_id, "adjusted", adjustment)
    logger.info(
        "Stock adjustment %s on item %s: %s %s (%s -> %s)",
        adjustment.pk, adjustment.item_id, adjustment.adjustment_type,
        adjustment.quantity, adjustment.previous_quantity, adjustment.new_quantity,
    )
    return adjustment


def _set_level(account: Account, item_id, quantity, reason: str, user_id) -> Optional[StockAdjustment]:
    item = _get_scoped(Item, account, item_id, "Item")
    if quantity in (None, ""):
        raise LedgerValidationError("quantity is required.", field="quantity")
    target = units.resolve_line_quantity(item, quantity, unit_system=account.use_unit_system)
    return stock.set_level(account.pk, item.pk, target, reason=reason, user_id=user_id)


@_atomic
def set_stock_level(
    account_id: int,
    *,
    item_id: int,
    quantity,
    reason: str,
    user_id: Optional[int],
) -> Optional[StockAdjustment]:
    """Bring an item to an absolute quantity; ``None`` when nothing changed."""

    account = _get_account(account_id)
    adjustment = _set_level(account, item_id, quantity, reason, user_id)
    if adjustment is None:
        return None
    log_activity(user_id, "adjusted", adjustment)
    logger.info(
        "Stock level of item %s set to %s", adjustment.item_id, adjustment.new_quantity
    )
    return adjustment


@_atomic
def bulk_adjust_stock(
    account_id: int,
    *,
    rows: Iterable[Dict[str, Any]],
    user_id: Optional[int],
) -> Dict[str, Any]:
    """Apply rows of ``{name, type, quantity, reason}`` matched by item name.

    ``type`` is ``add``, ``remove`` or ``set``.  Rows that fail are reported
    in ``errors`` and skipped; the others are applied.
    """

    account = _get_account(account_id)
    rows = list(rows or [])
    limit = ledger_setting("BULK_ADJUSTMENT_LIMIT")
    if not rows:
        raise LedgerValidationError("No adjustments provided.", field="adjustments")
    if len(rows) > limit:
        raise LedgerValidationError(
            f"Maximum {limit} adjustments allowed at once.", field="adjustments", limit=limit
        )

    result: Dict[str, Any] = {"updated": 0, "skipped": 0, "errors": []}
    for index, row in enumerate(rows, start=1):
        name = str(row.get("name") or "").strip()
        row_type = str(row.get("type") or "").strip().lower()
        reason = str(row.get("reason") or "").strip() or "Bulk adjustment"
        try:
            if not name:
                raise LedgerValidationError("Item name is required.")
            if row_type not in BULK_STOCK_TYPES:
                raise LedgerValidationError("Type must be add, remove or set.")
            item = Item.objects.filter(account=account, name__iexact=name).order_by("pk").first()
            if item is None:
                raise NotFound(f"Item '{name}' not found.")
            with transaction.atomic():
                if row_type == "set":
                    adjustment = _set_level(account, item.pk, row.get("quantity"), reason, user_id)
                else:
                    if row.get("quantity") in (None, ""):
                        raise LedgerValidationError("quantity is required.")
                    quantity = units.resolve_line_quantity(
                        item, row.get("quantity"), unit_system=account.use_unit_system
                    )
                    adjustment = stock.adjust(
                        account.pk,
                        item.pk,
                        StockAdjustment.INCREASE if row_type == "add" else StockAdjustment.DECREASE,
                        quantity,
                        reason=reason,
                        user_id=user_id,
                    )
        except LedgerError as exc:
            result["skipped"] += 1
            result["errors"].append(f"Row {index}: {exc.message}")
            continue

        if adjustment is None:
            result["skipped"] += 1
            continue
        result["updated"] += 1
        log_activity(user_id, "adjusted", adjustment)

    logger.info(
        "Bulk stock adjustment for account %s: updated=%s skipped=%s",
        account.pk, result["updated"], result["skipped"],
    )
    return result


@_atomic
def adjust_balance(
    account_id: int,
    *,
    kind: str,
    entity_id: int,
    balance,
    reason: str = "",
    user_id: Optional[int] = None,
):
    """Overwrite a customer or supplier balance with an audited override."""

    account = _get_account(account_id)
    adjustment = ledger.set_absolute(
        account.pk, kind, entity_id, balance, reason=reason, user_id=user_id
    )
    log_activity(user_id, "overridden", adjustment)
    logger.info(
        "Balance of %s %s overridden: %s -> %s",
        kind, entity_id, adjustment.previous_balance, adjustment.new_balance,
    )
    return adjustment


@_atomic
def bulk_adjust_balance(
    account_id: int,
    *,
    kind: str,
    rows: Iterable[Dict[str, Any]],
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Apply many balance overrides; see :func:`ledger.bulk_set_absolute`."""

    account = _get_account(account_id)
    result = ledger.bulk_set_absolute(account.pk, kind, rows, user_id=user_id)
    for adjustment in result["adjustments"]:
        log_activity(user_id, "overridden", adjustment)
    logger.info(
        "Bulk balance override for account %s: updated=%s skipped=%s",
        account.pk, result["updated"], result["skipped"],
    )
    return result
