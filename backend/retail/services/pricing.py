"""Price tier and discount arithmetic for transaction lines."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from ..exceptions import LedgerValidationError, TierUnavailable
from .ledger import MONEY_QUANTIZER

__all__ = [
    "DISCOUNT_AMOUNT",
    "DISCOUNT_PERCENT",
    "TIERS",
    "apply_line_discount",
    "apply_order_discount",
    "resolve_unit_price",
]

DISCOUNT_PERCENT = "percent"
DISCOUNT_AMOUNT = "amount"

# tier -> (item price attribute, account feature flag)
TIERS = {
    "default": ("selling_price", None),
    "retail": ("retail_price", "enable_retail_price"),
    "wholesale": ("wholesale_price", "enable_wholesale_price"),
    "promo": ("promo_price", "enable_promo_price"),
}

ZERO = Decimal("0.00")


def _money(value, label: str) -> Decimal:
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise LedgerValidationError(f"{label} must be a number.", field=label)
    if not number.is_finite():
        raise LedgerValidationError(f"{label} must be a number.", field=label)
    return number.quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP)


def resolve_unit_price(item, tier: str = "default", account=None) -> Decimal:
    """Return the unit price of ``item`` under ``tier``.

    The default tier is the selling price and is always available.  Other
    tiers need a price on the item and, when ``account`` is given, the
    account's matching feature switch.
    """

    tier = tier or "default"
    if tier not in TIERS:
        raise LedgerValidationError(f"Unknown price tier '{tier}'.", field="price_tier")

    attribute, flag = TIERS[tier]
    if flag and account is not None and not getattr(account, flag, False):
        raise TierUnavailable(
            f"The {tier} price tier is disabled for this account.",
            item_id=item.pk,
            tier=tier,
        )

    price = getattr(item, attribute, None)
    if price is None:
        raise TierUnavailable(
            f"{item.name} has no {tier} price.",
            item_id=item.pk,
            tier=tier,
        )
    return _money(price, "unit_price")


def apply_line_discount(unit_price, quantity, discount_amount=ZERO) -> Decimal:
    """Return the line total after a fixed discount, never below zero."""

    gross = _money(Decimal(str(unit_price)) * Decimal(str(quantity)), "line_total")
    discount = _money(discount_amount or ZERO, "discount")
    if discount < 0:
        raise LedgerValidationError("Line discount cannot be negative.", field="discount")
    return max(ZERO, gross - min(discount, gross))


def apply_order_discount(subtotal, discount_type, value) -> Decimal:
    """Return the order total once the order-level discount is taken off."""

    subtotal = _money(subtotal, "subtotal")
    value = _money(value or ZERO, "discount_value")
    if value < 0:
        raise LedgerValidationError("Discount value cannot be negative.", field="discount_value")

    if discount_type == DISCOUNT_PERCENT:
        reduction = min(
            (subtotal * value / Decimal("100")).quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP),
            subtotal,
        )
    elif discount_type == DISCOUNT_AMOUNT:
        reduction = min(value, subtotal)
    else:
        raise LedgerValidationError(
            f"Unknown discount type '{discount_type}'.", field="discount_type"
        )
    return max(ZERO, subtotal - reduction)
