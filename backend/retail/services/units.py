"""Carton/piece conversion for items sold in packs.

An item with ``pieces_per_unit > 1`` keeps its stock in cartons; a partial
carton is stored as a fraction (6 pieces of a 12-piece carton is ``0.5``).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

from ..exceptions import InvalidUnitInput

__all__ = [
    "QUANTITY_QUANTIZER",
    "from_quantity",
    "quantize_quantity",
    "resolve_line_quantity",
    "to_quantity",
]

QUANTITY_QUANTIZER = Decimal("0.000001")


def _as_decimal(value, label: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidUnitInput(f"{label} must be a number.", field=label)
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidUnitInput(f"{label} must be a number.", field=label)


def _as_whole(value, label: str) -> int:
    number = _as_decimal(value, label)
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidUnitInput(f"{label} must be a whole number.", field=label)
    return int(number)


def quantize_quantity(value) -> Decimal:
    """Round a stock quantity to the stored precision."""

    return _as_decimal(value, "quantity").quantize(QUANTITY_QUANTIZER, rounding=ROUND_HALF_UP)


def to_quantity(cartons, pieces, pieces_per_unit) -> Decimal:
    """Return ``cartons + pieces / pieces_per_unit`` as a stock quantity."""

    cartons = _as_whole(cartons, "cartons")
    pieces = _as_whole(pieces, "pieces")
    pieces_per_unit = _as_whole(pieces_per_unit, "pieces_per_unit")

    if pieces_per_unit < 1:
        raise InvalidUnitInput("pieces_per_unit must be at least 1.", field="pieces_per_unit")
    if cartons < 0:
        raise InvalidUnitInput("cartons cannot be negative.", field="cartons")
    if pieces < 0:
        raise InvalidUnitInput("pieces cannot be negative.", field="pieces")
    if pieces >= pieces_per_unit:
        raise InvalidUnitInput(
            f"pieces must be less than {pieces_per_unit}.",
            field="pieces",
            pieces_per_unit=pieces_per_unit,
        )

    value = Decimal(cartons) + Decimal(pieces) / Decimal(pieces_per_unit)
    return value.quantize(QUANTITY_QUANTIZER, rounding=ROUND_HALF_UP)


def from_quantity(quantity, pieces_per_unit) -> Tuple[int, int]:
    """Split a stock quantity into whole cartons and loose pieces."""

    quantity = _as_decimal(quantity, "quantity")
    pieces_per_unit = _as_whole(pieces_per_unit, "pieces_per_unit")
    if quantity < 0:
        raise InvalidUnitInput("quantity cannot be negative.", field="quantity")
    if pieces_per_unit < 1:
        raise InvalidUnitInput("pieces_per_unit must be at least 1.", field="pieces_per_unit")

    cartons = int(quantity)
    fraction = quantity - cartons
    pieces = int((fraction * pieces_per_unit).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if pieces >= pieces_per_unit:
        cartons += pieces // pieces_per_unit
        pieces = pieces % pieces_per_unit
    return cartons, pieces


def resolve_line_quantity(
    item,
    quantity=None,
    cartons: Optional[int] = None,
    pieces: Optional[int] = None,
    *,
    unit_system: bool = True,
) -> Decimal:
    """Resolve the stock quantity of a transaction line.

    Exactly one of ``quantity`` or the ``cartons``/``pieces`` pair must be
    given.  The pair is only meaningful for carton-mode items on accounts with
    the unit system switched on.  Count-mode items take whole numbers only.
    """

    unit_form = cartons is not None or pieces is not None
    if quantity is not None and unit_form:
        raise InvalidUnitInput("Provide either quantity or cartons/pieces, not both.")
    if quantity is None and not unit_form:
        raise InvalidUnitInput("A quantity or cartons/pieces is required.")

    if unit_form:
        if not item.is_carton_mode:
            raise InvalidUnitInput(
                f"{item.name} is not sold in cartons.", item_id=item.pk
            )
        if not unit_system:
            raise InvalidUnitInput("The unit system is disabled for this account.", item_id=item.pk)
        return to_quantity(cartons or 0, pieces or 0, item.pieces_per_unit)

    value = _as_decimal(quantity, "quantity")
    if not value.is_finite() or value < 0:
        raise InvalidUnitInput("quantity cannot be negative.", field="quantity", item_id=item.pk)
    if not item.is_carton_mode and not item.is_fractional_mode:
        if value != value.to_integral_value():
            raise InvalidUnitInput(
                f"{item.name} is counted in whole units.", field="quantity", item_id=item.pk
            )
    return value.quantize(QUANTITY_QUANTIZER, rounding=ROUND_HALF_UP)
