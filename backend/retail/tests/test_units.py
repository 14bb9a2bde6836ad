from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from ..exceptions import InvalidUnitInput
from ..services.units import from_quantity, resolve_line_quantity, to_quantity


def make_item(pieces_per_unit=1, unit_name=None):
    item = SimpleNamespace(pk=1, name="Soap", pieces_per_unit=pieces_per_unit, unit_name=unit_name)
    item.is_carton_mode = pieces_per_unit > 1
    item.is_fractional_mode = pieces_per_unit == 1 and bool(unit_name)
    return item


class ToQuantityTests(SimpleTestCase):
    def test_cartons_and_pieces_become_fraction(self):
        self.assertEqual(to_quantity(1, 6, 12), Decimal("1.500000"))
        self.assertEqual(to_quantity(3, 0, 12), Decimal("3"))

    def test_repeating_fraction_is_rounded_to_six_places(self):
        self.assertEqual(to_quantity(0, 1, 3), Decimal("0.333333"))
        self.assertEqual(to_quantity(0, 2, 3), Decimal("0.666667"))

    def test_rejects_pieces_outside_carton(self):
        for cartons, pieces in ((0, 12), (1, 13), (0, -1), (-1, 0)):
            with self.subTest(cartons=cartons, pieces=pieces):
                with self.assertRaises(InvalidUnitInput):
                    to_quantity(cartons, pieces, 12)

    def test_rejects_fractional_counts_and_bad_pack_size(self):
        with self.assertRaises(InvalidUnitInput):
            to_quantity(Decimal("1.5"), 0, 12)
        with self.assertRaises(InvalidUnitInput):
            to_quantity(1, 0, 0)


class FromQuantityTests(SimpleTestCase):
    def test_splits_whole_and_loose_pieces(self):
        self.assertEqual(from_quantity(Decimal("8.5"), 12), (8, 6))
        self.assertEqual(from_quantity(Decimal("0"), 12), (0, 0))

    def test_round_trip_for_every_piece_count(self):
        for pieces_per_unit in (2, 3, 7, 12, 24):
            for pieces in range(pieces_per_unit):
                with self.subTest(ppu=pieces_per_unit, pieces=pieces):
                    quantity = to_quantity(4, pieces, pieces_per_unit)
                    self.assertEqual(from_quantity(quantity, pieces_per_unit), (4, pieces))

    def test_rounding_carry_rolls_into_cartons(self):
        self.assertEqual(from_quantity(Decimal("1.999999"), 12), (2, 0))

    def test_negative_quantity_is_rejected(self):
        with self.assertRaises(InvalidUnitInput):
            from_quantity(Decimal("-1"), 12)


class ResolveLineQuantityTests(SimpleTestCase):
    def test_carton_item_accepts_cartons_and_pieces(self):
        item = make_item(pieces_per_unit=12)
        self.assertEqual(resolve_line_quantity(item, cartons=1, pieces=6), Decimal("1.5"))

    def test_carton_input_requires_unit_system(self):
        item = make_item(pieces_per_unit=12)
        with self.assertRaises(InvalidUnitInput):
            resolve_line_quantity(item, cartons=1, pieces=6, unit_system=False)

    def test_count_item_rejects_cartons_and_fractions(self):
        item = make_item()
        with self.assertRaises(InvalidUnitInput):
            resolve_line_quantity(item, cartons=1)
        with self.assertRaises(InvalidUnitInput):
            resolve_line_quantity(item, quantity="1.5")
        self.assertEqual(resolve_line_quantity(item, quantity=3), Decimal("3"))

    def test_fractional_item_accepts_decimals(self):
        item = make_item(unit_name="kg")
        self.assertEqual(resolve_line_quantity(item, quantity="0.25"), Decimal("0.25"))

    def test_both_or_neither_form_is_rejected(self):
        item = make_item(pieces_per_unit=12)
        with self.assertRaises(InvalidUnitInput):
            resolve_line_quantity(item, quantity=1, cartons=1)
        with self.assertRaises(InvalidUnitInput):
            resolve_line_quantity(item)
