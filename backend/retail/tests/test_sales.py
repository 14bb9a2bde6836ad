from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import TestCase

from ..exceptions import (
    ConcurrencyConflict,
    InsufficientStock,
    InvalidUnitInput,
    LedgerValidationError,
    NotFound,
    TierUnavailable,
)
from ..models import Activity, Customer, Sale
from ..services.transactions import create_sale
from . import create_item, create_user_with_account


class CreateSaleTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account(
            "sale-owner", enable_discounts=True, use_unit_system=True
        )
        self.customer = Customer.objects.create(account=self.account, name="Akosua")

    def test_cash_sale_reduces_stock(self):
        item = create_item(self.account, quantity="5")
        sale = create_sale(
            self.account.pk,
            items=[{"item_id": item.pk, "quantity": 3}],
            payment_type="CASH",
            user_id=self.user.pk,
        )
        item.refresh_from_db()
        self.assertEqual(item.quantity, Decimal("2"))
        self.assertEqual(sale.total_amount, Decimal("30.00"))
        self.assertEqual(sale.paid_amount, Decimal("30.00"))
        self.assertIsNone(sale.customer)
        self.assertTrue(Activity.objects.filter(object_id=sale.pk, action_type="created").exists())

    def test_carton_sale_leaves_fractional_stock(self):
        item = create_item(self.account, name="Biscuits", quantity="10", pieces_per_unit=12, unit_name="box")
        create_sale(
            self.account.pk,
            items=[{"item_id": item.pk, "cartons": 1, "pieces": 6}],
            payment_type="CASH",
        )
        item.refresh_from_db()
        self.assertEqual(item.quantity, Decimal("8.5"))

    def test_discounted_credit_sale_charges_the_remainder(self):
        item = create_item(self.account, quantity="20")
        sale = create_sale(
            self.account.pk,
            items=[{"item_id": item.pk, "quantity": 10}],
            payment_type="CREDIT",
            customer_id=self.customer.pk,
            paid_amount=Decimal("30"),
            discount={"type": "percent", "value": Decimal("10")},
        )
        self.assertEqual(sale.subtotal_amount, Decimal("100.00"))
        self.assertEqual(sale.order_discount, Decimal("10.00"))
        self.assertEqual(sale.total_amount, Decimal("90.00"))
        self.assertEqual(sale.paid_amount, Decimal("30.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("60.00"))

    def test_credit_overpayment_is_clamped_to_total(self):
        item = create_item(self.account)
        sale = create_sale(
            self.account.pk,
            items=[{"item_id": item.pk, "quantity": 2}],
            payment_type="CREDIT",
            customer_id=self.customer.pk,
            paid_amount=Decimal("500"),
        )
        self.assertEqual(sale.paid_amount, Decimal("20.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("0.00"))

    def test_line_discount_and_tier(self):
        item = create_item(self.account, wholesale_price=Decimal("8.00"))
        self.account.enable_wholesale_price = True
        self.account.save()
        sale = create_sale(
            self.account.pk,
            items=[{"item_id": item.pk, "quantity": 5, "price_tier": "wholesale", "discount": Decimal("4")}],
            payment_type="CASH",
        )
        line = sale.items.get()
        self.assertEqual(line.unit_price, Decimal("8.00"))
        self.assertEqual(line.line_discount, Decimal("4.00"))
        self.assertEqual(line.line_total, Decimal("36.00"))
        self.assertEqual(sale.total_amount, Decimal("36.00"))

    def test_disabled_tier_is_refused(self):
        item = create_item(self.account, promo_price=Decimal("7.00"))
        with self.assertRaises(TierUnavailable):
            create_sale(
                self.account.pk,
                items=[{"item_id": item.pk, "quantity": 1, "price_tier": "promo"}],
                payment_type="CASH",
            )

    def test_multi_line_sale_is_all_or_nothing(self):
        first = create_item(self.account, name="A", quantity="5")
        second = create_item(self.account, name="B", quantity="1")
        with self.assertRaises(InsufficientStock):
            create_sale(
                self.account.pk,
                items=[
                    {"item_id": first.pk, "quantity": 2},
                    {"item_id": second.pk, "quantity": 2},
                ],
                payment_type="CREDIT",
                customer_id=self.customer.pk,
            )
        first.refresh_from_db()
        second.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(first.quantity, Decimal("5"))
        self.assertEqual(second.quantity, Decimal("1"))
        self.assertEqual(self.customer.balance, Decimal("0.00"))
        self.assertEqual(Sale.objects.count(), 0)

    def test_failure_after_stock_moves_rolls_everything_back(self):
        item = create_item(self.account, quantity="5")
        with mock.patch(
            "retail.services.ledger.apply_delta", side_effect=NotFound("Customer gone.")
        ):
            with self.assertRaises(NotFound):
                create_sale(
                    self.account.pk,
                    items=[{"item_id": item.pk, "quantity": 2}],
                    payment_type="CREDIT",
                    customer_id=self.customer.pk,
                )
        item.refresh_from_db()
        self.assertEqual(item.quantity, Decimal("5"))
        self.assertEqual(Sale.objects.count(), 0)

    def test_validation_failures(self):
        item = create_item(self.account)
        cases = [
            dict(items=[], payment_type="CASH"),
            dict(items=[{"item_id": item.pk, "quantity": 1}], payment_type="CREDIT"),
            dict(items=[{"item_id": item.pk, "quantity": 1}, {"item_id": item.pk, "quantity": 2}], payment_type="CASH"),
            dict(items=[{"item_id": item.pk, "quantity": 0}], payment_type="CASH"),
            dict(items=[{"item_id": item.pk, "quantity": 1}], payment_type="CHEQUE"),
            dict(items=[{"item_id": item.pk, "quantity": 1}, {"item_id": str(item.pk), "quantity": 2}], payment_type="CASH"),
            dict(items=[{"item_id": "abc", "quantity": 1}], payment_type="CASH"),
        ]
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(LedgerValidationError):
                    create_sale(self.account.pk, **kwargs)

    def test_item_id_given_as_text(self):
        item = create_item(self.account, quantity="5")
        sale = create_sale(
            self.account.pk, items=[{"item_id": str(item.pk), "quantity": 2}], payment_type="CASH"
        )
        item.refresh_from_db()
        self.assertEqual(item.quantity, Decimal("3"))
        self.assertEqual(sale.items.get().item_id, item.pk)

    def test_fractional_quantity_on_count_item(self):
        item = create_item(self.account)
        with self.assertRaises(InvalidUnitInput):
            create_sale(self.account.pk, items=[{"item_id": item.pk, "quantity": "1.5"}], payment_type="CASH")

    def test_credit_sales_can_be_switched_off(self):
        self.account.enable_credit_sales = False
        self.account.save()
        item = create_item(self.account)
        with self.assertRaises(LedgerValidationError):
            create_sale(
                self.account.pk,
                items=[{"item_id": item.pk, "quantity": 1}],
                payment_type="CREDIT",
                customer_id=self.customer.pk,
            )

    def test_discounts_require_account_switch(self):
        _, plain_account = create_user_with_account("sale-plain")
        item = create_item(plain_account)
        with self.assertRaises(LedgerValidationError):
            create_sale(
                plain_account.pk,
                items=[{"item_id": item.pk, "quantity": 1}],
                payment_type="CASH",
                discount={"type": "amount", "value": Decimal("1")},
            )

    def test_items_of_other_account_are_not_found(self):
        _, other_account = create_user_with_account("sale-other")
        foreign = create_item(other_account)
        with self.assertRaises(NotFound):
            create_sale(self.account.pk, items=[{"item_id": foreign.pk, "quantity": 1}], payment_type="CASH")
        foreign.refresh_from_db()
        self.assertEqual(foreign.quantity, Decimal("10"))

    def test_lock_failure_surfaces_as_conflict(self):
        item = create_item(self.account)
        with mock.patch(
            "retail.services.stock.decrease", side_effect=OperationalError("database is locked")
        ):
            with self.assertRaises(ConcurrencyConflict) as ctx:
                create_sale(self.account.pk, items=[{"item_id": item.pk, "quantity": 1}], payment_type="CASH")
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(Sale.objects.count(), 0)
