from decimal import Decimal

from django.test import TestCase, override_settings

from ..exceptions import (
    InsufficientStock,
    InvalidUnitInput,
    LedgerValidationError,
    NegativeBalanceGuard,
    NotFound,
    ReturnExceedsOriginal,
)
from ..models import Customer, CustomerReturn, Supplier
from ..services.transactions import (
    create_purchase,
    create_sale,
    process_customer_return,
    process_supplier_return,
)
from . import create_item, create_user_with_account


class CustomerReturnTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("return-owner")
        self.customer = Customer.objects.create(account=self.account, name="Kwame")
        self.item = create_item(self.account, quantity="10")
        self.sale = create_sale(
            self.account.pk,
            items=[{"item_id": self.item.pk, "quantity": 5}],
            payment_type="CREDIT",
            customer_id=self.customer.pk,
        )

    def test_partial_credit_return_then_overreturn(self):
        process_customer_return(
            self.account.pk,
            sale_id=self.sale.pk,
            item_id=self.item.pk,
            quantity=2,
            return_type="CREDIT",
            amount=Decimal("20"),
        )
        self.item.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("7"))
        self.assertEqual(self.customer.balance, Decimal("30.00"))

        with self.assertRaises(ReturnExceedsOriginal) as ctx:
            process_customer_return(
                self.account.pk,
                sale_id=self.sale.pk,
                item_id=self.item.pk,
                quantity=4,
                return_type="CREDIT",
                amount=Decimal("40"),
            )
        self.assertEqual(ctx.exception.detail["remaining"], Decimal("3"))
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("7"))
        self.assertEqual(CustomerReturn.objects.count(), 1)

    def test_cash_and_exchange_returns_leave_balance(self):
        for return_type in ("CASH", "EXCHANGE"):
            process_customer_return(
                self.account.pk,
                sale_id=self.sale.pk,
                item_id=self.item.pk,
                quantity=1,
                return_type=return_type,
                amount=Decimal("10"),
            )
        self.customer.refresh_from_db()
        self.item.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("50.00"))
        self.assertEqual(self.item.quantity, Decimal("7"))

    def test_credit_return_may_leave_a_credit_note(self):
        process_customer_return(
            self.account.pk,
            sale_id=self.sale.pk,
            item_id=self.item.pk,
            quantity=5,
            return_type="CREDIT",
            amount=Decimal("60"),
        )
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("-10.00"))

    @override_settings(RETAIL_LEDGER={"ALLOW_CREDIT_NOTES": False})
    def test_credit_notes_can_be_disabled(self):
        with self.assertRaises(NegativeBalanceGuard):
            process_customer_return(
                self.account.pk,
                sale_id=self.sale.pk,
                item_id=self.item.pk,
                quantity=5,
                return_type="CREDIT",
                amount=Decimal("60"),
            )
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("5"))

    def test_item_not_on_sale(self):
        other_item = create_item(self.account, name="Other")
        with self.assertRaises(NotFound):
            process_customer_return(
                self.account.pk,
                sale_id=self.sale.pk,
                item_id=other_item.pk,
                quantity=1,
                return_type="CASH",
                amount=Decimal("0"),
            )

    def test_walk_in_sale_cannot_take_credit_return(self):
        walk_in = create_sale(
            self.account.pk, items=[{"item_id": self.item.pk, "quantity": 1}], payment_type="CASH"
        )
        with self.assertRaises(LedgerValidationError):
            process_customer_return(
                self.account.pk,
                sale_id=walk_in.pk,
                item_id=self.item.pk,
                quantity=1,
                return_type="CREDIT",
                amount=Decimal("10"),
            )

    def test_count_item_rejects_fractional_return(self):
        with self.assertRaises(InvalidUnitInput):
            process_customer_return(
                self.account.pk,
                sale_id=self.sale.pk,
                item_id=self.item.pk,
                quantity=Decimal("0.25"),
                return_type="CASH",
            )
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("5"))
        self.assertFalse(CustomerReturn.objects.exists())

    def test_weighed_item_accepts_fractional_return(self):
        rice = create_item(self.account, name="Rice", quantity="3", unit_name="kg")
        sale = create_sale(
            self.account.pk, items=[{"item_id": rice.pk, "quantity": "1.5"}], payment_type="CASH"
        )
        process_customer_return(
            self.account.pk,
            sale_id=sale.pk,
            item_id=rice.pk,
            quantity=Decimal("0.25"),
            return_type="CASH",
        )
        rice.refresh_from_db()
        self.assertEqual(rice.quantity, Decimal("1.75"))


class SupplierReturnTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("supplier-return-owner")
        self.supplier = Supplier.objects.create(account=self.account, name="Mills")
        self.item = create_item(self.account, quantity="0", cost_price=Decimal("3.00"))
        self.purchase = create_purchase(
            self.account.pk,
            supplier_id=self.supplier.pk,
            items=[{"item_id": self.item.pk, "quantity": 10}],
            payment_type="CREDIT",
        )

    def test_credit_return_reduces_supplier_balance_and_stock(self):
        process_supplier_return(
            self.account.pk,
            purchase_id=self.purchase.pk,
            item_id=self.item.pk,
            quantity=4,
            return_type="CREDIT",
            amount=Decimal("12"),
        )
        self.item.refresh_from_db()
        self.supplier.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("6"))
        self.assertEqual(self.supplier.balance, Decimal("18.00"))

    def test_goods_already_sold_cannot_be_returned(self):
        create_sale(self.account.pk, items=[{"item_id": self.item.pk, "quantity": 9}], payment_type="CASH")
        with self.assertRaises(InsufficientStock):
            process_supplier_return(
                self.account.pk,
                purchase_id=self.purchase.pk,
                item_id=self.item.pk,
                quantity=2,
                return_type="CASH",
                amount=Decimal("6"),
            )
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.balance, Decimal("30.00"))

    def test_count_item_rejects_fractional_return(self):
        with self.assertRaises(InvalidUnitInput):
            process_supplier_return(
                self.account.pk,
                purchase_id=self.purchase.pk,
                item_id=self.item.pk,
                quantity=Decimal("0.5"),
                return_type="CASH",
            )
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal("10"))
