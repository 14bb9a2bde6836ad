from decimal import Decimal

from django.test import TestCase

from ..exceptions import LedgerValidationError, NotFound, OverpaymentNotAllowed
from ..models import Customer, Payment, Supplier
from ..services.transactions import record_payment
from . import create_user_with_account


class RecordPaymentTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("payment-owner")
        self.customer = Customer.objects.create(account=self.account, name="Adjoa", balance=Decimal("50.00"))
        self.supplier = Supplier.objects.create(account=self.account, name="Depot", balance=Decimal("100.00"))

    def test_customer_payment_reduces_balance(self):
        payment = record_payment(
            self.account.pk,
            kind="customer",
            entity_id=self.customer.pk,
            amount=Decimal("20"),
            method="MOMO",
            user_id=self.user.pk,
        )
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("30.00"))
        self.assertEqual(payment.previous_balance, Decimal("50.00"))
        self.assertEqual(payment.new_balance, Decimal("30.00"))
        self.assertEqual(payment.customer, self.customer)

    def test_supplier_payment(self):
        record_payment(
            self.account.pk, kind="supplier", entity_id=self.supplier.pk, amount="100", method="BANK"
        )
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.balance, Decimal("0.00"))

    def test_overpayment_leaves_balance_untouched(self):
        with self.assertRaises(OverpaymentNotAllowed) as ctx:
            record_payment(
                self.account.pk,
                kind="customer",
                entity_id=self.customer.pk,
                amount=Decimal("70"),
                method="CASH",
            )
        self.assertEqual(ctx.exception.detail["balance"], Decimal("50.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("50.00"))
        self.assertEqual(Payment.objects.count(), 0)

    def test_invalid_payments(self):
        for amount, method in ((Decimal("0"), "CASH"), (Decimal("-5"), "CASH"), (Decimal("5"), "CHEQUE")):
            with self.subTest(amount=amount, method=method):
                with self.assertRaises(LedgerValidationError):
                    record_payment(
                        self.account.pk,
                        kind="customer",
                        entity_id=self.customer.pk,
                        amount=amount,
                        method=method,
                    )

    def test_customer_of_other_account(self):
        _, other_account = create_user_with_account("payment-other")
        with self.assertRaises(NotFound):
            record_payment(
                other_account.pk, kind="customer", entity_id=self.customer.pk, amount="5", method="CASH"
            )
