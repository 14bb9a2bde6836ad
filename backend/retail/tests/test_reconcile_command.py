from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from ..models import BalanceAdjustment, Customer
from ..services.transactions import create_sale, process_customer_return
from . import create_item, create_user_with_account


class ReconcileBalancesCommandTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("reconcile-cmd")
        self.customer = Customer.objects.create(account=self.account, name="Afia")
        self.item = create_item(self.account)
        self.sale = create_sale(
            self.account.pk,
            items=[{"item_id": self.item.pk, "quantity": 2}],
            payment_type="CREDIT",
            customer_id=self.customer.pk,
        )

    def test_clean_ledger_reports_nothing(self):
        out = StringIO()
        call_command("reconcile_balances", stdout=out)
        self.assertIn("All balances reconcile.", out.getvalue())

    def test_drift_is_reported_and_fixed(self):
        Customer.objects.filter(pk=self.customer.pk).update(balance=Decimal("75.00"))
        out = StringIO()
        call_command("reconcile_balances", "--account", str(self.account.pk), stdout=out)
        self.assertIn("expected 20.00", out.getvalue())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("75.00"))

        call_command("reconcile_balances", "--fix", stdout=StringIO())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("20.00"))
        self.assertEqual(BalanceAdjustment.objects.filter(customer=self.customer).count(), 1)

    def test_credit_note_is_reported_but_not_cleared(self):
        process_customer_return(
            self.account.pk,
            sale_id=self.sale.pk,
            item_id=self.item.pk,
            quantity=2,
            return_type="CREDIT",
            amount=Decimal("30"),
        )
        Customer.objects.filter(pk=self.customer.pk).update(balance=Decimal("5.00"))

        out = StringIO()
        call_command("reconcile_balances", "--fix", stdout=out)
        self.assertIn("expected -10.00", out.getvalue())
        self.assertIn("not fixed", out.getvalue())
        self.assertNotIn("balance updated", out.getvalue())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("5.00"))
        self.assertFalse(BalanceAdjustment.objects.filter(customer=self.customer).exists())
