from decimal import Decimal

from django.test import TestCase, override_settings

from ..exceptions import LedgerValidationError, NegativeBalanceGuard, NotFound
from ..models import BalanceAdjustment, Customer, Supplier
from ..services import ledger
from . import create_user_with_account


class ApplyDeltaTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("ledger-owner")
        self.customer = Customer.objects.create(account=self.account, name="Ama", balance=Decimal("50.00"))
        self.supplier = Supplier.objects.create(account=self.account, name="Kofi Traders")

    def test_positive_and_negative_movements(self):
        self.assertEqual(
            ledger.apply_delta(self.account.pk, "customer", self.customer.pk, Decimal("10.005")),
            Decimal("60.01"),
        )
        self.assertEqual(
            ledger.apply_delta(self.account.pk, "customer", self.customer.pk, Decimal("-60.01")),
            Decimal("0.00"),
        )

    def test_guard_blocks_negative_balance(self):
        with self.assertRaises(NegativeBalanceGuard) as ctx:
            ledger.apply_delta(self.account.pk, "customer", self.customer.pk, Decimal("-70"))
        self.assertEqual(ctx.exception.detail["balance"], Decimal("50.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("50.00"))

    def test_negative_allowed_for_credit_notes(self):
        new_balance = ledger.apply_delta(
            self.account.pk, "supplier", self.supplier.pk, Decimal("-5"), allow_negative=True
        )
        self.assertEqual(new_balance, Decimal("-5.00"))

    def test_other_account_and_unknown_kind(self):
        _, other_account = create_user_with_account("ledger-other")
        with self.assertRaises(NotFound):
            ledger.apply_delta(other_account.pk, "customer", self.customer.pk, Decimal("1"))
        with self.assertRaises(LedgerValidationError):
            ledger.apply_delta(self.account.pk, "employee", self.customer.pk, Decimal("1"))


class SetAbsoluteTests(TestCase):
    def setUp(self):
        self.user, self.account = create_user_with_account("override-owner")
        self.customer = Customer.objects.create(account=self.account, name="Esi", balance=Decimal("80.00"))

    def test_override_is_audited(self):
        adjustment = ledger.set_absolute(
            self.account.pk, "customer", self.customer.pk, "20", reason="Write-off", user_id=self.user.pk
        )
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("20.00"))
        self.assertEqual(adjustment.previous_balance, Decimal("80.00"))
        self.assertEqual(adjustment.new_balance, Decimal("20.00"))
        self.assertEqual(adjustment.customer, self.customer)

    def test_negative_override_is_invalid(self):
        with self.assertRaises(LedgerValidationError):
            ledger.set_absolute(self.account.pk, "customer", self.customer.pk, "-1")
        self.assertFalse(BalanceAdjustment.objects.exists())

    def test_bulk_reports_failed_rows(self):
        other = Customer.objects.create(account=self.account, name="Yaw", balance=Decimal("5.00"))
        result = ledger.bulk_set_absolute(
            self.account.pk,
            "customer",
            [
                {"id": self.customer.pk, "balance": "0"},
                {"id": other.pk, "balance": "-3"},
                {"id": 999999, "balance": "1"},
            ],
        )
        self.assertEqual(result["updated"], 1)
        self.assertEqual(result["skipped"], 2)
        self.assertTrue(result["errors"][0].startswith("Row 2:"))
        self.assertTrue(result["errors"][1].startswith("Row 3:"))
        other.refresh_from_db()
        self.assertEqual(other.balance, Decimal("5.00"))

    @override_settings(RETAIL_LEDGER={"BULK_ADJUSTMENT_LIMIT": 2})
    def test_bulk_limit(self):
        rows = [{"id": self.customer.pk, "balance": "1"}] * 3
        with self.assertRaises(LedgerValidationError):
            ledger.bulk_set_absolute(self.account.pk, "customer", rows)
