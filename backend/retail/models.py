# backend/retail/models.py
from decimal import Decimal

from django.contrib.auth.models import User
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils.text import slugify

MONEY = dict(max_digits=14, decimal_places=2)
QUANTITY = dict(max_digits=18, decimal_places=6)


class Account(models.Model):
    """Represents a tenant within the application."""

    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        related_name="owned_accounts",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True)

    # Tenant feature switches consulted by the pricing and unit rules.
    use_unit_system = models.BooleanField(default=False)
    enable_retail_price = models.BooleanField(default=False)
    enable_wholesale_price = models.BooleanField(default=False)
    enable_promo_price = models.BooleanField(default=False)
    enable_discounts = models.BooleanField(default=False)
    enable_credit_sales = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.name) or "account"
            slug = base
            suffix = 1
            while Account.objects.exclude(pk=self.pk).filter(slug=slug).exists():
                suffix += 1
                slug = f"{base}-{suffix}"
            self.slug = slug
        super().save(*args, **kwargs)

    @classmethod
    def for_user(cls, user: User | None) -> "Account | None":
        """Return the primary account for ``user`` if available."""

        if not user or not getattr(user, "pk", None):
            return None

        membership = (
            AccountMembership.objects.active()
            .filter(user=user, account__is_active=True)
            .select_related("account")
            .order_by("-is_owner", "-joined_at")
            .first()
        )
        if membership:
            return membership.account
        return None


class AccountMembershipQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class AccountMembership(models.Model):
    """Link between :class:`Account` objects and Django users."""

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="account_memberships",
    )
    is_owner = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    objects = AccountMembershipQuerySet.as_manager()

    class Meta:
        unique_together = ("account", "user")

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.user} → {self.account}"


class Activity(models.Model):
    ACTION_TYPES = (
        ('created', 'Created'),
        ('adjusted', 'Adjusted'),
        ('overridden', 'Overridden'),
    )

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='activities')
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='ledger_activities', null=True, blank=True
    )
    action_type = models.CharField(max_length=10, choices=ACTION_TYPES)
    description = models.CharField(max_length=255)
    timestamp = models.DateTimeField(auto_now_add=True)

    # Generic relationship to the row that was written
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveIntegerField()
    content_object = GenericForeignKey('content_type', 'object_id')

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = 'Activities'

    def __str__(self):
        return f'{self.action_type} - {self.description}'


class Item(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=255)
    quantity = models.DecimalField(**QUANTITY, default=Decimal("0"))
    cost_price = models.DecimalField(**MONEY, default=Decimal("0.00"))
    selling_price = models.DecimalField(**MONEY)
    retail_price = models.DecimalField(**MONEY, null=True, blank=True)
    wholesale_price = models.DecimalField(**MONEY, null=True, blank=True)
    promo_price = models.DecimalField(**MONEY, null=True, blank=True)
    unit_name = models.CharField(max_length=50, blank=True, null=True)
    pieces_per_unit = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0), name="item_quantity_non_negative"
            ),
            models.CheckConstraint(
                condition=models.Q(pieces_per_unit__gte=1), name="item_pieces_per_unit_positive"
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def is_carton_mode(self) -> bool:
        return (self.pieces_per_unit or 1) > 1

    @property
    def is_fractional_mode(self) -> bool:
        """Weight/volume items whose quantity may carry a fraction."""
        return (self.pieces_per_unit or 1) == 1 and bool(self.unit_name)


class Customer(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="customers")
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True, null=True)
    # Amount the customer owes the business.
    balance = models.DecimalField(**MONEY, default=Decimal("0.00"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Supplier(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="suppliers")
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True, null=True)
    # Amount the business owes the supplier.
    balance = models.DecimalField(**MONEY, default=Decimal("0.00"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


PAYMENT_TYPE_CASH = 'CASH'
PAYMENT_TYPE_CREDIT = 'CREDIT'
PAYMENT_TYPE_CHOICES = [
    (PAYMENT_TYPE_CASH, 'Cash'),
    (PAYMENT_TYPE_CREDIT, 'Credit'),
]

METHOD_CASH = 'CASH'
METHOD_MOMO = 'MOMO'
METHOD_BANK = 'BANK'
PAYMENT_METHOD_CHOICES = [
    (METHOD_CASH, 'Cash'),
    (METHOD_MOMO, 'Mobile Money'),
    (METHOD_BANK, 'Bank Transfer'),
]

DISCOUNT_PERCENT = 'percent'
DISCOUNT_AMOUNT = 'amount'
DISCOUNT_TYPE_CHOICES = [
    (DISCOUNT_PERCENT, 'Percent'),
    (DISCOUNT_AMOUNT, 'Amount'),
]

TIER_DEFAULT = 'default'
TIER_RETAIL = 'retail'
TIER_WHOLESALE = 'wholesale'
TIER_PROMO = 'promo'
PRICE_TIER_CHOICES = [
    (TIER_DEFAULT, 'Default'),
    (TIER_RETAIL, 'Retail'),
    (TIER_WHOLESALE, 'Wholesale'),
    (TIER_PROMO, 'Promotional'),
]

RETURN_CASH = 'CASH'
RETURN_CREDIT = 'CREDIT'
RETURN_EXCHANGE = 'EXCHANGE'
RETURN_TYPE_CHOICES = [
    (RETURN_CASH, 'Cash'),
    (RETURN_CREDIT, 'Credit'),
    (RETURN_EXCHANGE, 'Exchange'),
]


class Sale(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="sales")
    # Walk-in sales have no customer.
    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name='sales', null=True, blank=True
    )
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPE_CHOICES)
    payment_method = models.CharField(
        max_length=10, choices=PAYMENT_METHOD_CHOICES, default=METHOD_CASH
    )
    subtotal_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_TYPE_CHOICES, blank=True, default='')
    discount_value = models.DecimalField(**MONEY, default=Decimal("0.00"))
    order_discount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    total_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    paid_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='retail_sales', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        if self.customer_id:
            return f"Sale #{self.id} for {self.customer.name}"
        return f"Sale #{self.id} (walk-in)"

    @property
    def credit_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='sale_items')
    quantity = models.DecimalField(**QUANTITY)
    price_tier = models.CharField(max_length=10, choices=PRICE_TIER_CHOICES, default=TIER_DEFAULT)
    unit_price = models.DecimalField(**MONEY)
    line_discount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    line_total = models.DecimalField(**MONEY)

    def __str__(self):
        return f"{self.quantity} of {self.item.name} for Sale #{self.sale_id}"


class Purchase(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="purchases")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name='purchases')
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPE_CHOICES)
    payment_method = models.CharField(
        max_length=10, choices=PAYMENT_METHOD_CHOICES, default=METHOD_CASH
    )
    subtotal_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_TYPE_CHOICES, blank=True, default='')
    discount_value = models.DecimalField(**MONEY, default=Decimal("0.00"))
    order_discount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    total_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    paid_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='retail_purchases', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Purchase #{self.id} from {self.supplier.name}"

    @property
    def credit_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount


class PurchaseItem(models.Model):
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='purchase_items')
    quantity = models.DecimalField(**QUANTITY)
    unit_cost = models.DecimalField(**MONEY)
    line_discount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    line_total = models.DecimalField(**MONEY)

    def __str__(self):
        return f"{self.quantity} of {self.item.name} for Purchase #{self.purchase_id}"


class CustomerReturn(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="customer_returns")
    sale_item = models.ForeignKey(SaleItem, on_delete=models.PROTECT, related_name='returns')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='customer_returns')
    quantity = models.DecimalField(**QUANTITY)
    return_type = models.CharField(max_length=10, choices=RETURN_TYPE_CHOICES)
    amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    reason = models.CharField(max_length=255, blank=True, default='')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='retail_customer_returns', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.quantity} of {self.item.name} returned for Sale #{self.sale_item.sale_id}"


class SupplierReturn(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="supplier_returns")
    purchase_item = models.ForeignKey(PurchaseItem, on_delete=models.PROTECT, related_name='returns')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='supplier_returns')
    quantity = models.DecimalField(**QUANTITY)
    return_type = models.CharField(max_length=10, choices=RETURN_TYPE_CHOICES)
    amount = models.DecimalField(**MONEY, default=Decimal("0.00"))
    reason = models.CharField(max_length=255, blank=True, default='')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='retail_supplier_returns', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.quantity} of {self.item.name} returned for Purchase #{self.purchase_item.purchase_id}"


class Payment(models.Model):
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="payments")
    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name='payments', null=True, blank=True
    )
    supplier = models.ForeignKey(
        Supplier, on_delete=models.PROTECT, related_name='payments', null=True, blank=True
    )
    amount = models.DecimalField(**MONEY)
    method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default=METHOD_CASH)
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='retail_payments', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(customer__isnull=False, supplier__isnull=True)
                    | models.Q(customer__isnull=True, supplier__isnull=False)
                ),
                name="payment_single_counterparty",
            ),
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="payment_amount_positive"),
        ]

    def __str__(self):
        party = self.customer if self.customer_id else self.supplier
        return f"Payment of {self.amount} for {party}"


class StockAdjustment(models.Model):
    INCREASE = 'INCREASE'
    DECREASE = 'DECREASE'
    ADJUSTMENT_TYPE_CHOICES = [
        (INCREASE, 'Increase'),
        (DECREASE, 'Decrease'),
    ]

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="stock_adjustments")
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='adjustments')
    adjustment_type = models.CharField(max_length=10, choices=ADJUSTMENT_TYPE_CHOICES)
    quantity = models.DecimalField(**QUANTITY)
    previous_quantity = models.DecimalField(**QUANTITY)
    new_quantity = models.DecimalField(**QUANTITY)
    reason = models.CharField(max_length=255)
    idempotency_key = models.CharField(max_length=100, blank=True, null=True)
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='stock_adjustments', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=["account", "idempotency_key"],
                condition=models.Q(idempotency_key__isnull=False),
                name="unique_stock_adjustment_idempotency_key",
            )
        ]

    def __str__(self):
        return f"{self.get_adjustment_type_display()} {self.quantity} of {self.item.name}"


class BalanceAdjustment(models.Model):
    """Audit row for an administrative balance override."""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="balance_adjustments")
    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name='balance_adjustments', null=True, blank=True
    )
    supplier = models.ForeignKey(
        Supplier, on_delete=models.CASCADE, related_name='balance_adjustments', null=True, blank=True
    )
    previous_balance = models.DecimalField(**MONEY)
    new_balance = models.DecimalField(**MONEY)
    reason = models.CharField(max_length=255, blank=True, default='')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='balance_adjustments', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(customer__isnull=False, supplier__isnull=True)
                    | models.Q(customer__isnull=True, supplier__isnull=False)
                ),
                name="balance_adjustment_single_counterparty",
            ),
        ]

    def __str__(self):
        party = self.customer if self.customer_id else self.supplier
        return f"{party}: {self.previous_balance} → {self.new_balance}"
