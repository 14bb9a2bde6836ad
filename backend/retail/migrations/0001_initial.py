import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


def quantity(**kwargs):
    return models.DecimalField(max_digits=18, decimal_places=6, **kwargs)


def user_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


def account_fk(related_name):
    return models.ForeignKey(
        on_delete=django.db.models.deletion.CASCADE,
        related_name=related_name,
        to="retail.account",
    )


PAYMENT_TYPES = [("CASH", "Cash"), ("CREDIT", "Credit")]
PAYMENT_METHODS = [("CASH", "Cash"), ("MOMO", "Mobile Money"), ("BANK", "Bank Transfer")]
DISCOUNT_TYPES = [("percent", "Percent"), ("amount", "Amount")]
RETURN_TYPES = [("CASH", "Cash"), ("CREDIT", "Credit"), ("EXCHANGE", "Exchange")]
SINGLE_COUNTERPARTY = models.Q(customer__isnull=False, supplier__isnull=True) | models.Q(
    customer__isnull=True, supplier__isnull=False
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("use_unit_system", models.BooleanField(default=False)),
                ("enable_retail_price", models.BooleanField(default=False)),
                ("enable_wholesale_price", models.BooleanField(default=False)),
                ("enable_promo_price", models.BooleanField(default=False)),
                ("enable_discounts", models.BooleanField(default=False)),
                ("enable_credit_sales", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_accounts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="AccountMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_owner", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("memberships")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="account_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"unique_together": {("account", "user")}},
        ),
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action_type",
                    models.CharField(
                        choices=[("created", "Created"), ("adjusted", "Adjusted"), ("overridden", "Overridden")],
                        max_length=10,
                    ),
                ),
                ("description", models.CharField(max_length=255)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("object_id", models.PositiveIntegerField()),
                ("account", account_fk("activities")),
                (
                    "content_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="contenttypes.contenttype",
                    ),
                ),
                ("user", user_fk("ledger_activities")),
            ],
            options={"ordering": ["-timestamp"], "verbose_name_plural": "Activities"},
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("quantity", quantity(default=Decimal("0"))),
                ("cost_price", money(default=Decimal("0.00"))),
                ("selling_price", money()),
                ("retail_price", money(blank=True, null=True)),
                ("wholesale_price", money(blank=True, null=True)),
                ("promo_price", money(blank=True, null=True)),
                ("unit_name", models.CharField(blank=True, max_length=50, null=True)),
                ("pieces_per_unit", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", account_fk("items")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=0), name="item_quantity_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(pieces_per_unit__gte=1), name="item_pieces_per_unit_positive"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("balance", money(default=Decimal("0.00"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", account_fk("customers")),
            ],
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("balance", money(default=Decimal("0.00"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", account_fk("suppliers")),
            ],
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_type", models.CharField(choices=PAYMENT_TYPES, max_length=10)),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, default="CASH", max_length=10)),
                ("subtotal_amount", money(default=Decimal("0.00"))),
                ("discount_type", models.CharField(blank=True, choices=DISCOUNT_TYPES, default="", max_length=10)),
                ("discount_value", money(default=Decimal("0.00"))),
                ("order_discount", money(default=Decimal("0.00"))),
                ("total_amount", money(default=Decimal("0.00"))),
                ("paid_amount", money(default=Decimal("0.00"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("sales")),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="retail.customer",
                    ),
                ),
                ("created_by", user_fk("retail_sales")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", quantity()),
                (
                    "price_tier",
                    models.CharField(
                        choices=[
                            ("default", "Default"),
                            ("retail", "Retail"),
                            ("wholesale", "Wholesale"),
                            ("promo", "Promotional"),
                        ],
                        default="default",
                        max_length=10,
                    ),
                ),
                ("unit_price", money()),
                ("line_discount", money(default=Decimal("0.00"))),
                ("line_total", money()),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_items",
                        to="retail.item",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="retail.sale",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_type", models.CharField(choices=PAYMENT_TYPES, max_length=10)),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, default="CASH", max_length=10)),
                ("subtotal_amount", money(default=Decimal("0.00"))),
                ("discount_type", models.CharField(blank=True, choices=DISCOUNT_TYPES, default="", max_length=10)),
                ("discount_value", money(default=Decimal("0.00"))),
                ("order_discount", money(default=Decimal("0.00"))),
                ("total_amount", money(default=Decimal("0.00"))),
                ("paid_amount", money(default=Decimal("0.00"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("purchases")),
                ("created_by", user_fk("retail_purchases")),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="retail.supplier",
                    ),
                ),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="PurchaseItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", quantity()),
                ("unit_cost", money()),
                ("line_discount", money(default=Decimal("0.00"))),
                ("line_total", money()),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_items",
                        to="retail.item",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="retail.purchase",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="CustomerReturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", quantity()),
                ("return_type", models.CharField(choices=RETURN_TYPES, max_length=10)),
                ("amount", money(default=Decimal("0.00"))),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("customer_returns")),
                ("created_by", user_fk("retail_customer_returns")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customer_returns",
                        to="retail.item",
                    ),
                ),
                (
                    "sale_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="retail.saleitem",
                    ),
                ),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="SupplierReturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", quantity()),
                ("return_type", models.CharField(choices=RETURN_TYPES, max_length=10)),
                ("amount", money(default=Decimal("0.00"))),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("supplier_returns")),
                ("created_by", user_fk("retail_supplier_returns")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="supplier_returns",
                        to="retail.item",
                    ),
                ),
                (
                    "purchase_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="retail.purchaseitem",
                    ),
                ),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", money()),
                ("method", models.CharField(choices=PAYMENT_METHODS, default="CASH", max_length=10)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("payments")),
                ("created_by", user_fk("retail_payments")),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="retail.customer",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="retail.supplier",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(condition=SINGLE_COUNTERPARTY, name="payment_single_counterparty"),
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name="payment_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "adjustment_type",
                    models.CharField(
                        choices=[("INCREASE", "Increase"), ("DECREASE", "Decrease")], max_length=10
                    ),
                ),
                ("quantity", quantity()),
                ("previous_quantity", quantity()),
                ("new_quantity", quantity()),
                ("reason", models.CharField(max_length=255)),
                ("idempotency_key", models.CharField(blank=True, max_length=100, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("stock_adjustments")),
                ("created_by", user_fk("stock_adjustments")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustments",
                        to="retail.item",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(idempotency_key__isnull=False),
                        fields=("account", "idempotency_key"),
                        name="unique_stock_adjustment_idempotency_key",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BalanceAdjustment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_balance", money()),
                ("new_balance", money()),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", account_fk("balance_adjustments")),
                ("created_by", user_fk("balance_adjustments")),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="balance_adjustments",
                        to="retail.customer",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="balance_adjustments",
                        to="retail.supplier",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=SINGLE_COUNTERPARTY, name="balance_adjustment_single_counterparty"
                    ),
                ],
            },
        ),
    ]
