from decimal import Decimal

from rest_framework import serializers

from .models import (
    Account,
    BalanceAdjustment,
    CustomerReturn,
    DISCOUNT_TYPE_CHOICES,
    METHOD_CASH,
    Payment,
    PAYMENT_METHOD_CHOICES,
    PAYMENT_TYPE_CHOICES,
    PAYMENT_TYPE_CREDIT,
    PRICE_TIER_CHOICES,
    Purchase,
    PurchaseItem,
    RETURN_TYPE_CHOICES,
    Sale,
    SaleItem,
    StockAdjustment,
    SupplierReturn,
    TIER_DEFAULT,
)
from .services import transactions


def _quantity_field(**kwargs):
    return serializers.DecimalField(max_digits=18, decimal_places=6, **kwargs)


def _money_field(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class AccountScopedSerializerMixin:
    """Mixin that provides access to the request-scoped account."""

    def get_account(self):
        request = self.context.get('request')
        if not request:
            return None
        return Account.for_user(getattr(request, 'user', None))

    def pop_caller(self, validated_data):
        """Return ``(account_id, user_id)`` for the engine call."""
        account = validated_data.pop('account', None) or self.get_account()
        if account is None:
            raise serializers.ValidationError('Unable to determine the account for this request.')
        user = validated_data.pop('created_by', None)
        return account.pk, getattr(user, 'pk', None)


# --- write serializers -----------------------------------------------------


class DiscountSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=DISCOUNT_TYPE_CHOICES)
    value = _money_field(min_value=Decimal('0'))


class LineQuantityMixin:
    def validate(self, attrs):
        has_units = attrs.get('cartons') is not None or attrs.get('pieces') is not None
        if attrs.get('quantity') is None and not has_units:
            raise serializers.ValidationError('Provide a quantity or cartons/pieces.')
        if attrs.get('quantity') is not None and has_units:
            raise serializers.ValidationError('Provide either quantity or cartons/pieces, not both.')
        return attrs


class SaleLineSerializer(LineQuantityMixin, serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = _quantity_field(required=False, allow_null=True, min_value=Decimal('0'))
    cartons = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    pieces = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    price_tier = serializers.ChoiceField(choices=PRICE_TIER_CHOICES, default=TIER_DEFAULT)
    discount = _money_field(required=False, min_value=Decimal('0'), default=Decimal('0'))


class PurchaseLineSerializer(LineQuantityMixin, serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = _quantity_field(required=False, allow_null=True, min_value=Decimal('0'))
    cartons = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    pieces = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    unit_cost = _money_field(required=False, allow_null=True, min_value=Decimal('0'))
    discount = _money_field(required=False, min_value=Decimal('0'), default=Decimal('0'))


class SaleWriteSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPE_CHOICES)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, default=METHOD_CASH)
    paid_amount = _money_field(required=False, default=Decimal('0'))
    discount = DiscountSerializer(required=False, allow_null=True)
    items = SaleLineSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs['payment_type'] == PAYMENT_TYPE_CREDIT and not attrs.get('customer_id'):
            raise serializers.ValidationError({'customer_id': 'Credit sales require a customer.'})
        return attrs

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.create_sale(account_id, user_id=user_id, **validated_data)


class PurchaseWriteSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    supplier_id = serializers.IntegerField()
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPE_CHOICES)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, default=METHOD_CASH)
    paid_amount = _money_field(required=False, default=Decimal('0'))
    discount = DiscountSerializer(required=False, allow_null=True)
    items = PurchaseLineSerializer(many=True, allow_empty=False)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.create_purchase(account_id, user_id=user_id, **validated_data)


class CustomerReturnWriteSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    sale_id = serializers.IntegerField()
    item_id = serializers.IntegerField()
    quantity = _quantity_field(min_value=Decimal('0.000001'))
    return_type = serializers.ChoiceField(choices=RETURN_TYPE_CHOICES)
    amount = _money_field(required=False, min_value=Decimal('0'), default=Decimal('0'))
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.process_customer_return(account_id, user_id=user_id, **validated_data)


class SupplierReturnWriteSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    purchase_id = serializers.IntegerField()
    item_id = serializers.IntegerField()
    quantity = _quantity_field(min_value=Decimal('0.000001'))
    return_type = serializers.ChoiceField(choices=RETURN_TYPE_CHOICES)
    amount = _money_field(required=False, min_value=Decimal('0'), default=Decimal('0'))
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.process_supplier_return(account_id, user_id=user_id, **validated_data)


class CounterpartyMixin:
    """Resolve exactly one of ``customer_id``/``supplier_id`` into kind and id."""

    def validate(self, attrs):
        customer_id = attrs.pop('customer_id', None)
        supplier_id = attrs.pop('supplier_id', None)
        if not customer_id and not supplier_id:
            raise serializers.ValidationError('customer_id or supplier_id required')
        if customer_id and supplier_id:
            raise serializers.ValidationError('Only one of customer_id or supplier_id may be provided.')
        attrs['kind'] = 'customer' if customer_id else 'supplier'
        attrs['entity_id'] = customer_id or supplier_id
        return attrs


class PaymentWriteSerializer(CounterpartyMixin, AccountScopedSerializerMixin, serializers.Serializer):
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    amount = _money_field(min_value=Decimal('0.01'))
    method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.record_payment(account_id, user_id=user_id, **validated_data)


class StockAdjustmentWriteSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    item_id = serializers.IntegerField()
    adjustment_type = serializers.ChoiceField(choices=StockAdjustment.ADJUSTMENT_TYPE_CHOICES)
    quantity = _quantity_field(min_value=Decimal('0.000001'))
    reason = serializers.CharField(max_length=255)
    idempotency_key = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=100
    )

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.adjust_stock(account_id, user_id=user_id, **validated_data)


class StockLevelSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = _quantity_field(min_value=Decimal('0'))
    reason = serializers.CharField(max_length=255)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.set_stock_level(account_id, user_id=user_id, **validated_data)


class BulkStockAdjustmentSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    # Rows are checked one by one by the engine so a bad row does not reject the batch.
    adjustments = serializers.ListField(child=serializers.DictField(), allow_empty=False)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.bulk_adjust_stock(
            account_id, rows=validated_data['adjustments'], user_id=user_id
        )


class BalanceAdjustmentWriteSerializer(CounterpartyMixin, AccountScopedSerializerMixin, serializers.Serializer):
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    balance = _money_field(min_value=Decimal('0'))
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.adjust_balance(account_id, user_id=user_id, **validated_data)


class BulkBalanceAdjustmentSerializer(AccountScopedSerializerMixin, serializers.Serializer):
    kind = serializers.ChoiceField(choices=[('customer', 'Customer'), ('supplier', 'Supplier')])
    adjustments = serializers.ListField(child=serializers.DictField(), allow_empty=False)

    def create(self, validated_data):
        account_id, user_id = self.pop_caller(validated_data)
        return transactions.bulk_adjust_balance(
            account_id,
            kind=validated_data['kind'],
            rows=validated_data['adjustments'],
            user_id=user_id,
        )


# --- read serializers ------------------------------------------------------


class SaleItemReadSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.name', read_only=True)

    class Meta:
        model = SaleItem
        fields = ['id', 'item', 'item_name', 'quantity', 'price_tier', 'unit_price', 'line_discount', 'line_total']


class SaleReadSerializer(serializers.ModelSerializer):
    items = SaleItemReadSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            'id', 'customer', 'customer_name', 'payment_type', 'payment_method',
            'subtotal_amount', 'discount_type', 'discount_value', 'order_discount',
            'total_amount', 'paid_amount', 'created_by', 'created_at', 'items',
        ]


class PurchaseItemReadSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.name', read_only=True)

    class Meta:
        model = PurchaseItem
        fields = ['id', 'item', 'item_name', 'quantity', 'unit_cost', 'line_discount', 'line_total']


class PurchaseReadSerializer(serializers.ModelSerializer):
    items = PurchaseItemReadSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'id', 'supplier', 'supplier_name', 'payment_type', 'payment_method',
            'subtotal_amount', 'discount_type', 'discount_value', 'order_discount',
            'total_amount', 'paid_amount', 'created_by', 'created_at', 'items',
        ]


class CustomerReturnSerializer(serializers.ModelSerializer):
    sale = serializers.IntegerField(source='sale_item.sale_id', read_only=True)

    class Meta:
        model = CustomerReturn
        fields = ['id', 'sale', 'sale_item', 'item', 'quantity', 'return_type', 'amount', 'reason', 'created_by', 'created_at']


class SupplierReturnSerializer(serializers.ModelSerializer):
    purchase = serializers.IntegerField(source='purchase_item.purchase_id', read_only=True)

    class Meta:
        model = SupplierReturn
        fields = ['id', 'purchase', 'purchase_item', 'item', 'quantity', 'return_type', 'amount', 'reason', 'created_by', 'created_at']


class PaymentSerializer(serializers.ModelSerializer):
    previous_balance = serializers.SerializerMethodField()
    new_balance = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = ['id', 'customer', 'supplier', 'amount', 'method', 'notes', 'created_by', 'created_at', 'previous_balance', 'new_balance']

    # Only set on payments returned by the engine in the same request.
    def get_previous_balance(self, obj):
        value = getattr(obj, 'previous_balance', None)
        return None if value is None else str(value)

    def get_new_balance(self, obj):
        value = getattr(obj, 'new_balance', None)
        return None if value is None else str(value)


class StockAdjustmentSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.name', read_only=True)

    class Meta:
        model = StockAdjustment
        fields = [
            'id', 'item', 'item_name', 'adjustment_type', 'quantity', 'previous_quantity',
            'new_quantity', 'reason', 'idempotency_key', 'created_by', 'created_at',
        ]


class BalanceAdjustmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BalanceAdjustment
        fields = ['id', 'customer', 'supplier', 'previous_balance', 'new_balance', 'reason', 'created_by', 'created_at']
