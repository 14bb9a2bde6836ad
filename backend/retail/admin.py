# backend/retail/admin.py

from django.contrib import admin
from .models import (
    Account,
    AccountMembership,
    Activity,
    BalanceAdjustment,
    Customer,
    Item,
    Payment,
    Purchase,
    Sale,
    StockAdjustment,
    Supplier,
)


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'account', 'quantity', 'selling_price', 'pieces_per_unit')
    list_filter = ('account',)
    search_fields = ('name',)
    readonly_fields = ('quantity',)


@admin.register(Customer, Supplier)
class CounterpartyAdmin(admin.ModelAdmin):
    list_display = ('name', 'account', 'balance')
    list_filter = ('account',)
    search_fields = ('name', 'phone')
    readonly_fields = ('balance',)


admin.site.register(Account)
admin.site.register(AccountMembership)
admin.site.register(Sale)
admin.site.register(Purchase)
admin.site.register(Payment)
admin.site.register(StockAdjustment)
admin.site.register(BalanceAdjustment)
admin.site.register(Activity)
