"""URL routing for the retail ledger API."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    BalanceAdjustmentViewSet,
    CustomerReturnViewSet,
    PaymentViewSet,
    PurchaseViewSet,
    SaleViewSet,
    StockAdjustmentViewSet,
    SupplierReturnViewSet,
)

router = DefaultRouter()
router.register(r'sales', SaleViewSet, basename='sale')
router.register(r'purchases', PurchaseViewSet, basename='purchase')
router.register(r'customer-returns', CustomerReturnViewSet, basename='customer-return')
router.register(r'supplier-returns', SupplierReturnViewSet, basename='supplier-return')
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'stock-adjustments', StockAdjustmentViewSet, basename='stock-adjustment')
router.register(r'balance-adjustments', BalanceAdjustmentViewSet, basename='balance-adjustment')

urlpatterns = [
    path('', include(router.urls)),
]
