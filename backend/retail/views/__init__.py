"""Expose public API views for the application."""

from .adjustments import BalanceAdjustmentViewSet, StockAdjustmentViewSet
from .errors import ledger_exception_handler
from .payments import PaymentViewSet
from .purchases import PurchaseViewSet
from .returns import CustomerReturnViewSet, SupplierReturnViewSet
from .sales import SaleViewSet

__all__ = [
    "BalanceAdjustmentViewSet",
    "CustomerReturnViewSet",
    "PaymentViewSet",
    "PurchaseViewSet",
    "SaleViewSet",
    "StockAdjustmentViewSet",
    "SupplierReturnViewSet",
    "ledger_exception_handler",
]
