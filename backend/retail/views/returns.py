"""Customer and supplier return views."""

from ..models import CustomerReturn, SupplierReturn
from ..serializers import (
    CustomerReturnSerializer,
    CustomerReturnWriteSerializer,
    SupplierReturnSerializer,
    SupplierReturnWriteSerializer,
)
from .utils import LedgerDocumentViewSet


class CustomerReturnViewSet(LedgerDocumentViewSet):
    model = CustomerReturn
    write_serializer_class = CustomerReturnWriteSerializer
    read_serializer_class = CustomerReturnSerializer

    def get_queryset(self):
        queryset = super().get_queryset().select_related('sale_item')
        sale_id = self.request.query_params.get('sale')
        if sale_id:
            queryset = queryset.filter(sale_item__sale_id=sale_id)
        return queryset


class SupplierReturnViewSet(LedgerDocumentViewSet):
    model = SupplierReturn
    write_serializer_class = SupplierReturnWriteSerializer
    read_serializer_class = SupplierReturnSerializer

    def get_queryset(self):
        queryset = super().get_queryset().select_related('purchase_item')
        purchase_id = self.request.query_params.get('purchase')
        if purchase_id:
            queryset = queryset.filter(purchase_item__purchase_id=purchase_id)
        return queryset
