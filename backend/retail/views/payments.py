from ..models import Payment
from ..serializers import PaymentSerializer, PaymentWriteSerializer
from .utils import LedgerDocumentViewSet


class PaymentViewSet(LedgerDocumentViewSet):
    """Payments against customer or supplier balances."""

    model = Payment
    write_serializer_class = PaymentWriteSerializer
    read_serializer_class = PaymentSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        customer_id = self.request.query_params.get('customer')
        supplier_id = self.request.query_params.get('supplier')
        if customer_id:
            queryset = queryset.filter(customer_id=customer_id)
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)
        return queryset
