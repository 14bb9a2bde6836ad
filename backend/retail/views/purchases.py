from ..models import Purchase
from ..serializers import PurchaseReadSerializer, PurchaseWriteSerializer
from .utils import LedgerDocumentViewSet


class PurchaseViewSet(LedgerDocumentViewSet):
    model = Purchase
    write_serializer_class = PurchaseWriteSerializer
    read_serializer_class = PurchaseReadSerializer

    def get_queryset(self):
        return (
            super()
            .get_queryset()
            .select_related('supplier')
            .prefetch_related('items__item')
            .order_by('-created_at', '-id')
        )
