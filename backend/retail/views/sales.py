"""Sales API views."""

from ..models import Sale
from ..serializers import SaleReadSerializer, SaleWriteSerializer
from .utils import LedgerDocumentViewSet


class SaleViewSet(LedgerDocumentViewSet):
    """Create and list sales. Sales are never edited or deleted."""

    model = Sale
    write_serializer_class = SaleWriteSerializer
    read_serializer_class = SaleReadSerializer

    def get_queryset(self):
        return (
            super()
            .get_queryset()
            .select_related('customer')
            .prefetch_related('items__item')
            .order_by('-created_at', '-id')
        )
