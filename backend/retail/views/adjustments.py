"""Manual stock and balance corrections."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import BalanceAdjustment, StockAdjustment
from ..serializers import (
    BalanceAdjustmentSerializer,
    BalanceAdjustmentWriteSerializer,
    BulkBalanceAdjustmentSerializer,
    BulkStockAdjustmentSerializer,
    StockAdjustmentSerializer,
    StockAdjustmentWriteSerializer,
    StockLevelSerializer,
)
from .utils import LedgerDocumentViewSet, get_request_account


def _bulk_response(result):
    return Response(
        {
            'updated': result['updated'],
            'skipped': result['skipped'],
            'errors': result['errors'],
        },
        status=status.HTTP_200_OK,
    )


class StockAdjustmentViewSet(LedgerDocumentViewSet):
    model = StockAdjustment
    write_serializer_class = StockAdjustmentWriteSerializer
    read_serializer_class = StockAdjustmentSerializer

    def get_queryset(self):
        queryset = super().get_queryset().select_related('item')
        item_id = self.request.query_params.get('item')
        if item_id:
            queryset = queryset.filter(item_id=item_id)
        return queryset

    def create(self, request, *args, **kwargs):
        data = request.data.copy()
        header_key = request.headers.get('Idempotency-Key')
        if header_key and not data.get('idempotency_key'):
            data['idempotency_key'] = header_key
        serializer = self.get_serializer(data=data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        adjustment = serializer.instance
        read_serializer = self.read_serializer_class(adjustment, context=self.get_serializer_context())
        # A replayed key answers with the original adjustment.
        code = status.HTTP_200_OK if getattr(adjustment, 'replayed', False) else status.HTTP_201_CREATED
        return Response(read_serializer.data, status=code)

    @action(detail=False, methods=['post'], url_path='set-level')
    def set_level(self, request):
        serializer = StockLevelSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        adjustment = serializer.save(created_by=request.user, account=get_request_account(request))
        if adjustment is None:
            return Response({'detail': 'Quantity unchanged.'}, status=status.HTTP_200_OK)
        read_serializer = self.read_serializer_class(adjustment, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='bulk')
    def bulk(self, request):
        serializer = BulkStockAdjustmentSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        result = serializer.save(created_by=request.user, account=get_request_account(request))
        return _bulk_response(result)


class BalanceAdjustmentViewSet(LedgerDocumentViewSet):
    """Administrative balance overrides, one at a time or in bulk."""

    model = BalanceAdjustment
    write_serializer_class = BalanceAdjustmentWriteSerializer
    read_serializer_class = BalanceAdjustmentSerializer

    def create(self, request, *args, **kwargs):
        if 'adjustments' not in request.data:
            return super().create(request, *args, **kwargs)
        serializer = BulkBalanceAdjustmentSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        result = serializer.save(created_by=request.user, account=get_request_account(request))
        return _bulk_response(result)
