"""Utility helpers shared across API view modules."""

from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Account


def get_request_account(request):
    """Return the active account for ``request.user`` or raise a permission error."""

    account = Account.for_user(getattr(request, "user", None))
    if account is None:
        raise PermissionDenied("No active account available for this user.")
    return account


class LedgerDocumentViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """Append-only documents: create through the engine, then read back.

    Subclasses name the ``model`` plus a write and a read serializer.
    """

    permission_classes = [IsAuthenticated]
    model = None
    write_serializer_class = None
    read_serializer_class = None

    def get_serializer_class(self):
        if self.action == 'create':
            return self.write_serializer_class
        return self.read_serializer_class

    def get_queryset(self):
        account = get_request_account(self.request)
        return self.model.objects.filter(account=account)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        read_serializer = self.read_serializer_class(
            serializer.instance, context=self.get_serializer_context()
        )
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def perform_create(self, serializer):
        account = get_request_account(self.request)
        serializer.save(created_by=self.request.user, account=account)
