"""Translate engine failures into HTTP responses."""

from decimal import Decimal

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..exceptions import ConcurrencyConflict, LedgerError, NotFound

STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ConcurrencyConflict, status.HTTP_409_CONFLICT),
)


def _plain(value):
    if isinstance(value, Decimal):
        return str(value)
    return value


def ledger_exception_handler(exc, context):
    """DRF exception handler that understands :class:`LedgerError`."""

    if not isinstance(exc, LedgerError):
        return exception_handler(exc, context)

    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            status_code = code
            break

    body = {key: _plain(value) for key, value in exc.detail.items()}
    body.update({"error": exc.message, "code": exc.code})
    return Response(body, status=status_code)
