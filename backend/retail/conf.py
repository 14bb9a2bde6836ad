"""Engine options read from the ``RETAIL_LEDGER`` settings dict."""

from typing import Any

from django.conf import settings

DEFAULTS = {
    # CREDIT returns may push a balance below zero, leaving a credit note.
    "ALLOW_CREDIT_NOTES": True,
    "BULK_ADJUSTMENT_LIMIT": 500,
}


def ledger_setting(name: str) -> Any:
    """Return the configured value for ``name`` or its default."""

    overrides = getattr(settings, "RETAIL_LEDGER", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
