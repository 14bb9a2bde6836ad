from .ledger import (
    apply_delta,
    bulk_set_absolute,
    expected_balance,
    set_absolute,
)
from .stock import adjust, decrease, increase, set_level

__all__ = [
    "adjust",
    "apply_delta",
    "bulk_set_absolute",
    "decrease",
    "expected_balance",
    "increase",
    "set_absolute",
    "set_level",
]
