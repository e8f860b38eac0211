"""
Stock Services
Ledger, locked stock access, adjustment engine and movement recorder
"""

from .accessor import StockAccessor
from .ledger import LedgerStore
from .adjustment import StockAdjustmentService, apply_movement, validate_quantity
from .movements import MovementRecorder, compute_total_amount, validate_movement_context

__all__ = [
    "StockAccessor",
    "LedgerStore",
    "StockAdjustmentService",
    "apply_movement",
    "validate_quantity",
    "MovementRecorder",
    "compute_total_amount",
    "validate_movement_context",
]
