"""Stock Ledger Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


# Enums
class MovementKind(str, Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    ADJUSTMENT = "ADJUSTMENT"  # reserved, never written by the engine


class TransactionType(str, Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"


# Adjustment Schemas
class StockAdjustmentRequest(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=1000)


class StockLogRead(BaseModel):
    id: int
    product_id: int
    transaction_type: MovementKind
    quantity: int
    stock_before: int
    stock_after: int
    notes: Optional[str] = None
    created_by: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockAdjustmentResponse(BaseModel):
    product_id: int
    stock: int
    entry: StockLogRead


class StockLogPage(BaseModel):
    logs: List[StockLogRead]
    total: int
    page: int
    page_size: int


# Movement Schemas
class TransactionCreate(BaseModel):
    """
    Directional movement request

    ``store_id`` is required for DECREASE and must be absent for INCREASE;
    the movement recorder enforces this so the failure carries its own
    error kind. The total is never accepted from the caller.
    """
    transaction_type: TransactionType
    product_id: int
    store_id: Optional[int] = None
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)


class TransactionRead(BaseModel):
    id: int
    transaction_type: TransactionType
    product_id: int
    product_name: Optional[str] = None
    store_id: Optional[int] = None
    store_name: Optional[str] = None
    stock_log_id: int
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    transaction_date: datetime
    created_by: int
    created_by_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionPage(BaseModel):
    transactions: List[TransactionRead]
    total: int
    page: int
    limit: int
