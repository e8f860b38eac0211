"""Stock Adjustment API endpoints"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from backoffice.api import deps
from backoffice.core.security import Actor
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.stock import (
    MovementKind, StockAdjustmentRequest, StockAdjustmentResponse,
    StockLogPage, StockLogRead
)
from backoffice.services.stock import StockAdjustmentService

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post("/increase", response_model=StockAdjustmentResponse, responses=ERROR_RESPONSES)
def increase_stock(
    request: StockAdjustmentRequest,
    service: StockAdjustmentService = Depends(deps.get_adjustment_service),
    actor: Actor = Depends(deps.get_current_actor),
):
    """
    Increase product stock.

    Locks the product row, adds the quantity and appends a ledger entry
    in one transaction.
    """
    entry = service.increase(request.product_id, request.quantity, actor, request.notes)
    return StockAdjustmentResponse(
        product_id=entry.product_id,
        stock=entry.stock_after,
        entry=StockLogRead.model_validate(entry),
    )


@router.post("/decrease", response_model=StockAdjustmentResponse, responses=ERROR_RESPONSES)
def decrease_stock(
    request: StockAdjustmentRequest,
    service: StockAdjustmentService = Depends(deps.get_adjustment_service),
    actor: Actor = Depends(deps.get_current_actor),
):
    """
    Decrease product stock.

    Fails with INSUFFICIENT_STOCK instead of letting stock go negative.
    """
    entry = service.decrease(request.product_id, request.quantity, actor, request.notes)
    return StockAdjustmentResponse(
        product_id=entry.product_id,
        stock=entry.stock_after,
        entry=StockLogRead.model_validate(entry),
    )


@router.get("/logs/recent", response_model=List[StockLogRead])
def get_recent_logs(
    limit: Optional[int] = Query(None, description="Number of entries"),
    service: StockAdjustmentService = Depends(deps.get_adjustment_service),
    actor: Actor = Depends(deps.get_current_actor),
):
    """Latest ledger entries across all products."""
    return [StockLogRead.model_validate(entry) for entry in service.get_recent_logs(limit)]


@router.get("/logs/{product_id}", response_model=StockLogPage)
def get_stock_logs(
    product_id: int,
    page: int = Query(1, description="Page number"),
    page_size: Optional[int] = Query(None, description="Page size"),
    transaction_type: Optional[MovementKind] = Query(None, description="Filter by movement kind"),
    service: StockAdjustmentService = Depends(deps.get_adjustment_service),
    actor: Actor = Depends(deps.get_current_actor),
):
    """Stock history for a product, newest first."""
    return service.get_stock_logs(product_id, page, page_size, transaction_type)
