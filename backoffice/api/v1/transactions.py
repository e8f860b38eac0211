"""Stock Transaction API endpoints"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from backoffice.api import deps
from backoffice.core.security import Actor
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.stock import TransactionCreate, TransactionPage, TransactionRead
from backoffice.services.stock import MovementRecorder

router = APIRouter()


@router.post(
    "",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 409, 503)},
)
def create_transaction(
    transaction_in: TransactionCreate,
    recorder: MovementRecorder = Depends(deps.get_movement_recorder),
    actor: Actor = Depends(deps.get_current_actor),
):
    """
    Record a stock movement.

    DECREASE requires a destination store; INCREASE must not have one.
    The total amount is always computed from unit price and quantity.
    """
    return recorder.record(transaction_in, actor)


@router.get("", response_model=TransactionPage)
def list_transactions(
    page: int = Query(1, description="Page number"),
    limit: Optional[int] = Query(None, description="Page size"),
    recorder: MovementRecorder = Depends(deps.get_movement_recorder),
    actor: Actor = Depends(deps.get_current_actor),
):
    """All movements, newest first."""
    rows, total, page, limit = recorder.list_transactions(page, limit)
    return TransactionPage(
        transactions=[TransactionRead.model_validate(row) for row in rows],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/product/{product_id}", response_model=List[TransactionRead])
def list_product_transactions(
    product_id: int,
    limit: Optional[int] = Query(None),
    recorder: MovementRecorder = Depends(deps.get_movement_recorder),
    actor: Actor = Depends(deps.get_current_actor),
):
    return recorder.list_by_product(product_id, limit)


@router.get("/store/{store_id}", response_model=List[TransactionRead])
def list_store_transactions(
    store_id: int,
    limit: Optional[int] = Query(None),
    recorder: MovementRecorder = Depends(deps.get_movement_recorder),
    actor: Actor = Depends(deps.get_current_actor),
):
    return recorder.list_by_store(store_id, limit)
