"""
Stock Movements Service
Directional movements: goods received (INCREASE) and goods sent to a store (DECREASE)
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from backoffice.core.database import Database
from backoffice.core.exceptions import InvalidMovementContext, StockError
from backoffice.core.logging import get_logger
from backoffice.core.security import Actor
from backoffice.models.stock import StockTransaction
from backoffice.models.store import Store
from backoffice.schemas.common import normalize_page
from backoffice.schemas.stock import MovementKind, TransactionCreate, TransactionType

from .adjustment import apply_movement, validate_quantity

logger = get_logger("stock")

CENT = Decimal("0.01")


def validate_movement_context(transaction_type: TransactionType, store_id: Optional[int]) -> None:
    """Outbound movements name a destination store; inbound movements must not"""
    if transaction_type == TransactionType.DECREASE and store_id is None:
        raise InvalidMovementContext("Store ID is required for DECREASE transactions")
    if transaction_type == TransactionType.INCREASE and store_id is not None:
        raise InvalidMovementContext("Store ID should not be provided for INCREASE transactions")


def compute_total_amount(unit_price: Decimal, quantity: int) -> Decimal:
    """Valuation of a movement, rounded half-up to cents"""
    return (Decimal(unit_price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


class MovementRecorder:
    """
    Movement Recorder

    Shares the adjustment engine's locked read-validate-write path and
    additionally records the movement with its destination and valuation.
    """

    def __init__(self, database: Database):
        self.database = database
        self.settings = database.settings

    def record(self, request: TransactionCreate, actor: Actor) -> StockTransaction:
        """
        Record a directional movement

        Cheap validation happens before the unit of work opens, so a
        malformed request never takes a row lock.
        """
        validate_quantity(request.quantity)
        validate_movement_context(request.transaction_type, request.store_id)
        total_amount = compute_total_amount(request.unit_price, request.quantity)
        kind = MovementKind(request.transaction_type.value)

        try:
            with self.database.unit_of_work() as db:
                if request.store_id is not None:
                    store = db.get(Store, request.store_id)
                    if store is None:
                        raise InvalidMovementContext(f"Store {request.store_id} not found")
                    if store.status != "ACTIVE":
                        raise InvalidMovementContext(f"Store {request.store_id} is inactive")

                entry = apply_movement(db, kind, request.product_id, request.quantity, actor, request.notes)

                movement = StockTransaction(
                    transaction_type=request.transaction_type.value,
                    product_id=request.product_id,
                    store_id=request.store_id,
                    stock_log_id=entry.id,
                    quantity=request.quantity,
                    unit_price=request.unit_price,
                    total_amount=total_amount,
                    notes=request.notes,
                    created_by=actor.id,
                )
                db.add(movement)
                db.flush()
                db.refresh(movement)
        except StockError as e:
            logger.info(
                f"{kind.value} movement of {request.quantity} for product {request.product_id} "
                f"by user {actor.id} rejected: {e.kind}"
            )
            raise

        logger.info(
            f"Recorded {kind.value} movement {movement.id} for product {movement.product_id}"
            f"{' to store ' + str(movement.store_id) if movement.store_id else ''}: "
            f"{movement.quantity} x {movement.unit_price} = {movement.total_amount}"
        )
        return movement

    def _limit(self, limit: Optional[int]) -> int:
        _, limit = normalize_page(
            1,
            limit if limit is not None else self.settings.TRANSACTIONS_DEFAULT_LIMIT,
            self.settings.TRANSACTIONS_DEFAULT_LIMIT,
            self.settings.LEDGER_MAX_PAGE_SIZE,
        )
        return limit

    def list_transactions(self, page: int = 1, limit: Optional[int] = None) -> Tuple[List[StockTransaction], int, int, int]:
        """All movements, newest first; returns (rows, total, page, limit)"""
        page = max(page, 1)
        limit = self._limit(limit)
        with self.database.session() as db:
            query = db.query(StockTransaction)
            total = query.count()
            rows = (
                query.order_by(StockTransaction.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        return rows, total, page, limit

    def list_by_product(self, product_id: int, limit: Optional[int] = None) -> List[StockTransaction]:
        with self.database.session() as db:
            return (
                db.query(StockTransaction)
                .filter(StockTransaction.product_id == product_id)
                .order_by(StockTransaction.id.desc())
                .limit(self._limit(limit))
                .all()
            )

    def list_by_store(self, store_id: int, limit: Optional[int] = None) -> List[StockTransaction]:
        with self.database.session() as db:
            return (
                db.query(StockTransaction)
                .filter(StockTransaction.store_id == store_id)
                .order_by(StockTransaction.id.desc())
                .limit(self._limit(limit))
                .all()
            )
