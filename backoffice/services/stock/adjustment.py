"""
Stock Adjustment Service
Atomic, concurrency-safe increase and decrease of product stock
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from backoffice.core.database import Database
from backoffice.core.exceptions import (
    InsufficientStock, InvalidQuantity, ProductInactive, StockError, StockInvariantError
)
from backoffice.core.logging import get_logger
from backoffice.core.security import Actor
from backoffice.models.stock import StockLog
from backoffice.schemas.common import normalize_page
from backoffice.schemas.stock import MovementKind, StockLogPage, StockLogRead

from .accessor import StockAccessor
from .ledger import LedgerStore

logger = get_logger("stock")


def validate_quantity(quantity) -> int:
    """Reject anything but a positive int before any I/O happens"""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)
    return quantity


def apply_movement(
    db: Session,
    kind: MovementKind,
    product_id: int,
    quantity: int,
    actor: Actor,
    notes: Optional[str] = None,
) -> StockLog:
    """
    Lock, validate, write and journal one stock movement

    Runs inside the caller's unit of work. Status and sufficiency are
    checked against the row as read under the lock, so the check and the
    write cannot interleave with another writer on the same product.
    """
    accessor = StockAccessor(db)
    product = accessor.lock(product_id)

    if not product.is_active:
        raise ProductInactive(product.id, product.status)

    stock_before = product.stock
    if kind == MovementKind.INCREASE:
        stock_after = stock_before + quantity
    elif kind == MovementKind.DECREASE:
        if stock_before < quantity:
            raise InsufficientStock(product.id, stock_before, quantity)
        stock_after = stock_before - quantity
    else:
        raise StockInvariantError(f"Unsupported movement kind: {kind}")

    accessor.write(product, stock_after, actor.id)

    return LedgerStore(db).append(StockLog(
        product_id=product.id,
        transaction_type=kind.value,
        quantity=quantity,
        stock_before=stock_before,
        stock_after=stock_after,
        notes=notes,
        created_by=actor.id,
    ))


class StockAdjustmentService:
    """
    Stock Adjustment Engine

    Sole writer of ``products.stock``. Holds no state besides the
    database handle, so one instance may serve any number of threads.
    """

    def __init__(self, database: Database):
        self.database = database
        self.settings = database.settings

    def increase(self, product_id: int, quantity: int, actor: Actor, notes: Optional[str] = None) -> StockLog:
        """Increase stock; returns the committed ledger entry"""
        return self._adjust(MovementKind.INCREASE, product_id, quantity, actor, notes)

    def decrease(self, product_id: int, quantity: int, actor: Actor, notes: Optional[str] = None) -> StockLog:
        """Decrease stock; fails with InsufficientStock rather than going negative"""
        return self._adjust(MovementKind.DECREASE, product_id, quantity, actor, notes)

    def _adjust(
        self,
        kind: MovementKind,
        product_id: int,
        quantity: int,
        actor: Actor,
        notes: Optional[str],
    ) -> StockLog:
        validate_quantity(quantity)

        try:
            with self.database.unit_of_work() as db:
                entry = apply_movement(db, kind, product_id, quantity, actor, notes)
        except StockError as e:
            logger.info(f"{kind.value} of {quantity} for product {product_id} by user {actor.id} rejected: {e.kind}")
            raise

        logger.info(
            f"{kind.value} product {product_id} by {quantity} "
            f"({entry.stock_before} -> {entry.stock_after}) by user {actor.id}, ledger entry {entry.id}"
        )
        return entry

    def get_stock_logs(
        self,
        product_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
        transaction_type: Optional[MovementKind] = None,
    ) -> StockLogPage:
        """Paged ledger entries for a product, newest first"""
        page, page_size = normalize_page(
            page,
            page_size if page_size is not None else self.settings.LEDGER_DEFAULT_PAGE_SIZE,
            self.settings.LEDGER_DEFAULT_PAGE_SIZE,
            self.settings.LEDGER_MAX_PAGE_SIZE,
        )
        with self.database.session() as db:
            entries, total = LedgerStore(db).list_by_product(
                product_id,
                page,
                page_size,
                transaction_type.value if transaction_type else None,
            )

        return StockLogPage(
            logs=[StockLogRead.model_validate(entry) for entry in entries],
            total=total,
            page=page,
            page_size=page_size,
        )

    def get_recent_logs(self, limit: Optional[int] = None) -> List[StockLog]:
        """Latest ledger entries across all products"""
        if limit is None or limit < 1 or limit > self.settings.LEDGER_MAX_PAGE_SIZE:
            limit = self.settings.RECENT_LOGS_LIMIT
        with self.database.session() as db:
            return LedgerStore(db).list_recent(limit)
