"""
Ledger Entry Store
Append and read stock ledger entries; there is no update or delete path
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from backoffice.core.exceptions import StockInvariantError
from backoffice.models.stock import StockLog


class LedgerStore:
    """Append-only access to ``stock_logs``"""

    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: StockLog) -> StockLog:
        """
        Add a ledger entry to the caller's open unit of work

        The entry becomes visible only when that unit of work commits.
        """
        if not self.db.in_transaction():
            raise StockInvariantError("Ledger entries can only be appended inside an open unit of work")
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_by_product(
        self,
        product_id: int,
        page: int,
        page_size: int,
        transaction_type: Optional[str] = None,
    ) -> Tuple[List[StockLog], int]:
        """
        Entries for one product, newest first, with the total count

        Ids are drawn by the INSERT while the product row lock is held, so id
        order is commit order for a product.
        """
        query = self.db.query(StockLog).filter(StockLog.product_id == product_id)
        if transaction_type:
            query = query.filter(StockLog.transaction_type == transaction_type)

        total = query.count()
        entries = (
            query.order_by(StockLog.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return entries, total

    def list_recent(self, limit: int) -> List[StockLog]:
        """Most recent entries across all products"""
        return (
            self.db.query(StockLog)
            .order_by(StockLog.id.desc())
            .limit(limit)
            .all()
        )
