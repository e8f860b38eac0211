"""
Stock Ledger Models
Append-only records of every stock movement
"""
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Text,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base, insert_timestamp


class StockLog(Base):
    """
    Stock Log - ledger entry

    One row per committed stock change, written in the same transaction
    as the product update. Rows are never updated or deleted.
    """
    __tablename__ = "stock_logs"

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Ledger entry ID")
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, doc="Product ID"
    )
    transaction_type = Column(String(12), nullable=False, doc="INCREASE, DECREASE or ADJUSTMENT")
    quantity = Column(Integer, nullable=False, doc="Magnitude moved")
    stock_before = Column(Integer, nullable=False, doc="Stock before this movement")
    stock_after = Column(Integer, nullable=False, doc="Stock after this movement")
    notes = Column(Text, doc="Caller supplied notes")

    # Audit Trail
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=insert_timestamp(),
        server_default=func.current_timestamp(),
        doc="Set by the INSERT, under the product lock"
    )

    __table_args__ = (
        CheckConstraint("transaction_type IN ('INCREASE', 'DECREASE', 'ADJUSTMENT')", name="valid_type"),
        CheckConstraint("quantity > 0", name="positive_quantity"),
        CheckConstraint("stock_before >= 0 AND stock_after >= 0", name="non_negative_snapshot"),
        CheckConstraint(
            "(transaction_type = 'INCREASE' AND stock_after = stock_before + quantity) OR "
            "(transaction_type = 'DECREASE' AND stock_after = stock_before - quantity) OR "
            "transaction_type = 'ADJUSTMENT'",
            name="consistent_snapshot"
        ),
        Index("idx_stock_logs_product_id", "product_id", "id"),
        Index("idx_stock_logs_created", "created_at"),
    )

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self):
        return (
            f"<StockLog {self.id} product={self.product_id} {self.transaction_type} "
            f"{self.quantity} {self.stock_before}->{self.stock_after}>"
        )


class StockTransaction(Base):
    """
    Stock Transaction - directional movement

    Inbound (INCREASE) movements carry no store; outbound (DECREASE)
    movements name the destination store. Linked to the ledger entry
    written by the same unit of work.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_type = Column(String(10), nullable=False, doc="INCREASE or DECREASE")
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="RESTRICT"), nullable=True)
    stock_log_id = Column(Integer, ForeignKey("stock_logs.id", ondelete="RESTRICT"), nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False, doc="unit_price x quantity")
    notes = Column(Text)

    transaction_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=insert_timestamp(),
        server_default=func.current_timestamp()
    )
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    product = relationship("Product", lazy="joined")
    store = relationship("Store", lazy="joined")
    creator = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("transaction_type IN ('INCREASE', 'DECREASE')", name="valid_type"),
        CheckConstraint("quantity >= 1", name="positive_quantity"),
        CheckConstraint("unit_price >= 0", name="non_negative_price"),
        CheckConstraint(
            "(transaction_type = 'DECREASE' AND store_id IS NOT NULL) OR "
            "(transaction_type = 'INCREASE' AND store_id IS NULL)",
            name="store_matches_direction"
        ),
        Index("idx_transactions_product_date", "product_id", "transaction_date"),
        Index("idx_transactions_store_date", "store_id", "transaction_date"),
    )

    __mapper_args__ = {"eager_defaults": True}

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None

    @property
    def store_name(self):
        return self.store.name if self.store is not None else None

    @property
    def created_by_name(self):
        return self.creator.full_name if self.creator is not None else None
