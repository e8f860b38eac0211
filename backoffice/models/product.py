"""
Product Model
Catalog product row; stock is only written by the stock adjustment engine
"""
from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Text,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.sql import func

from backoffice.core.database import Base


class Product(Base):
    """
    Product Record

    Catalog CRUD owns everything except ``stock``; ``stock`` changes only
    inside a stock adjustment unit of work, under the row lock.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Product ID")
    sku = Column(String(50), unique=True, nullable=False, doc="Stock keeping unit")
    name = Column(String(200), nullable=False, doc="Product name")
    description = Column(Text, doc="Product description")

    price = Column(Numeric(12, 2), nullable=False, default=0, doc="Selling price")
    cost = Column(Numeric(12, 2), nullable=False, default=0, doc="Unit cost")

    stock = Column(Integer, nullable=False, default=0, doc="Quantity on hand")
    status = Column(String(10), nullable=False, default="ACTIVE", doc="ACTIVE or INACTIVE")

    # Audit Trail
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), doc="Created by user")
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), doc="Last updated by user")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="valid_status"),
        Index("idx_products_status", "status"),
    )

    __mapper_args__ = {"eager_defaults": True}

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    def __repr__(self):
        return f"<Product {self.id} {self.sku} stock={self.stock} {self.status}>"
