"""
Store Model
Destination of outbound stock movements
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func

from backoffice.core.database import Base


class Store(Base):
    """Retail store receiving stock withdrawn from the warehouse"""
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    address = Column(Text)
    phone = Column(String(30))
    status = Column(String(10), nullable=False, default="ACTIVE")

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="valid_status"),
    )

    def __repr__(self):
        return f"<Store {self.id} {self.code}>"
