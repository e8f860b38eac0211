"""
User Model
Principals referenced by ledger and movement rows
"""
from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint
from sqlalchemy.sql import func

from backoffice.core.database import Base


class User(Base):
    """System users"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    role = Column(String(10), nullable=False, default="STAFF")  # ADMIN or STAFF
    status = Column(String(10), nullable=False, default="ACTIVE")

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'STAFF')", name="valid_role"),
    )
