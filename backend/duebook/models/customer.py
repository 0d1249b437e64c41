from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from duebook.db.base import Base


class Customer(Base):
    """
    A shop's customer and their running balance.

    current_balance is a cached running total:
        opening_balance + sum(effective BAKI) - sum(effective PAID)
    It is only mutated by the ledger service (and the customer update endpoint).
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    entity_name = Column(String(255), nullable=True)
    phone = Column(String(10), nullable=False)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    current_balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    shop = relationship("Shop", backref="customers")
