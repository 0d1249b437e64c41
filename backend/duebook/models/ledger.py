"""
CustomerLedger: append-only ledger entries.
Entries are never updated or deleted. A REVERSAL is a new entry whose
reference_entry_id points at the BAKI/PAID entry it cancels.
"""
from sqlalchemy import Column, Integer, ForeignKey, Numeric, DateTime, Date, String, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from duebook.db.base import Base
from duebook.models.enums import LedgerEntryType


class CustomerLedger(Base):
    __tablename__ = "customer_ledger"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    entry_type = Column(Enum(LedgerEntryType, name="ledger_entry_type"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    balance_after = Column(Numeric(12, 2), nullable=False)
    reference_entry_id = Column(Integer, ForeignKey("customer_ledger.id"), nullable=True, index=True)
    notes = Column(String(500), nullable=True)
    entry_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", backref="ledger_entries")
    shop = relationship("Shop")
    created_by_user = relationship("User")
    reference_entry = relationship("CustomerLedger", remote_side=[id])

    def __repr__(self):
        return f"<CustomerLedger id={self.id} {self.entry_type} amount={self.amount} balance_after={self.balance_after}>"
