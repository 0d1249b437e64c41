from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from duebook.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    entity_type = Column(String(32), nullable=False)
    entity_id = Column(Integer, nullable=True)
    action = Column(String(64), nullable=False)
    performed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    old_value = Column(Text, nullable=True)  # JSON snapshot
    new_value = Column(Text, nullable=True)  # JSON snapshot
    performed_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    performer = relationship("User")
