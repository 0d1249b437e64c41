from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from duebook.db.base import Base


class User(Base):
    """Account owned by the authentication service; read-only here."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(10), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
