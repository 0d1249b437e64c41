"""
ShopUser: membership of a user in a shop.
Role gates writes (OWNER/STAFF) vs read-only (VIEWER). Rows are never deleted;
removal flips status to INACTIVE.
"""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from duebook.db.base import Base
from duebook.models.enums import ShopUserRole, ShopUserStatus


class ShopUser(Base):
    __tablename__ = "shop_users"
    __table_args__ = (UniqueConstraint("shop_id", "user_id"),)

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(ShopUserRole, name="shop_user_role"), nullable=False)
    status = Column(Enum(ShopUserStatus, name="shop_user_status"), nullable=False, default=ShopUserStatus.ACTIVE)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    shop = relationship("Shop", backref="members")
    user = relationship("User", backref="memberships")

    def __repr__(self):
        return f"<ShopUser shop={self.shop_id} user={self.user_id} role={self.role} status={self.status}>"
