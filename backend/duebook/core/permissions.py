"""
Shop access checks.

Any ACTIVE member of a shop may read its data; only OWNER and STAFF may write.
Membership management and shop settings are OWNER-only.
"""
from typing import List

from sqlalchemy.orm import Session

from duebook.core.audit import AuditTrail
from duebook.core.exceptions import BusinessError
from duebook.models.enums import ShopUserRole, ShopUserStatus
from duebook.models.shop_user import ShopUser

WRITE_ROLES = (ShopUserRole.OWNER, ShopUserRole.STAFF)


def authorize(db: Session, shop_id: int, user_id: int) -> ShopUser:
    """Return the caller's ACTIVE membership in the shop, or raise FORBIDDEN."""
    membership = (
        db.query(ShopUser)
        .filter(ShopUser.shop_id == shop_id, ShopUser.user_id == user_id)
        .first()
    )
    if membership is None:
        AuditTrail.log_access_denied("read", shop_id, user_id, "not a member")
        raise BusinessError.forbidden()
    if membership.status != ShopUserStatus.ACTIVE:
        AuditTrail.log_access_denied("read", shop_id, user_id, f"membership {membership.status.value}")
        raise BusinessError.forbidden()
    return membership


def can_write(membership: ShopUser) -> bool:
    return membership.role in WRITE_ROLES


def require_write(membership: ShopUser, message: str = "Only OWNER or STAFF can create ledger entries") -> ShopUser:
    if not can_write(membership):
        AuditTrail.log_access_denied(
            "write", membership.shop_id, membership.user_id, f"{membership.role.value} role"
        )
        raise BusinessError.forbidden(message)
    return membership


def require_owner(db: Session, shop_id: int, user_id: int, message: str = "You must be the shop owner") -> ShopUser:
    membership = authorize(db, shop_id, user_id)
    if membership.role != ShopUserRole.OWNER:
        AuditTrail.log_access_denied("manage", shop_id, user_id, f"{membership.role.value} role")
        raise BusinessError.forbidden(message)
    return membership


def accessible_shop_ids(db: Session, user_id: int) -> List[int]:
    """Shops where the user holds an ACTIVE membership."""
    rows = (
        db.query(ShopUser.shop_id)
        .filter(ShopUser.user_id == user_id, ShopUser.status == ShopUserStatus.ACTIVE)
        .all()
    )
    return [shop_id for (shop_id,) in rows]
