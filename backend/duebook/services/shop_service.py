"""Shops and shop membership."""
import logging
from typing import List

from sqlalchemy.orm import Session

from duebook.core.audit import AuditTrail
from duebook.core.exceptions import BusinessError
from duebook.core.permissions import accessible_shop_ids, authorize, require_owner
from duebook.models.enums import AuditAction, AuditEntity, ShopUserRole, ShopUserStatus
from duebook.models.shop import Shop
from duebook.models.shop_user import ShopUser
from duebook.models.user import User
from duebook.schemas.shop import ShopCreate, ShopUpdate
from duebook.services.audit_service import record_audit

logger = logging.getLogger(__name__)


def shop_snapshot(shop: Shop) -> dict:
    return {"id": shop.id, "name": shop.name, "address": shop.address, "isActive": shop.is_active}


def membership_snapshot(membership: ShopUser) -> dict:
    return {
        "id": membership.id,
        "shopId": membership.shop_id,
        "userId": membership.user_id,
        "role": membership.role.value,
        "status": membership.status.value,
    }


def _commit(db: Session):
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _audit_shop(db: Session, shop_id: int, action: AuditAction, user_id: int, old=None, new=None):
    record_audit(db, shop_id, AuditEntity.SHOP, shop_id, action, user_id, old, new)


def create_shop(db: Session, data: ShopCreate, user_id: int) -> Shop:
    """Create a shop; the creator becomes its ACTIVE OWNER."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise BusinessError.user_not_found()

    shop = Shop(name=data.name.strip(), address=data.address.strip() if data.address else None, is_active=True)
    db.add(shop)
    db.flush()
    db.add(ShopUser(shop_id=shop.id, user_id=user.id, role=ShopUserRole.OWNER, status=ShopUserStatus.ACTIVE))
    _commit(db)
    db.refresh(shop)

    logger.info(f"Shop created: id={shop.id}, owner={user_id}")
    _audit_shop(db, shop.id, AuditAction.SHOP_CREATED, user_id, None, shop_snapshot(shop))
    return shop


def update_shop(db: Session, shop_id: int, data: ShopUpdate, user_id: int) -> Shop:
    shop = get_shop(db, shop_id, user_id)
    require_owner(db, shop_id, user_id, "You don't have permission to update this shop")

    old_value = shop_snapshot(shop)
    shop.name = data.name.strip()
    shop.address = data.address.strip() if data.address else None
    if data.is_active is not None:
        shop.is_active = data.is_active
    _commit(db)
    db.refresh(shop)

    logger.info(f"Shop updated: id={shop.id}")
    _audit_shop(db, shop.id, AuditAction.SHOP_UPDATED, user_id, old_value, shop_snapshot(shop))
    return shop


def list_shops_for_user(db: Session, user_id: int) -> List[Shop]:
    shop_ids = accessible_shop_ids(db, user_id)
    if not shop_ids:
        return []
    return (
        db.query(Shop)
        .filter(Shop.id.in_(shop_ids))
        .order_by(Shop.created_at.desc(), Shop.id.desc())
        .all()
    )


def get_shop(db: Session, shop_id: int, user_id: int) -> Shop:
    shop = None
    if shop_id in accessible_shop_ids(db, user_id):
        shop = db.query(Shop).filter(Shop.id == shop_id).first()
    if shop is None:
        raise BusinessError.shop_not_found(f"id {shop_id} for user {user_id}")
    return shop


def _active_owner_count(db: Session, shop_id: int) -> int:
    return (
        db.query(ShopUser)
        .filter(
            ShopUser.shop_id == shop_id,
            ShopUser.role == ShopUserRole.OWNER,
            ShopUser.status == ShopUserStatus.ACTIVE,
        )
        .count()
    )


def _shop_member(db: Session, shop_id: int, shop_user_id: int) -> ShopUser:
    membership = db.query(ShopUser).filter(ShopUser.id == shop_user_id).first()
    if membership is None:
        raise BusinessError.shop_user_not_found()
    if membership.shop_id != shop_id:
        raise BusinessError.validation_error("User does not belong to this shop")
    return membership


def _guard_last_owner(db: Session, membership: ShopUser):
    if (
        membership.role == ShopUserRole.OWNER
        and membership.status == ShopUserStatus.ACTIVE
        and _active_owner_count(db, membership.shop_id) <= 1
    ):
        raise BusinessError.conflict("Cannot remove the only owner from the shop", "LAST_OWNER")


def add_user_to_shop(db: Session, shop_id: int, user_phone: str, role: ShopUserRole, current_user_id: int) -> ShopUser:
    """
    Add a registered user (looked up by phone) to the shop.
    A previously removed member is reactivated with the new role.
    """
    if db.query(Shop.id).filter(Shop.id == shop_id).first() is None:
        raise BusinessError.shop_not_found(f"id {shop_id}")
    require_owner(db, shop_id, current_user_id, "You must be the shop owner to add users")

    user = db.query(User).filter(User.phone == user_phone).first()
    if user is None:
        raise BusinessError.user_not_found(f"User with phone {user_phone} not found in the system")

    membership = (
        db.query(ShopUser)
        .filter(ShopUser.shop_id == shop_id, ShopUser.user_id == user.id)
        .first()
    )
    if membership is not None and membership.status != ShopUserStatus.INACTIVE:
        raise BusinessError.conflict("This user is already a member of this shop", "ALREADY_MEMBER")

    if membership is None:
        membership = ShopUser(shop_id=shop_id, user_id=user.id, role=role, status=ShopUserStatus.ACTIVE)
        db.add(membership)
    else:
        membership.role = role
        membership.status = ShopUserStatus.ACTIVE
    _commit(db)
    db.refresh(membership)

    AuditTrail.log_permission_change(shop_id, user.id, current_user_id, role.value, ShopUserStatus.ACTIVE.value)
    _audit_shop(db, shop_id, AuditAction.SHOP_USER_ADDED, current_user_id, None, membership_snapshot(membership))
    return membership


def list_shop_users(db: Session, shop_id: int, current_user_id: int) -> List[ShopUser]:
    """ACTIVE members of the shop. Any ACTIVE member may list them."""
    if db.query(Shop.id).filter(Shop.id == shop_id).first() is None:
        raise BusinessError.shop_not_found(f"id {shop_id}")
    authorize(db, shop_id, current_user_id)
    return (
        db.query(ShopUser)
        .filter(ShopUser.shop_id == shop_id, ShopUser.status == ShopUserStatus.ACTIVE)
        .order_by(ShopUser.joined_at.asc(), ShopUser.id.asc())
        .all()
    )


def update_user_role(
    db: Session, shop_id: int, shop_user_id: int, new_role: ShopUserRole, current_user_id: int
) -> ShopUser:
    require_owner(db, shop_id, current_user_id, "You must be the shop owner to update roles")
    membership = _shop_member(db, shop_id, shop_user_id)
    if new_role != ShopUserRole.OWNER:
        _guard_last_owner(db, membership)

    old_value = membership_snapshot(membership)
    membership.role = new_role
    _commit(db)
    db.refresh(membership)

    AuditTrail.log_permission_change(
        shop_id, membership.user_id, current_user_id, new_role.value, membership.status.value
    )
    _audit_shop(db, shop_id, AuditAction.SHOP_USER_UPDATED, current_user_id, old_value, membership_snapshot(membership))
    return membership


def remove_user_from_shop(db: Session, shop_id: int, shop_user_id: int, current_user_id: int) -> ShopUser:
    """Soft delete: the membership row stays, with status INACTIVE."""
    require_owner(db, shop_id, current_user_id, "You must be the shop owner to remove users")
    membership = _shop_member(db, shop_id, shop_user_id)
    _guard_last_owner(db, membership)

    old_value = membership_snapshot(membership)
    membership.status = ShopUserStatus.INACTIVE
    _commit(db)
    db.refresh(membership)

    AuditTrail.log_permission_change(
        shop_id, membership.user_id, current_user_id, membership.role.value, ShopUserStatus.INACTIVE.value
    )
    _audit_shop(db, shop_id, AuditAction.SHOP_USER_REMOVED, current_user_id, old_value, membership_snapshot(membership))
    return membership
