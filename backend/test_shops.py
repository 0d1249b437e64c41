import pytest

from duebook.core.exceptions import ApplicationError
from duebook.models.audit_log import AuditLog
from duebook.models.enums import ShopUserRole, ShopUserStatus
from duebook.models.shop_user import ShopUser
from duebook.schemas.shop import ShopCreate, ShopUpdate
from duebook.services import shop_service


def membership_of(db, shop_id, user_id):
    return db.query(ShopUser).filter(ShopUser.shop_id == shop_id, ShopUser.user_id == user_id).one()


def test_creator_becomes_owner(db, seed):
    shop = shop_service.create_shop(db, ShopCreate(name="  Corner Store ", address="Ward 4"), seed.newcomer)

    assert shop.name == "Corner Store"
    member = membership_of(db, shop.id, seed.newcomer)
    assert member.role == ShopUserRole.OWNER
    assert member.status == ShopUserStatus.ACTIVE
    assert [s.id for s in shop_service.list_shops_for_user(db, seed.newcomer)] == [shop.id]
    assert db.query(AuditLog).filter(AuditLog.action == "SHOP_CREATED").count() == 1


def test_only_owner_updates_shop(db, seed):
    with pytest.raises(ApplicationError) as exc:
        shop_service.update_shop(db, seed.shop_id, ShopUpdate(name="Renamed"), seed.staff)
    assert exc.value.error_code == "FORBIDDEN"

    shop = shop_service.update_shop(db, seed.shop_id, ShopUpdate(name="Renamed"), seed.owner)
    assert shop.name == "Renamed"

    with pytest.raises(ApplicationError) as exc:
        shop_service.get_shop(db, seed.shop_id, seed.outsider)
    assert exc.value.error_code == "SHOP_NOT_FOUND"


def test_add_user_by_phone(db, seed):
    member = shop_service.add_user_to_shop(db, seed.shop_id, "9000000006", ShopUserRole.VIEWER, seed.owner)
    assert member.user_id == seed.newcomer
    assert member.role == ShopUserRole.VIEWER

    with pytest.raises(ApplicationError) as exc:
        shop_service.add_user_to_shop(db, seed.shop_id, "9000000006", ShopUserRole.STAFF, seed.owner)
    assert exc.value.error_code == "ALREADY_MEMBER"

    with pytest.raises(ApplicationError) as exc:
        shop_service.add_user_to_shop(db, seed.shop_id, "9111111111", ShopUserRole.STAFF, seed.owner)
    assert exc.value.error_code == "USER_NOT_FOUND"

    with pytest.raises(ApplicationError) as exc:
        shop_service.add_user_to_shop(db, seed.shop_id, "9000000005", ShopUserRole.STAFF, seed.staff)
    assert exc.value.error_code == "FORBIDDEN"


def test_removed_member_is_reactivated(db, seed):
    member = shop_service.add_user_to_shop(db, seed.shop_id, "9000000004", ShopUserRole.VIEWER, seed.owner)
    assert member.user_id == seed.former
    assert member.status == ShopUserStatus.ACTIVE
    assert member.role == ShopUserRole.VIEWER
    assert db.query(ShopUser).filter(ShopUser.user_id == seed.former).count() == 1


def test_list_shop_users_shows_active_members(db, seed):
    members = shop_service.list_shop_users(db, seed.shop_id, seed.viewer)
    assert {m.user_id for m in members} == {seed.owner, seed.staff, seed.viewer}

    with pytest.raises(ApplicationError) as exc:
        shop_service.list_shop_users(db, seed.shop_id, seed.former)
    assert exc.value.error_code == "FORBIDDEN"


def test_last_owner_is_protected(db, seed):
    owner = membership_of(db, seed.shop_id, seed.owner)

    with pytest.raises(ApplicationError) as exc:
        shop_service.update_user_role(db, seed.shop_id, owner.id, ShopUserRole.STAFF, seed.owner)
    assert exc.value.error_code == "LAST_OWNER"

    with pytest.raises(ApplicationError) as exc:
        shop_service.remove_user_from_shop(db, seed.shop_id, owner.id, seed.owner)
    assert exc.value.error_code == "LAST_OWNER"


def test_role_change_and_soft_removal(db, seed):
    staff = membership_of(db, seed.shop_id, seed.staff)
    promoted = shop_service.update_user_role(db, seed.shop_id, staff.id, ShopUserRole.OWNER, seed.owner)
    assert promoted.role == ShopUserRole.OWNER

    # with two owners, the original one may step down
    owner = membership_of(db, seed.shop_id, seed.owner)
    removed = shop_service.remove_user_from_shop(db, seed.shop_id, owner.id, seed.staff)
    assert removed.status == ShopUserStatus.INACTIVE
    assert db.query(ShopUser).filter(ShopUser.id == owner.id).count() == 1

    actions = [row.action for row in db.query(AuditLog).order_by(AuditLog.id).all()]
    assert actions == ["SHOP_USER_UPDATED", "SHOP_USER_REMOVED"]


def test_membership_must_belong_to_shop(db, seed):
    foreign = membership_of(db, seed.other_shop_id, seed.outsider)
    with pytest.raises(ApplicationError) as exc:
        shop_service.remove_user_from_shop(db, seed.shop_id, foreign.id, seed.owner)
    assert exc.value.error_code == "VALIDATION_ERROR"

    with pytest.raises(ApplicationError) as exc:
        shop_service.update_user_role(db, seed.shop_id, 31337, ShopUserRole.STAFF, seed.owner)
    assert exc.value.error_code == "SHOP_USER_NOT_FOUND"
