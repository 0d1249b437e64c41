from datetime import datetime
from typing import Optional

from pydantic import Field

from duebook.models.enums import ShopUserRole, ShopUserStatus
from duebook.models.shop_user import ShopUser
from duebook.schemas.common import CamelModel
from duebook.schemas.customer import PHONE_PATTERN


class ShopCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    address: Optional[str] = Field(default=None, max_length=255)


class ShopUpdate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    address: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None


class ShopResponse(CamelModel):
    id: int
    name: str
    address: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShopUserCreate(CamelModel):
    user_phone: str = Field(pattern=PHONE_PATTERN)
    role: ShopUserRole


class ShopUserRoleUpdate(CamelModel):
    role: ShopUserRole


class ShopUserResponse(CamelModel):
    id: int
    shop_id: int
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    role: ShopUserRole
    status: ShopUserStatus
    joined_at: Optional[datetime] = None

    @classmethod
    def from_membership(cls, membership: ShopUser) -> "ShopUserResponse":
        user = membership.user
        return cls(
            id=membership.id,
            shop_id=membership.shop_id,
            user_id=membership.user_id,
            user_name=user.name if user else None,
            user_email=user.email if user else None,
            user_phone=user.phone if user else None,
            role=membership.role,
            status=membership.status,
            joined_at=membership.joined_at,
        )
