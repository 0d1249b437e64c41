"""Shops and shop membership."""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from duebook.api.deps import get_current_user_id, get_db
from duebook.schemas.shop import (
    ShopCreate,
    ShopResponse,
    ShopUpdate,
    ShopUserCreate,
    ShopUserResponse,
    ShopUserRoleUpdate,
)
from duebook.services import shop_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ShopResponse])
def list_shops(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    shops = shop_service.list_shops_for_user(db, user_id)
    logger.info(f"Retrieved {len(shops)} shops for user {user_id}")
    return shops


@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
def create_shop(data: ShopCreate, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    logger.info(f"Creating shop '{data.name}' by user {user_id}")
    return shop_service.create_shop(db, data, user_id)


@router.get("/{shop_id}", response_model=ShopResponse)
def get_shop(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return shop_service.get_shop(db, shop_id, user_id)


@router.put("/{shop_id}", response_model=ShopResponse)
def update_shop(
    shop_id: int,
    data: ShopUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Updating shop {shop_id} by user {user_id}")
    return shop_service.update_shop(db, shop_id, data, user_id)


# Membership

@router.get("/{shop_id}/users", response_model=List[ShopUserResponse])
def list_shop_users(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    members = shop_service.list_shop_users(db, shop_id, user_id)
    return [ShopUserResponse.from_membership(m) for m in members]


@router.post("/{shop_id}/users", response_model=ShopUserResponse, status_code=status.HTTP_201_CREATED)
def add_shop_user(
    shop_id: int,
    data: ShopUserCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Adding user with phone {data.user_phone} to shop {shop_id} by user {user_id}")
    membership = shop_service.add_user_to_shop(db, shop_id, data.user_phone, data.role, user_id)
    return ShopUserResponse.from_membership(membership)


@router.put("/{shop_id}/users/{shop_user_id}/role", response_model=ShopUserResponse)
def update_shop_user_role(
    shop_id: int,
    shop_user_id: int,
    data: ShopUserRoleUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Updating role for shop user {shop_user_id} in shop {shop_id} by user {user_id}")
    membership = shop_service.update_user_role(db, shop_id, shop_user_id, data.role, user_id)
    return ShopUserResponse.from_membership(membership)


@router.delete("/{shop_id}/users/{shop_user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_shop_user(
    shop_id: int,
    shop_user_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Removing shop user {shop_user_id} from shop {shop_id} by user {user_id}")
    shop_service.remove_user_from_shop(db, shop_id, shop_user_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
