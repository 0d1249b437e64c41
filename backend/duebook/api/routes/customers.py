"""Customers: CRUD, per-shop listings and summary cards."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from duebook.api.deps import PageParams, get_current_user_id, get_db
from duebook.schemas.common import Page
from duebook.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerSummaryResponse,
    CustomerUpdate,
)
from duebook.services import customer_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[CustomerResponse])
def list_customers(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return customer_service.list_customers_for_user(db, user_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Creating customer in shop {data.shop_id} by user {user_id}")
    return customer_service.create_customer(db, data, user_id)


@router.get("/shop/{shop_id}/paginated", response_model=Page[CustomerResponse])
def list_customers_paginated(
    shop_id: int,
    paging: PageParams = Depends(),
    customer_status: Optional[str] = Query(None, alias="status"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """shopId 0 pages across every shop the caller belongs to."""
    rows, total = customer_service.list_customers_paginated(
        db, user_id, shop_id, paging.page, paging.size, customer_status, search_term
    )
    logger.info(f"Retrieved page {paging.page} with {len(rows)} customers for shop {shop_id}")
    content = [CustomerResponse.model_validate(c) for c in rows]
    return Page.build(content, paging.page, paging.size, total)


@router.get("/shop/{shop_id}/summary", response_model=CustomerSummaryResponse)
def customer_summary(
    shop_id: int,
    customer_status: Optional[str] = Query(None, alias="status"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return customer_service.get_customer_summary(db, user_id, shop_id, customer_status, search_term)


@router.get("/shops/{shop_id}", response_model=List[CustomerResponse])
def list_shop_customers(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return customer_service.list_customers_by_shop(db, shop_id, user_id)


@router.get("/shops/{shop_id}/active", response_model=List[CustomerResponse])
def list_active_shop_customers(
    shop_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return customer_service.list_customers_by_shop(db, shop_id, user_id, active_only=True)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return customer_service.get_customer(db, customer_id, user_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Updating customer {customer_id} by user {user_id}")
    return customer_service.update_customer(db, customer_id, data, user_id)
