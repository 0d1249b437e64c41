"""Customer records: creation (with opening balance), profile updates and reads."""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from duebook.core.exceptions import ApplicationError, BusinessError
from duebook.core.permissions import accessible_shop_ids, authorize, require_write
from duebook.models.customer import Customer
from duebook.models.enums import AuditAction, AuditEntity
from duebook.models.shop import Shop
from duebook.schemas.customer import CustomerCreate, CustomerUpdate
from duebook.services.audit_service import record_audit
from duebook.services.ledger_service import create_opening_balance_entry, entry_snapshot

logger = logging.getLogger(__name__)

PHONE_TAKEN = "A customer with this phone number already exists in this shop"


def customer_snapshot(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "shopId": customer.shop_id,
        "name": customer.name,
        "entityName": customer.entity_name,
        "phone": customer.phone,
        "openingBalance": customer.opening_balance,
        "currentBalance": customer.current_balance,
        "isActive": customer.is_active,
    }


def _phone_taken(db: Session, shop_id: int, phone: str) -> bool:
    return (
        db.query(Customer.id)
        .filter(Customer.shop_id == shop_id, Customer.phone == phone)
        .first()
        is not None
    )


def _newest_first(q):
    return q.order_by(Customer.created_at.desc(), Customer.id.desc())


def create_customer(db: Session, data: CustomerCreate, user_id: int) -> Customer:
    """
    Create a customer whose current balance starts at the opening balance.

    A positive opening balance is booked as a BAKI entry in the same
    transaction; if that entry cannot be written the customer is not created.
    """
    shop = db.query(Shop).filter(Shop.id == data.shop_id).first()
    if shop is None:
        raise BusinessError.shop_not_found(f"id {data.shop_id}")

    membership = authorize(db, shop.id, user_id)
    require_write(membership, "Only OWNER or STAFF can create customers")

    if _phone_taken(db, shop.id, data.phone):
        raise BusinessError.conflict(PHONE_TAKEN, "PHONE_ALREADY_EXISTS")

    opening_balance = data.opening_balance or Decimal("0")
    customer = Customer(
        shop_id=shop.id,
        name=data.name,
        entity_name=data.entity_name,
        phone=data.phone,
        opening_balance=opening_balance,
        current_balance=opening_balance,
        is_active=True,
    )
    opening_entry = None
    try:
        db.add(customer)
        db.flush()
        if opening_balance > 0:
            opening_entry = create_opening_balance_entry(db, customer, user_id)
        db.commit()
    except ApplicationError:
        db.rollback()
        raise
    except Exception:
        logger.error(f"Customer creation failed for shop {shop.id}", exc_info=True)
        db.rollback()
        raise
    db.refresh(customer)

    logger.info(f"Customer created: id={customer.id}, shop={customer.shop_id}, opening_balance={opening_balance}")

    if opening_entry is not None:
        record_audit(
            db, customer.shop_id, AuditEntity.LEDGER, opening_entry.id, AuditAction.LEDGER_ENTRY_CREATED,
            user_id, None, entry_snapshot(opening_entry),
        )
    record_audit(
        db, customer.shop_id, AuditEntity.CUSTOMER, customer.id, AuditAction.CUSTOMER_CREATED,
        user_id, None, customer_snapshot(customer),
    )
    return customer


def update_customer(db: Session, customer_id: int, data: CustomerUpdate, user_id: int) -> Customer:
    """
    Update the profile. A supplied current_balance overwrites the running
    balance directly, with no ledger entry.
    """
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise BusinessError.customer_not_found(f"id {customer_id}")

    membership = authorize(db, customer.shop_id, user_id)
    require_write(membership, "Only OWNER or STAFF can update customers")

    target_shop_id = data.shop_id or customer.shop_id
    if target_shop_id != customer.shop_id:
        if target_shop_id not in accessible_shop_ids(db, user_id):
            raise BusinessError.shop_not_found(f"id {target_shop_id} for user {user_id}")
        require_write(authorize(db, target_shop_id, user_id), "Only OWNER or STAFF can update customers")

    phone_changed = data.phone != customer.phone or target_shop_id != customer.shop_id
    if phone_changed and _phone_taken(db, target_shop_id, data.phone):
        raise BusinessError.conflict(PHONE_TAKEN, "PHONE_ALREADY_EXISTS")

    old_value = customer_snapshot(customer)

    customer.name = data.name
    customer.entity_name = data.entity_name
    customer.phone = data.phone
    customer.shop_id = target_shop_id
    if data.current_balance is not None:
        customer.current_balance = data.current_balance
    if data.is_active is not None:
        customer.is_active = data.is_active

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(customer)

    logger.info(f"Customer updated: id={customer.id}, shop={customer.shop_id}")
    record_audit(
        db, customer.shop_id, AuditEntity.CUSTOMER, customer.id, AuditAction.CUSTOMER_UPDATED,
        user_id, old_value, customer_snapshot(customer),
    )
    return customer


def get_customer(db: Session, customer_id: int, user_id: int) -> Customer:
    shop_ids = accessible_shop_ids(db, user_id)
    customer = None
    if shop_ids:
        customer = (
            db.query(Customer)
            .filter(Customer.id == customer_id, Customer.shop_id.in_(shop_ids))
            .first()
        )
    if customer is None:
        raise BusinessError.customer_not_found(f"id {customer_id} for user {user_id}")
    return customer


def list_customers_for_user(db: Session, user_id: int) -> List[Customer]:
    shop_ids = accessible_shop_ids(db, user_id)
    if not shop_ids:
        return []
    return _newest_first(db.query(Customer).filter(Customer.shop_id.in_(shop_ids))).all()


def list_customers_by_shop(db: Session, shop_id: int, user_id: int, active_only: bool = False) -> List[Customer]:
    if shop_id not in accessible_shop_ids(db, user_id):
        raise BusinessError.shop_not_found(f"id {shop_id} for user {user_id}")
    q = db.query(Customer).filter(Customer.shop_id == shop_id)
    if active_only:
        q = q.filter(Customer.is_active.is_(True))
    return _newest_first(q).all()


def _filtered_query(db: Session, shop_ids: List[int], status: Optional[str], search: Optional[str]):
    """status ACTIVE/INACTIVE; search matches name, phone or entity name."""
    q = db.query(Customer).filter(Customer.shop_id.in_(shop_ids))
    if status and status.strip():
        q = q.filter(Customer.is_active.is_(status.strip().upper() == "ACTIVE"))
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        q = q.filter(
            or_(
                func.lower(Customer.name).like(term),
                Customer.phone.like(term),
                func.lower(Customer.entity_name).like(term),
            )
        )
    return q


def _scope_shop_ids(db: Session, user_id: int, shop_id: Optional[int]) -> List[int]:
    if not shop_id:
        return accessible_shop_ids(db, user_id)
    authorize(db, shop_id, user_id)
    return [shop_id]


def list_customers_paginated(
    db: Session,
    user_id: int,
    shop_id: Optional[int],
    page: int = 0,
    size: int = 20,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[Customer], int]:
    shop_ids = _scope_shop_ids(db, user_id, shop_id)
    if not shop_ids:
        return [], 0
    q = _filtered_query(db, shop_ids, status, search)
    total = q.count()
    rows = _newest_first(q).offset(page * size).limit(size).all()
    return rows, total


def get_customer_summary(
    db: Session,
    user_id: int,
    shop_id: Optional[int],
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> dict:
    """Totals across every page of the filtered customer list."""
    shop_ids = _scope_shop_ids(db, user_id, shop_id)
    customers = _filtered_query(db, shop_ids, status, search).all() if shop_ids else []
    return {
        "total_customers": len(customers),
        "active_customers": sum(1 for c in customers if c.is_active),
        "total_opening_balance": sum((Decimal(c.opening_balance or 0) for c in customers), Decimal("0")),
        "total_current_balance": sum((Decimal(c.current_balance or 0) for c in customers), Decimal("0")),
    }
