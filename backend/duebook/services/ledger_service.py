"""
Ledger engine: balance-mutating entries, reversals and ledger reads.

Every mutation follows the same shape: take the per-customer lock, re-read the
customer row FOR UPDATE, apply the delta, insert the entry, commit once. Audit
rows are written after the commit and never undo it.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from duebook.core.exceptions import ApplicationError, BusinessError
from duebook.core.locks import customer_lock
from duebook.core.permissions import accessible_shop_ids, authorize, require_write
from duebook.models.customer import Customer
from duebook.models.enums import AuditAction, AuditEntity, LedgerEntryType
from duebook.models.ledger import CustomerLedger
from duebook.services.audit_service import record_audit
from duebook.services.summary_service import LedgerSummary, summarize

logger = logging.getLogger(__name__)

OPENING_BALANCE_NOTE = "Opening balance for new customer"
MUTABLE_TYPES = (LedgerEntryType.BAKI, LedgerEntryType.PAID)


def to_decimal(amount: Union[Decimal, float, int, str]) -> Decimal:
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


def compute_balance_delta(entry_type: LedgerEntryType, amount: Decimal) -> Decimal:
    """+amount for BAKI, -amount for PAID."""
    if entry_type == LedgerEntryType.BAKI:
        return amount
    if entry_type == LedgerEntryType.PAID:
        return -amount
    raise BusinessError.validation_error(f"Entry type must be BAKI or PAID, got {entry_type}")


def entry_snapshot(entry: CustomerLedger) -> dict:
    """Audit payload for a ledger entry."""
    return {
        "id": entry.id,
        "customerId": entry.customer_id,
        "shopId": entry.shop_id,
        "entryType": entry.entry_type.value,
        "amount": entry.amount,
        "balanceAfter": entry.balance_after,
        "referenceEntryId": entry.reference_entry_id,
        "notes": entry.notes,
        "entryDate": entry.entry_date,
    }


def build_entry(
    customer: Customer,
    entry_type: LedgerEntryType,
    amount: Decimal,
    balance_after: Decimal,
    user_id: int,
    notes: Optional[str] = None,
    entry_date: Optional[date] = None,
    reference_entry_id: Optional[int] = None,
) -> CustomerLedger:
    return CustomerLedger(
        customer_id=customer.id,
        shop_id=customer.shop_id,
        created_by_user_id=user_id,
        entry_type=entry_type,
        amount=amount,
        balance_after=balance_after,
        reference_entry_id=reference_entry_id,
        notes=notes,
        entry_date=entry_date or date.today(),
    )


def _lock_customer_row(db: Session, customer_id: int) -> Customer:
    # populate_existing: the identity map may hold a balance read before the lock
    return (
        db.query(Customer)
        .filter(Customer.id == customer_id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def _visible_entry(db: Session, entry_id: int, user_id: int) -> CustomerLedger:
    shop_ids = accessible_shop_ids(db, user_id)
    entry = None
    if shop_ids:
        entry = (
            db.query(CustomerLedger)
            .filter(CustomerLedger.id == entry_id, CustomerLedger.shop_id.in_(shop_ids))
            .first()
        )
    if entry is None:
        raise BusinessError.ledger_not_found(f"entry {entry_id} for user {user_id}")
    return entry


def create_entry(
    db: Session,
    customer_id: int,
    entry_type: LedgerEntryType,
    amount: Union[Decimal, float, int, str],
    acting_user_id: int,
    notes: Optional[str] = None,
    entry_date: Optional[date] = None,
) -> CustomerLedger:
    """Record a BAKI or PAID entry and move the customer's balance by its delta."""
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise BusinessError.customer_not_found(f"id {customer_id}")

    membership = authorize(db, customer.shop_id, acting_user_id)
    require_write(membership)

    try:
        entry_type = LedgerEntryType(entry_type)
    except ValueError:
        raise BusinessError.validation_error(f"Unknown entry type: {entry_type}")
    if entry_type not in MUTABLE_TYPES:
        raise BusinessError.validation_error("Entry type must be BAKI or PAID")
    amount = to_decimal(amount)
    if amount <= 0:
        raise BusinessError.validation_error("Amount must be greater than 0")

    with customer_lock(customer_id):
        try:
            customer = _lock_customer_row(db, customer_id)
            old_balance = customer.current_balance
            new_balance = old_balance + compute_balance_delta(entry_type, amount)

            entry = build_entry(
                customer, entry_type, amount, new_balance, acting_user_id,
                notes=notes, entry_date=entry_date,
            )
            db.add(entry)
            customer.current_balance = new_balance
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(entry)

    logger.info(
        f"Ledger entry created: id={entry.id}, customer={customer_id}, "
        f"type={entry_type.value}, amount={amount}, balance {old_balance} -> {new_balance}"
    )

    shop_id = entry.shop_id
    record_audit(
        db, shop_id, AuditEntity.LEDGER, entry.id, AuditAction.LEDGER_ENTRY_CREATED,
        acting_user_id, None, entry_snapshot(entry),
    )
    record_audit(
        db, shop_id, AuditEntity.CUSTOMER, customer_id, AuditAction.LEDGER_BALANCE_ADJUSTED,
        acting_user_id,
        {"balance": old_balance},
        {"balance": new_balance, "amount": amount, "type": entry_type.value},
    )
    return entry


def reverse_entry(
    db: Session,
    entry_id: int,
    acting_user_id: int,
    notes: Optional[str] = None,
) -> CustomerLedger:
    """
    Append a REVERSAL cancelling a BAKI or PAID entry.

    The inverse delta is applied to the customer's current balance, so reversing
    an older entry keeps the effect of every entry recorded after it.
    """
    original = _visible_entry(db, entry_id, acting_user_id)

    membership = authorize(db, original.shop_id, acting_user_id)
    require_write(membership, "Only OWNER or STAFF can reverse ledger entries")

    if original.entry_type == LedgerEntryType.REVERSAL:
        raise BusinessError.invalid_reversal("Cannot reverse a reversal entry")

    customer_id = original.customer_id
    with customer_lock(customer_id):
        try:
            # row lock first: a reversal committed by another worker must be visible to the check
            customer = _lock_customer_row(db, customer_id)
            already_reversed = (
                db.query(CustomerLedger.id)
                .filter(CustomerLedger.reference_entry_id == original.id)
                .first()
            )
            if already_reversed is not None:
                raise BusinessError.invalid_reversal(f"Ledger entry #{original.id} has already been reversed")

            old_balance = customer.current_balance
            new_balance = old_balance - compute_balance_delta(original.entry_type, original.amount)

            reversal = build_entry(
                customer, LedgerEntryType.REVERSAL, original.amount, new_balance, acting_user_id,
                notes=notes or f"Reversal of entry #{original.id}",
                reference_entry_id=original.id,
            )
            db.add(reversal)
            customer.current_balance = new_balance
            old_snapshot = entry_snapshot(original)
            db.commit()
        except ApplicationError:
            db.rollback()
            raise
        except Exception:
            logger.error(f"Reversal of entry {entry_id} failed, rolling back", exc_info=True)
            db.rollback()
            raise
        db.refresh(reversal)

    logger.info(
        f"Ledger entry {entry_id} reversed by entry {reversal.id}: "
        f"customer={customer_id}, balance {old_balance} -> {new_balance}"
    )

    record_audit(
        db, reversal.shop_id, AuditEntity.LEDGER, reversal.id, AuditAction.LEDGER_REVERSAL,
        acting_user_id, old_snapshot, entry_snapshot(reversal),
    )
    return reversal


def create_opening_balance_entry(db: Session, customer: Customer, acting_user_id: int) -> CustomerLedger:
    """
    BAKI entry for a new customer's opening balance.

    Runs inside the customer-creation transaction: flushes but does not commit.
    Any failure surfaces as LEDGER_CREATION_FAILED so the caller rolls back.
    """
    try:
        amount = to_decimal(customer.opening_balance)
        entry = build_entry(
            customer, LedgerEntryType.BAKI, amount, to_decimal(customer.current_balance),
            acting_user_id, notes=OPENING_BALANCE_NOTE,
        )
        db.add(entry)
        db.flush()
    except Exception as e:
        raise BusinessError.ledger_creation_failed(e) from e
    logger.info(f"Opening balance entry {entry.id} created for customer {customer.id}: {amount}")
    return entry


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def _newest_first(q):
    return q.order_by(CustomerLedger.created_at.desc(), CustomerLedger.id.desc())


def _scope_shop_ids(db: Session, user_id: int, shop_id: Optional[int]) -> List[int]:
    """shop_id 0/None means every shop the user can read."""
    if not shop_id:
        return accessible_shop_ids(db, user_id)
    authorize(db, shop_id, user_id)
    return [shop_id]


def get_entry(db: Session, entry_id: int, user_id: int) -> CustomerLedger:
    return _visible_entry(db, entry_id, user_id)


def list_entries_for_user(db: Session, user_id: int) -> List[CustomerLedger]:
    shop_ids = accessible_shop_ids(db, user_id)
    if not shop_ids:
        return []
    return _newest_first(
        db.query(CustomerLedger).filter(CustomerLedger.shop_id.in_(shop_ids))
    ).all()


def list_entries_for_customer(db: Session, customer_id: int, user_id: int) -> List[CustomerLedger]:
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
    return _newest_first(
        db.query(CustomerLedger).filter(CustomerLedger.customer_id == customer_id)
    ).all()


def list_entries_paginated(
    db: Session,
    user_id: int,
    shop_id: Optional[int],
    page: int = 0,
    size: int = 20,
    customer_id: Optional[int] = None,
    entry_type: Optional[LedgerEntryType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[CustomerLedger], int]:
    """Newest-first page of entries. Returns (rows, total)."""
    shop_ids = _scope_shop_ids(db, user_id, shop_id)
    if not shop_ids:
        return [], 0

    q = db.query(CustomerLedger).filter(CustomerLedger.shop_id.in_(shop_ids))
    if customer_id:
        q = q.filter(CustomerLedger.customer_id == customer_id)
    if entry_type is not None:
        q = q.filter(CustomerLedger.entry_type == entry_type)
    if start_date is not None:
        q = q.filter(CustomerLedger.entry_date >= start_date)
    if end_date is not None:
        q = q.filter(CustomerLedger.entry_date <= end_date)

    total = q.count()
    rows = _newest_first(q).offset(page * size).limit(size).all()
    return rows, total


def get_ledger_summary(
    db: Session,
    user_id: int,
    shop_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    entry_type: Optional[LedgerEntryType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> LedgerSummary:
    shop_ids = _scope_shop_ids(db, user_id, shop_id)
    if not shop_ids:
        return LedgerSummary()
    entries = db.query(CustomerLedger).filter(CustomerLedger.shop_id.in_(shop_ids)).all()
    summary = summarize(entries, customer_id, entry_type, start_date, end_date)
    logger.debug(
        f"Ledger summary for user {user_id}, shops {shop_ids}: "
        f"debit={summary.total_debit}, credit={summary.total_credit}, entries={summary.total_entries}"
    )
    return summary
