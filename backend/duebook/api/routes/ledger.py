"""Ledger: create entries, reverse them, list and summarise."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from duebook.api.deps import PageParams, get_current_user_id, get_db, parse_date
from duebook.schemas.common import Page
from duebook.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryResponse,
    LedgerReverseRequest,
    LedgerSummaryResponse,
)
from duebook.services import ledger_service
from duebook.services.summary_service import parse_entry_type

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[LedgerEntryResponse])
def list_entries(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    """Every entry in the caller's shops, newest first."""
    entries = ledger_service.list_entries_for_user(db, user_id)
    logger.info(f"Retrieved {len(entries)} ledger entries for user {user_id}")
    return entries


@router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(
    data: LedgerEntryCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Creating ledger entry for customer {data.customer_id}, amount {data.amount}, by user {user_id}")
    return ledger_service.create_entry(
        db,
        customer_id=data.customer_id,
        entry_type=data.entry_type,
        amount=data.amount,
        acting_user_id=user_id,
        notes=data.notes,
        entry_date=data.entry_date,
    )


@router.post("/{entry_id}/reverse", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def reverse_entry(
    entry_id: int,
    data: Optional[LedgerReverseRequest] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    logger.info(f"Reversing ledger entry {entry_id} by user {user_id}")
    return ledger_service.reverse_entry(db, entry_id, user_id, notes=data.notes if data else None)


@router.get("/customer/{customer_id}", response_model=List[LedgerEntryResponse])
def list_customer_entries(
    customer_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return ledger_service.list_entries_for_customer(db, customer_id, user_id)


@router.get("/shop/{shop_id}/paginated", response_model=Page[LedgerEntryResponse])
def list_entries_paginated(
    shop_id: int,
    paging: PageParams = Depends(),
    customer_id: Optional[int] = Query(None, alias="customerId"),
    entry_type: Optional[str] = Query(None, alias="entryType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """shopId 0 pages across every shop the caller belongs to."""
    rows, total = ledger_service.list_entries_paginated(
        db,
        user_id,
        shop_id,
        page=paging.page,
        size=paging.size,
        customer_id=customer_id,
        entry_type=parse_entry_type(entry_type),
        start_date=parse_date(start_date, "startDate"),
        end_date=parse_date(end_date, "endDate"),
    )
    logger.info(f"Retrieved page {paging.page} with {len(rows)} ledger entries for shop {shop_id}")
    content = [LedgerEntryResponse.model_validate(r) for r in rows]
    return Page.build(content, paging.page, paging.size, total)


@router.get("/shop/{shop_id}/summary", response_model=LedgerSummaryResponse)
def ledger_summary(
    shop_id: int,
    customer_id: Optional[int] = Query(None, alias="customerId"),
    entry_type: Optional[str] = Query(None, alias="entryType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Totals over effective entries: reversed entries and reversals are excluded."""
    summary = ledger_service.get_ledger_summary(
        db,
        user_id,
        shop_id,
        customer_id=customer_id,
        entry_type=parse_entry_type(entry_type),
        start_date=parse_date(start_date, "startDate"),
        end_date=parse_date(end_date, "endDate"),
    )
    logger.info(
        f"Ledger summary for shop {shop_id}: debit={summary.total_debit}, "
        f"credit={summary.total_credit}, entries={summary.total_entries}"
    )
    return LedgerSummaryResponse.model_validate(summary)


@router.get("/{entry_id}", response_model=LedgerEntryResponse)
def get_entry(entry_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return ledger_service.get_entry(db, entry_id, user_id)
