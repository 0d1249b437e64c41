"""Audit log reads. Any ACTIVE member of the shop may read its log."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from duebook.api.deps import PageParams, get_current_user_id, get_db, parse_date
from duebook.schemas.audit_log import AuditLogResponse
from duebook.schemas.common import Page
from duebook.services import audit_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/shop/{shop_id}/paginated", response_model=Page[AuditLogResponse])
def list_audit_logs(
    shop_id: int,
    paging: PageParams = Depends(),
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    rows, total = audit_service.list_audit_logs(
        db,
        shop_id,
        user_id,
        page=paging.page,
        size=paging.size,
        action=action,
        entity_type=entity_type,
        start_date=parse_date(start_date, "startDate"),
        end_date=parse_date(end_date, "endDate"),
    )
    logger.info(f"Retrieved page {paging.page} with {len(rows)} audit logs for shop {shop_id}")
    return Page.build([AuditLogResponse.from_row(r) for r in rows], paging.page, paging.size, total)


@router.get("/shop/{shop_id}/actions", response_model=List[str])
def list_actions(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return audit_service.list_actions(db, shop_id, user_id)


@router.get("/shop/{shop_id}/entity-types", response_model=List[str])
def list_entity_types(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return audit_service.list_entity_types(db, shop_id, user_id)
