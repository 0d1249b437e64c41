"""Audit log persistence and reads.

record_audit is best-effort: it runs after the business transaction has
committed, in its own short transaction, and never raises.
"""
import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from duebook.core.audit import AuditTrail
from duebook.core.permissions import authorize
from duebook.models.audit_log import AuditLog
from duebook.models.enums import AuditAction, AuditEntity

logger = logging.getLogger(__name__)


def _json_default(value: Any):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "value"):  # enums
        return value.value
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def to_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=_json_default, sort_keys=True)


def record_audit(
    db: Session,
    shop_id: int,
    entity_type: AuditEntity,
    entity_id: Optional[int],
    action: AuditAction,
    user_id: int,
    old_value: Any = None,
    new_value: Any = None,
) -> Optional[AuditLog]:
    """Persist one audit row. Failures are logged and swallowed."""
    try:
        row = AuditLog(
            shop_id=shop_id,
            entity_type=entity_type.value,
            entity_id=entity_id,
            action=action.value,
            performed_by=user_id,
            old_value=to_json(old_value),
            new_value=to_json(new_value),
        )
        db.add(row)
        db.commit()
        AuditTrail.log_action(action.value, entity_type.value, entity_id, shop_id, user_id)
        logger.debug(f"Audit logged: {action.value} on {entity_type.value} #{entity_id}")
        return row
    except Exception as e:
        # Audit logging must never break the main operation
        logger.error(f"Error logging audit for action: {action.value}: {e}", exc_info=True)
        db.rollback()
        return None


def list_audit_logs(
    db: Session,
    shop_id: int,
    user_id: int,
    page: int = 0,
    size: int = 20,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[AuditLog], int]:
    """Newest-first page of a shop's audit log. Returns (rows, total)."""
    authorize(db, shop_id, user_id)

    q = db.query(AuditLog).filter(AuditLog.shop_id == shop_id)
    if action and action.strip():
        q = q.filter(AuditLog.action == action.strip())
    if entity_type and entity_type.strip():
        q = q.filter(AuditLog.entity_type == entity_type.strip())
    # Date range covers whole days; only applied when both ends are given
    if start_date and end_date:
        q = q.filter(
            AuditLog.performed_at >= datetime.combine(start_date, time.min),
            AuditLog.performed_at <= datetime.combine(end_date, time.max),
        )

    total = q.count()
    rows = (
        q.order_by(AuditLog.performed_at.desc(), AuditLog.id.desc())
        .offset(page * size)
        .limit(size)
        .all()
    )
    return rows, total


def list_actions(db: Session, shop_id: int, user_id: int) -> List[str]:
    authorize(db, shop_id, user_id)
    rows = (
        db.query(AuditLog.action)
        .filter(AuditLog.shop_id == shop_id)
        .distinct()
        .order_by(AuditLog.action.asc())
        .all()
    )
    return [a for (a,) in rows]


def list_entity_types(db: Session, shop_id: int, user_id: int) -> List[str]:
    authorize(db, shop_id, user_id)
    rows = (
        db.query(AuditLog.entity_type)
        .filter(AuditLog.shop_id == shop_id)
        .distinct()
        .order_by(AuditLog.entity_type.asc())
        .all()
    )
    return [e for (e,) in rows]
