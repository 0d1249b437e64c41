from datetime import datetime
from typing import Optional

from duebook.models.audit_log import AuditLog
from duebook.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    id: int
    shop_id: int
    entity_type: str
    entity_id: Optional[int] = None
    action: str
    performed_by_id: int
    performed_by_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    performed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: AuditLog) -> "AuditLogResponse":
        return cls(
            id=row.id,
            shop_id=row.shop_id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            action=row.action,
            performed_by_id=row.performed_by,
            performed_by_name=row.performer.name if row.performer else None,
            old_value=row.old_value,
            new_value=row.new_value,
            performed_at=row.performed_at,
        )
