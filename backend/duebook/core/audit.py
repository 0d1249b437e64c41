"""
Structured audit log lines for security-relevant and business-critical events.

These go to the "audit" logger as one JSON object per line, alongside the
audit_log table rows written by services.audit_service.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Optional

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditTrail:
    """Central audit logging for ledger, customer and shop events."""

    @staticmethod
    def log_action(
        action: str,  # "LEDGER_ENTRY_CREATED", "LEDGER_REVERSAL", "CUSTOMER_UPDATED", ...
        entity_type: str,  # "LEDGER", "CUSTOMER", "SHOP"
        entity_id: Optional[int],
        shop_id: int,
        user_id: int,
    ):
        """
        Log a business-critical mutation.

        Each line records who (user id), where (shop id), what (entity type and id)
        and when. Full before/after snapshots live only in the audit_log table.

        Usage:
            AuditTrail.log_action("LEDGER_REVERSAL", "LEDGER", 42, shop_id=1, user_id=3)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{entity_type.lower()}.{action.lower()}",
            "shop_id": shop_id,
            "user_id": user_id,
            "entity_id": entity_id,
        }

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_access_denied(
        action: str,  # "read", "write", "manage"
        shop_id: int,
        user_id: int,
        reason: str,
    ):
        """
        Log denied access attempts.

        Tracks users reaching for shops they are not members of, inactive
        members, and VIEWERs attempting writes.

        Usage:
            AuditTrail.log_access_denied("write", shop_id=4, user_id=9, reason="VIEWER role")
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "shop_id": shop_id,
            "user_id": user_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_permission_change(
        shop_id: int,
        user_id: int,
        granted_by: int,
        role: str,
        status: str,
    ):
        """
        Log shop membership role/status changes.

        Helps detect unauthorized privilege escalation.

        Usage:
            AuditTrail.log_permission_change(shop_id=1, user_id=2, granted_by=1, role="STAFF", status="ACTIVE")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "permissions.changed",
            "shop_id": shop_id,
            "user_id": user_id,
            "granted_by": granted_by,
            "role": role,
            "status": status,
        }

        audit_logger.info(json.dumps(log_entry))
