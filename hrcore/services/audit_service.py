"""
Audit service — records lifecycle changes and queries audit logs.

Every promotion CREATE, UPDATE, DELETE, APPLY, REVERT and CANCEL passes
through ``log_change`` so that a complete trail is kept, including the
changes the scheduler makes with no user attached.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import desc

from hrcore.extensions import db
from hrcore.models.audit import AuditLog

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> str:
    """Serialize dates and decimals that ``json`` cannot handle."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Unserializable audit value: {value!r}")


def _dump(value: dict[str, Any] | None) -> str | None:
    return json.dumps(value, default=_json_default) if value else None


# -- Write audit entries ---------------------------------------------------

def log_change(
    company_id: int | None,
    user_id: str | None,
    action_type: str,
    entity_type: str,
    entity_id: int | None,
    previous_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Record a data change in the audit log.

    The entry is added to the current session; the caller commits it
    together with the change it describes.

    Args:
        company_id:     Tenant that owns the changed record.
        user_id:        ID of the user who made the change, or None for
                        system actions (e.g., the promotion scheduler).
        action_type:    One of CREATE, UPDATE, DELETE, APPLY, REVERT, CANCEL.
        entity_type:    Dot-notation entity name (e.g., 'hr.promotion').
        entity_id:      Primary key of the affected record.
        previous_value: Dict of the record state before the change.
        new_value:      Dict of the record state after the change.

    Returns:
        The newly created AuditLog record.
    """
    entry = AuditLog(
        company_id=company_id,
        user_id=user_id or None,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_value=_dump(previous_value),
        new_value=_dump(new_value),
    )
    db.session.add(entry)

    logger.info(
        "Audit: %s %s:%s company=%s by user %s",
        action_type,
        entity_type,
        entity_id,
        company_id,
        user_id,
    )
    return entry


# -- Query audit logs ------------------------------------------------------

def get_entity_history(
    company_id: int,
    entity_type: str,
    entity_id: int,
) -> list[AuditLog]:
    """
    Return every audit entry for one record, newest first.

    Args:
        company_id:  Tenant that owns the record.
        entity_type: Dot-notation entity name.
        entity_id:   Primary key of the record.
    """
    return (
        AuditLog.query.filter_by(
            company_id=company_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        .order_by(desc(AuditLog.id))
        .all()
    )
