import logging
from typing import Any

from sqlalchemy.orm import Session

from app.models.audit_event import AuditEvent

logger = logging.getLogger(__name__)

FORM_SAVED = "FORM_SAVED"


def log_event(
    *,
    db: Session,
    actor_email: str | None,
    action: str,
    entity_type: str,
    entity_id: str,
    metadata: dict[str, Any] | None = None,
) -> AuditEvent:
    """Stage an audit row; it is committed together with the caller's changes."""
    event = AuditEvent(
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        event_metadata=metadata,
    )
    db.add(event)
    logger.debug("audit %s %s/%s by %s", action, entity_type, entity_id, actor_email or "-")
    return event
