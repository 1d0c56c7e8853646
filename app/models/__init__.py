from app.models.audit_event import AuditEvent
from app.models.saved_form import SavedForm

__all__ = ["AuditEvent", "SavedForm"]
