from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.field_model import utcnow
from app.models.saved_form import SavedForm
from app.schemas.forms import FormDocument, FormField


def share_url_for(base_url: str, form_id: str) -> str:
    return f"{base_url.rstrip('/')}/form/{form_id}"


class SqlFormRepository:
    """
    Stores saved forms as one row each; the field list goes into a JSON column.
    `save()` upserts by form id and returns the share URL.
    """

    def __init__(self, db: Session, *, share_base_url: str, owner_email: str | None = None):
        self.db = db
        self.share_base_url = share_base_url
        self.owner_email = owner_email

    def save(self, document: FormDocument) -> str:
        url = share_url_for(self.share_base_url, document.id)

        row = self.db.get(SavedForm, document.id)
        if row is None:
            row = SavedForm(
                id=document.id,
                owner_email=self.owner_email,
                created_at=document.created_at,
            )
            self.db.add(row)

        row.name = document.name
        row.description = document.description
        row.fields = [f.model_dump(mode="json") for f in document.fields]
        row.is_public = document.is_public
        row.share_url = url
        row.updated_at = document.updated_at
        row.saved_at = utcnow()

        self.db.flush()
        return url

    def get(self, form_id: str) -> SavedForm | None:
        return self.db.get(SavedForm, form_id)


def to_document(row: SavedForm) -> FormDocument:
    return FormDocument(
        id=row.id,
        name=row.name,
        description=row.description or "",
        fields=[FormField.model_validate(f) for f in (row.fields or [])],
        created_at=row.created_at,
        updated_at=row.updated_at,
        is_public=row.is_public,
        share_url=row.share_url,
    )
