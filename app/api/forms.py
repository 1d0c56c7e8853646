from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.field_model import FIELD_TYPE_CATALOG, default_label
from app.core.form_repository import SqlFormRepository, to_document
from app.core.config import settings
from app.core.security import CurrentUser, get_optional_user
from app.db.session import get_db
from app.schemas.forms import FieldTypeOut, FormDocument

router = APIRouter(tags=["forms"])


@router.get("/field-types", response_model=list[FieldTypeOut])
def list_field_types():
    """Field palette shown next to the builder."""
    return [
        FieldTypeOut(type=t, label=label, icon=icon, default_label=default_label(t))
        for t, label, icon in FIELD_TYPE_CATALOG
    ]


@router.get("/forms/{form_id}", response_model=FormDocument)
def get_saved_form(
    form_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser | None = Depends(get_optional_user),
):
    """
    Saved form behind a share link. Private forms are only visible to the
    user who saved them.
    """
    row = SqlFormRepository(db, share_base_url=settings.SHARE_BASE_URL).get(form_id)
    if not row:
        raise HTTPException(status_code=404, detail="Form not found")

    if not row.is_public and (current_user is None or current_user.email != row.owner_email):
        # don't leak existence of private forms
        raise HTTPException(status_code=404, detail="Form not found")

    return to_document(row)
