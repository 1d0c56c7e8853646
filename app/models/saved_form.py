from datetime import datetime

from sqlalchemy import Boolean, DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.field_model import utcnow
from app.db.base import Base


class SavedForm(Base):
    __tablename__ = "saved_forms"

    # same id as the in-memory FormDocument, so re-saving overwrites
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_email: Mapped[str | None] = mapped_column(String(320), index=True, nullable=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # ordered list of field records, see app.schemas.forms.FormField
    fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    share_url: Mapped[str] = mapped_column(String(500), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
