"""
In-memory owner of the form document being built.

Manual edits from the UI and the voice interpreter both go through this
class, and every mutation refreshes `updated_at`.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Protocol

from app.core.errors import FieldNotFoundError, ValidationError
from app.core.field_model import is_choice_type, new_id, utcnow
from app.core.interpreter import summarize_delta
from app.schemas.forms import (
    FieldDelta,
    FieldUpdate,
    FormDocument,
    FormDocumentUpdate,
    FormField,
)

logger = logging.getLogger(__name__)


class FormRepository(Protocol):
    def save(self, document: FormDocument) -> str: ...


class FormDocumentStore:
    def __init__(
        self,
        document: FormDocument | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.clock = clock
        self.id_factory = id_factory
        if document is None:
            now = clock()
            document = FormDocument(id=id_factory(), created_at=now, updated_at=now)
        self._doc = document

    @property
    def document(self) -> FormDocument:
        return self._doc

    @property
    def id(self) -> str:
        return self._doc.id

    # ----------------- helpers -----------------
    def _touch(self) -> None:
        # updated_at must strictly increase even if the clock does not move
        now = self.clock()
        if now <= self._doc.updated_at:
            now = self._doc.updated_at + timedelta(microseconds=1)
        self._doc.updated_at = now

    def _index_of(self, field_id: str) -> int:
        for i, f in enumerate(self._doc.fields):
            if f.id == field_id:
                return i
        raise FieldNotFoundError(field_id)

    def get_field(self, field_id: str) -> FormField:
        return self._doc.fields[self._index_of(field_id)]

    # ----------------- mutations ---------------
    def add_field(self, field_type: str, **overrides: Any) -> FormField:
        values = {k: v for k, v in overrides.items() if v is not None}
        field = FormField(id=self.id_factory(), type=field_type, **values)
        self._doc.fields.append(field)
        self._touch()
        logger.debug("form %s: added %s field %s", self.id, field.type, field.id)
        return field

    def update_field(self, field_id: str, changes: FieldUpdate | dict) -> FormField:
        if isinstance(changes, FieldUpdate):
            changes = changes.model_dump(exclude_unset=True, exclude_none=True)
        changes = {k: v for k, v in changes.items() if k != "id"}

        idx = self._index_of(field_id)
        current = self._doc.fields[idx]
        merged = current.model_dump()
        merged.update(changes)

        # a type change re-derives options unless the caller sent new ones
        if "type" in changes and "options" not in changes:
            merged["options"] = current.options if is_choice_type(current.type) else None

        updated = FormField.model_validate(merged)
        self._doc.fields[idx] = updated
        self._touch()
        return updated

    def delete_field(self, field_id: str) -> None:
        idx = self._index_of(field_id)
        del self._doc.fields[idx]
        self._touch()
        logger.debug("form %s: deleted field %s", self.id, field_id)

    def add_option(self, field_id: str, option: str | None = None) -> FormField:
        field = self.get_field(field_id)
        if not is_choice_type(field.type):
            raise ValidationError(f"Field type '{field.type}' has no options")
        options = list(field.options or [])
        options.append(option or f"Option {len(options) + 1}")
        return self.update_field(field_id, {"options": options})

    def remove_option(self, field_id: str, index: int) -> FormField:
        field = self.get_field(field_id)
        if not is_choice_type(field.type):
            raise ValidationError(f"Field type '{field.type}' has no options")
        options = list(field.options or [])
        if index < 0 or index >= len(options):
            raise ValidationError(f"Option index out of range: {index}")
        del options[index]
        return self.update_field(field_id, {"options": options})

    def set_name(self, name: str) -> None:
        self._doc.name = name
        self._touch()

    def set_description(self, description: str) -> None:
        self._doc.description = description
        self._touch()

    def apply_update(self, update: FormDocumentUpdate) -> FieldDelta:
        """Merge an interpreter result into the document."""
        delta = summarize_delta(self._doc.fields, update.fields)
        self._doc.name = update.name
        self._doc.description = update.description
        self._doc.fields = list(update.fields)
        self._touch()
        return delta

    # ----------------- persistence -------------
    def save(
        self,
        repository: FormRepository,
        *,
        is_public: bool | None = None,
        commit: Callable[[], None] | None = None,
    ) -> str:
        """
        Persist the document and return its share URL.

        `commit` runs after the repository write; `share_url` is only set once
        it returns, and any failure leaves the document as it was.
        """
        if not self._doc.name.strip():
            raise ValidationError("Please provide a form name")

        was_public = self._doc.is_public
        if is_public is not None:
            self._doc.is_public = is_public

        try:
            share_url = repository.save(self._doc)
            if commit is not None:
                commit()
        except Exception:
            self._doc.is_public = was_public
            raise
        self._doc.share_url = share_url
        logger.info("form %s saved (%d fields, public=%s)", self.id, len(self._doc.fields), self._doc.is_public)
        return share_url

    # ----------------- read-outs ---------------
    def summary(self) -> str:
        doc = self._doc
        title = doc.name or "Untitled Form"
        if doc.fields:
            labels = ", ".join(f.label for f in doc.fields)
            text = f'Your form "{title}" contains {len(doc.fields)} fields: {labels}.'
        else:
            text = f'Your form "{title}" has no fields yet.'
        if doc.description:
            text += f" Description: {doc.description}"
        return text

