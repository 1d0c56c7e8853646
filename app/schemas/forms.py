from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from app.core.field_model import (
    FieldType,
    default_label,
    default_options,
    default_placeholder,
    is_choice_type,
    new_id,
    utcnow,
)


class FieldValidation(BaseModel):
    # reserved for validation rules; voice commands never fill it
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    message: str | None = None


class FormField(BaseModel):
    id: str = Field(default_factory=new_id)
    type: FieldType
    label: str = ""
    placeholder: str | None = None
    required: bool = False
    options: list[str] | None = None  # select|radio only
    validation: FieldValidation | None = None
    description: str | None = None

    @model_validator(mode="after")
    def _apply_defaults(self) -> "FormField":
        if not self.label.strip():
            self.label = default_label(self.type)
        if self.placeholder is None:
            self.placeholder = default_placeholder(self.label)

        if is_choice_type(self.type):
            if self.options is None:
                self.options = default_options()
        else:
            self.options = None
        return self


class FormDocument(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    fields: list[FormField] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_public: bool = False
    share_url: str | None = None

    @model_validator(mode="after")
    def _unique_field_ids(self) -> "FormDocument":
        ids = [f.id for f in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError("Field ids must be unique within a form")
        return self


class FormDocumentUpdate(BaseModel):
    """Result of one interpretation pass (document delta)."""
    name: str
    description: str
    fields: list[FormField]


class FieldDelta(BaseModel):
    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)


# --- API payloads ---

class FieldCreate(BaseModel):
    type: FieldType
    label: str | None = Field(default=None, max_length=200)
    placeholder: str | None = Field(default=None, max_length=200)
    required: bool = False
    options: list[str] | None = None
    description: str | None = Field(default=None, max_length=500)


class FieldUpdate(BaseModel):
    type: FieldType | None = None
    label: str | None = Field(default=None, max_length=200)
    placeholder: str | None = Field(default=None, max_length=200)
    required: bool | None = None
    options: list[str] | None = None
    validation: FieldValidation | None = None
    description: str | None = Field(default=None, max_length=500)


class FormDetailsUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=500)


class CommandIn(BaseModel):
    transcript: str = Field(max_length=5000)


class CommandOut(BaseModel):
    transcript: str
    delta: FieldDelta
    form: FormDocument


class SaveFormIn(BaseModel):
    is_public: bool | None = None


class SaveFormOut(BaseModel):
    share_url: str
    form: FormDocument


class FieldTypeOut(BaseModel):
    type: str
    label: str
    icon: str
    default_label: str


class FormSummaryOut(BaseModel):
    summary: str
    field_count: int
