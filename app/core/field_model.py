"""
Field taxonomy and defaulting rules shared by manual edits and voice commands.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal, get_args

FieldType = Literal[
    "text",
    "email",
    "tel",
    "date",
    "number",
    "textarea",
    "select",
    "checkbox",
    "radio",
    "file",
    "url",
    "time",
    "range",
    "color",
    "password",
]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)

# types that carry an ordered list of options
CHOICE_TYPES = frozenset({"select", "radio"})

DEFAULT_OPTION_COUNT = 3

# type -> label when nothing more specific was said
TYPE_LABELS: dict[str, str] = {
    "email": "Email Address",
    "tel": "Phone Number",
    "textarea": "Comments",
    "file": "File Upload",
}

# commonly voiced entities -> label
ENTITY_LABELS: dict[str, str] = {
    "name": "Full Name",
    "first name": "First Name",
    "last name": "Last Name",
    "address": "Address",
    "company": "Company",
    "email": "Email Address",
    "phone": "Phone Number",
    "date": "Date",
    "number": "Number",
    "comments": "Comments",
    "file": "File Upload",
}

# palette shown next to the builder: (type, display label, icon category)
FIELD_TYPE_CATALOG: tuple[tuple[str, str, str], ...] = (
    ("text", "Text", "type"),
    ("email", "Email", "mail"),
    ("tel", "Phone", "phone"),
    ("date", "Date", "calendar"),
    ("number", "Number", "hash"),
    ("textarea", "Textarea", "file-text"),
    ("select", "Dropdown", "list"),
    ("checkbox", "Checkbox", "check-square"),
    ("radio", "Radio", "radio"),
    ("file", "File Upload", "upload"),
    ("url", "URL", "link"),
    ("time", "Time", "clock"),
    ("range", "Range", "slider"),
    ("color", "Color", "star"),
    ("password", "Password", "eye-off"),
)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def capitalize_type(field_type: str) -> str:
    return field_type[:1].upper() + field_type[1:]


def default_label(field_type: str) -> str:
    return TYPE_LABELS.get(field_type, capitalize_type(field_type))


def entity_label(entity: str) -> str | None:
    return ENTITY_LABELS.get(" ".join(entity.lower().split()))


def default_placeholder(label: str) -> str:
    return f"Enter {label.lower()}"


def default_options(count: int = DEFAULT_OPTION_COUNT) -> list[str]:
    return [f"Option {i}" for i in range(1, count + 1)]


def is_choice_type(field_type: str) -> bool:
    return field_type in CHOICE_TYPES
