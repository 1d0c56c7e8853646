"""
Turns one transcript into a FormDocumentUpdate.

Steps run in a fixed order over a running copy of the field list:

  1. form name ("form called X", or "create a X form" when still unnamed)
  2. description ("description/about/for X")
  3. new fields from the phrase table; "required"/"mandatory" anywhere in the
     transcript marks every field created by it as required
  4. "options are A, B and C" replaces the options of the last field if it
     is a select/radio
  5. "make X required" sets required on every field whose label contains X
  6. "remove X field" drops every field whose label contains X

Steps 5 and 6 use case-insensitive substring matching on labels, so
"remove the name field" also drops "First Name" and "Last Name". "X and Y"
in those clauses targets X and Y separately, and no field is created inside
an options, required or removal clause.

A transcript that matches nothing returns the current fields unchanged.
"""
from __future__ import annotations

import logging
from typing import Callable

from app.core import command_patterns as cp
from app.core.field_model import is_choice_type, new_id
from app.schemas.forms import FieldDelta, FormDocument, FormDocumentUpdate, FormField

logger = logging.getLogger(__name__)


def _label_contains(field: FormField, phrase: str) -> bool:
    return phrase.lower() in field.label.lower()


def interpret_transcript(
    transcript: str,
    document: FormDocument,
    *,
    id_factory: Callable[[], str] = new_id,
    loose_clauses: bool = False,
) -> FormDocumentUpdate:
    """
    `loose_clauses` restores the older, broader clause matching: any
    "called/named X" renames the form, and "for X" inside a field phrase
    ("a dropdown field for country") also becomes the description.
    """
    text = transcript.strip()
    fields = [f.model_copy(deep=True) for f in document.fields]

    # 1. name
    name = cp.extract_form_title(text, loose=loose_clauses)
    if name is None and "form" in text.lower() and not document.name:
        name = cp.extract_form_kind(text)

    # 2. description
    matches = cp.match_fields(text)
    field_spans = [] if loose_clauses else [m.span for m in matches]
    description = cp.extract_description(text, ignore_spans=field_spans)

    # 3. new fields
    required = cp.mentions_required(text)
    for m in matches:
        fields.append(
            FormField(
                id=id_factory(),
                type=m.field_type,
                label=m.label,
                required=required,
            )
        )

    # 4. options for the last select/radio
    options = cp.extract_options(text)
    if options and fields and is_choice_type(fields[-1].type):
        fields[-1].options = options

    # 5. required retrofit
    for phrase in cp.extract_required_targets(text):
        for f in fields:
            if _label_contains(f, phrase):
                f.required = True

    # 6. removal
    for phrase in cp.extract_removal_targets(text):
        fields = [f for f in fields if not _label_contains(f, phrase)]

    logger.debug(
        "interpreted %r: %d field matches, name=%r, description=%r",
        text,
        len(matches),
        name,
        description,
    )

    return FormDocumentUpdate(
        name=name or document.name,
        description=description or document.description,
        fields=fields,
    )


def summarize_delta(before: list[FormField], after: list[FormField]) -> FieldDelta:
    """Which field ids were added, changed or dropped between two field lists."""
    old = {f.id: f for f in before}
    new_ids = {f.id for f in after}

    delta = FieldDelta()
    for f in after:
        prev = old.get(f.id)
        if prev is None:
            delta.added.append(f.id)
        elif prev != f:
            delta.updated.append(f.id)
    delta.removed = [f.id for f in before if f.id not in new_ids]
    return delta
