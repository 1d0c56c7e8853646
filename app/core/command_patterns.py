"""
Phrase table for voice commands.

Each CommandPattern binds a regular expression to the field it creates. The
table is scanned top to bottom; every pattern is applied to the whole
transcript and may fire more than once, so one utterance can create several
fields. Matching ignores case but captured text keeps the speaker's casing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from app.core.field_model import ENTITY_LABELS, capitalize_type

# "add", "include", "create", or "and" continuing an earlier one in the same utterance
VERB = r"\b(?P<verb>add|include|create|and)\s+"
ARTICLE = r"(?:an?\s+)?"

# where a captured name ends: punctuation, end of text, or the next clause
_STOP = (
    r"(?=\s+(?:with|options|choices|that|which|required|mandatory|make|add|include|create"
    r"|and\s+(?:an?|the|make|add|include|create))\b"
    r"|\s*[\"'.,;!?]|\s*$)"
)
LABEL = r"[\"']?(?P<label>[^\"'.,;!?]+?)" + _STOP
NAMED = r"\s+(?:for|called|named)\s*" + LABEL
OPTIONALLY_NAMED = r"(?:" + NAMED + r")?"

REQUIRED_WORDS = ("required", "mandatory")


@dataclass(frozen=True)
class FieldMatch:
    pattern: str
    field_type: str
    label: str
    span: tuple[int, int]


@dataclass(frozen=True)
class CommandPattern:
    name: str
    regex: re.Pattern
    field_type: str
    default_label: str | None = None

    def fallback_label(self) -> str:
        return self.default_label or capitalize_type(self.field_type)

    def finditer(self, transcript: str) -> Iterator[FieldMatch]:
        for m in self.regex.finditer(transcript):
            if m.group("verb").lower() == "and" and not CREATION_VERB_RE.search(transcript, 0, m.start()):
                continue
            captured = ""
            if "label" in self.regex.groupindex:
                captured = (m.group("label") or "").strip()
            yield FieldMatch(
                pattern=self.name,
                field_type=self.field_type,
                label=captured or self.fallback_label(),
                span=m.span(),
            )


def _pattern(name: str, body: str, field_type: str, default_label: str | None = None) -> CommandPattern:
    return CommandPattern(
        name=name,
        regex=re.compile(VERB + ARTICLE + body, re.IGNORECASE),
        field_type=field_type,
        default_label=default_label,
    )


FIELD_PATTERNS: tuple[CommandPattern, ...] = (
    # text
    _pattern("text", r"(?:(?:text|input)\s+)?field" + NAMED, "text"),
    _pattern("name", r"name\s*field", "text", ENTITY_LABELS["name"]),
    _pattern("first_name", r"first\s*name\s*field", "text", ENTITY_LABELS["first name"]),
    _pattern("last_name", r"last\s*name\s*field", "text", ENTITY_LABELS["last name"]),
    _pattern("address", r"address\s*field", "text", ENTITY_LABELS["address"]),
    _pattern("company", r"company\s*field", "text", ENTITY_LABELS["company"]),
    # contact details
    _pattern("email", r"e-?mail\b(?:\s+address)?(?:\s+field)?", "email", ENTITY_LABELS["email"]),
    _pattern("phone", r"phone\b(?:\s+number)?(?:\s+field)?", "tel", ENTITY_LABELS["phone"]),
    # dates and numbers
    _pattern("date", r"(?:date|birthday|birth\s*date)\s*field", "date", ENTITY_LABELS["date"]),
    _pattern("number", r"(?:number|age|quantity)\s*field", "number", ENTITY_LABELS["number"]),
    # long text
    _pattern(
        "textarea",
        r"(?:textarea|text\s*area|comments?|message|description)\s*field",
        "textarea",
        ENTITY_LABELS["comments"],
    ),
    # choices
    _pattern("select", r"(?:dropdown|drop-down|select|choice)\s*field" + OPTIONALLY_NAMED, "select"),
    _pattern("checkbox", r"checkbox(?:\s*field)?" + OPTIONALLY_NAMED, "checkbox"),
    _pattern("radio", r"radio(?:\s*(?:button|field))?" + OPTIONALLY_NAMED, "radio"),
    # uploads
    _pattern("file", r"(?:file|upload)\s*field", "file", ENTITY_LABELS["file"]),
    # remaining input types
    _pattern("url", r"(?:url|website|link)\s*field", "url", "Website"),
    _pattern("time", r"time\s*field", "time"),
    _pattern("range", r"(?:range|slider|rating)\s*field", "range"),
    _pattern("color", r"colou?r\s*(?:picker|field)", "color"),
    _pattern("password", r"password\s*field", "password"),
)


# --- clauses that edit the document rather than add fields ---

FORM_TITLE_RE = re.compile(
    r"\b(?:(?:form|survey)\s+(?:called|named)|titled)\s*[\"']?(?P<name>[^\"'.,;!?]+?)" + _STOP,
    re.IGNORECASE,
)
# any "called/named/titled X", including "a field called X"
LOOSE_TITLE_RE = re.compile(
    r"\b(?:called|named|titled)\s*[\"']?(?P<name>[^\"'.,;!?]+?)" + _STOP,
    re.IGNORECASE,
)
FORM_KIND_RE = re.compile(
    r"\b(?:create|make|build)\s+(?:(?:a|an|the|new)\s+)*"
    r"(?P<name>(?:(?!\b(?:create|make|build)\b)[^.,;!?])+?)\s*\b(?:form|survey)\b",
    re.IGNORECASE,
)
DESCRIPTION_RE = re.compile(
    r"\b(?:description|about|for)\b\s*(?:is\s+|:\s*)?[\"']?(?P<description>[^\"'.;!?]+?)"
    r"(?=\s*,?\s*(?:\band\s+)?\b(?:add|include|create|make|remove|delete)\b|\s*[\"'.;!?]|\s*$)",
    re.IGNORECASE,
)
# a phrase that does not run into a following creation command
_NO_CREATION = r"(?:(?!\b(?:add|include|create)\b)[^\"'.,;!?])+?"

OPTIONS_RE = re.compile(
    r"\b(?:options|choices)\b\s*(?:(?:are|include)\b|:)?\s*[\"']?(?P<items>[^\"'.;!?]+?)"
    r"(?=\s*,?\s*(?:\band\s+)?\b(?:add|include|create|make|remove|delete)\b|\s*[\"'.;!?]|\s*$)",
    re.IGNORECASE,
)
OPTION_SPLIT_RE = re.compile(r",|\s+and\s+|\s+or\s+", re.IGNORECASE)
REQUIRED_RETROFIT_RE = re.compile(
    r"\bmake\s+(?:the\s+)?(?P<phrase>" + _NO_CREATION + r")\s+(?:fields?\s+)?(?:required|mandatory)\b",
    re.IGNORECASE,
)
REMOVE_RE = re.compile(
    r"\b(?:remove|delete)\s+(?:the\s+)?(?P<phrase>" + _NO_CREATION + r")\s*\bfields?\b",
    re.IGNORECASE,
)
CREATION_VERB_RE = re.compile(r"\b(?:add|include|create)\b", re.IGNORECASE)

_LEADING_ARTICLES = re.compile(r"^(?:(?:a|an|the|new)\s+)+", re.IGNORECASE)


def edit_clause_spans(transcript: str) -> list[tuple[int, int]]:
    """Spans of options, required and removal clauses; no field is created inside them."""
    spans = []
    for regex in (OPTIONS_RE, REQUIRED_RETROFIT_RE, REMOVE_RE):
        spans.extend(m.span() for m in regex.finditer(transcript))
    return spans


def match_fields(transcript: str) -> list[FieldMatch]:
    """All field-creation matches, in table order."""
    blocked = edit_clause_spans(transcript)
    matches: list[FieldMatch] = []
    for pattern in FIELD_PATTERNS:
        for m in pattern.finditer(transcript):
            start = m.span[0]
            if any(lo <= start < hi for lo, hi in blocked):
                continue
            matches.append(m)
    return matches


def mentions_required(transcript: str) -> bool:
    lowered = transcript.lower()
    return any(word in lowered for word in REQUIRED_WORDS)


def extract_form_title(transcript: str, *, loose: bool = False) -> str | None:
    """
    Name from "form called X", "survey named X" or "titled X".
    With `loose`, any "called/named X" counts, so "a field called Team"
    also renames the form.
    """
    m = (LOOSE_TITLE_RE if loose else FORM_TITLE_RE).search(transcript)
    if not m:
        return None
    return m.group("name").strip() or None


def extract_form_kind(transcript: str) -> str | None:
    """'create a customer feedback form' -> 'customer feedback'"""
    m = FORM_KIND_RE.search(transcript)
    if not m:
        return None
    name = _LEADING_ARTICLES.sub("", m.group("name").strip()).strip()
    if name.lower() in {"a", "an", "the", "new"}:
        return None
    return name or None


def extract_description(transcript: str, ignore_spans: list[tuple[int, int]] | None = None) -> str | None:
    spans = ignore_spans or []
    for m in DESCRIPTION_RE.finditer(transcript):
        start = m.start()
        if any(lo <= start < hi for lo, hi in spans):
            continue
        text = m.group("description").strip()
        if text:
            return text
    return None


def extract_options(transcript: str) -> list[str] | None:
    m = OPTIONS_RE.search(transcript)
    if not m:
        return None
    options = [opt.strip() for opt in OPTION_SPLIT_RE.split(m.group("items"))]
    options = [opt for opt in options if opt]
    return options or None


def _split_targets(regex: re.Pattern, transcript: str) -> list[str]:
    # "the phone and email fields" -> ["phone", "email"]
    targets = []
    for m in regex.finditer(transcript):
        for part in OPTION_SPLIT_RE.split(m.group("phrase")):
            part = _LEADING_ARTICLES.sub("", part.strip()).strip()
            if part:
                targets.append(part)
    return targets


def extract_required_targets(transcript: str) -> list[str]:
    return _split_targets(REQUIRED_RETROFIT_RE, transcript)


def extract_removal_targets(transcript: str) -> list[str]:
    return _split_targets(REMOVE_RE, transcript)
