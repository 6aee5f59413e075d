"""
Frontmatter parser for content items.

Content files start with a block delimited by ``---`` lines:

    ---
    title: Day 1 as a Solo Founder
    date: 2025-03-15
    tags: [startup, "solo founder"]
    featured: true
    ---
    # Day 1 as a Solo Founder
    ...

Only a flat ``key: value`` subset of YAML is accepted. Every value comes back
as one of three tagged types (Text, TextList, Flag) and the set of keys is
closed, so a typo in a content file fails the item instead of silently
falling back to a default.
"""

import csv
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union


FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)(.*)$', re.DOTALL)
EMPTY_FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n---[ \t]*(?:\r?\n|$)(.*)$', re.DOTALL)
LINE_RE = re.compile(r'^([A-Za-z_][A-Za-z0-9_-]*)\s*:\s*(.*)$')

# field -> kinds accepted for it
FIELD_KINDS = {
    'title': ('text',),
    'date': ('text',),
    'tags': ('list', 'text'),
    'author': ('text',),
    'image': ('text',),
    'coverImage': ('text',),
    'tldr': ('text',),
    'description': ('text',),
    'demo': ('text',),
    'github': ('text',),
    'featured': ('flag',),
}


class FrontmatterError(ValueError):
    """Raised when a frontmatter block cannot be parsed or validated."""


@dataclass(frozen=True)
class Text:
    value: str
    kind = 'text'


@dataclass(frozen=True)
class TextList:
    items: tuple
    kind = 'list'


@dataclass(frozen=True)
class Flag:
    value: bool
    kind = 'flag'


FieldValue = Union[Text, TextList, Flag]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_value(raw: str) -> FieldValue:
    """Parse the right-hand side of a ``key: value`` line."""
    value = raw.strip()
    if value.startswith('[') and value.endswith(']'):
        # csv keeps commas inside "double quoted" elements
        parts = next(csv.reader([value[1:-1]], skipinitialspace=True), [])
        items = [_strip_quotes(part.strip()).strip() for part in parts]
        return TextList(tuple(item for item in items if item))
    if value in ('true', 'false'):
        return Flag(value == 'true')
    return Text(_strip_quotes(value).strip())


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split a document into (frontmatter block, body). Block is None if absent."""
    if content.startswith('\ufeff'):
        content = content[1:]
    empty = EMPTY_FRONTMATTER_RE.match(content)
    if empty:
        return '', empty.group(1)
    match = FRONTMATTER_RE.match(content)
    if not match:
        return None, content
    return match.group(1), match.group(2)


def parse_block(block: str) -> dict[str, FieldValue]:
    """Parse and validate a frontmatter block into tagged values."""
    fields: dict[str, FieldValue] = {}

    for lineno, line in enumerate(block.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue

        match = LINE_RE.match(stripped)
        if not match:
            raise FrontmatterError(f"line {lineno}: expected 'key: value', got {stripped!r}")

        key, raw = match.group(1), match.group(2)
        if key not in FIELD_KINDS:
            raise FrontmatterError(f"line {lineno}: unknown field {key!r}")
        if key in fields:
            raise FrontmatterError(f"line {lineno}: duplicate field {key!r}")

        value = parse_value(raw)
        if value.kind not in FIELD_KINDS[key]:
            raise FrontmatterError(
                f"line {lineno}: field {key!r} expects {' or '.join(FIELD_KINDS[key])}, got {value.kind}"
            )
        fields[key] = value

    return fields


def parse_document(content: str) -> tuple[dict[str, FieldValue], str]:
    """Parse a whole markdown document. Returns (fields, body)."""
    block, body = split_frontmatter(content)
    if block is None:
        return {}, body
    return parse_block(block), body


def text_field(fields: dict[str, FieldValue], key: str, default: str = '') -> str:
    value = fields.get(key)
    if value is None:
        return default
    return value.value if isinstance(value, Text) else default


def tags_field(fields: dict[str, FieldValue], key: str = 'tags') -> list[str]:
    """Tags in authored order. A bare string is treated as comma-separated."""
    value = fields.get(key)
    if isinstance(value, TextList):
        return list(value.items)
    if isinstance(value, Text):
        return [tag.strip() for tag in value.value.split(',') if tag.strip()]
    return []


def flag_field(fields: dict[str, FieldValue], key: str, default: bool = False) -> bool:
    value = fields.get(key)
    return value.value if isinstance(value, Flag) else default


DATE_FORMATS = ('%Y-%m-%d', '%Y/%m/%d', '%B %d, %Y', '%b %d, %Y', '%d %B %Y', '%d %b %Y')


def parse_date(value: str | None) -> datetime | None:
    """Parse an ISO-ish date string. Returns a naive UTC datetime, or None."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
