"""Combine front matter and segmented blocks into one immutable Document"""

import datetime
import re
from typing import Any, Iterable, Optional

from mdpost.core.blocks import BlockKind, RawBlock
from mdpost.core.errors import InvalidMetadata, MissingMetadata
from mdpost.core.inline import format_inline
from mdpost.core.models import (
    Block, CodeFence, Document, Heading, Hyperlink, Link, ListItem,
    Paragraph, Quote, Rule, Span, Text,
)
from mdpost.core.utils.slug import is_safe_slug


REQUIRED_KEYS = ("title", "slug", "date")
RECOGNIZED_KEYS = frozenset({"title", "slug", "date", "description"})
ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$')


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_date(value: Any) -> datetime.date:
    """Accept date/datetime objects or ISO-like 'YYYY-MM-DD[...]' strings."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    m = ISO_DATE_RE.match(str(value).strip())
    if not m:
        raise InvalidMetadata("date", f"expected YYYY-MM-DD, got {value!r}")
    try:
        return datetime.date(*(int(g) for g in m.groups()))
    except ValueError as e:
        raise InvalidMetadata("date", str(e)) from e


def _sole_link(spans: tuple[Span, ...]) -> Optional[Hyperlink]:
    """Return the hyperlink when it is the only non-whitespace span, else None."""
    content = [s for s in spans if not (isinstance(s, Text) and not s.value.strip())]
    if len(content) == 1 and isinstance(content[0], Hyperlink):
        return content[0]
    return None


def build_block(raw: RawBlock) -> Block:
    """Convert one RawBlock into its Block model, formatting inline text."""
    if raw.kind == BlockKind.heading:
        return Heading(level=raw.level, text=raw.text)
    if raw.kind == BlockKind.code:
        return CodeFence(language=raw.language, raw_text=raw.text)
    if raw.kind == BlockKind.rule:
        return Rule()
    if raw.kind == BlockKind.link:
        return Link(text=raw.text, url=raw.url or "")
    if raw.kind == BlockKind.list_item:
        return ListItem(ordered=raw.ordered, spans=format_inline(raw.text), depth=raw.depth)
    if raw.kind == BlockKind.quote:
        return Quote(spans=format_inline(raw.text))

    spans = format_inline(raw.text)
    if link := _sole_link(spans):
        return Link(text=link.text, url=link.url)
    return Paragraph(spans=spans)


def assemble(
    meta: dict[str, Any],
    blocks: Iterable[RawBlock],
    required: Iterable[str] = REQUIRED_KEYS,
    ) -> Document:
    """Validate metadata and build the Document. Pure; no I/O.

    Required keys are checked in order (caller's keys first, then title, slug,
    date) before any block is consumed; the first absent or empty key raises
    MissingMetadata. Keys other than title/slug/date/description are kept in
    Document.extra.
    """
    for key in dict.fromkeys((*required, *REQUIRED_KEYS)):
        if _is_blank(meta.get(key)):
            raise MissingMetadata(key)

    slug = str(meta["slug"]).strip()
    if not is_safe_slug(slug):
        raise InvalidMetadata("slug", f"must be URL-safe (A-Z a-z 0-9 . _ ~ -): {slug!r}")

    description = meta.get("description")
    return Document(
        title=str(meta["title"]).strip(),
        slug=slug,
        date=coerce_date(meta["date"]),
        description="" if description is None else str(description),
        blocks=tuple(build_block(b) for b in blocks),
        extra={k: v for k, v in meta.items() if k not in RECOGNIZED_KEYS},
    )
