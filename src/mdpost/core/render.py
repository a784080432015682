"""Renderers for a parsed Document: HTML page, normalized markdown, JSON sidecar"""

import datetime
import re
from collections import Counter
from html import escape
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict

from mdpost.core.models import (
    CodeFence, Document, Emphasis, Heading, Hyperlink, Image, InlineCode,
    Link, ListItem, Paragraph, Quote, Rule, Span, Text,
)
from mdpost.core.utils.slug import unique_slug


BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class SiteContext(BaseModel):
    """Site-wide values handed to the renderer explicitly."""
    model_config = ConfigDict(frozen=True)
    site_title: str = ""
    language:   str = "en"


# --- HTML ---

def _html_span(span: Span) -> str:
    if isinstance(span, Text):
        return escape(span.value, quote=False)
    if isinstance(span, Emphasis):
        tag = "strong" if span.strong else "em"
        return f"<{tag}>{escape(span.value, quote=False)}</{tag}>"
    if isinstance(span, InlineCode):
        return f"<code>{escape(span.value, quote=False)}</code>"
    if isinstance(span, Hyperlink):
        return f'<a href="{escape(span.url)}">{escape(span.text, quote=False)}</a>'
    if isinstance(span, Image):
        return f'<img src="{escape(span.url)}" alt="{escape(span.alt)}">'
    raise TypeError(f"Unknown span type: {type(span).__name__}")


def render_spans(spans: Iterable[Span]) -> str:
    return "".join(_html_span(s) for s in spans)


def _html_list(items: list[ListItem]) -> str:
    """Nest consecutive list items into <ul>/<ol> by depth."""
    out: list[str] = []
    stack: list[tuple[int, str]] = []   # (depth, tag) of open lists
    for item in items:
        tag = "ol" if item.ordered else "ul"
        while stack and stack[-1][0] > item.depth:
            out.append(f"</li></{stack.pop()[1]}>")
        if stack and stack[-1][0] == item.depth and stack[-1][1] != tag:
            out.append(f"</li></{stack.pop()[1]}>")
        if stack and stack[-1][0] == item.depth:
            out.append("</li>")
        else:
            out.append(f"<{tag}>")
            stack.append((item.depth, tag))
        out.append(f"<li>{render_spans(item.spans)}")
    while stack:
        out.append(f"</li></{stack.pop()[1]}>")
    return "".join(out)


def render_blocks(blocks: Iterable) -> str:
    """Render blocks in order; consecutive ListItems share one list element."""
    parts: list[str] = []
    pending: list[ListItem] = []
    anchors: set[str] = set()

    for block in blocks:
        if isinstance(block, ListItem):
            pending.append(block)
            continue
        if pending:
            parts.append(_html_list(pending))
            pending = []

        if isinstance(block, Heading):
            anchor = unique_slug(block.text, anchors)
            parts.append(f'<h{block.level} id="{anchor}">{escape(block.text, quote=False)}</h{block.level}>')
        elif isinstance(block, Paragraph):
            parts.append(f"<p>{render_spans(block.spans)}</p>")
        elif isinstance(block, CodeFence):
            cls = f' class="language-{escape(block.language)}"' if block.language else ""
            parts.append(f"<pre><code{cls}>{escape(block.raw_text, quote=False)}</code></pre>")
        elif isinstance(block, Quote):
            parts.append(f"<blockquote><p>{render_spans(block.spans)}</p></blockquote>")
        elif isinstance(block, Link):
            parts.append(f'<p><a href="{escape(block.url)}">{escape(block.text, quote=False)}</a></p>')
        elif isinstance(block, Rule):
            parts.append("<hr>")
    if pending:
        parts.append(_html_list(pending))
    return "\n".join(parts)


def render_html(doc: Document, site: SiteContext = None) -> str:
    """Standalone article page; no navigation and no theme."""
    site = site or SiteContext()
    title = escape(doc.title, quote=False)
    head_title = f"{title} | {escape(site.site_title, quote=False)}" if site.site_title else title
    meta = f'\n<meta name="description" content="{escape(doc.description)}">' if doc.description else ""
    return (
        f'<!DOCTYPE html>\n<html lang="{escape(site.language)}">\n<head>\n'
        f'<meta charset="utf-8">\n<title>{head_title}</title>{meta}\n</head>\n<body>\n'
        f'<article>\n<header>\n<h1>{title}</h1>\n'
        f'<time datetime="{doc.date.isoformat()}">{doc.date.isoformat()}</time>\n</header>\n'
        f'{render_blocks(doc.blocks)}\n</article>\n</body>\n</html>\n'
    )


# --- normalized markdown ---

def _quote_value(value: Any) -> str:
    """Render a header value as TOML."""
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_quote_value(v) for v in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, datetime.date):
        return value.isoformat()
    s = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r")
    return f'"{s}"'


def _quote_key(key: str) -> str:
    return key if BARE_KEY_RE.match(key) else _quote_value(key)


def _code_ticks(value: str) -> str:
    longest = max((len(r) for r in re.findall(r'`+', value)), default=0)
    return "`" * (longest + 1)


def _md_span(span: Span) -> str:
    if isinstance(span, Text):
        return span.value
    if isinstance(span, Emphasis):
        mark = "**" if span.strong else "*"
        return f"{mark}{span.value}{mark}"
    if isinstance(span, InlineCode):
        ticks = _code_ticks(span.value)
        return f"{ticks}{span.value}{ticks}"
    if isinstance(span, Hyperlink):
        return f"[{span.text}]({span.url})"
    if isinstance(span, Image):
        return f"![{span.alt}]({span.url})"
    raise TypeError(f"Unknown span type: {type(span).__name__}")


def _md_fence(block: CodeFence) -> str:
    fence = "```"
    while re.search(r'^[ \t]*' + fence, block.raw_text, re.MULTILINE):
        fence += "`"
    body = block.raw_text
    if body and not body.endswith("\n"):
        body += "\n"
    return f"{fence}{block.language or ''}\n{body}{fence}"


def _md_block(block) -> str:
    if isinstance(block, Heading):
        return f"{'#' * block.level} {block.text}"
    if isinstance(block, Paragraph):
        return "".join(_md_span(s) for s in block.spans)
    if isinstance(block, CodeFence):
        return _md_fence(block)
    if isinstance(block, ListItem):
        marker = "1." if block.ordered else "-"
        return f"{'  ' * block.depth}{marker} " + "".join(_md_span(s) for s in block.spans)
    if isinstance(block, Quote):
        text = "".join(_md_span(s) for s in block.spans)
        return "\n".join(f"> {line}".rstrip() for line in text.split("\n"))
    if isinstance(block, Link):
        return f"[{block.text}]({block.url})"
    if isinstance(block, Rule):
        return "---"
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def render_markdown(doc: Document) -> str:
    """Normalized markdown with a +++ key = "value" header."""
    header = {"title": doc.title, "slug": doc.slug, "date": doc.date.isoformat()}
    if doc.description:
        header["description"] = doc.description
    header.update(doc.extra)
    lines = ["+++", *(f"{_quote_key(k)} = {_quote_value(v)}" for k, v in header.items()), "+++", ""]

    body: list[str] = []
    prev = None
    for block in doc.blocks:
        sep = "\n" if isinstance(block, ListItem) and isinstance(prev, ListItem) else "\n\n"
        if body:
            body.append(sep)
        body.append(_md_block(block))
        prev = block
    return "\n".join(lines) + "".join(body) + ("\n" if body else "")


# --- sidecar ---

def build_sidecar(doc: Document) -> dict:
    """JSON-ready metadata: front matter fields, heading outline, block counts."""
    data = doc.model_dump(mode="json", exclude={"blocks"})
    data["extra"] = dict(data["extra"])
    data["outline"] = [
        {"level": b.level, "text": b.text} for b in doc.blocks if isinstance(b, Heading)
    ]
    data["block_counts"] = dict(Counter(b.kind for b in doc.blocks))
    return data
