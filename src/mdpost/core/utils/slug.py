"""Slug generation for heading anchors"""

import re
import unicodedata


def slugify(text: str) -> str:
    """Lowercase, ASCII-folded, hyphen-separated anchor id ('' for no usable chars)."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r'[^\w\s-]', '', text.lower())
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def unique_slug(text: str, seen: set[str]) -> str:
    """slugify text, suffixing -1, -2, ... until it is not in seen; records the result."""
    base = slugify(text) or "section"
    candidate, n = base, 0
    while candidate in seen:
        n += 1
        candidate = f"{base}-{n}"
    seen.add(candidate)
    return candidate


SAFE_SLUG_RE = re.compile(r'^[A-Za-z0-9._~-]+$')


def is_safe_slug(slug: str) -> bool:
    """True for URL-safe slugs that also name a single file ('.' and '..' excluded)."""
    return bool(SAFE_SLUG_RE.match(slug)) and slug not in (".", "..")
