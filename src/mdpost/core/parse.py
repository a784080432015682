"""Text-to-Document parsing plus caller-side file discovery and reading"""

import logging
from pathlib import Path
from typing import Iterable

from mdpost.core.assemble import REQUIRED_KEYS, assemble
from mdpost.core.blocks import segment
from mdpost.core.errors import ParseError
from mdpost.core.frontmatter import DEFAULT_MARKER, parse_front_matter
from mdpost.core.models import Document


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}


def parse_text(
    text: str,
    marker: str = DEFAULT_MARKER,
    required: Iterable[str] = REQUIRED_KEYS,
    ) -> Document:
    """Parse already-decoded document text into a Document.

    Raises MalformedHeader, UnterminatedFence, MissingMetadata, or
    InvalidMetadata; never returns a partially built Document.
    """
    fm = parse_front_matter(text, marker)
    return assemble(fm.meta, segment(fm.body), required)


def parse_file(
    path: Path,
    marker: str = DEFAULT_MARKER,
    required: Iterable[str] = REQUIRED_KEYS,
    ) -> Document:
    """Read a UTF-8 file and parse it; ParseErrors are tagged with the path."""
    raw = path.read_text(encoding='utf-8')
    try:
        doc = parse_text(raw, marker, required)
    except ParseError as e:
        e.with_source(str(path))
        raise
    logger.debug("Parsed %s -> %s (%d blocks)", path, doc.slug, len(doc.blocks))
    return doc


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)
