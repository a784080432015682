"""Pipeline step functions: parse, commit, and export orchestration"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Union

from sqlmodel import Session

from mdpost.core.assemble import REQUIRED_KEYS
from mdpost.core.errors import ParseError
from mdpost.core.export import write_doc
from mdpost.core.frontmatter import DEFAULT_MARKER
from mdpost.core.models import Document
from mdpost.core.parse import discover_files, parse_file, parse_text
from mdpost.core.render import SiteContext
from mdpost.crud.models import Post
from mdpost.crud.posts import commit_post, to_document


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedSource:
    """A parsed Document with the source it came from."""
    path: Path
    raw: str
    document: Document


def run_parse(
    path: Union[str, Path],
    marker: str = DEFAULT_MARKER,
    required: Iterable[str] = REQUIRED_KEYS,
    ) -> list[ParsedSource]:
    """Parse every markdown file under path. Stops at the first failure with RuntimeError."""
    required = tuple(required)
    results = []
    for p in discover_files(Path(path)):
        try:
            raw = p.read_text(encoding="utf-8")
            doc = parse_text(raw, marker, required)
        except (OSError, UnicodeDecodeError, ParseError) as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e
        logger.info("Parsed %s -> %s", p, doc.slug)
        results.append(ParsedSource(path=p, raw=raw, document=doc))
    return results


def check_files(
    path: Union[str, Path],
    marker: str = DEFAULT_MARKER,
    required: Iterable[str] = REQUIRED_KEYS,
    ) -> list[tuple[Path, Union[Document, ParseError]]]:
    """Parse every file independently; each result is a Document or the ParseError it raised."""
    required = tuple(required)
    results = []
    for p in discover_files(Path(path)):
        try:
            results.append((p, parse_file(p, marker, required)))
        except ParseError as e:
            logger.warning("%s", e)
            results.append((p, e))
    return results


def run_commit(
    engine,
    parsed: list[ParsedSource],
    max_versions: int,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Upsert parsed sources into the database in one transaction.

    Returns (counts, changes) where changes lists (status, slug) for
    created/updated posts. Returns ({}, []) when nothing was parsed.
    """
    if not parsed:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for src in parsed:
            post, status = commit_post(
                session, src.document, str(src.path), src.raw, max_versions, committed_at,
            )
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, post.slug))
        session.commit()
    return counts, changes


def run_export(
    posts: list[Post],
    output_dir: Path,
    fmt: str = "html",
    site: SiteContext = None,
    ) -> list[tuple[str, Path]]:
    """Write each post's page and sidecar. Returns (slug, page_path) pairs."""
    results = []
    for post in posts:
        page_path, _ = write_doc(to_document(post), output_dir, fmt, site)
        results.append((post.slug, page_path))
    return results
