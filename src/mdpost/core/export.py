"""Export: write a rendered page and sidecar JSON per post"""

import json
from pathlib import Path

from mdpost.core.models import Document
from mdpost.core.render import SiteContext, build_sidecar, render_html, render_markdown


def render_page(doc: Document, fmt: str = "html", site: SiteContext = None) -> str:
    """Return the page body for fmt ('html' or 'md')."""
    if fmt == "html":
        return render_html(doc, site)
    if fmt == "md":
        return render_markdown(doc)
    raise ValueError(f"Unknown output format: {fmt!r}")


def write_doc(
    doc: Document,
    output_dir: Path,
    fmt: str = "html",
    site: SiteContext = None,
    ) -> tuple[Path, Path]:
    """Write <slug>.<fmt> and <slug>.json under output_dir. Returns (page_path, json_path)."""
    output_dir.mkdir(parents=True, exist_ok=True)
    page_path = output_dir / f"{doc.slug}.{fmt}"
    json_path = output_dir / f"{doc.slug}.json"

    page_path.write_text(render_page(doc, fmt, site), encoding="utf-8")
    json_path.write_text(json.dumps(build_sidecar(doc), indent=2, ensure_ascii=False), encoding="utf-8")
    return page_path, json_path
