"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdpost.config import Settings, load_config
from mdpost.core.errors import ParseError
from mdpost.core.models import Heading
from mdpost.core.parse import parse_file
from mdpost.core.pipeline import check_files, run_commit, run_export, run_parse
from mdpost.core.render import SiteContext
from mdpost.core.utils.diff import diff_summary
from mdpost.crud.database import init_db, make_engine, reset_db
from mdpost.crud.posts import get_all_posts, get_by_path, get_by_slug
from mdpost.crud.versioning import diff_versions, get_version, list_versions, revert_to_version
from mdpost.logs import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _site(settings: Settings) -> SiteContext:
    return SiteContext(site_title=settings.site_title, language=settings.language)


def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level")] = False,
    ):
    """Front-matter markdown article publisher."""
    level = "DEBUG" if verbose else _settings().log_level
    configure_logging(level)


def parse_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown file to parse")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the full Document as JSON")] = False,
    ):
    """Parse one file and print its metadata and outline."""
    settings = _settings()
    try:
        doc = parse_file(path, settings.header_marker, settings.required_keys)
    except ParseError as e:
        _fail(str(e))

    if as_json:
        typer.echo(doc.model_dump_json(indent=2))
        return
    typer.echo(f"title: {doc.title}")
    typer.echo(f"slug:  {doc.slug}")
    typer.echo(f"date:  {doc.date.isoformat()}")
    if doc.description:
        typer.echo(f"description: {doc.description}")
    typer.echo(f"blocks: {len(doc.blocks)}")
    for b in doc.blocks:
        if isinstance(b, Heading):
            typer.echo(f"{'  ' * (b.level - 1)}- {b.text}")


def check_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to validate")],
    ):
    """Parse every file and report errors without storing anything."""
    settings = _settings()
    results = check_files(path, settings.header_marker, settings.required_keys)
    if not results:
        typer.echo("No markdown files found.")
        raise typer.Exit(1)

    failed = 0
    for p, result in results:
        if isinstance(result, ParseError):
            failed += 1
            typer.echo(f"  error: {result}")
        else:
            typer.echo(f"  ok: {p} ({result.slug})")
    typer.echo(f"Checked {len(results)} file(s), {failed} failed")
    if failed:
        raise typer.Exit(1)


def build_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to process")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="html or md")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    ):
    """Run the full pipeline: parse -> commit -> export."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt, "max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)

    # --- parse ---
    try:
        parsed = run_parse(path, settings.header_marker, settings.required_keys)
    except RuntimeError as e:
        _fail(str(e))
    if not parsed:
        typer.echo("No markdown files found.")
        raise typer.Exit(1)
    typer.echo(f"Parsed {len(parsed)} document(s)")

    # --- commit ---
    try:
        counts, changes = run_commit(engine, parsed, settings.max_versions)
    except Exception as e:
        _fail("Commit failed", e)
    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )

    # --- export ---
    output_dir = Path(settings.output_dir)
    try:
        with Session(engine) as session:
            posts = [get_by_path(session, str(src.path)) for src in parsed]
            results = run_export(posts, output_dir, settings.output_format, _site(settings))
    except Exception as e:
        _fail("Export failed", e)
    for slug, page_path in results:
        typer.echo(f"  {slug} -> {page_path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")


def list_cmd():
    """List stored posts, newest first."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        posts = get_all_posts(session)
        rows = [(p.published_on.isoformat(), p.slug, p.title) for p in posts]
    if not rows:
        typer.echo("No posts found in database.")
        raise typer.Exit(1)
    for day, slug, title in rows:
        typer.echo(f"{day}  {slug}  {title}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def history_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    ):
    """List stored versions of a post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug {slug!r}")
        rows = [(v.version_num, v.created_at, v.hash[:12]) for v in list_versions(session, post.id)]
    if not rows:
        typer.echo(f"No stored versions for {slug}.")
        return
    for num, created, short_hash in rows:
        typer.echo(f"v{num}  {created:%Y-%m-%d %H:%M:%S}  {short_hash}")


def diff_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    from_num: Annotated[int, typer.Argument(help="Older version number")],
    to_num: Annotated[int, typer.Argument(help="Newer version number")],
    ):
    """Show a unified diff between two stored versions of a post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug {slug!r}")
        try:
            lines = diff_versions(session, post.id, from_num, to_num)
            summary = diff_summary(
                get_version(session, post.id, from_num).markdown,
                get_version(session, post.id, to_num).markdown,
            )
        except ValueError as e:
            _fail(str(e))
    typer.echo(f"+{summary['added']} -{summary['deleted']} ={summary['unchanged']}")
    typer.echo("".join(lines), nl=False)


def revert_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    version: Annotated[int, typer.Argument(help="Version number to restore")],
    ):
    """Restore a stored version as the current state of a post."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        post = get_by_slug(session, slug)
        if post is None:
            _fail(f"No post with slug {slug!r}")
        try:
            revert_to_version(session, post, version, settings.max_versions)
        except ValueError as e:
            _fail(str(e))
        session.commit()
    typer.echo(f"Reverted {slug} to v{version}")
