"""Post persistence: upsert by source path, slug/path lookup, commit batches"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from mdpost.core.models import Document
from mdpost.core.utils.hashing import sha256
from mdpost.crud.models import Post
from mdpost.crud.versioning import save_version


logger = logging.getLogger(__name__)


def get_by_path(session: Session, path: str) -> Post | None:
    """Return the Post built from the given source path, or None if not found."""
    return session.exec(select(Post).where(Post.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> Post | None:
    """Return the Post with the given slug, or None if not found."""
    return session.exec(select(Post).where(Post.slug == slug)).one_or_none()


def get_all_posts(session: Session) -> list[Post]:
    """Return all posts, newest first."""
    return list(session.exec(select(Post).order_by(Post.published_on.desc(), Post.slug)).all())


def get_last_committed(session: Session) -> list[Post]:
    """Return posts from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Post.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(select(Post).where(Post.committed_at == max_ts)).all())


def to_document(post: Post) -> Document:
    """Rebuild the immutable Document stored on a Post."""
    return Document.model_validate(post.document)


def _apply(post: Post, doc: Document, raw: str) -> None:
    post.slug = doc.slug
    post.title = doc.title
    post.published_on = doc.date
    post.description = doc.description
    post.markdown = raw
    post.hash = sha256(raw)
    post.document = doc.model_dump(mode="json")


def commit_post(
    session: Session,
    doc: Document,
    path: str,
    raw: str,
    max_versions: int = 10,
    committed_at: datetime | None = None,
    ) -> tuple[Post, str]:
    """Upsert a parsed Document keyed by its source path.

    Returns (post, status) where status is 'created', 'updated', or 'unchanged'.
    Raises ValueError when the slug already belongs to a post from another path.
    Flushes but does not commit; caller controls the transaction.
    """
    owner = get_by_slug(session, doc.slug)
    if owner is not None and owner.path != path:
        raise ValueError(f"Slug {doc.slug!r} in {path} is already used by {owner.path}")

    post = get_by_path(session, path)
    if post:
        if post.hash == sha256(raw):
            return post, 'unchanged'
        save_version(session, post, max_versions)
        _apply(post, doc, raw)
        post.updated_at = datetime.now()
        post.committed_at = committed_at
        session.add(post)
        session.flush()
        logger.info("Updated post %s from %s", post.slug, path)
        return post, 'updated'

    post = Post(
        slug=doc.slug,
        title=doc.title,
        published_on=doc.date,
        description=doc.description,
        path=path,
        hash=sha256(raw),
        markdown=raw,
        document=doc.model_dump(mode="json"),
        committed_at=committed_at,
    )
    session.add(post)
    session.flush()
    logger.info("Created post %s from %s", post.slug, path)
    return post, 'created'
