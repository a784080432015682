"""Post version persistence: save, prune, list, diff, and revert operations"""

import json
from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from mdpost.core.models import Document
from mdpost.core.utils.diff import unified_diff
from mdpost.crud.models import Post, PostVersion


def get_version(session: Session, post_id: UUID, num: int) -> PostVersion:
    """Return one stored version. Raises ValueError if it does not exist."""
    v = session.exec(
        select(PostVersion)
        .where(PostVersion.post_id == post_id)
        .where(PostVersion.version_num == num)
    ).one_or_none()
    if v is None:
        raise ValueError(f"Version {num} not found for post {post_id}")
    return v


def diff_versions(session: Session, post_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    """Unified diff lines between two stored versions. Raises ValueError if either is missing."""
    v_from, v_to = get_version(session, post_id, from_num), get_version(session, post_id, to_num)
    return unified_diff(v_from.markdown, v_to.markdown, f"v{from_num}", f"v{to_num}", context)


def list_versions(session: Session, post_id: UUID) -> list[PostVersion]:
    """Return all versions for a post ordered by version_num ascending."""
    return list(
        session.exec(
            select(PostVersion)
            .where(PostVersion.post_id == post_id)
            .order_by(PostVersion.version_num.asc())
        ).all()
    )


def prune_versions(session: Session, post_id: UUID, max_versions: int) -> int:
    """Delete oldest versions beyond max_versions. Returns count deleted. No-op if max_versions=0."""
    if max_versions == 0:
        return 0

    versions = list_versions(session, post_id)
    excess = len(versions) - max_versions
    if excess <= 0:
        return 0

    for v in versions[:excess]:
        session.delete(v)
    session.flush()
    return excess


def save_version(session: Session, post: Post, max_versions: int = 10) -> PostVersion:
    """Snapshot the current Post state as a new immutable version.

    version_num is MAX(version_num)+1 for this post. Prunes afterwards when
    max_versions > 0.
    """
    result = session.exec(
        select(func.max(PostVersion.version_num))
        .where(PostVersion.post_id == post.id)
    ).one()

    version = PostVersion(
        post_id=post.id,
        version_num=(result or 0) + 1,
        markdown=post.markdown,
        hash=post.hash,
        document=json.dumps(post.document),
    )
    session.add(version)
    session.flush()

    if max_versions > 0:
        prune_versions(session, post.id, max_versions)
    return version


def revert_to_version(session: Session, post: Post, version_num: int, max_versions: int = 10) -> Post:
    """Promote a prior version's content as a new state of the current Post.

    Snapshots the current state first so it stays in history. Flushes but
    does not commit. Raises ValueError if version_num is not found or its
    slug now belongs to another post.
    """
    target = get_version(session, post.id, version_num)
    doc = Document.model_validate(json.loads(target.document))
    owner = session.exec(select(Post).where(Post.slug == doc.slug, Post.id != post.id)).first()
    if owner is not None:
        raise ValueError(f"Slug {doc.slug!r} of v{version_num} is now used by {owner.path}")
    markdown, hash_ = target.markdown, target.hash
    save_version(session, post, max_versions=max_versions)

    post.slug = doc.slug
    post.title = doc.title
    post.published_on = doc.date
    post.description = doc.description
    post.markdown = markdown
    post.hash = hash_
    post.document = doc.model_dump(mode="json")
    post.updated_at = datetime.now()
    session.add(post)
    session.flush()
    return post
