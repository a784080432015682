"""Unit tests for crud/versioning.py"""

import json

import pytest
from sqlmodel import Session

from mdpost.core.parse import parse_text
from mdpost.core.utils.hashing import sha256
from mdpost.crud.models import Post, PostVersion
from mdpost.crud.posts import commit_post
from mdpost.crud.versioning import (
    diff_versions, get_version, list_versions, prune_versions, revert_to_version, save_version,
)



def _edit(session: Session, post: Post, markdown: str) -> PostVersion:
    """Mutate post.markdown + hash and save a version snapshot."""
    post.markdown = markdown
    post.hash = sha256(markdown)
    return save_version(session, post, max_versions=0)


# --- save_version ---

def test_save_version_creates_record(session, post):
    v = save_version(session, post)
    assert session.get(PostVersion, v.id) is not None
    assert v.version_num == 1


def test_save_version_increments_num(session, post):
    v1 = save_version(session, post, max_versions=0)
    v2 = save_version(session, post, max_versions=0)
    assert v2.version_num == v1.version_num + 1


def test_save_version_serializes_document(session, post):
    v = save_version(session, post)
    assert json.loads(v.document) == post.document


def test_save_version_prunes_on_overflow(session, post):
    for _ in range(5):
        save_version(session, post, max_versions=3)
    nums = [v.version_num for v in list_versions(session, post.id)]
    assert nums == [3, 4, 5]


# --- prune_versions ---

def test_prune_versions_zero_is_noop(session, post):
    for _ in range(3):
        save_version(session, post, max_versions=0)
    assert prune_versions(session, post.id, 0) == 0
    assert len(list_versions(session, post.id)) == 3


def test_prune_versions_returns_count(session, post):
    for _ in range(4):
        save_version(session, post, max_versions=0)
    assert prune_versions(session, post.id, 1) == 3


# --- get_version / diff_versions ---

def test_get_version_missing(session, post):
    with pytest.raises(ValueError, match="Version 9 not found"):
        get_version(session, post.id, 9)


def test_diff_versions(session, post):
    _edit(session, post, "line a\n")
    _edit(session, post, "line b\n")
    lines = diff_versions(session, post.id, 1, 2)
    assert "-line a\n" in lines
    assert "+line b\n" in lines
    assert lines[0].startswith("--- v1")


def test_diff_identical_versions_empty(session, post):
    save_version(session, post, max_versions=0)
    save_version(session, post, max_versions=0)
    assert diff_versions(session, post.id, 1, 2) == []


# --- revert_to_version ---

def test_revert_to_version_restores_content(session, post, post_v1, post_v2):
    """Reverting restores the earlier source and keeps the current state in history."""
    commit_post(session, parse_text(post_v2), "posts/first.md", post_v2)
    assert post.title == "First, revised"

    reverted = revert_to_version(session, post, 1)
    assert reverted.markdown == post_v1
    assert reverted.hash == sha256(post_v1)
    assert reverted.title == "First"
    assert [v.markdown for v in list_versions(session, post.id)] == [post_v1, post_v2]


def test_revert_survives_pruning_of_target(session, post, post_v1, post_v2):
    """The target is read before the snapshot can prune it."""
    commit_post(session, parse_text(post_v2), "posts/first.md", post_v2, max_versions=1)
    reverted = revert_to_version(session, post, 1, max_versions=1)
    assert reverted.markdown == post_v1
    assert [v.version_num for v in list_versions(session, post.id)] == [2]


def test_revert_missing_version(session, post):
    with pytest.raises(ValueError):
        revert_to_version(session, post, 42)


def test_revert_rejects_slug_taken_by_another_post(session, post, post_v1):
    """A version whose slug has since moved to another post is not restored."""
    renamed = post_v1.replace('slug = "first"', 'slug = "renamed"')
    commit_post(session, parse_text(renamed), "posts/first.md", renamed)
    commit_post(session, parse_text(post_v1), "posts/other.md", post_v1)

    with pytest.raises(ValueError, match="now used by posts/other.md"):
        revert_to_version(session, post, 1)
    assert post.slug == "renamed"
    assert len(list_versions(session, post.id)) == 1
