"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdpost.core.parse import parse_text
from mdpost.crud.posts import commit_post


POST_V1 = '+++\ntitle = "First"\nslug = "first"\ndate = "2024-08-20"\n+++\n# Hello\n\nWorld\n'
POST_V2 = '+++\ntitle = "First, revised"\nslug = "first"\ndate = "2024-08-21"\n+++\n# Hello\n\nWorld, again\n'


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="post")
def post_fixture(session):
    """A Post created from POST_V1 and flushed to the session."""
    p, _ = commit_post(session, parse_text(POST_V1), "posts/first.md", POST_V1)
    return p


@pytest.fixture(name="post_v1")
def post_v1_fixture():
    return POST_V1


@pytest.fixture(name="post_v2")
def post_v2_fixture():
    return POST_V2
