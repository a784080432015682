"""Database tables for published posts and their version history"""

from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


class Post(SQLModel, table=True):
    """A parsed article and the source text it was built from"""
    __tablename__ = "posts"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., index=True, unique=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    published_on: date = Field(..., nullable=False, description="Front matter date")
    description: str = Field(default="", sa_column=Column(Text, nullable=False))
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    document: Dict[str, Any] = Field(..., sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))


class PostVersion(SQLModel, table=True):
    """Immutable snapshot of a Post at a prior state."""
    __tablename__ = "post_versions"
    __table_args__ = (UniqueConstraint("post_id", "version_num", name="uq_postver_post_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    post_id: UUID = Field(..., foreign_key="posts.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-post version number")
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    document: str = Field(..., sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
