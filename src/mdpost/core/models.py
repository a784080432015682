"""Document, block, and inline span models produced by the parse pipeline"""

import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mdpost.core.utils.slug import is_safe_slug


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def freeze(value: Any) -> Any:
    """Lists become tuples and mappings become tuples of (key, value) pairs, recursively."""
    if isinstance(value, dict):
        return tuple((str(k), freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


# --- inline spans ---

class Text(_Frozen):
    kind: Literal["text"] = "text"
    value: str


class Emphasis(_Frozen):
    kind: Literal["emphasis"] = "emphasis"
    value: str
    strong: bool = False


class InlineCode(_Frozen):
    kind: Literal["code"] = "code"
    value: str


class Hyperlink(_Frozen):
    kind: Literal["link"] = "link"
    text: str
    url: str


class Image(_Frozen):
    kind: Literal["image"] = "image"
    alt: str
    url: str


Span = Annotated[Union[Text, Emphasis, InlineCode, Hyperlink, Image], Field(discriminator="kind")]


# --- blocks ---

class Heading(_Frozen):
    kind: Literal["heading"] = "heading"
    level: int = Field(..., ge=1, le=6)
    text: str


class Paragraph(_Frozen):
    kind: Literal["paragraph"] = "paragraph"
    spans: tuple[Span, ...] = ()


class CodeFence(_Frozen):
    """Verbatim fenced code; raw_text is never reinterpreted as markdown."""
    kind: Literal["code_fence"] = "code_fence"
    language: Optional[str] = None
    raw_text: str = ""


class ListItem(_Frozen):
    kind: Literal["list_item"] = "list_item"
    ordered: bool = False
    spans: tuple[Span, ...] = ()
    depth: int = Field(default=0, ge=0, description="Nesting level derived from indentation")


class Quote(_Frozen):
    kind: Literal["quote"] = "quote"
    spans: tuple[Span, ...] = ()


class Link(_Frozen):
    """A standalone link: a reference definition or a paragraph holding only a link."""
    kind: Literal["link"] = "link"
    text: str
    url: str


class Rule(_Frozen):
    kind: Literal["rule"] = "rule"


Block = Annotated[
    Union[Heading, Paragraph, CodeFence, ListItem, Quote, Link, Rule],
    Field(discriminator="kind"),
]


class Document(_Frozen):
    """Immutable parse result for one article; edits go through model_copy."""
    title: str
    slug: str
    date: datetime.date
    description: str = ""
    blocks: tuple[Block, ...] = ()
    extra: tuple[tuple[str, Any], ...] = Field(default=(), description="Unrecognized front matter keys as (key, value) pairs")

    @field_validator("slug")
    @classmethod
    def _slug_is_url_safe(cls, v: str) -> str:
        if not is_safe_slug(v):
            raise ValueError(f"slug must contain only A-Z a-z 0-9 . _ ~ -, got {v!r}")
        return v

    @field_validator("extra", mode="before")
    @classmethod
    def _freeze_extra(cls, v: Any) -> Any:
        """Accept a mapping or (key, value) pairs; nested containers become tuples."""
        if isinstance(v, dict):
            v = v.items()
        return tuple((str(k), freeze(val)) for k, val in v)
