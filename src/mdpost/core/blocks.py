"""Line-based segmentation of a markdown body into typed raw blocks"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from mdpost.core.errors import UnterminatedFence
from mdpost.core.utils.lines import split_lines, strip_eol


logger = logging.getLogger(__name__)

FENCE_RE   = re.compile(r'^[ \t]*(`{3,}|~{3,})(.*)$')
HEADING_RE = re.compile(r'^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$')
CLOSING_HASHES_RE = re.compile(r'(?:^|[ \t]+)#+[ \t]*$')
RULE_RE    = re.compile(r'^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$')
LIST_RE    = re.compile(r'^([ \t]*)([-*+]|\d{1,9}\.)[ \t]+(.*)$')
QUOTE_RE   = re.compile(r'^ {0,3}> ?(.*)$')
REFDEF_RE  = re.compile(
    r'^ {0,3}\[([^\]]+)\]:[ \t]*<?([^\s>]+)>?'
    r'(?:[ \t]+(?:"[^"]*"|\'[^\']*\'|\([^)]*\)))?[ \t]*$'
)


class BlockKind(str, Enum):
    """Block types the segmenter can emit"""
    heading = "heading"
    paragraph = "paragraph"
    code = "code"
    list_item = "list_item"
    quote = "quote"
    link = "link"
    rule = "rule"


@dataclass(frozen=True)
class RawBlock:
    """A segmented block before inline formatting."""
    kind:     BlockKind
    text:     str = ""
    line:     int = 0                 # 1-based line of the block's first source line
    level:    Optional[int] = None    # heading level (1-6)
    language: Optional[str] = None    # code fence info word
    ordered:  bool = False            # list items only
    depth:    int = 0                 # list nesting from indentation
    url:      Optional[str] = None    # reference definitions only


def _fence_open(line: str) -> Optional[re.Match]:
    """Match a fence opener; a backtick info string may not contain backticks."""
    m = FENCE_RE.match(line)
    if m and m.group(1)[0] == "`" and "`" in m.group(2):
        return None
    return m


def starts_block(line: str) -> bool:
    """True when line opens a non-paragraph block and so interrupts a paragraph."""
    return bool(
        _fence_open(line)
        or HEADING_RE.match(line)
        or RULE_RE.match(line)
        or LIST_RE.match(line)
        or QUOTE_RE.match(line)
        or REFDEF_RE.match(line)
    )


def _read_fence(lines: list[str], start: int, m: re.Match) -> tuple[RawBlock, int]:
    marker = m.group(1)
    info = m.group(2).strip()
    close_re = re.compile(r'^[ \t]*%s{%d,}[ \t]*$' % (re.escape(marker[0]), len(marker)))
    for j in range(start + 1, len(lines)):
        if close_re.match(strip_eol(lines[j])):
            block = RawBlock(
                kind=BlockKind.code,
                text="".join(lines[start + 1:j]),
                line=start + 1,
                language=info.split()[0] if info else None,
            )
            return block, j + 1
    raise UnterminatedFence(line=start + 1, marker=marker)


def _read_list_item(lines: list[str], start: int, m: re.Match) -> tuple[RawBlock, int]:
    indent, marker, first = m.groups()
    parts = [first.strip()]
    j = start + 1
    while j < len(lines):
        line = strip_eol(lines[j])
        if not line.strip() or starts_block(line):
            break
        parts.append(line.strip())
        j += 1
    block = RawBlock(
        kind=BlockKind.list_item,
        text="\n".join(parts),
        line=start + 1,
        ordered=marker[0].isdigit(),
        depth=len(indent.expandtabs(4)) // 2,
    )
    return block, j


def _read_quote(lines: list[str], start: int) -> tuple[RawBlock, int]:
    parts = []
    j = start
    while j < len(lines) and (m := QUOTE_RE.match(strip_eol(lines[j]))):
        parts.append(m.group(1).rstrip())
        j += 1
    return RawBlock(kind=BlockKind.quote, text="\n".join(parts).strip(), line=start + 1), j


def _read_paragraph(lines: list[str], start: int) -> tuple[RawBlock, int]:
    parts = [strip_eol(lines[start]).strip()]
    j = start + 1
    while j < len(lines):
        line = strip_eol(lines[j])
        if not line.strip() or starts_block(line):
            break
        parts.append(line.strip())
        j += 1
    return RawBlock(kind=BlockKind.paragraph, text="\n".join(parts), line=start + 1), j


def _scan(lines: list[str]) -> Iterator[RawBlock]:
    """Single forward pass; blank lines separate blocks and are never emitted."""
    i = 0
    while i < len(lines):
        line = strip_eol(lines[i])
        if not line.strip():
            i += 1
            continue

        if m := _fence_open(line):
            block, i = _read_fence(lines, i, m)
        elif m := HEADING_RE.match(line):
            text = CLOSING_HASHES_RE.sub("", m.group(2) or "").strip()
            block, i = RawBlock(kind=BlockKind.heading, text=text, line=i + 1, level=len(m.group(1))), i + 1
        elif RULE_RE.match(line):
            block, i = RawBlock(kind=BlockKind.rule, line=i + 1), i + 1
        elif m := LIST_RE.match(line):
            block, i = _read_list_item(lines, i, m)
        elif QUOTE_RE.match(line):
            block, i = _read_quote(lines, i)
        elif m := REFDEF_RE.match(line):
            block, i = RawBlock(kind=BlockKind.link, text=m.group(1), url=m.group(2), line=i + 1), i + 1
        else:
            block, i = _read_paragraph(lines, i)

        logger.debug("Segmented %s block at line %d", block.kind.value, block.line)
        yield block


class Segments:
    """Lazy, finite, restartable sequence of RawBlocks over a body.

    Nothing is scanned until iteration starts; every iter() rescans from the
    first line, so the sequence can be consumed more than once.
    """

    def __init__(self, body: str):
        self.body = body

    def __iter__(self) -> Iterator[RawBlock]:
        return _scan(split_lines(self.body))

    def __repr__(self) -> str:
        return f"Segments({len(self.body)} chars)"


def segment(body: str) -> Segments:
    """Return the block sequence for a markdown body (front matter already removed)."""
    return Segments(body)
