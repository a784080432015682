"""Unit tests for core/blocks.py"""

import pytest

from mdpost.core.blocks import BlockKind, Segments, segment
from mdpost.core.errors import UnterminatedFence


def _kinds(body: str) -> list[BlockKind]:
    return [b.kind for b in segment(body)]


def test_heading_levels():
    """1-6 '#' followed by whitespace is a heading with level = count."""
    blocks = list(segment("# One\n\n###### Six\n"))
    assert [(b.level, b.text) for b in blocks] == [(1, "One"), (6, "Six")]


@pytest.mark.parametrize("line", ["#NoSpace", "####### seven"])
def test_not_a_heading(line):
    assert _kinds(line + "\n") == [BlockKind.paragraph]


def test_heading_closing_hashes_stripped():
    block = next(iter(segment("## Title ##\n")))
    assert block.text == "Title"


def test_heading_keeps_inner_hash():
    block = next(iter(segment("## C# tips\n")))
    assert block.text == "C# tips"


@pytest.mark.parametrize("line", ["---", "***", "___", "- - -", "*****"])
def test_rule(line):
    assert _kinds(line + "\n") == [BlockKind.rule]


def test_paragraph_groups_lines():
    """Consecutive non-blank lines form one paragraph until a blank line."""
    blocks = list(segment("line one\nline two\n\nnext para\n"))
    assert [b.kind for b in blocks] == [BlockKind.paragraph, BlockKind.paragraph]
    assert blocks[0].text == "line one\nline two"


def test_paragraph_interrupted_by_heading():
    assert _kinds("text\n# Heading\nmore\n") == [
        BlockKind.paragraph, BlockKind.heading, BlockKind.paragraph,
    ]


def test_blank_lines_not_emitted():
    assert _kinds("\n\n\n") == []
    assert _kinds("") == []


def test_list_items():
    """Each marker line is one item; ordered is set for 'N.' markers."""
    blocks = list(segment("- a\n* b\n+ c\n1. d\n10. e\n"))
    assert all(b.kind == BlockKind.list_item for b in blocks)
    assert [b.text for b in blocks] == ["a", "b", "c", "d", "e"]
    assert [b.ordered for b in blocks] == [False, False, False, True, True]


def test_list_depth_from_indent():
    blocks = list(segment("- top\n  - nested\n    - deeper\n"))
    assert [b.depth for b in blocks] == [0, 1, 2]


def test_list_item_lazy_continuation():
    blocks = list(segment("- first line\n  continues here\n- second\n"))
    assert [b.text for b in blocks] == ["first line\ncontinues here", "second"]


def test_list_marker_needs_whitespace():
    assert _kinds("-not a list\n") == [BlockKind.paragraph]


def test_quote_lines_join():
    blocks = list(segment("> one\n> two\n\nafter\n"))
    assert blocks[0].kind == BlockKind.quote
    assert blocks[0].text == "one\ntwo"
    assert blocks[1].kind == BlockKind.paragraph


def test_reference_definition_is_link():
    block = next(iter(segment('[hpx]: https://hpx.stellar-group.org "HPX"\n')))
    assert block.kind == BlockKind.link
    assert (block.text, block.url) == ("hpx", "https://hpx.stellar-group.org")


# --- fences ---

def test_fence_language_and_raw_text():
    block = next(iter(segment("```python\nprint('x')\n```\n")))
    assert block.kind == BlockKind.code
    assert block.language == "python"
    assert block.text == "print('x')\n"


def test_fence_without_language():
    block = next(iter(segment("~~~\nplain\n~~~\n")))
    assert block.language is None
    assert block.text == "plain\n"


def test_fence_contents_not_reinterpreted():
    """Markdown-like lines inside a fence stay verbatim, byte for byte."""
    inner = "# not a heading\n- not a list\n\n**not bold** `tick`\n> nor a quote\n"
    blocks = list(segment(f"```md\n{inner}```\n"))
    assert len(blocks) == 1
    assert blocks[0].text == inner


def test_fence_preserves_crlf_and_trailing_spaces():
    inner = "a  \r\n\tb\r\n"
    block = next(iter(segment(f"```\r\n{inner}```\r\n")))
    assert block.text == inner


def test_fence_closer_must_be_long_enough():
    """A shorter run inside a longer fence does not close it."""
    block = next(iter(segment("````\n```\ninside\n```\n````\n")))
    assert block.text == "```\ninside\n```\n"


def test_fence_closer_may_be_longer():
    block = next(iter(segment("```\ncode\n`````\n")))
    assert block.text == "code\n"


def test_fence_closer_with_trailing_text_does_not_close():
    with pytest.raises(UnterminatedFence):
        list(segment("```\ncode\n``` not a closer\n"))


def test_backtick_fence_closed_by_tildes_is_unterminated():
    """Marker characters must match."""
    with pytest.raises(UnterminatedFence) as exc:
        list(segment("```\ncode\n~~~\n"))
    assert exc.value.line == 1


def test_unterminated_fence_reports_opening_line():
    with pytest.raises(UnterminatedFence) as exc:
        list(segment("intro\n\n```python\nnever closed\n"))
    assert exc.value.line == 3


def test_inline_triple_backticks_are_not_a_fence():
    """A backtick info string containing backticks is paragraph text."""
    assert _kinds("```code``` in prose\n") == [BlockKind.paragraph]


def test_fence_interrupts_paragraph():
    assert _kinds("text\n```\ncode\n```\n") == [BlockKind.paragraph, BlockKind.code]


# --- sequence behaviour ---

def test_segments_are_lazy():
    """No scanning (and so no error) happens until iteration."""
    seq = segment("```\nnever closed\n")
    assert isinstance(seq, Segments)
    with pytest.raises(UnterminatedFence):
        list(seq)


def test_segments_are_restartable():
    seq = segment("# A\n\npara\n")
    assert list(seq) == list(seq)


def test_order_and_lines(article):
    """Blocks come out in source order with 1-based start lines."""
    from mdpost.core.frontmatter import parse_front_matter
    body = parse_front_matter(article).body
    kinds = _kinds(body)
    assert kinds == [
        BlockKind.heading, BlockKind.paragraph, BlockKind.heading,
        BlockKind.list_item, BlockKind.list_item, BlockKind.list_item, BlockKind.list_item,
        BlockKind.code, BlockKind.quote, BlockKind.rule, BlockKind.paragraph,
    ]
    lines = [b.line for b in segment(body)]
    assert lines == sorted(lines)
