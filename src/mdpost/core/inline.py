"""Inline span resolution: code, emphasis, links, images, autolinks"""

import re
import string
from typing import Optional

from mdpost.core.models import Emphasis, Hyperlink, Image, InlineCode, Span, Text


SPECIAL_RE  = re.compile(r'[\\`*_!\[<]')
AUTOLINK_RE = re.compile(r'<((?:https?|ftp|mailto):[^\s<>]+)>')
ASCII_PUNCT = frozenset(string.punctuation)


def _line_end(text: str, i: int) -> int:
    """Index of the newline ending the line containing i (or len(text))."""
    end = text.find("\n", i)
    return len(text) if end == -1 else end


def _run_length(text: str, i: int, ch: str) -> int:
    j = i
    while j < len(text) and text[j] == ch:
        j += 1
    return j - i


def _code(text: str, i: int) -> tuple[Optional[Span], int]:
    """Backtick run closed by a run of the same length on the same line."""
    run = _run_length(text, i, "`")
    end_line = _line_end(text, i)
    j = i + run
    while (k := text.find("`", j, end_line)) != -1:
        closing = _run_length(text, k, "`")
        if closing == run:
            return InlineCode(value=text[i + run:k]), k + run
        j = k + closing
    return None, i + run


def _delimited(text: str, i: int, delim: str) -> tuple[Optional[Span], int]:
    ch = delim[0]
    start = i + len(delim)
    end_line = _line_end(text, i)
    if start >= end_line or text[start].isspace():
        return None, i + 1
    if ch == "_" and i > 0 and text[i - 1].isalnum():
        return None, i + 1

    j = start
    while (k := text.find(delim, j, end_line)) != -1:
        # Code spans bind tighter than emphasis; a delimiter inside one never closes.
        tick = text.find("`", j, k)
        if tick != -1:
            _, j = _code(text, tick)
            continue
        after = k + len(delim)
        ok = k > start and not text[k - 1].isspace()
        if len(delim) == 1 and (text[k - 1] == ch or (after < len(text) and text[after] == ch)):
            ok = False
        if ch == "_" and after < len(text) and text[after].isalnum():
            ok = False
        if ok:
            return Emphasis(value=text[start:k], strong=len(delim) == 2), after
        j = k + 1
    return None, i + 1


def _emphasis(text: str, i: int) -> tuple[Optional[Span], int]:
    ch = text[i]
    run = _run_length(text, i, ch)
    if run >= 2:
        return _delimited(text, i, ch * 2)
    return _delimited(text, i, ch)


def _link_target(text: str, j: int, end_line: int) -> tuple[Optional[str], int]:
    """Read '(dest "title")' starting after '('; parentheses in dest must balance."""
    depth = 0
    k = j
    while k < end_line:
        c = text[k]
        if c == "\\" and k + 1 < end_line:
            k += 2
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            if depth == 0:
                break
            depth -= 1
        k += 1
    else:
        return None, j

    inner = text[j:k].strip()
    if inner.startswith("<") and ">" in inner:
        url = inner[1:inner.index(">")]
    else:
        url = inner.split()[0] if inner else ""
    return url, k + 1


def _link(text: str, i: int) -> tuple[Optional[Span], int]:
    """[text](url); link text is kept literal."""
    end_line = _line_end(text, i)
    depth = 0
    k = i
    while k < end_line:
        c = text[k]
        if c == "\\":
            k += 2
            continue
        if c == "[":
            depth += 1
        elif c == "]":
            depth -= 1
            if depth == 0:
                break
        k += 1
    if k >= end_line or k + 1 >= end_line or text[k + 1] != "(":
        return None, i + 1

    url, end = _link_target(text, k + 2, end_line)
    if url is None:
        return None, i + 1
    return Hyperlink(text=text[i + 1:k], url=url), end


def _image(text: str, i: int) -> tuple[Optional[Span], int]:
    if not text.startswith("![", i):
        return None, i + 1
    span, end = _link(text, i + 1)
    if span is None:
        return None, i + 1
    return Image(alt=span.text, url=span.url), end


def _autolink(text: str, i: int) -> tuple[Optional[Span], int]:
    m = AUTOLINK_RE.match(text, i)
    if not m:
        return None, i + 1
    return Hyperlink(text=m.group(1), url=m.group(1)), m.end()


HANDLERS = {
    "`": _code,
    "*": _emphasis,
    "_": _emphasis,
    "[": _link,
    "!": _image,
    "<": _autolink,
}


def format_inline(text: str) -> tuple[Span, ...]:
    """Resolve inline markup left to right. Never fails.

    Openers with no closer before the end of their line are kept as literal
    text. Adjacent text runs are merged into one Text span.
    """
    spans: list[Span] = []
    buf: list[str] = []

    def flush() -> None:
        if buf:
            spans.append(Text(value="".join(buf)))
            buf.clear()

    i = 0
    while i < len(text):
        m = SPECIAL_RE.search(text, i)
        if m is None:
            buf.append(text[i:])
            break
        if m.start() > i:
            buf.append(text[i:m.start()])
            i = m.start()

        c = text[i]
        if c == "\\":
            if i + 1 < len(text) and text[i + 1] in ASCII_PUNCT:
                buf.append(text[i + 1])
                i += 2
            else:
                buf.append(c)
                i += 1
            continue

        span, end = HANDLERS[c](text, i)
        if span is None:
            buf.append(text[i:end])
        else:
            flush()
            spans.append(span)
        i = end

    flush()
    return tuple(spans)
