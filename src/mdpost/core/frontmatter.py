"""Front matter extraction: +++ TOML headers and --- YAML headers"""

import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Any

import yaml

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from mdpost.core.errors import MalformedHeader
from mdpost.core.utils.lines import split_lines


logger = logging.getLogger(__name__)

DEFAULT_MARKER = "+++"
YAML_MARKER = "---"
TOML_LINE_RE = re.compile(r"at line (\d+)")


@dataclass(frozen=True)
class FrontMatter:
    """Header mapping plus the unconsumed body text."""
    meta: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def _flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    """Nested tables become dotted keys: {"taxonomies": {"tags": [...]}} -> {"taxonomies.tags": [...]}."""
    meta: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            meta.update(_flatten(value, name + "."))
        else:
            meta[name] = value
    return meta


def _parse_toml(lines: list[str], first_line: int) -> dict[str, Any]:
    try:
        data = tomllib.loads("".join(lines))
    except tomllib.TOMLDecodeError as e:
        m = TOML_LINE_RE.search(str(e))
        line = first_line + int(m.group(1)) - 1 if m else None
        raise MalformedHeader(f"invalid TOML: {e}", line=line) from e
    return _flatten(data)


def _parse_yaml(lines: list[str]) -> dict[str, Any]:
    try:
        data = yaml.safe_load("".join(lines)) or {}
    except yaml.YAMLError as e:
        raise MalformedHeader(f"invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise MalformedHeader(f"expected a mapping, got {type(data).__name__}")
    return _flatten({str(k): v for k, v in data.items()})


def parse_front_matter(text: str, marker: str = DEFAULT_MARKER) -> FrontMatter:
    """Split text into (meta, body). Purely syntactic; required keys are not checked.

    A first line equal to `marker` opens a TOML header that must be closed by
    the same marker, else MalformedHeader. A first line of `---` opens a YAML
    header; an unclosed `---` is left in the body as a thematic break. Without
    an opening marker the whole input is body. Nested tables are flattened
    to dotted keys.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = split_lines(text)
    if not lines:
        return FrontMatter({}, text)

    opener = lines[0].strip()
    if opener not in (marker, YAML_MARKER):
        return FrontMatter({}, text)

    close = next((i for i in range(1, len(lines)) if lines[i].strip() == opener), None)
    if close is None:
        if opener == YAML_MARKER and marker != YAML_MARKER:
            return FrontMatter({}, text)
        raise MalformedHeader(f"no closing {opener!r} marker before end of input", line=1)

    interior = lines[1:close]
    body = "".join(lines[close + 1:])
    if opener == YAML_MARKER:
        meta = _parse_yaml(interior)
    else:
        meta = _parse_toml(interior, first_line=2)
    logger.debug("Parsed front matter with %d key(s)", len(meta))
    return FrontMatter(meta, body)
