"""Line splitting that keeps the source byte-exact"""


def split_lines(text: str) -> list[str]:
    """Split on '\\n' only, keeping line endings. No trailing empty entry.

    str.splitlines also breaks on form feeds and other separators, which would
    alter code fence contents when lines are joined back together.
    """
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def strip_eol(line: str) -> str:
    """Drop a trailing '\\n' or '\\r\\n'."""
    return line.rstrip("\r\n")
