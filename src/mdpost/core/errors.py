"""Structural parse errors; each one aborts a single document only"""

from typing import Optional


class ParseError(ValueError):
    """Base class for errors that prevent a Document from being built."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source

    def with_source(self, source: str) -> "ParseError":
        """Attach the originating path so messages name the file."""
        self.source = source
        return self

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class MalformedHeader(ParseError):
    """Front matter opened but never closed, or an interior line is not key = value."""

    def __init__(self, reason: str, line: Optional[int] = None):
        msg = f"Malformed header: {reason}"
        if line is not None:
            msg += f" (line {line})"
        super().__init__(msg)
        self.reason = reason
        self.line = line


class UnterminatedFence(ParseError):
    """A code fence reached end of input without a matching closer."""

    def __init__(self, line: int, marker: str = "```"):
        super().__init__(f"Unterminated code fence {marker!r} opened at line {line}")
        self.line = line
        self.marker = marker


class MissingMetadata(ParseError):
    """A required front matter key is absent."""

    def __init__(self, key: str):
        super().__init__(f"Missing required metadata key: {key!r}")
        self.key = key


class InvalidMetadata(ParseError):
    """A recognized front matter key has a value that cannot be used."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Invalid metadata {key!r}: {reason}")
        self.key = key
        self.reason = reason
