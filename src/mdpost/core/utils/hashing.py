"""Content hashing for detecting changed post sources"""

import hashlib


def sha256(content: str) -> str:
    """Hex SHA-256 of the UTF-8 encoded source (64 chars, fits Post.hash)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
