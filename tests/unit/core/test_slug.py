"""Unit tests for core/utils/slug.py"""

import pytest

from mdpost.core.utils.slug import slugify, unique_slug


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("Café Déjà Vu", "cafe-deja-vu"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to a lowercase hyphenated ASCII slug."""
    assert slugify(text) == expected


def test_unique_slug_suffixes_duplicates():
    seen: set[str] = set()
    assert [unique_slug("Intro", seen) for _ in range(3)] == ["intro", "intro-1", "intro-2"]


def test_unique_slug_fallback_for_symbols():
    assert unique_slug("???", set()) == "section"
