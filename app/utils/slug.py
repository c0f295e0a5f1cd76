"""
Slug generation for article titles
"""

import re

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """Create a URL-safe slug from a title.

    "Flu Outbreak!" -> "flu-outbreak". Characters outside ``[a-z0-9\\s-]``
    are dropped after lowercasing, so a title made only of such characters
    gives an empty slug.
    """
    s = (title or "").lower()
    s = _DISALLOWED.sub("", s)
    s = _WHITESPACE.sub("-", s)
    s = _HYPHENS.sub("-", s)
    return s.strip("-")
