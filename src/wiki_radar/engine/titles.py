"""Canonical article-title handling.

The recent-changes feed reports titles with spaces (``"Joe Biden"``) while
the Pageviews API reports them with underscores (``"Joe_Biden"``).  Every
title entering the engine goes through :func:`normalize_title` before any
grouping, lookup or comparison so the two feeds agree.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")

FRONT_PAGE_TITLE: str = "Main Page"
"""Normalized title of the site's front page, excluded from rankings."""


def normalize_title(title: str | None) -> str:
    """Return the canonical form of *title*.

    Underscores become spaces, whitespace runs collapse to a single space,
    and leading/trailing whitespace is stripped.  ``None`` maps to ``""``.

    Args:
        title: Raw title from any upstream source.

    Returns:
        The normalized title.
    """
    if not title:
        return ""
    return _WHITESPACE_RE.sub(" ", title.replace("_", " ")).strip()


def is_content_title(title: str | None) -> bool:
    """Return ``True`` if *title* names a main-namespace content article.

    Namespace-qualified titles (``Special:Search``, ``Talk:Foo``,
    ``File:Bar.jpg``) and the front page are not content.  Any colon counts
    as a namespace marker, matching how the top-viewed list is filtered.
    """
    normalized = normalize_title(title)
    if not normalized:
        return False
    if ":" in normalized:
        return False
    return normalized != FRONT_PAGE_TITLE
