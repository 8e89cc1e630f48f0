"""Revert detection from edit summaries.

A revert is recognised from the editor's comment, not from a structural
diff.  One marker set is used everywhere the radar distinguishes
revert-like edits: batch aggregation, single-article profiles and the
recent-edit listing.
"""

from __future__ import annotations

REVERT_MARKERS: tuple[str, ...] = ("revert", "undid", "rv ", "rvv")
"""Lower-case substrings that mark an edit summary as a revert.

``"rvv"`` (revert vandalism) is included; it also covers summaries such as
``"rvv"`` with no trailing space that ``"rv "`` would miss.
"""


def is_revert(comment: str | None) -> bool:
    """Return ``True`` if *comment* looks like a revert.

    Matching is a case-insensitive substring test against
    :data:`REVERT_MARKERS`.  ``None`` and empty comments never match.
    """
    if not comment:
        return False
    lowered = comment.lower()
    return any(marker in lowered for marker in REVERT_MARKERS)
