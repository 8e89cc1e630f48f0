"""Keyword-rule topic classifier.

Assigns every title to exactly one bucket by evaluating an ordered list of
``(bucket, predicate)`` rules, first match wins.  Keyword sets overlap
(``"Climate change law"`` matches both politics and science), so the order
of :data:`TOPIC_RULES` is part of the behaviour: politics is checked first,
then science and technology, culture, people, current events, and finally
the ``Other`` fallback.

Keyword tests are plain substring matches against the lower-cased title;
this is a best-effort heuristic, not natural-language classification.

The person-name pattern (two capitalised words) is the one rule matched
against the title in its original case.  Run against the lower-cased title
it could never fire, which would leave the people bucket reachable only
through its keywords; ``"joe biden"`` therefore lands in ``Other`` while
``"Joe Biden"`` is a person.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from wiki_radar.engine.models import ContestedTopic
from wiki_radar.engine.titles import normalize_title

POLITICS = "Politics & Governance"
SCIENCE = "Science & Technology"
CULTURE = "Culture & Society"
PEOPLE = "People & Biography"
CURRENT_EVENTS = "Current Events"
OTHER = "Other"

BUCKETS: tuple[str, ...] = (POLITICS, SCIENCE, CULTURE, PEOPLE, CURRENT_EVENTS, OTHER)
"""Closed, canonically ordered set of bucket names."""

POLITICS_KEYWORDS: tuple[str, ...] = (
    "election", "president", "government", "party", "minister",
    "congress", "senate", "law", "political",
)
SCIENCE_KEYWORDS: tuple[str, ...] = (
    "ai", "technology", "software", "science", "research",
    "study", "climate", "medical", "vaccine",
)
CULTURE_KEYWORDS: tuple[str, ...] = (
    "film", "album", "series", "show", "music",
    "art", "culture", "religion", "sport",
)
PEOPLE_KEYWORDS: tuple[str, ...] = ("death of", "biography")
CURRENT_EVENTS_KEYWORDS: tuple[str, ...] = (
    "2024", "2025", "attack", "earthquake", "storm", "shooting",
)

# "Firstname Lastname": exactly two capitalised words.
_PERSON_NAME_RE = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$")

TitlePredicate = Callable[[str, str], bool]
"""Predicate over ``(title, lowered_title)``."""


def _contains_any(keywords: tuple[str, ...]) -> TitlePredicate:
    def predicate(title: str, lowered: str) -> bool:  # noqa: ARG001
        return any(keyword in lowered for keyword in keywords)

    return predicate


def _looks_like_person(title: str, lowered: str) -> bool:
    # The name pattern needs the original capitalisation.
    if _PERSON_NAME_RE.match(title):
        return True
    return any(keyword in lowered for keyword in PEOPLE_KEYWORDS)


TOPIC_RULES: tuple[tuple[str, TitlePredicate], ...] = (
    (POLITICS, _contains_any(POLITICS_KEYWORDS)),
    (SCIENCE, _contains_any(SCIENCE_KEYWORDS)),
    (CULTURE, _contains_any(CULTURE_KEYWORDS)),
    (PEOPLE, _looks_like_person),
    (CURRENT_EVENTS, _contains_any(CURRENT_EVENTS_KEYWORDS)),
)


def classify_title(title: str) -> str:
    """Return the bucket for *title*.

    Total and deterministic: every title, including the empty string, maps
    to exactly one name in :data:`BUCKETS`.
    """
    normalized = normalize_title(title)
    lowered = normalized.lower()
    for bucket, predicate in TOPIC_RULES:
        if predicate(normalized, lowered):
            return bucket
    return OTHER


def classify_topics(topics: Iterable[ContestedTopic]) -> list[tuple[str, ContestedTopic]]:
    """Pair each topic with its bucket, preserving input order."""
    return [(classify_title(topic.title), topic) for topic in topics]
