"""
Response classification for data-source lookups.

The data source reports refusals inside an otherwise successful response
("restricted data", "no data for ...", "anomaly detected"). Each predicate
inspects the response text and returns a short reason when it flags the
response, or None to let the next predicate decide.
"""

from typing import Callable, Iterable

from .config import DEFAULT_RESTRICTION_KEYWORDS

ClassifierPredicate = Callable[[str], str | None]


def keyword_predicate(keyword: str) -> ClassifierPredicate:
    """Build a case-insensitive substring predicate for one keyword."""
    needle = keyword.lower()

    def _matches(text: str) -> str | None:
        if needle in text.lower():
            return f"keyword:{keyword}"
        return None

    return _matches


class ResponseClassifier:
    """Ordered set of predicates; the first one that fires names the failure."""

    def __init__(self, predicates: Iterable[ClassifierPredicate]):
        self.predicates = list(predicates)

    @classmethod
    def from_keywords(cls, keywords: Iterable[str] = DEFAULT_RESTRICTION_KEYWORDS) -> "ResponseClassifier":
        return cls(keyword_predicate(k) for k in keywords if k)

    def classify(self, text: str) -> str | None:
        """Return the failure reason for a restricted response, None if usable."""
        for predicate in self.predicates:
            reason = predicate(text)
            if reason:
                return reason
        return None

    def is_restricted(self, text: str) -> bool:
        return self.classify(text) is not None
