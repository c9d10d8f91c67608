"""Category inference from free-text venue metadata.

This is a lossy substring heuristic and belongs to the data layer: the
statistics engine receives a category per market and never looks at titles.
"""
from __future__ import annotations

from typing import Mapping, Sequence

from arb_oppity.core.enums import Category

CATEGORY_KEYWORDS: Mapping[Category, Sequence[str]] = {
    Category.POLITICS: ("politic", "election", "senate", "president"),
    Category.SPORTS: ("sport", "nba", "nfl", "mlb", "nhl", "soccer"),
    Category.CRYPTO: ("crypto", "bitcoin", "btc", "eth"),
    Category.ECONOMICS: ("econ", "fed", "rate", "inflation", "cpi", "recession"),
    Category.WEATHER: ("weather", "climate", "temperature", "hurricane"),
}


def infer_category(*texts: str | None) -> Category:
    """Return the first category whose keyword appears in any of ``texts``."""

    haystack = " ".join(text.lower() for text in texts if text)
    if not haystack:
        return Category.OTHER
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in haystack for keyword in keywords):
            return category
    return Category.OTHER
