"""
Keyword dictionary features.

The simplest dictionary method: a document is positive if it mentions
more positive than negative keywords. Matching is plain substring
presence on normalized text, so "awesome" also matches "awesomeness";
overlapping keywords are not resolved.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import pandas as pd

from textasdata.features.preprocessing import normalize_text


def keyword_match(text: str, keyword: str) -> bool:
    """Return True if the normalized keyword occurs in the normalized text."""
    keyword = normalize_text(keyword)
    if not keyword:
        return False
    return keyword in normalize_text(text)


def keyword_hits(texts: Iterable[str], keywords: Sequence[str]) -> pd.DataFrame:
    """
    Build a boolean hit table with one row per text and one column per
    keyword.
    """
    texts = [normalize_text(t) for t in texts]
    data = {kw: [keyword_match(t, kw) for t in texts] for kw in keywords}
    return pd.DataFrame(data, columns=list(keywords), dtype=bool)


def keyword_score(text: str, positive: Sequence[str], negative: Sequence[str]) -> int:
    """Number of positive keywords present minus number of negative ones."""
    text = normalize_text(text)
    pos = sum(keyword_match(text, kw) for kw in positive)
    neg = sum(keyword_match(text, kw) for kw in negative)
    return pos - neg


def keyword_predictions(
    texts: Iterable[str],
    positive: Sequence[str],
    negative: Sequence[str],
) -> List[int]:
    """
    Label each text 1 when its keyword score is positive, else 0.

    Texts with no hits, or with as many negative as positive hits, are
    labeled 0.
    """
    if isinstance(positive, str):
        positive = [positive]
    if isinstance(negative, str):
        negative = [negative]
    return [1 if keyword_score(t, positive, negative) > 0 else 0 for t in texts]
