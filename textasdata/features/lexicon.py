"""
Lexicon (dictionary) sentiment scoring.

A lexicon maps word tokens to polarity weights. A document's score is
the sum of the weights of its tokens; tokens absent from the lexicon
contribute nothing. To turn scores into labels, LexiconClassifier learns
a threshold from the training split (the mean training score) and labels
every document scoring at or above it as positive.

Lexicons can be read from a two-column CSV (e.g. AFINN or Bing exported
from tidytext) or taken from nltk's VADER lexicon.
"""

from __future__ import annotations

import os
from importlib import resources
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

import numpy as np
import pandas as pd

from textasdata.errors import ConfigurationError, DataValidationError, NotFittedError
from textasdata.features.preprocessing import clean_text, tokenize_text


class Lexicon(Mapping[str, float]):
    """Read-only mapping from lowercase token to polarity weight."""

    def __init__(self, weights: Optional[Mapping[str, float]] = None, name: str = "lexicon"):
        self.name = name
        self._weights: Dict[str, float] = {
            str(word).lower(): float(value) for word, value in (weights or {}).items()
        }

    def __getitem__(self, word: str) -> float:
        return self._weights[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"Lexicon(name={self.name!r}, size={len(self)})"


def load_lexicon_csv(
    path: str,
    word_column: str = "word",
    value_column: str = "value",
    name: Optional[str] = None,
) -> Lexicon:
    """
    Load a lexicon from a CSV file with a word column and a numeric value
    column.

    Non-numeric values "positive"/"negative" (Bing style) are mapped to
    +1/-1. Duplicate words keep their last value.

    Raises
    ------
    ConfigurationError
        If the file does not exist.
    DataValidationError
        If the columns are missing or a value cannot be interpreted.
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Lexicon file not found: {path}")

    df = pd.read_csv(path)
    missing = [c for c in (word_column, value_column) if c not in df.columns]
    if missing:
        raise DataValidationError(
            f"Missing column(s) {missing} in lexicon file {path}. "
            f"Available columns: {list(df.columns)}"
        )

    values = df[value_column].replace({"positive": 1, "negative": -1})
    numeric = pd.to_numeric(values, errors="coerce")
    if numeric.isna().any():
        bad = df.loc[numeric.isna(), word_column].tolist()[:5]
        raise DataValidationError(f"Non-numeric lexicon values for words: {bad}")

    return Lexicon(
        dict(zip(df[word_column].astype(str), numeric)),
        name=name or os.path.splitext(os.path.basename(path))[0],
    )


def load_example_lexicon() -> Lexicon:
    """Small AFINN-style lexicon shipped with the package for the example corpus."""
    source = (
        resources.files("textasdata.data")
        .joinpath("resources")
        .joinpath("sentiment_lexicon.csv")
    )
    with resources.as_file(source) as path:
        return load_lexicon_csv(str(path), name="example")


def load_vader_lexicon() -> Lexicon:
    """
    Load nltk's VADER lexicon.

    The lexicon data must have been fetched once with
    ``nltk.download("vader_lexicon")``.
    """
    from nltk.sentiment.vader import SentimentIntensityAnalyzer

    try:
        analyzer = SentimentIntensityAnalyzer()
    except LookupError as exc:
        raise ConfigurationError(
            "VADER lexicon not available; run nltk.download('vader_lexicon')."
        ) from exc
    return Lexicon(analyzer.lexicon, name="vader")


def load_lexicon_from_config(lexicon_cfg: Optional[Mapping[str, object]] = None) -> Lexicon:
    """
    Load the lexicon named by the "lexicon" section of config/ml.yaml:
    source "example" (bundled), "vader" (nltk) or "csv" (path, word_column,
    value_column).
    """
    cfg = dict(lexicon_cfg or {})
    source = str(cfg.get("source", "example")).lower()

    if source == "example":
        return load_example_lexicon()
    if source == "vader":
        return load_vader_lexicon()
    if source == "csv":
        path = cfg.get("path")
        if not path:
            raise ConfigurationError("lexicon.path is required when lexicon.source is \"csv\".")
        return load_lexicon_csv(
            str(path),
            word_column=str(cfg.get("word_column", "word")),
            value_column=str(cfg.get("value_column", "value")),
        )
    raise ConfigurationError(f"Unknown lexicon source: {source!r}")


def score_text(text: str, lexicon: Mapping[str, float]) -> float:
    """
    Sum the polarity weights of the tokens of a text.

    An empty lexicon yields 0.0 for any text.
    """
    if not lexicon:
        return 0.0
    tokens = tokenize_text(clean_text(text))
    return float(sum(lexicon.get(tok, 0.0) for tok in tokens))


def score_texts(texts: Iterable[str], lexicon: Mapping[str, float]) -> np.ndarray:
    return np.array([score_text(t, lexicon) for t in texts], dtype=float)


class LexiconClassifier:
    """
    Binarize lexicon scores with a threshold learned on training texts.

    Parameters
    ----------
    lexicon : Mapping[str, float]
        Polarity lexicon.
    threshold : Optional[float]
        Fixed threshold. If None, fit() sets it to the mean training score;
        otherwise fit() leaves it untouched.
    """

    def __init__(self, lexicon: Mapping[str, float], threshold: Optional[float] = None):
        self.lexicon = lexicon
        self.fixed_threshold = None if threshold is None else float(threshold)
        self.threshold = self.fixed_threshold

    def fit(self, texts: Iterable[str]) -> "LexiconClassifier":
        if self.fixed_threshold is not None:
            return self
        scores = score_texts(texts, self.lexicon)
        if scores.size == 0:
            raise DataValidationError("Cannot fit a lexicon threshold on zero texts.")
        self.threshold = float(scores.mean())
        return self

    def decision_function(self, texts: Iterable[str]) -> np.ndarray:
        return score_texts(texts, self.lexicon)

    def predict(self, texts: Iterable[str]) -> List[int]:
        if self.threshold is None:
            raise NotFittedError("LexiconClassifier has no threshold; call fit() first.")
        scores = self.decision_function(texts)
        return [int(s >= self.threshold) for s in scores]
