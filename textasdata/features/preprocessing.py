"""
Text preprocessing utilities.

This module implements the two text pipelines used by the course
material:

- normalization (every document): lowercasing, whitespace collapsing and
  removal of anything that is not printable ASCII
- cleaning for bag-of-words features (document-term matrices, lexicon
  scoring): normalization plus punctuation and number removal,
  tokenization, optional stopword removal and optional stemming

We provide helpers that operate on individual strings as well as on
pandas Series. The bag-of-words pipeline is driven by the
"preprocessing" section of config/data.yaml, so it can be tweaked
without changing this code.
"""

from __future__ import annotations

import re
import string
from typing import Any, Dict, Iterable, List, Optional, Set

import pandas as pd
from nltk.stem import PorterStemmer, SnowballStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS


_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e]")
_WHITESPACE_RE = re.compile(r"\s+")
_PUNCT_TABLE = str.maketrans({ch: " " for ch in string.punctuation})


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_text(text: Any) -> str:
    """
    Lowercase a text and keep printable ASCII only.

    Whitespace runs (including tabs and newlines) become a single space
    before non-printable characters are dropped, so words separated by a
    line break stay separated.

    Parameters
    ----------
    text : Any
        Raw input; non-strings are converted with str().

    Returns
    -------
    str
        Lowercase text made only of characters in the 0x20-0x7E range.
    """
    if not isinstance(text, str):
        text = str(text)

    text = text.lower()
    text = _WHITESPACE_RE.sub(" ", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    return text.strip()


def clean_text(
    text: Any,
    remove_punctuation: bool = True,
    remove_numbers: bool = True,
) -> str:
    """
    Normalize a text and strip punctuation and numbers from it.

    Parameters
    ----------
    text : Any
        Raw input text.
    remove_punctuation : bool
        Replace punctuation characters with spaces if True.
    remove_numbers : bool
        Replace digit runs with spaces if True.

    Returns
    -------
    str
        Cleaned text string with single spaces between words.
    """
    text = normalize_text(text)

    if remove_punctuation:
        # Replace punctuation with space so we don't accidentally join words.
        text = text.translate(_PUNCT_TABLE)

    if remove_numbers:
        text = re.sub(r"\d+", " ", text)

    return _WHITESPACE_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def tokenize_text(text: str) -> List[str]:
    """
    Whitespace tokenizer for text that has already been cleaned.
    """
    if not text:
        return []
    return text.split()


# ---------------------------------------------------------------------------
# Stopwords and stemming
# ---------------------------------------------------------------------------


def get_stopword_set(extra: Optional[Iterable[str]] = None) -> Set[str]:
    """
    Build the English stopword set (scikit-learn's list), optionally
    extended with corpus-specific words such as "movie" or "film".
    """
    stopwords = set(ENGLISH_STOP_WORDS)
    if extra:
        stopwords.update(w.lower() for w in extra)
    return stopwords


def remove_stopwords(tokens: Iterable[str], stopword_set: Set[str]) -> List[str]:
    """
    Remove stopwords from a list of tokens.
    """
    if not stopword_set:
        return list(tokens)
    return [t for t in tokens if t not in stopword_set]


def _build_stemmer(algorithm: str = "porter"):
    algo = (algorithm or "porter").lower()
    if algo == "snowball":
        return SnowballStemmer("english")
    if algo == "porter":
        return PorterStemmer()
    raise ValueError(f"Unknown stemming algorithm: {algorithm!r}")


def stem_tokens(tokens: Iterable[str], algorithm: str = "porter") -> List[str]:
    """
    Apply stemming to a list of tokens.

    Parameters
    ----------
    tokens : Iterable[str]
        Input tokens.
    algorithm : str
        Stemming algorithm ("porter" or "snowball").

    Returns
    -------
    List[str]
        Stemmed tokens.
    """
    stemmer = _build_stemmer(algorithm)
    return [stemmer.stem(t) for t in tokens]


# ---------------------------------------------------------------------------
# High-level preprocessing functions
# ---------------------------------------------------------------------------


def preprocess_text_to_tokens(
    text: Any,
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
) -> List[str]:
    """
    Full bag-of-words preprocessing pipeline, returning tokens.

    The pipeline is controlled via the 'preprocessing' section in
    config/data.yaml and includes:

    - normalization (lowercase, printable ASCII)
    - punctuation removal
    - number removal
    - tokenization (whitespace)
    - stopword removal (if enabled)
    - stemming (if enabled)

    Parameters
    ----------
    text : Any
        Raw input text.
    preprocessing_cfg : Optional[Dict[str, Any]]
        The 'preprocessing' config section. Missing keys fall back to
        cleaning without stopword removal or stemming.

    Returns
    -------
    List[str]
        Preprocessed tokens.
    """
    cfg = preprocessing_cfg or {}

    text_clean = clean_text(
        text,
        remove_punctuation=bool(cfg.get("remove_punctuation", True)),
        remove_numbers=bool(cfg.get("remove_numbers", True)),
    )
    tokens = tokenize_text(text_clean)

    sw_cfg = cfg.get("stopwords", {}) or {}
    if tokens and bool(sw_cfg.get("enabled", False)):
        tokens = remove_stopwords(tokens, get_stopword_set(sw_cfg.get("extra")))

    stem_cfg = cfg.get("stemming", {}) or {}
    if tokens and bool(stem_cfg.get("enabled", False)):
        tokens = stem_tokens(tokens, algorithm=stem_cfg.get("algorithm", "porter"))

    return tokens


def preprocess_text_to_string(
    text: Any,
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Preprocess a text string and return the tokens joined by single
    spaces, suitable for CountVectorizer with a whitespace tokenizer.
    """
    return " ".join(preprocess_text_to_tokens(text, preprocessing_cfg))


def preprocess_series_to_string(
    series: pd.Series,
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
) -> pd.Series:
    """
    Apply the bag-of-words preprocessing pipeline to a pandas Series of
    text and return a new Series of processed strings.
    """
    return series.astype(str).apply(
        lambda x: preprocess_text_to_string(x, preprocessing_cfg)
    )
