"""
Document-term matrix utilities.

A document-term matrix (DTM) has one row per document and one column
per term, holding raw counts. Columns are defined by an explicit
Vocabulary fitted on the training split and passed to every builder, so
training and evaluation matrices always share the same columns in the
same order. Terms that never occurred in training are dropped from
evaluation matrices without error.

This module provides helpers to:
- fit a Vocabulary with scikit-learn's CountVectorizer on preprocessed text
- build sparse count matrices for any sequence of texts on that vocabulary
- check that two matrices are column-compatible
- view a matrix as a pandas DataFrame for printing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer

from textasdata.errors import ColumnMismatchError, DataValidationError
from textasdata.features.preprocessing import preprocess_series_to_string


@dataclass(frozen=True)
class Vocabulary:
    """Ordered, immutable set of terms that defines DTM columns."""

    terms: Tuple[str, ...]
    preprocessing_cfg: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: object) -> bool:
        return term in self.terms

    @property
    def index(self) -> Dict[str, int]:
        return {term: i for i, term in enumerate(self.terms)}


@dataclass
class DocumentTermMatrix:
    """Sparse count matrix together with its row ids and vocabulary."""

    matrix: sparse.csr_matrix
    doc_ids: Tuple[Any, ...]
    vocabulary: Vocabulary

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    @property
    def n_documents(self) -> int:
        return self.matrix.shape[0]

    @property
    def terms(self) -> Tuple[str, ...]:
        return self.vocabulary.terms


def _whitespace_vectorizer(**kwargs) -> CountVectorizer:
    # Input is already cleaned and tokenized by the preprocessing pipeline.
    return CountVectorizer(
        tokenizer=str.split,
        token_pattern=None,
        preprocessor=None,
        lowercase=False,
        **kwargs,
    )


def fit_vocabulary(
    texts: Iterable[str],
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
    min_df: Any = 1,
    max_df: Any = 1.0,
    max_features: Optional[int] = None,
) -> Vocabulary:
    """
    Fit a vocabulary on training texts.

    Parameters
    ----------
    texts : Iterable[str]
        Raw training texts.
    preprocessing_cfg : Optional[Dict[str, Any]]
        The 'preprocessing' config section applied before counting; the
        same settings are reused for every matrix built on this vocabulary.
    min_df, max_df, max_features
        Passed to CountVectorizer to prune rare/common terms.

    Returns
    -------
    Vocabulary
        Terms in alphabetical order.

    Raises
    ------
    DataValidationError
        If no term survives preprocessing and pruning.
    """
    processed = preprocess_series_to_string(pd.Series(list(texts), dtype=str), preprocessing_cfg)
    vectorizer = _whitespace_vectorizer(min_df=min_df, max_df=max_df, max_features=max_features)
    try:
        vectorizer.fit(processed.values)
    except ValueError as exc:
        raise DataValidationError(f"Cannot build a vocabulary: {exc}") from exc

    terms = tuple(vectorizer.get_feature_names_out().tolist())
    return Vocabulary(terms=terms, preprocessing_cfg=dict(preprocessing_cfg or {}))


def build_dtm(
    texts: Iterable[str],
    vocabulary: Vocabulary,
    doc_ids: Optional[Sequence[Any]] = None,
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
) -> DocumentTermMatrix:
    """
    Count the vocabulary terms in each text.

    Parameters
    ----------
    texts : Iterable[str]
        Raw texts, one row per text in the given order.
    vocabulary : Vocabulary
        Shared vocabulary defining the columns.
    doc_ids : Optional[Sequence[Any]]
        Row identifiers; defaults to 0..n-1.
    preprocessing_cfg : Optional[Dict[str, Any]]
        Preprocessing settings. Must match the ones the vocabulary was
        fitted with, so it is normally left as None.

    Returns
    -------
    DocumentTermMatrix
        Matrix of shape (n_texts, len(vocabulary)).
    """
    texts = list(texts)
    if doc_ids is None:
        doc_ids = range(len(texts))
    doc_ids = tuple(doc_ids)
    if len(doc_ids) != len(texts):
        raise DataValidationError(
            f"Got {len(doc_ids)} doc ids for {len(texts)} texts."
        )

    if preprocessing_cfg is None:
        preprocessing_cfg = vocabulary.preprocessing_cfg
    elif dict(preprocessing_cfg) != vocabulary.preprocessing_cfg:
        raise ColumnMismatchError(
            "Preprocessing settings differ from the ones the vocabulary was fitted with."
        )

    processed = preprocess_series_to_string(pd.Series(texts, dtype=str), preprocessing_cfg)

    if len(vocabulary) == 0:
        matrix = sparse.csr_matrix((len(texts), 0), dtype=np.int64)
    else:
        vectorizer = _whitespace_vectorizer(vocabulary=list(vocabulary.terms))
        matrix = vectorizer.transform(processed.values).tocsr()

    return DocumentTermMatrix(matrix=matrix, doc_ids=doc_ids, vocabulary=vocabulary)


def fit_transform_dtm(
    texts: Iterable[str],
    doc_ids: Optional[Sequence[Any]] = None,
    preprocessing_cfg: Optional[Dict[str, Any]] = None,
    **vocab_kwargs: Any,
) -> DocumentTermMatrix:
    """
    Convenience function that fits a vocabulary on the texts and builds
    their DTM on it.
    """
    texts = list(texts)
    vocabulary = fit_vocabulary(texts, preprocessing_cfg=preprocessing_cfg, **vocab_kwargs)
    return build_dtm(texts, vocabulary, doc_ids=doc_ids)


def check_same_columns(a: DocumentTermMatrix, b: DocumentTermMatrix) -> None:
    """
    Raise ColumnMismatchError unless both matrices use the same vocabulary.
    """
    if a.vocabulary.terms != b.vocabulary.terms:
        only_a = set(a.vocabulary.terms) - set(b.vocabulary.terms)
        only_b = set(b.vocabulary.terms) - set(a.vocabulary.terms)
        raise ColumnMismatchError(
            f"Document-term matrices have different columns "
            f"({len(a.vocabulary)} vs {len(b.vocabulary)} terms; "
            f"{len(only_a)} only in first, {len(only_b)} only in second)."
        )


def dtm_to_frame(dtm: DocumentTermMatrix) -> pd.DataFrame:
    """Dense DataFrame view (rows = doc ids, columns = terms)."""
    return pd.DataFrame(
        dtm.matrix.toarray(),
        index=pd.Index(dtm.doc_ids, name="doc_id"),
        columns=list(dtm.terms),
    )


def term_frequencies(dtm: DocumentTermMatrix) -> pd.Series:
    """Total count of each term across all documents, most frequent first."""
    totals = np.asarray(dtm.matrix.sum(axis=0)).ravel()
    return pd.Series(totals, index=list(dtm.terms), name="count").sort_values(
        ascending=False, kind="stable"
    )
