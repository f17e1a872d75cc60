"""
Topic modeling on document-term matrices.

Two models are provided:

- plain LDA, delegated to scikit-learn's LatentDirichletAllocation
- keyword-seeded LDA in the spirit of keyATM, delegated to gensim's
  LdaModel: each labeled topic gets a boosted topic-word prior on its
  seed words, optionally followed by unseeded topics

Both are fitted on a DocumentTermMatrix and reshaped into the same tidy
pandas tables: per-document topic proportions and the top terms of each
topic with their weights.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from gensim import matutils
from gensim.models import LdaModel
from sklearn.decomposition import LatentDirichletAllocation

from textasdata.errors import DataValidationError
from textasdata.features.dtm import DocumentTermMatrix, check_same_columns
from textasdata.features.preprocessing import preprocess_text_to_tokens


logger = logging.getLogger(__name__)


@dataclass
class TopicModelResult:
    model: Any
    dtm: DocumentTermMatrix
    doc_topics: pd.DataFrame
    topic_word: np.ndarray

    @property
    def n_topics(self) -> int:
        return self.topic_word.shape[0]

    @property
    def topic_labels(self) -> List[Any]:
        return list(self.doc_topics.columns)

    def topic_term_weights(self) -> pd.DataFrame:
        """Topic x term matrix of normalized word probabilities."""
        weights = self.topic_word / self.topic_word.sum(axis=1, keepdims=True)
        return pd.DataFrame(
            weights,
            index=pd.Index(self.topic_labels, name="topic"),
            columns=list(self.dtm.terms),
        )

    def top_terms(self, n: int = 10) -> pd.DataFrame:
        """
        Long table with columns ["topic", "rank", "term", "weight"] holding
        the n most probable terms of each topic.
        """
        weights = self.topic_term_weights()
        rows = []
        for topic, row in weights.iterrows():
            best = row.sort_values(ascending=False, kind="stable").head(n)
            for rank, (term, weight) in enumerate(best.items(), start=1):
                rows.append({"topic": topic, "rank": rank, "term": term, "weight": float(weight)})
        return pd.DataFrame(rows, columns=["topic", "rank", "term", "weight"])


def _check_fittable(dtm: DocumentTermMatrix, n_topics: int) -> None:
    if n_topics < 1:
        raise DataValidationError("n_topics must be at least 1.")
    if dtm.matrix.shape[0] == 0 or dtm.matrix.shape[1] == 0:
        raise DataValidationError(f"Cannot fit LDA on an empty matrix of shape {dtm.shape}.")


def _doc_topic_frame(theta: np.ndarray, doc_ids: Sequence[Any], labels: Sequence[Any]) -> pd.DataFrame:
    return pd.DataFrame(
        np.asarray(theta, dtype=float),
        index=pd.Index(doc_ids, name="doc_id"),
        columns=list(labels),
    )


# ---------------------------------------------------------------------------
# Plain LDA
# ---------------------------------------------------------------------------


def fit_lda(
    dtm: DocumentTermMatrix,
    n_topics: int = 5,
    random_state: int = 42,
    max_iter: int = 50,
    doc_topic_prior: Optional[float] = None,
    topic_word_prior: Optional[float] = None,
    **kwargs: Any,
) -> TopicModelResult:
    """
    Fit an LDA model on a document-term matrix.

    Parameters
    ----------
    dtm : DocumentTermMatrix
        Raw term counts.
    n_topics : int
        Number of latent topics (k).
    random_state : int
        Seed for the variational inference.
    max_iter : int
        Passes over the data.
    doc_topic_prior, topic_word_prior : Optional[float]
        Dirichlet priors (alpha and eta); scikit-learn defaults to 1/k.

    Returns
    -------
    TopicModelResult
        Fitted model plus a doc_topics DataFrame indexed by doc_id with
        one column per topic, each row summing to 1.

    Raises
    ------
    DataValidationError
        If the matrix is empty or n_topics < 1.
    """
    _check_fittable(dtm, n_topics)

    model = LatentDirichletAllocation(
        n_components=n_topics,
        random_state=random_state,
        max_iter=max_iter,
        learning_method="batch",
        doc_topic_prior=doc_topic_prior,
        topic_word_prior=topic_word_prior,
        **kwargs,
    )
    theta = model.fit_transform(dtm.matrix)

    return TopicModelResult(
        model=model,
        dtm=dtm,
        doc_topics=_doc_topic_frame(theta, dtm.doc_ids, range(n_topics)),
        topic_word=np.asarray(model.components_, dtype=float),
    )


# ---------------------------------------------------------------------------
# Keyword-seeded LDA
# ---------------------------------------------------------------------------


def _gensim_corpus(dtm: DocumentTermMatrix) -> List[List[Any]]:
    return list(matutils.Sparse2Corpus(dtm.matrix, documents_columns=False))


def _gensim_doc_topics(model: LdaModel, corpus: List[List[Any]]) -> np.ndarray:
    gamma, _ = model.inference(corpus)
    return gamma / gamma.sum(axis=1, keepdims=True)


def seed_prior(
    dtm: DocumentTermMatrix,
    seed_keywords: Mapping[str, Sequence[str]],
    n_extra_topics: int = 0,
    base_eta: float = 0.01,
    seed_weight: float = 1.0,
) -> np.ndarray:
    """
    Build the (n_topics, n_terms) topic-word prior for seeded LDA.

    Seed words go through the vocabulary's preprocessing, so "Actors"
    seeds the term "actors" (or "actor" when stemming is enabled). Seed
    words missing from the vocabulary are logged and skipped.

    Raises
    ------
    DataValidationError
        If a seeded topic has no seed word in the vocabulary.
    """
    index = dtm.vocabulary.index
    n_topics = len(seed_keywords) + int(n_extra_topics)
    eta = np.full((n_topics, len(index)), float(base_eta))

    for row, (label, words) in enumerate(seed_keywords.items()):
        found = 0
        for word in words:
            tokens = preprocess_text_to_tokens(word, dtm.vocabulary.preprocessing_cfg)
            hits = [index[tok] for tok in tokens if tok in index]
            if not hits:
                logger.warning("Seed word %r of topic %r is not in the vocabulary.", word, label)
            for col in hits:
                eta[row, col] = float(seed_weight)
            found += len(hits)
        if found == 0:
            raise DataValidationError(f"No seed word of topic {label!r} occurs in the vocabulary.")
    return eta


def fit_seeded_lda(
    dtm: DocumentTermMatrix,
    seed_keywords: Mapping[str, Sequence[str]],
    n_extra_topics: int = 0,
    base_eta: float = 0.01,
    seed_weight: float = 1.0,
    random_state: int = 42,
    passes: int = 20,
    iterations: int = 100,
    alpha: Any = "symmetric",
) -> TopicModelResult:
    """
    Fit an LDA model whose first topics are anchored by seed keywords.

    Parameters
    ----------
    dtm : DocumentTermMatrix
        Raw term counts on a shared vocabulary.
    seed_keywords : Mapping[str, Sequence[str]]
        Topic label -> seed words. Labels become the topic columns.
    n_extra_topics : int
        Additional unseeded topics, labeled "other_1", "other_2", ...
    base_eta : float
        Topic-word prior for every (topic, term) pair.
    seed_weight : float
        Topic-word prior of a seed word in its own topic.
    random_state, passes, iterations, alpha
        Passed to gensim's LdaModel.

    Returns
    -------
    TopicModelResult
        Same layout as fit_lda, with string topic labels.
    """
    if not seed_keywords:
        raise DataValidationError("seed_keywords must name at least one topic.")
    labels: List[Any] = [str(label) for label in seed_keywords]
    labels += [f"other_{i}" for i in range(1, int(n_extra_topics) + 1)]
    _check_fittable(dtm, len(labels))

    eta = seed_prior(dtm, seed_keywords, n_extra_topics, base_eta, seed_weight)
    corpus = _gensim_corpus(dtm)
    model = LdaModel(
        corpus=corpus,
        id2word=dict(enumerate(dtm.terms)),
        num_topics=len(labels),
        eta=eta,
        alpha=alpha,
        passes=passes,
        iterations=iterations,
        random_state=random_state,
    )

    return TopicModelResult(
        model=model,
        dtm=dtm,
        doc_topics=_doc_topic_frame(_gensim_doc_topics(model, corpus), dtm.doc_ids, labels),
        topic_word=np.asarray(model.get_topics(), dtype=float),
    )


# ---------------------------------------------------------------------------
# Inference helpers
# ---------------------------------------------------------------------------


def dominant_topic(result: TopicModelResult) -> pd.Series:
    """Most probable topic of every document."""
    return result.doc_topics.idxmax(axis=1).rename("topic")


def transform_topics(result: TopicModelResult, dtm: DocumentTermMatrix) -> pd.DataFrame:
    """
    Infer topic proportions for new documents built on the model's
    vocabulary.
    """
    check_same_columns(result.dtm, dtm)
    if isinstance(result.model, LdaModel):
        theta = _gensim_doc_topics(result.model, _gensim_corpus(dtm))
    else:
        theta = result.model.transform(dtm.matrix)
    return _doc_topic_frame(theta, dtm.doc_ids, result.topic_labels)
