"""
Tests for the scoring models: supervised classifiers on document-term
matrices, LDA topic models and dependency-based motif extraction.
"""

from __future__ import annotations

import numpy as np
import pytest
from spacy.tokens import Doc
from spacy.vocab import Vocab

from textasdata.data.datasets import load_example_corpus
from textasdata.errors import (
    ColumnMismatchError,
    ConfigurationError,
    DataValidationError,
    NotFittedError,
)
from textasdata.features.dtm import build_dtm, fit_transform_dtm, fit_vocabulary
from textasdata.features.semantic_roles import Motif, extract_motifs
from textasdata.models.classifiers import ClassifierAdapter, build_classifier
from textasdata.models.topics import (
    dominant_topic,
    fit_lda,
    fit_seeded_lda,
    seed_prior,
    transform_topics,
)


ML_CFG = {
    "general": {"random_state": 0, "use_class_weight_balanced": False},
    "ml_models": {"random_forest": {"n_estimators": 20}},
}

TRAIN_TEXTS = ["good great", "good fine", "bad awful", "bad poor"]
TRAIN_LABELS = [1, 1, 0, 0]


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def _fitted_adapter(name: str = "naive_bayes"):
    vocab = fit_vocabulary(TRAIN_TEXTS)
    adapter = ClassifierAdapter(build_classifier(name, ML_CFG))
    adapter.fit(build_dtm(TRAIN_TEXTS, vocab), TRAIN_LABELS)
    return adapter, vocab


def test_classifier_predicts_on_training_vocabulary():
    adapter, vocab = _fitted_adapter()
    preds = adapter.predict(build_dtm(["good", "bad", "never seen"], vocab))

    assert preds.tolist()[:2] == [1, 0]
    assert preds.dtype.kind == "i"


def test_classifier_rejects_other_vocabulary():
    adapter, _ = _fitted_adapter()
    with pytest.raises(ColumnMismatchError):
        adapter.predict(fit_transform_dtm(["good movie"]))


def test_classifier_requires_fit():
    adapter = ClassifierAdapter(build_classifier("naive_bayes", ML_CFG))
    with pytest.raises(NotFittedError):
        adapter.predict(fit_transform_dtm(["good"]))


def test_classifier_label_count_mismatch():
    adapter = ClassifierAdapter(build_classifier("naive_bayes", ML_CFG))
    with pytest.raises(DataValidationError):
        adapter.fit(fit_transform_dtm(TRAIN_TEXTS), [1, 0])


def test_unknown_classifier_name():
    with pytest.raises(ConfigurationError):
        build_classifier("svm", ML_CFG)


def test_from_config_defaults_to_random_forest():
    adapter = ClassifierAdapter.from_config(ML_CFG)
    assert type(adapter.estimator).__name__ == "RandomForestClassifier"
    assert adapter.estimator.n_estimators == 20


def test_feature_importances_random_forest():
    adapter, vocab = _fitted_adapter("random_forest")
    top = adapter.feature_importances(top_n=3)

    assert len(top) == 3
    assert set(top.index) <= set(vocab.terms)
    assert top.is_monotonic_decreasing


# ---------------------------------------------------------------------------
# Topic models
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def example_dtm():
    corpus = load_example_corpus()
    return fit_transform_dtm(
        corpus["text"],
        doc_ids=corpus["doc_id"],
        preprocessing_cfg={"stopwords": {"enabled": True}},
    )


def test_lda_document_topic_proportions(example_dtm):
    result = fit_lda(example_dtm, n_topics=3, random_state=0, max_iter=10)

    assert result.doc_topics.shape == (example_dtm.n_documents, 3)
    np.testing.assert_allclose(result.doc_topics.sum(axis=1).values, 1.0, rtol=1e-6)
    np.testing.assert_allclose(result.topic_term_weights().sum(axis=1).values, 1.0, rtol=1e-6)

    top = result.top_terms(5)
    assert list(top.columns) == ["topic", "rank", "term", "weight"]
    assert len(top) == 15
    assert set(dominant_topic(result).unique()) <= {0, 1, 2}


def test_lda_transform_new_documents(example_dtm):
    result = fit_lda(example_dtm, n_topics=2, random_state=0, max_iter=5)
    new = build_dtm(["a great cast and a great story"], example_dtm.vocabulary)

    theta = transform_topics(result, new)
    assert theta.shape == (1, 2)
    assert theta.iloc[0].sum() == pytest.approx(1.0)

    with pytest.raises(ColumnMismatchError):
        transform_topics(result, fit_transform_dtm(["other words"]))


def test_lda_invalid_k(example_dtm):
    with pytest.raises(DataValidationError):
        fit_lda(example_dtm, n_topics=0)


# ---------------------------------------------------------------------------
# Keyword-seeded topic models
# ---------------------------------------------------------------------------


SEEDED_TEXTS = [
    "actor cast",
    "actor cast dialogue",
    "plot twist",
    "plot twist ending",
]
SEEDS = {"acting": ["Actor", "cast"], "story": ["plot", "twist"]}


def test_seed_prior_boosts_seed_columns():
    dtm = fit_transform_dtm(SEEDED_TEXTS)
    eta = seed_prior(dtm, SEEDS, n_extra_topics=1, base_eta=0.01, seed_weight=5.0)
    index = dtm.vocabulary.index

    assert eta.shape == (3, len(dtm.terms))
    assert eta[0, index["actor"]] == 5.0
    assert eta[0, index["plot"]] == 0.01
    assert eta[1, index["twist"]] == 5.0
    assert (eta[2] == 0.01).all()


def test_seeded_terms_rank_first_in_their_topic():
    dtm = fit_transform_dtm(SEEDED_TEXTS)
    result = fit_seeded_lda(dtm, SEEDS, n_extra_topics=1, seed_weight=10.0, random_state=0, passes=5)

    assert result.topic_labels == ["acting", "story", "other_1"]
    np.testing.assert_allclose(result.doc_topics.sum(axis=1).values, 1.0, rtol=1e-5)

    top = result.top_terms(2)
    assert set(top.loc[top["topic"] == "acting", "term"]) == {"actor", "cast"}
    assert set(top.loc[top["topic"] == "story", "term"]) == {"plot", "twist"}

    theta = transform_topics(result, build_dtm(["actor cast"], dtm.vocabulary))
    assert list(theta.columns) == ["acting", "story", "other_1"]


def test_seeded_lda_rejects_unknown_seeds():
    dtm = fit_transform_dtm(SEEDED_TEXTS)
    with pytest.raises(DataValidationError):
        fit_seeded_lda(dtm, {"music": ["soundtrack"]})
    with pytest.raises(DataValidationError):
        fit_seeded_lda(dtm, {})


# ---------------------------------------------------------------------------
# Semantic-role motifs
# ---------------------------------------------------------------------------


def _doc(words, heads, deps, lemmas, pos):
    return Doc(Vocab(), words=words, heads=heads, deps=deps, lemmas=lemmas, pos=pos)


def test_action_and_treatment_motifs():
    # "She loved the movie" / "Darcy insulted her"
    loved = _doc(
        ["She", "loved", "the", "movie"],
        [1, 1, 3, 1],
        ["nsubj", "ROOT", "det", "dobj"],
        ["she", "love", "the", "movie"],
        ["PRON", "VERB", "DET", "NOUN"],
    )
    insulted = _doc(
        ["Darcy", "insulted", "her"],
        [1, 1, 1],
        ["nsubj", "ROOT", "dobj"],
        ["Darcy", "insult", "she"],
        ["PROPN", "VERB", "PRON"],
    )

    assert extract_motifs(loved, ["she"]) == [Motif("she", "action", "love")]
    assert extract_motifs(insulted, ["she", "darcy"]) == [
        Motif("darcy", "action", "insult"),
        Motif("she", "treatment", "insult"),
    ]


def test_characterization_motifs():
    # "She is clever" / "clever Elizabeth smiled"
    copula = _doc(
        ["She", "is", "clever"],
        [1, 1, 1],
        ["nsubj", "ROOT", "acomp"],
        ["she", "be", "clever"],
        ["PRON", "AUX", "ADJ"],
    )
    modifier = _doc(
        ["clever", "Elizabeth", "smiled"],
        [1, 2, 2],
        ["amod", "nsubj", "ROOT"],
        ["clever", "Elizabeth", "smile"],
        ["ADJ", "PROPN", "VERB"],
    )

    assert extract_motifs(copula, ["she"]) == [Motif("she", "characterization", "clever")]
    assert extract_motifs(modifier, ["Elizabeth"]) == [
        Motif("elizabeth", "action", "smile"),
        Motif("elizabeth", "characterization", "clever"),
    ]


def test_passive_agent_is_action():
    # "Elizabeth was praised by him"
    doc = _doc(
        ["Elizabeth", "was", "praised", "by", "him"],
        [2, 2, 2, 2, 3],
        ["nsubjpass", "auxpass", "ROOT", "agent", "pobj"],
        ["Elizabeth", "be", "praise", "by", "he"],
        ["PROPN", "AUX", "VERB", "ADP", "PRON"],
    )

    assert extract_motifs(doc, ["elizabeth", "he"]) == [
        Motif("elizabeth", "treatment", "praise"),
        Motif("he", "action", "praise"),
    ]
