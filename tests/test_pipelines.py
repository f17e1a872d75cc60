"""
Smoke tests for the end-to-end pipelines on the bundled example corpus.

These are *smoke tests*, not accuracy benchmarks: we only assert that
each pipeline runs and returns outputs of the expected type/shape. The
zero-shot pipeline uses a fake client, and the motif pipeline is skipped
unless the spaCy English model is installed.
"""

from __future__ import annotations

import importlib.util
import os

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest
import yaml

from textasdata.errors import ConfigurationError
from textasdata.pipelines.motifs import run_motif_pipeline
from textasdata.pipelines.sentiment import (
    run_classifier_pipeline,
    run_keyword_pipeline,
    run_lexicon_pipeline,
)
from textasdata.pipelines.topics import run_topic_pipeline
from textasdata.pipelines.zero_shot import run_llm_pipeline


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "data.yaml")
ML_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "ml.yaml")
LLM_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "llm.yaml")
RUN_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "run.yaml")

_HAS_SPACY_MODEL = importlib.util.find_spec("en_core_web_sm") is not None


def _write_ml_config(tmp_path, **overrides):
    with open(ML_CONFIG_PATH, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    for section, values in overrides.items():
        cfg[section] = {**(cfg.get(section) or {}), **values}
    path = tmp_path / "ml.yaml"
    path.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")
    return str(path)


class SentimentWordClient:
    model = "fake"

    def complete(self, prompt, timeout_s=None):
        text = prompt.rsplit("Review:", 1)[-1].lower()
        return "1" if any(w in text for w in ("awesome", "loved", "great", "wonderful")) else "0"


# ---------------------------------------------------------------------------
# Sentiment pipelines
# ---------------------------------------------------------------------------


def test_keyword_pipeline_smoke():
    metrics = run_keyword_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH)

    assert metrics["method"] == "keywords"
    assert metrics["n_documents"] == 24
    assert 0.0 <= metrics["accuracy_pct"] <= 100.0


def test_lexicon_pipeline_fits_threshold_on_train():
    metrics = run_lexicon_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH)

    assert metrics["lexicon"] == "example"
    assert metrics["threshold"] is not None
    assert metrics["n_documents"] < 24
    assert 0.0 <= metrics["accuracy_pct"] <= 100.0


def test_lexicon_pipeline_with_fixed_threshold(tmp_path):
    ml_path = _write_ml_config(tmp_path, lexicon={"threshold": 0.0})
    metrics = run_lexicon_pipeline(DATA_CONFIG_PATH, ml_path, RUN_CONFIG_PATH)

    assert metrics["threshold"] == 0.0


@pytest.mark.parametrize("name", ["naive_bayes", "logistic_regression"])
def test_classifier_pipeline_smoke(name):
    metrics = run_classifier_pipeline(
        DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH, classifier_name=name
    )

    assert metrics["n_terms"] > 0
    assert 0.0 <= metrics["accuracy_pct"] <= 100.0
    assert 0.0 <= metrics["train_accuracy_pct"] <= 100.0
    assert len(metrics["confusion_matrix"]) == 2


def test_keyword_pipeline_on_given_corpus():
    corpus = pd.DataFrame(
        {
            "doc_id": [0, 1],
            "text": ["awesome movie", "terrible movie"],
            "text_norm": ["awesome movie", "terrible movie"],
            "sentiment": [1, 0],
        }
    )
    metrics = run_keyword_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH, corpus=corpus)

    assert metrics["accuracy_pct"] == 100.0


def test_keyword_pipeline_on_plain_text_table():
    corpus = pd.DataFrame({"text": ["awesome movie", "terrible movie"], "sentiment": [1, 0]})
    metrics = run_keyword_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH, corpus=corpus)

    assert metrics["n_documents"] == 2
    assert metrics["accuracy_pct"] == 100.0


# ---------------------------------------------------------------------------
# Zero-shot pipeline
# ---------------------------------------------------------------------------


def test_llm_pipeline_with_fake_client():
    result = run_llm_pipeline(
        DATA_CONFIG_PATH, LLM_CONFIG_PATH, RUN_CONFIG_PATH, client=SentimentWordClient()
    )

    assert result["n_scored"] == result["n_documents"]
    assert result["failures"] == []
    assert list(result["predictions"].columns) == ["doc_id", "sentiment", "predicted"]
    assert 0.0 <= result["accuracy_pct"] <= 100.0


def test_llm_pipeline_without_credentials(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        run_llm_pipeline(DATA_CONFIG_PATH, LLM_CONFIG_PATH, RUN_CONFIG_PATH)


# ---------------------------------------------------------------------------
# Topics and motifs
# ---------------------------------------------------------------------------


def test_topic_pipeline_smoke():
    result = run_topic_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH, n_topics=2)

    assert result["n_topics"] == 2
    assert result["doc_topics"].shape == (24, 2)
    assert set(result["top_terms"]["topic"]) == {0, 1}
    assert "movie" not in set(result["top_terms"]["term"])
    assert result["figure_path"] is None


def test_seeded_topic_pipeline(tmp_path):
    ml_path = _write_ml_config(
        tmp_path,
        topics={"seeds": {"praise": ["brilliant", "wonderful"], "complaint": ["boring", "dull"]}},
    )
    result = run_topic_pipeline(DATA_CONFIG_PATH, ml_path, RUN_CONFIG_PATH, n_topics=3)

    assert result["method"] == "seeded_lda"
    assert result["n_topics"] == 3
    assert list(result["doc_topics"].columns) == ["praise", "complaint", "other_1"]
    assert set(result["dominant_topic"]) <= {"praise", "complaint", "other_1"}


def test_topic_pipeline_on_unlabeled_table():
    corpus = pd.DataFrame({"text": ["great cast and story", "boring plot", "great story again"]})
    result = run_topic_pipeline(
        DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH, n_topics=2, corpus=corpus
    )

    assert result["doc_topics"].index.tolist() == [0, 1, 2]


def test_motif_pipeline_requires_entities(tmp_path):
    ml_path = _write_ml_config(tmp_path, motifs={"entities": []})
    with pytest.raises(ConfigurationError):
        run_motif_pipeline(DATA_CONFIG_PATH, ml_path, RUN_CONFIG_PATH)


@pytest.mark.skipif(
    not _HAS_SPACY_MODEL,
    reason="spaCy model en_core_web_sm not installed; skipping motif smoke test.",
)
def test_motif_pipeline_smoke():
    result = run_motif_pipeline(DATA_CONFIG_PATH, ML_CONFIG_PATH, RUN_CONFIG_PATH)

    assert list(result["motifs"].columns) == ["doc_id", "entity", "role", "word"]
    assert set(result["motifs"]["role"]) <= {"action", "treatment", "characterization"}
