"""
Sentiment pipelines: keyword dictionary, lexicon and supervised
classification.

Each pipeline:

- loads the configured corpus (config/data.yaml)
- builds the features of its method
- scores the documents
- compares the predictions with the "sentiment" labels and logs the
  accuracy percentage and related metrics

The functions return plain dictionaries so the numbers can be printed
or tabulated by the calling script. Nothing is written to disk apart
from optional log files.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from textasdata.data.datasets import DEFAULT_DATA_CONFIG_PATH
from textasdata.evaluation.metrics import accuracy_percentage, compute_classification_metrics
from textasdata.features.dtm import build_dtm, check_same_columns, fit_vocabulary
from textasdata.features.keywords import keyword_predictions
from textasdata.features.lexicon import LexiconClassifier, load_lexicon_from_config
from textasdata.models.classifiers import DEFAULT_ML_CONFIG_PATH, ClassifierAdapter, load_ml_config
from textasdata.pipelines.common import log_metrics, start_run
from textasdata.utils.runtime import DEFAULT_RUN_CONFIG_PATH


# ---------------------------------------------------------------------------
# Keyword dictionary
# ---------------------------------------------------------------------------


def run_keyword_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Label every document with the keyword rule and evaluate on the whole
    corpus (there is nothing to train).
    """
    ctx = start_run("keywords", data_config_path, run_config_path, split=False, corpus=corpus)
    ml_cfg = load_ml_config(ml_config_path)

    kw_cfg = ml_cfg.get("keywords", {}) or {}
    positive = list(kw_cfg.get("positive", []))
    negative = list(kw_cfg.get("negative", []))
    ctx.logger.info("Keywords: positive=%s, negative=%s", positive, negative)

    y_pred = keyword_predictions(ctx.corpus["text_norm"], positive, negative)
    y_true = ctx.corpus["sentiment"].tolist()

    metrics = compute_classification_metrics(y_true=y_true, y_pred=y_pred)
    log_metrics(ctx.logger, "keywords", metrics)

    return {"method": "keywords", "n_documents": len(y_true), **metrics}


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------


def run_lexicon_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Score documents with a polarity lexicon, learn the positive/negative
    threshold on the training split and evaluate on the test split.
    """
    ctx = start_run("lexicon", data_config_path, run_config_path, corpus=corpus)
    ml_cfg = load_ml_config(ml_config_path)

    lexicon_cfg = ml_cfg.get("lexicon", {}) or {}
    lexicon = load_lexicon_from_config(lexicon_cfg)
    ctx.logger.info("Loaded %r", lexicon)

    scorer = LexiconClassifier(lexicon, threshold=lexicon_cfg.get("threshold"))
    scorer.fit(ctx.train_df["text"])
    if scorer.fixed_threshold is None:
        ctx.logger.info("Threshold fitted on training split: %.4f", scorer.threshold)
    else:
        ctx.logger.info("Using fixed threshold: %.4f", scorer.threshold)

    y_pred = scorer.predict(ctx.test_df["text"])
    y_true = ctx.test_df["sentiment"].tolist()

    metrics = compute_classification_metrics(y_true=y_true, y_pred=y_pred)
    log_metrics(ctx.logger, "lexicon", metrics)

    return {
        "method": "lexicon",
        "lexicon": lexicon.name,
        "threshold": scorer.threshold,
        "n_documents": len(y_true),
        **metrics,
    }


# ---------------------------------------------------------------------------
# Supervised classifier on a document-term matrix
# ---------------------------------------------------------------------------


def run_classifier_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    classifier_name: Optional[str] = None,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Train a classifier on the training DTM and evaluate it on the test
    DTM, both built on the training vocabulary.
    """
    ctx = start_run("classifier", data_config_path, run_config_path, corpus=corpus)
    ml_cfg = load_ml_config(ml_config_path)
    dtm_cfg = ml_cfg.get("dtm", {}) or {}

    ctx.logger.info("Fitting vocabulary on training texts...")
    vocabulary = fit_vocabulary(
        ctx.train_df["text"],
        preprocessing_cfg=ctx.preprocessing_cfg,
        min_df=dtm_cfg.get("min_df", 1),
        max_df=dtm_cfg.get("max_df", 1.0),
        max_features=dtm_cfg.get("max_features"),
    )
    X_train = build_dtm(ctx.train_df["text"], vocabulary, doc_ids=ctx.train_df["doc_id"])
    X_test = build_dtm(ctx.test_df["text"], vocabulary, doc_ids=ctx.test_df["doc_id"])
    check_same_columns(X_train, X_test)
    ctx.logger.info("DTM shapes: X_train=%s, X_test=%s", X_train.shape, X_test.shape)

    adapter = ClassifierAdapter.from_config(ml_cfg, name=classifier_name)
    name = type(adapter.estimator).__name__
    ctx.logger.info("Training model: %s", name)
    adapter.fit(X_train, ctx.train_df["sentiment"])

    y_pred = adapter.predict(X_test)
    y_true = ctx.test_df["sentiment"].tolist()

    metrics = compute_classification_metrics(y_true=y_true, y_pred=y_pred)
    log_metrics(ctx.logger, name, metrics)

    try:
        top_terms = adapter.feature_importances(top_n=10)
        ctx.logger.info("Most informative terms:\n%s", top_terms.to_string())
    except TypeError:
        top_terms = None

    return {
        "method": "classifier",
        "model": name,
        "n_terms": len(vocabulary),
        "n_documents": len(y_true),
        "train_accuracy_pct": accuracy_percentage(
            adapter.predict(X_train), ctx.train_df["sentiment"].tolist()
        ),
        "top_terms": [] if top_terms is None else top_terms.index.tolist(),
        **metrics,
    }
