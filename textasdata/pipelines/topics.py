"""
LDA topic modeling pipeline.

Builds a document-term matrix over the whole corpus (labels are not
needed), fits LDA with the number of topics from config/ml.yaml, logs
the top terms of each topic and optionally saves a bar-chart figure.
When "topics.seeds" maps topic labels to seed words, a keyword-seeded
model is fitted instead; n_topics then counts seeded plus unseeded
topics.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import pandas as pd

from textasdata.data.datasets import DEFAULT_DATA_CONFIG_PATH
from textasdata.evaluation.plots import plot_top_terms
from textasdata.features.dtm import fit_transform_dtm, term_frequencies
from textasdata.models.classifiers import DEFAULT_ML_CONFIG_PATH, load_ml_config
from textasdata.models.topics import dominant_topic, fit_lda, fit_seeded_lda
from textasdata.pipelines.common import start_run
from textasdata.utils.runtime import DEFAULT_RUN_CONFIG_PATH, ensure_dir_exists


def run_topic_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    n_topics: Optional[int] = None,
    save_figure: bool = False,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Fit LDA on the configured corpus.

    Returns
    -------
    Dict[str, Any]
        "n_topics", "top_terms" (long DataFrame), "doc_topics" (DataFrame
        indexed by doc_id), "dominant_topic" (Series) and "figure_path"
        (None unless save_figure is True).
    """
    ctx = start_run(
        "topics", data_config_path, run_config_path, split=False, corpus=corpus, require_labels=False
    )
    ml_cfg = load_ml_config(ml_config_path)
    topics_cfg = ml_cfg.get("topics", {}) or {}

    # Topic models usually need stopwords removed even when the classifier
    # keeps them.
    preprocessing_cfg = dict(ctx.preprocessing_cfg)
    if "stopwords" in topics_cfg:
        preprocessing_cfg["stopwords"] = topics_cfg["stopwords"]

    dtm = fit_transform_dtm(
        ctx.corpus["text"],
        doc_ids=ctx.corpus["doc_id"],
        preprocessing_cfg=preprocessing_cfg,
        min_df=topics_cfg.get("min_df", 1),
        max_df=topics_cfg.get("max_df", 1.0),
    )
    ctx.logger.info("DTM shape: %s", dtm.shape)
    ctx.logger.info("Most frequent terms:\n%s", term_frequencies(dtm).head(10).to_string())

    k = int(n_topics or topics_cfg.get("n_topics", 5))
    random_state = int((ml_cfg.get("general", {}) or {}).get("random_state", 42))
    seeds = topics_cfg.get("seeds") or {}

    if seeds:
        method = "seeded_lda"
        ctx.logger.info("Seeded topics: %s", {label: list(words) for label, words in seeds.items()})
        result = fit_seeded_lda(
            dtm,
            seeds,
            n_extra_topics=max(k - len(seeds), 0),
            base_eta=float(topics_cfg.get("eta") or 0.01),
            seed_weight=float(topics_cfg.get("seed_weight", 1.0)),
            random_state=random_state,
            passes=int(topics_cfg.get("max_iter", 50)),
        )
        k = result.n_topics
    else:
        method = "lda"
        result = fit_lda(
            dtm,
            n_topics=k,
            random_state=random_state,
            max_iter=int(topics_cfg.get("max_iter", 50)),
            doc_topic_prior=topics_cfg.get("alpha"),
            topic_word_prior=topics_cfg.get("eta"),
        )

    top_terms = result.top_terms(int(topics_cfg.get("n_top_terms", 10)))
    for topic, group in top_terms.groupby("topic"):
        ctx.logger.info("Topic %s: %s", topic, ", ".join(group["term"]))

    figure_path = None
    if save_figure:
        figures_dir = (ctx.run_cfg.get("paths", {}) or {}).get("figures_dir", "outputs/figures")
        ensure_dir_exists(figures_dir)
        figure_path = os.path.join(figures_dir, f"{method}_top_terms_k{k}.png")
        plot_top_terms(top_terms, title=f"{method} top terms (k={k})", out_path=figure_path, show=False)
        ctx.logger.info("Saved top-terms figure to %s", figure_path)

    return {
        "method": method,
        "n_topics": k,
        "top_terms": top_terms,
        "doc_topics": result.doc_topics,
        "dominant_topic": dominant_topic(result),
        "figure_path": figure_path,
    }
