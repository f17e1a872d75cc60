"""
Shared setup for the pipelines: configuration loading, seeding, logger
construction and data loading/splitting.

All configuration is read once at the start of a run and passed down
explicitly; nothing is installed or loaded lazily later on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pandas as pd

from textasdata.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    load_data_config,
    load_labeled_texts,
    prepare_labeled_frame,
)
from textasdata.data.split import train_test_split_df
from textasdata.utils.runtime import (
    DEFAULT_RUN_CONFIG_PATH,
    get_logger,
    load_run_config,
    seed_everything,
)


@dataclass
class RunContext:
    data_cfg: Dict[str, Any]
    run_cfg: Dict[str, Any]
    logger: logging.Logger
    corpus: pd.DataFrame
    train_df: Optional[pd.DataFrame] = None
    test_df: Optional[pd.DataFrame] = None

    @property
    def preprocessing_cfg(self) -> Dict[str, Any]:
        return self.data_cfg.get("preprocessing", {}) or {}


def start_run(
    name: str,
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    split: bool = True,
    corpus: Optional[pd.DataFrame] = None,
    require_labels: bool = True,
) -> RunContext:
    """
    Load configs, seed RNGs, build the logger and load (and optionally
    split) the corpus.

    Parameters
    ----------
    name : str
        Pipeline name, used for the logger and the log file suffix.
    data_config_path : str
        Path to config/data.yaml.
    run_config_path : str
        Path to config/run.yaml.
    split : bool
        Whether to build train/test splits.
    corpus : Optional[pd.DataFrame]
        Already loaded corpus; when given, the dataset section of the
        data config is not used to load one. A plain table with "text"
        (and "sentiment") columns is brought to the standard layout first.
    require_labels : bool
        Whether a supplied corpus must carry 0/1 labels.
    """
    data_cfg = load_data_config(data_config_path)
    run_cfg = load_run_config(run_config_path)

    seed_everything(int((run_cfg.get("general", {}) or {}).get("random_state", 42)))
    logger = get_logger(name=name, config=run_cfg, log_file_suffix=name)

    if corpus is None:
        corpus = load_labeled_texts(config_path=data_config_path)
    elif not {"doc_id", "text_norm"} <= set(corpus.columns):
        corpus = prepare_labeled_frame(corpus, require_labels=require_labels)
    logger.info("Loaded corpus with %d documents.", len(corpus))

    ctx = RunContext(data_cfg=data_cfg, run_cfg=run_cfg, logger=logger, corpus=corpus)

    if split:
        ctx.train_df, ctx.test_df = train_test_split_df(
            corpus,
            label_column="sentiment",
            split_cfg=data_cfg.get("split", {}) or {},
        )
        logger.info("Train size: %d, Test size: %d", len(ctx.train_df), len(ctx.test_df))

    return ctx


def log_metrics(logger: logging.Logger, name: str, metrics: Dict[str, Any]) -> None:
    logger.info(
        "Metrics for %s - acc: %.2f%%, prec: %.4f, rec: %.4f, f1: %.4f",
        name,
        metrics["accuracy_pct"],
        metrics["precision"],
        metrics["recall"],
        metrics["f1"],
    )
