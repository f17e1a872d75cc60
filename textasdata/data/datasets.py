"""
Dataset loading utilities for labeled text corpora.

This module is responsible for:
- reading the dataset configuration from config/data.yaml
- loading a CSV of labeled texts into a pandas DataFrame
- normalizing text and label columns to standard names ("text", "sentiment")
- applying basic cleaning (drop NA, drop duplicates) as configured
- coercing labels to integer 0/1 and assigning a stable "doc_id"
- adding a normalized "text_norm" column

Extra columns in the input table are carried along untouched. The
resulting DataFrame is ready to be used by every pipeline: keyword
matching, lexicon scoring, document-term matrices and LLM prompts.
"""

from __future__ import annotations

import os
from importlib import resources
from typing import Any, Dict

import pandas as pd

from textasdata.errors import ConfigurationError, DataValidationError
from textasdata.features.preprocessing import normalize_text
from textasdata.utils.runtime import load_yaml_config


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"
EXAMPLE_CORPUS_FILENAME = "movie_reviews.csv"

VALID_LABELS = (0, 1)
STANDARD_COLUMNS = ("doc_id", "text", "text_norm", "sentiment")


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "split", and "preprocessing" sections.

    Raises
    ------
    ConfigurationError
        If the file is missing or one of the sections is absent.
    """
    return load_yaml_config(
        config_path, required_sections=("dataset", "split", "preprocessing")
    )


def _coerce_labels(labels: pd.Series) -> pd.Series:
    """
    Convert a label column to nullable integers, mapping anything that is
    not 0/1 (including booleans-as-strings) to NA.
    """
    as_str = labels.astype(str).str.strip().str.lower()
    mapped = as_str.map({"0": 0, "1": 1, "0.0": 0, "1.0": 1, "false": 0, "true": 1})
    return mapped.astype("Int64")


def prepare_labeled_frame(
    df: pd.DataFrame,
    text_column: str = "text",
    label_column: str = "sentiment",
    drop_na_text: bool = True,
    drop_duplicates: bool = False,
    require_labels: bool = True,
) -> pd.DataFrame:
    """
    Normalize an already loaded table of texts to the standard interface.

    Parameters
    ----------
    df : pd.DataFrame
        Raw table.
    text_column : str
        Name of the column holding the raw text.
    label_column : str
        Name of the column holding 0/1 labels.
    drop_na_text : bool
        Drop rows whose text is missing.
    drop_duplicates : bool
        Drop duplicated (text, label) rows, keeping the first.
    require_labels : bool
        If True, the label column must exist and rows with labels other
        than 0/1 are dropped. If False, a missing label column yields an
        all-NA "sentiment" column.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns ["doc_id", "text", "text_norm", "sentiment"]
        first, followed by any extra input columns in their original order.

    Raises
    ------
    DataValidationError
        If required columns are missing or no row carries a valid label.
    """
    required = [text_column] + ([label_column] if require_labels else [])
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise DataValidationError(
            f"Missing required column(s) in input table: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    df = df.copy()

    if drop_na_text:
        df = df.dropna(subset=[text_column])

    # Normalize column names to a standard interface.
    if text_column != "text":
        df = df.rename(columns={text_column: "text"})
    if label_column in df.columns and label_column != "sentiment":
        df = df.rename(columns={label_column: "sentiment"})

    df["text"] = df["text"].astype(str)

    if "sentiment" in df.columns:
        df["sentiment"] = _coerce_labels(df["sentiment"])
    else:
        df["sentiment"] = pd.Series(pd.NA, index=df.index, dtype="Int64")

    if require_labels:
        invalid_mask = df["sentiment"].isna()
        if invalid_mask.any():
            df = df[~invalid_mask]
            if df.empty:
                raise DataValidationError(
                    "After filtering, no rows remain with valid labels. "
                    f"Expected labels: {set(VALID_LABELS)}"
                )
        df["sentiment"] = df["sentiment"].astype("int64")

    if drop_duplicates:
        df = df.drop_duplicates(subset=["text", "sentiment"], keep="first")

    # doc_id and text_norm are always derived from the rows as loaded.
    df = df.drop(columns=[c for c in ("doc_id", "text_norm") if c in df.columns])
    df = df.reset_index(drop=True)
    df.insert(0, "doc_id", range(len(df)))
    df["text_norm"] = df["text"].map(normalize_text)

    extra = [c for c in df.columns if c not in STANDARD_COLUMNS]
    return df[list(STANDARD_COLUMNS) + extra]


def load_labeled_csv(
    csv_path: str,
    text_column: str = "text",
    label_column: str = "sentiment",
    drop_na_text: bool = True,
    drop_duplicates: bool = False,
    require_labels: bool = True,
) -> pd.DataFrame:
    """
    Load a CSV of labeled texts.

    Raises
    ------
    ConfigurationError
        If the CSV file cannot be found.
    """
    if not os.path.exists(csv_path):
        raise ConfigurationError(f"Dataset CSV not found at: {csv_path}")

    df = pd.read_csv(csv_path)
    return prepare_labeled_frame(
        df,
        text_column=text_column,
        label_column=label_column,
        drop_na_text=drop_na_text,
        drop_duplicates=drop_duplicates,
        require_labels=require_labels,
    )


def load_labeled_texts(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> pd.DataFrame:
    """
    Load the dataset described by config/data.yaml.

    When ``dataset.path`` is empty or set to "example", the bundled
    example corpus is used instead of a file on disk.
    """
    cfg = load_data_config(config_path)
    dataset_cfg = cfg["dataset"] or {}

    csv_path = dataset_cfg.get("path") or "example"
    text_column = dataset_cfg.get("text_column", "text")
    label_column = dataset_cfg.get("label_column", "sentiment")
    drop_na_text = bool(dataset_cfg.get("drop_na_text", True))
    drop_duplicates = bool(dataset_cfg.get("drop_duplicates", False))

    if csv_path == "example":
        return load_example_corpus()

    return load_labeled_csv(
        csv_path,
        text_column=text_column,
        label_column=label_column,
        drop_na_text=drop_na_text,
        drop_duplicates=drop_duplicates,
    )


def load_example_corpus() -> pd.DataFrame:
    """
    Load the small labeled movie-review corpus shipped with the package.
    """
    source = (
        resources.files("textasdata.data")
        .joinpath("resources")
        .joinpath(EXAMPLE_CORPUS_FILENAME)
    )
    with source.open("r", encoding="utf-8") as f:
        df = pd.read_csv(f)
    return prepare_labeled_frame(df)
