"""
Train/test splitting utilities.

This module provides a simple interface to split a pre-loaded DataFrame
into training and evaluation sets, using the configuration defined in
config/data.yaml ("split" section).

We rely on scikit-learn's train_test_split and support:
- stratified splitting based on the sentiment column
- configurable test_size and random_state

The "doc_id" column is preserved, so predictions on either split can be
traced back to the loaded corpus.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from textasdata.data.datasets import DEFAULT_DATA_CONFIG_PATH, load_data_config
from textasdata.errors import DataValidationError


def get_split_config(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Retrieve the 'split' section from the data configuration.
    """
    cfg = load_data_config(config_path)
    return cfg["split"] or {}


def train_test_split_df(
    df: pd.DataFrame,
    label_column: str = "sentiment",
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
    split_cfg: Dict[str, Any] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split a DataFrame into train and test sets according to config/data.yaml.

    Parameters
    ----------
    df : pd.DataFrame
        Input DataFrame containing at least the label_column.
    label_column : str
        Name of the label column to use for stratification.
    config_path : str
        Path to the data YAML configuration.
    split_cfg : Dict[str, Any], optional
        Explicit split settings; when given, config_path is not read.

    Returns
    -------
    Tuple[pd.DataFrame, pd.DataFrame]
        (train_df, test_df), sorted by doc_id.

    Raises
    ------
    DataValidationError
        If the label_column is missing.
    ValueError
        If stratified splitting is requested but the label distribution
        is incompatible (e.g., only one class present).
    """
    if label_column not in df.columns:
        raise DataValidationError(
            f"Label column '{label_column}' not found in DataFrame. "
            f"Available columns: {list(df.columns)}"
        )

    if split_cfg is None:
        split_cfg = get_split_config(config_path)
    test_size = float(split_cfg.get("test_size", 0.3))
    stratify_enabled = bool(split_cfg.get("stratify", True))
    random_state = int(split_cfg.get("random_state", 42))

    stratify_labels = df[label_column] if stratify_enabled else None

    train_df, test_df = train_test_split(
        df,
        test_size=test_size,
        random_state=random_state,
        stratify=stratify_labels,
        shuffle=True,
    )

    # Keep load order within each split.
    if "doc_id" in df.columns:
        train_df = train_df.sort_values("doc_id")
        test_df = test_df.sort_values("doc_id")

    train_df = train_df.reset_index(drop=True)
    test_df = test_df.reset_index(drop=True)

    return train_df, test_df
