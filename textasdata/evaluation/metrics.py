"""
Evaluation metrics for the sentiment pipelines.

This module centralizes the computation of the numbers reported in the
course material:

- accuracy as a percentage (the headline number of every method)
- precision, recall, F1-score and the confusion matrix
- accuracy over partially scored predictions (zero-shot labeling may
  leave documents unscored)

The helper functions here are used by every pipeline in
textasdata.pipelines.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    precision_recall_fscore_support,
)

from textasdata.errors import LengthMismatchError


ArrayLike = Union[Sequence[int], np.ndarray]


def _check_aligned(y_pred: Sequence[Any], y_true: Sequence[Any]) -> None:
    if len(y_pred) != len(y_true):
        raise LengthMismatchError(
            f"Predicted and true labels differ in length: {len(y_pred)} vs {len(y_true)}"
        )
    if len(y_true) == 0:
        raise ValueError("Cannot compute accuracy on zero documents.")


def accuracy_percentage(y_pred: ArrayLike, y_true: ArrayLike) -> float:
    """
    Share of positions where the prediction equals the true label, in
    percent.

    Parameters
    ----------
    y_pred : ArrayLike
        Predicted labels.
    y_true : ArrayLike
        True labels, order-aligned with y_pred.

    Returns
    -------
    float
        Accuracy in [0, 100].

    Raises
    ------
    LengthMismatchError
        If the sequences have different lengths.
    ValueError
        If both sequences are empty.
    """
    y_pred = list(y_pred)
    y_true = list(y_true)
    _check_aligned(y_pred, y_true)
    hits = sum(int(p == t) for p, t in zip(y_pred, y_true))
    return 100.0 * hits / len(y_true)


def compute_classification_metrics(
    y_true: ArrayLike,
    y_pred: ArrayLike,
    average: str = "binary",
    labels: Optional[Sequence[int]] = (0, 1),
    output_confusion_matrix: bool = True,
) -> Dict[str, Any]:
    """
    Compute standard classification metrics for a predicted label set.

    Parameters
    ----------
    y_true : ArrayLike
        Ground-truth labels (0 negative, 1 positive).
    y_pred : ArrayLike
        Predicted labels, same shape as y_true.
    average : str
        Averaging mode for precision/recall/F1 ("binary", "macro", ...).
    labels : Optional[Sequence[int]]
        Label order for the confusion matrix.
    output_confusion_matrix : bool
        If True, also compute and include the confusion matrix.

    Returns
    -------
    Dict[str, Any]
        Keys "accuracy" (fraction), "accuracy_pct", "precision", "recall",
        "f1" and optionally "confusion_matrix" (2D list, rows = true).
    """
    y_true_arr = np.asarray(y_true)
    y_pred_arr = np.asarray(y_pred)
    _check_aligned(y_pred_arr, y_true_arr)

    acc = accuracy_score(y_true_arr, y_pred_arr)
    prec, rec, f1, _ = precision_recall_fscore_support(
        y_true_arr,
        y_pred_arr,
        average=average,
        zero_division=0,
    )

    metrics: Dict[str, Any] = {
        "accuracy": float(acc),
        "accuracy_pct": 100.0 * float(acc),
        "precision": float(prec),
        "recall": float(rec),
        "f1": float(f1),
    }

    if output_confusion_matrix:
        cm = confusion_matrix(y_true_arr, y_pred_arr, labels=labels)
        metrics["confusion_matrix"] = cm.tolist()

    return metrics


def evaluate_partial(
    y_pred: Sequence[Optional[int]],
    y_true: Sequence[int],
) -> Dict[str, Any]:
    """
    Accuracy over the scored positions of a partially scored prediction
    list (None marks an unscored document).

    Returns
    -------
    Dict[str, Any]
        "n_documents", "n_scored", "n_unscored", "coverage_pct" and
        "accuracy_pct" (None when nothing was scored).
    """
    y_pred = list(y_pred)
    y_true = list(y_true)
    if len(y_pred) != len(y_true):
        raise LengthMismatchError(
            f"Predicted and true labels differ in length: {len(y_pred)} vs {len(y_true)}"
        )

    pairs = [(p, t) for p, t in zip(y_pred, y_true) if p is not None]
    n_docs = len(y_true)
    n_scored = len(pairs)

    accuracy = None
    if pairs:
        preds, trues = zip(*pairs)
        accuracy = accuracy_percentage(preds, trues)

    return {
        "n_documents": n_docs,
        "n_scored": n_scored,
        "n_unscored": n_docs - n_scored,
        "coverage_pct": 100.0 * n_scored / n_docs if n_docs else 0.0,
        "accuracy_pct": accuracy,
    }
