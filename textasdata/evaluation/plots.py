"""
Plotting utilities for the course pipelines.

This module provides helpers to visualize:

- the top terms of each LDA topic
- the distribution of lexicon scores with the fitted threshold
- confusion matrices for any binary classifier

Every function returns the Matplotlib (fig, ax/axes), optionally saves
the figure to ``out_path`` and only calls plt.show() when asked to.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def _finish(fig, out_path: Optional[str], show: bool) -> None:
    fig.tight_layout()

    if out_path is not None:
        fig.savefig(out_path, dpi=300, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)


# ---------------------------------------------------------------------------
# Topic models
# ---------------------------------------------------------------------------


def plot_top_terms(
    top_terms: pd.DataFrame,
    n_cols: int = 3,
    figsize_per_panel: Tuple[float, float] = (4.0, 3.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot one horizontal bar chart of term weights per topic.

    Parameters
    ----------
    top_terms : pd.DataFrame
        Long table with columns ["topic", "term", "weight"], as produced
        by TopicModelResult.top_terms().
    n_cols : int
        Number of panels per row.
    figsize_per_panel : Tuple[float, float]
        Size of a single panel in inches.
    title : Optional[str]
        Figure title.
    out_path : Optional[str]
        If provided, save the figure to this path (e.g., PNG).
    show : bool
        If True, call plt.show(). If False, just return the figure/axes.

    Returns
    -------
    (fig, axes)
        Matplotlib Figure and a flat array of Axes.
    """
    missing = {"topic", "term", "weight"} - set(top_terms.columns)
    if missing:
        raise ValueError(f"top_terms is missing column(s): {sorted(missing)}")
    if top_terms.empty:
        raise ValueError("top_terms is empty; nothing to plot.")

    topics = sorted(top_terms["topic"].unique())
    n_cols = max(1, min(n_cols, len(topics)))
    n_rows = math.ceil(len(topics) / n_cols)

    fig, axes = plt.subplots(
        n_rows,
        n_cols,
        figsize=(figsize_per_panel[0] * n_cols, figsize_per_panel[1] * n_rows),
        squeeze=False,
    )
    axes = axes.ravel()

    for ax, topic in zip(axes, topics):
        sub = top_terms[top_terms["topic"] == topic].sort_values("weight")
        ax.barh(sub["term"].astype(str), sub["weight"])
        ax.set_title(f"Topic {topic}")
        ax.set_xlabel("Weight")

    # Hide unused panels
    for ax in axes[len(topics):]:
        ax.set_visible(False)

    if title is not None:
        fig.suptitle(title)

    _finish(fig, out_path, show)
    return fig, axes


# ---------------------------------------------------------------------------
# Lexicon scores
# ---------------------------------------------------------------------------


def plot_score_distribution(
    scores: Sequence[float],
    threshold: Optional[float] = None,
    labels: Optional[Sequence[int]] = None,
    bins: int = 30,
    figsize: Tuple[float, float] = (8.0, 5.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Histogram of lexicon scores, split by true label when given, with a
    vertical line at the classification threshold.
    """
    scores = np.asarray(scores, dtype=float)
    if scores.size == 0:
        raise ValueError("scores is empty; nothing to plot.")

    fig, ax = plt.subplots(figsize=figsize)

    if labels is None:
        ax.hist(scores, bins=bins, alpha=0.8)
    else:
        labels = np.asarray(labels)
        if labels.shape[0] != scores.shape[0]:
            raise ValueError("scores and labels must have the same length.")
        for value, name in ((0, "negative"), (1, "positive")):
            ax.hist(scores[labels == value], bins=bins, alpha=0.6, label=name)
        ax.legend()

    if threshold is not None:
        ax.axvline(threshold, color="black", linestyle="--", label="threshold")
        ax.text(threshold, ax.get_ylim()[1] * 0.95, f" {threshold:.3f}", va="top")

    ax.set_xlabel("Lexicon score")
    ax.set_ylabel("Documents")
    ax.set_title(title or "Distribution of lexicon scores")

    _finish(fig, out_path, show)
    return fig, ax


# ---------------------------------------------------------------------------
# Confusion matrix plots
# ---------------------------------------------------------------------------


def plot_confusion_matrix(
    cm: np.ndarray,
    labels: Sequence[str] = ("negative", "positive"),
    normalize: bool = False,
    figsize: Tuple[float, float] = (6.0, 5.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a confusion matrix as a heatmap.

    Parameters
    ----------
    cm : np.ndarray
        Confusion matrix of shape (n_classes, n_classes), where
        rows correspond to true labels and columns to predicted labels.
    labels : Sequence[str]
        Class labels in the order corresponding to the confusion matrix.
    normalize : bool
        If True, normalize each row to sum to 1.0.
    figsize : Tuple[float, float]
        Figure size in inches.
    title : Optional[str]
        Plot title. If None, a default is chosen based on `normalize`.
    out_path : Optional[str]
        If provided, save the figure to this path.
    show : bool
        If True, show the plot; otherwise, just return fig/ax.

    Returns
    -------
    (fig, ax)
        Matplotlib Figure and Axes objects.
    """
    cm = np.asarray(cm)
    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValueError("Confusion matrix must be a square 2D array.")

    n_classes = cm.shape[0]
    if len(labels) != n_classes:
        raise ValueError(
            f"Number of labels ({len(labels)}) does not match CM size ({n_classes})."
        )

    if normalize:
        row_sums = cm.sum(axis=1, keepdims=True)
        cm_display = np.divide(
            cm, row_sums, out=np.zeros(cm.shape, dtype=float), where=row_sums != 0
        )
        fmt = ".2f"
    else:
        cm_display = cm
        fmt = "d"

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(cm_display, interpolation="nearest", cmap="Blues")
    fig.colorbar(im, ax=ax)

    ax.set(
        xticks=np.arange(n_classes),
        yticks=np.arange(n_classes),
        xticklabels=labels,
        yticklabels=labels,
        ylabel="True label",
        xlabel="Predicted label",
    )

    if title is None:
        title = "Normalized confusion matrix" if normalize else "Confusion matrix"
    ax.set_title(title)

    # Annotate each cell
    thresh = cm_display.max() / 2.0 if cm_display.size > 0 else 0.5
    for i in range(n_classes):
        for j in range(n_classes):
            value = cm_display[i, j]
            ax.text(
                j,
                i,
                format(value, fmt),
                ha="center",
                va="center",
                color="white" if value > thresh else "black",
            )

    _finish(fig, out_path, show)
    return fig, ax
