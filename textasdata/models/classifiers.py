"""
Supervised classifier builders and adapter.

This module provides helper functions to construct the classifiers used
on document-term matrices:

- Random Forest (the course default)
- Logistic Regression
- Naive Bayes

Hyperparameters are read from config/ml.yaml so they can be tuned
without modifying code. ClassifierAdapter wraps a fitted estimator
together with the vocabulary it was trained on, and refuses to predict
on a matrix built with any other vocabulary.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import BernoulliNB, MultinomialNB

from textasdata.errors import ColumnMismatchError, ConfigurationError, DataValidationError, NotFittedError
from textasdata.features.dtm import DocumentTermMatrix, Vocabulary
from textasdata.utils.runtime import load_yaml_config


DEFAULT_ML_CONFIG_PATH = "config/ml.yaml"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_ml_config(config_path: str = DEFAULT_ML_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the ML configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the ML YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with at least "general" and "ml_models" sections.

    Raises
    ------
    ConfigurationError
        If the file is missing, empty, or misses a required section.
    """
    return load_yaml_config(config_path, required_sections=("general", "ml_models"))


# ---------------------------------------------------------------------------
# Model builder helpers
# ---------------------------------------------------------------------------


def _class_weight_or_none(use_balanced: bool) -> Any:
    return "balanced" if use_balanced else None


def _model_cfg(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return (cfg.get("ml_models", {}) or {}).get(name, {}) or {}


def _random_state(cfg: Dict[str, Any]) -> int:
    return int((cfg.get("general", {}) or {}).get("random_state", 42))


def build_random_forest(cfg: Dict[str, Any], use_balanced: bool = False) -> RandomForestClassifier:
    mcfg = _model_cfg(cfg, "random_forest")
    return RandomForestClassifier(
        n_estimators=int(mcfg.get("n_estimators", 500)),
        criterion=str(mcfg.get("criterion", "gini")),
        max_depth=mcfg.get("max_depth", None),
        min_samples_split=int(mcfg.get("min_samples_split", 2)),
        min_samples_leaf=int(mcfg.get("min_samples_leaf", 1)),
        max_features=mcfg.get("max_features", "sqrt"),
        n_jobs=mcfg.get("n_jobs", None),
        random_state=_random_state(cfg),
        class_weight=_class_weight_or_none(use_balanced),
    )


def build_logistic_regression(cfg: Dict[str, Any], use_balanced: bool = False) -> LogisticRegression:
    mcfg = _model_cfg(cfg, "logistic_regression")
    return LogisticRegression(
        C=float(mcfg.get("C", 1.0)),
        solver=str(mcfg.get("solver", "liblinear")),
        max_iter=int(mcfg.get("max_iter", 1000)),
        fit_intercept=bool(mcfg.get("fit_intercept", True)),
        random_state=_random_state(cfg),
        class_weight=_class_weight_or_none(use_balanced),
    )


def build_naive_bayes(cfg: Dict[str, Any], use_balanced: bool = False):
    """
    Build a Naive Bayes classifier instance.

    Depending on ml_models.naive_bayes.type, we return either
    MultinomialNB or BernoulliNB. For raw term counts, MultinomialNB is
    the usual choice. Class weighting does not apply.
    """
    mcfg = _model_cfg(cfg, "naive_bayes")
    nb_type = str(mcfg.get("type", "multinomial")).lower()
    alpha = float(mcfg.get("alpha", 1.0))
    fit_prior = bool(mcfg.get("fit_prior", True))

    if nb_type == "bernoulli":
        return BernoulliNB(alpha=alpha, fit_prior=fit_prior)
    return MultinomialNB(alpha=alpha, fit_prior=fit_prior)


_BUILDERS = {
    "random_forest": build_random_forest,
    "logistic_regression": build_logistic_regression,
    "naive_bayes": build_naive_bayes,
}


def build_classifier(name: str, cfg: Dict[str, Any]):
    """
    Build the estimator registered under ``name`` from the ML config.

    Raises
    ------
    ConfigurationError
        If the name is unknown.
    """
    builder = _BUILDERS.get(name)
    if builder is None:
        raise ConfigurationError(
            f"Unknown classifier {name!r}. Available: {sorted(_BUILDERS)}"
        )
    use_balanced = bool((cfg.get("general", {}) or {}).get("use_class_weight_balanced", False))
    return builder(cfg, use_balanced)


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class ClassifierAdapter:
    """
    Fit/predict wrapper that pins an estimator to its training vocabulary.

    Parameters
    ----------
    estimator : object
        Unfitted scikit-learn estimator.
    """

    def __init__(self, estimator: Any):
        self.estimator = estimator
        self.vocabulary: Optional[Vocabulary] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], name: Optional[str] = None) -> "ClassifierAdapter":
        name = name or (cfg.get("classifier", {}) or {}).get("name", "random_forest")
        return cls(build_classifier(name, cfg))

    def fit(self, dtm: DocumentTermMatrix, labels: Sequence[int]) -> "ClassifierAdapter":
        y = np.asarray(labels).ravel()
        if y.shape[0] != dtm.n_documents:
            raise DataValidationError(
                f"Training matrix has {dtm.n_documents} rows but {y.shape[0]} labels were given."
            )
        if dtm.matrix.shape[1] != len(dtm.vocabulary):
            raise DataValidationError(
                f"Training matrix has {dtm.matrix.shape[1]} columns for a vocabulary "
                f"of {len(dtm.vocabulary)} terms."
            )
        self.estimator.fit(dtm.matrix, y.astype(int))
        self.vocabulary = dtm.vocabulary
        return self

    def check_columns(self, dtm: DocumentTermMatrix) -> None:
        """Validate an evaluation matrix against the training vocabulary."""
        if self.vocabulary is None:
            raise NotFittedError("ClassifierAdapter is not fitted; call fit() first.")
        if dtm.vocabulary.terms != self.vocabulary.terms:
            raise ColumnMismatchError(
                "Evaluation matrix was not built on the training vocabulary "
                f"({len(dtm.vocabulary)} vs {len(self.vocabulary)} terms)."
            )
        if dtm.matrix.shape[1] != len(self.vocabulary):
            raise DataValidationError(
                f"Evaluation matrix has {dtm.matrix.shape[1]} columns, "
                f"expected {len(self.vocabulary)}."
            )

    def predict(self, dtm: DocumentTermMatrix) -> np.ndarray:
        self.check_columns(dtm)
        return np.asarray(self.estimator.predict(dtm.matrix)).astype(int)

    def feature_importances(self, top_n: int = 20) -> pd.Series:
        """
        Most important terms for tree ensembles (or largest absolute
        coefficients for linear models), as a pandas Series.
        """
        if self.vocabulary is None:
            raise NotFittedError("ClassifierAdapter is not fitted; call fit() first.")
        if hasattr(self.estimator, "feature_importances_"):
            values = np.asarray(self.estimator.feature_importances_)
        elif hasattr(self.estimator, "coef_"):
            values = np.abs(np.asarray(self.estimator.coef_)).ravel()
        else:
            raise TypeError(
                f"{type(self.estimator).__name__} exposes no feature importances."
            )
        series = pd.Series(values, index=list(self.vocabulary.terms), name="importance")
        return series.sort_values(ascending=False, kind="stable").head(top_n)
