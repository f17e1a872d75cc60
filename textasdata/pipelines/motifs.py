"""
Semantic-role motif pipeline.

Parses the corpus with a spaCy pipeline and tabulates what the entities
listed in config/ml.yaml ("motifs" section) do, undergo and are
described as.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd
import spacy
from spacy.language import Language

from textasdata.data.datasets import DEFAULT_DATA_CONFIG_PATH
from textasdata.errors import ConfigurationError
from textasdata.features.semantic_roles import motifs_frame
from textasdata.models.classifiers import DEFAULT_ML_CONFIG_PATH, load_ml_config
from textasdata.pipelines.common import start_run
from textasdata.utils.runtime import DEFAULT_RUN_CONFIG_PATH


def load_spacy_model(name: str) -> Language:
    """
    Load an installed spaCy model, e.g. "en_core_web_sm".

    Raises
    ------
    ConfigurationError
        If the model package is not installed.
    """
    try:
        return spacy.load(name)
    except OSError as exc:
        raise ConfigurationError(
            f"spaCy model {name!r} is not installed; run `python -m spacy download {name}`."
        ) from exc


def run_motif_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    nlp: Optional[Language] = None,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Extract motifs for the configured entities from every document.

    Returns
    -------
    Dict[str, Any]
        "motifs" (DataFrame doc_id/entity/role/word) and "counts"
        (DataFrame of word frequencies per entity and role).
    """
    ml_cfg = load_ml_config(ml_config_path)
    motif_cfg = ml_cfg.get("motifs", {}) or {}
    entities = [str(e) for e in motif_cfg.get("entities", [])]
    if not entities:
        raise ConfigurationError("motifs.entities must list at least one entity.")

    if nlp is None:
        nlp = load_spacy_model(str(motif_cfg.get("spacy_model", "en_core_web_sm")))

    ctx = start_run(
        "motifs", data_config_path, run_config_path, split=False, corpus=corpus, require_labels=False
    )

    motifs = motifs_frame(
        ctx.corpus["text"].tolist(),
        entities,
        nlp,
        doc_ids=ctx.corpus["doc_id"].tolist(),
    )
    ctx.logger.info("Extracted %d motifs for entities %s", len(motifs), entities)

    if motifs.empty:
        counts = pd.DataFrame(columns=["entity", "role", "word", "n"])
        return {"method": "motifs", "motifs": motifs, "counts": counts}

    counts = (
        motifs.groupby(["entity", "role", "word"])
        .size()
        .rename("n")
        .reset_index()
        .sort_values(["entity", "role", "n"], ascending=[True, True, False], kind="stable")
        .reset_index(drop=True)
    )
    for (entity, role), group in counts.groupby(["entity", "role"]):
        ctx.logger.info("%s / %s: %s", entity, role, ", ".join(group["word"].head(10)))

    return {"method": "motifs", "motifs": motifs, "counts": counts}
