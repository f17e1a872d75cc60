"""
Zero-shot sentiment labeling with an LLM.

The client is built (and its credentials checked) before any document is
sent, so a missing API key stops the run immediately. Documents the
model could not label are reported as unscored and excluded from the
accuracy, which is computed over the scored documents only.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd

from textasdata.data.datasets import DEFAULT_DATA_CONFIG_PATH
from textasdata.evaluation.metrics import evaluate_partial
from textasdata.models.llm import (
    DEFAULT_LLM_CONFIG_PATH,
    ChatCompletionClient,
    ZeroShotLabeler,
    load_llm_config,
)
from textasdata.pipelines.common import start_run
from textasdata.utils.runtime import DEFAULT_RUN_CONFIG_PATH


def run_llm_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    llm_config_path: str = DEFAULT_LLM_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    client: Optional[Any] = None,
    corpus: Optional[pd.DataFrame] = None,
) -> Dict[str, Any]:
    """
    Label the test split with a chat-completion model.

    Parameters
    ----------
    data_config_path, llm_config_path, run_config_path : str
        Config file paths.
    client : Optional[Any]
        Pre-built client exposing ``complete(prompt, timeout_s=None)``.
        When None, a ChatCompletionClient is built from config/llm.yaml.
    corpus : Optional[pd.DataFrame]
        Already loaded corpus to use instead of the configured dataset.

    Returns
    -------
    Dict[str, Any]
        Coverage and accuracy numbers plus the per-document predictions
        and failures.
    """
    llm_cfg = load_llm_config(llm_config_path)
    if client is None:
        client = ChatCompletionClient.from_config(llm_cfg)
    labeler = ZeroShotLabeler.from_config(llm_cfg, client=client)

    ctx = start_run("llm", data_config_path, run_config_path, corpus=corpus)

    eval_df = ctx.test_df
    max_documents = llm_cfg.get("max_documents")
    if max_documents:
        eval_df = eval_df.head(int(max_documents))

    ctx.logger.info(
        "Labeling %d documents with %s (max_workers=%d, max_retries=%d)",
        len(eval_df),
        getattr(client, "model", type(client).__name__),
        labeler.max_workers,
        labeler.max_retries,
    )
    result = labeler.label(eval_df["text"].tolist())

    summary = evaluate_partial(result.predictions, eval_df["sentiment"].tolist())
    if summary["accuracy_pct"] is None:
        ctx.logger.warning("No document could be labeled.")
    else:
        ctx.logger.info(
            "Zero-shot accuracy: %.2f%% on %d/%d scored documents",
            summary["accuracy_pct"],
            summary["n_scored"],
            summary["n_documents"],
        )
    for failure in result.failures:
        ctx.logger.info(
            "Unscored doc_id=%s (%s): %s",
            eval_df["doc_id"].iloc[failure.index],
            failure.error,
            failure.message,
        )

    predictions = pd.DataFrame(
        {
            "doc_id": eval_df["doc_id"].tolist(),
            "sentiment": eval_df["sentiment"].tolist(),
            "predicted": pd.array(result.predictions, dtype="Int64"),
        }
    )

    return {
        "method": "llm",
        **summary,
        "predictions": predictions,
        "failures": result.failures,
    }
