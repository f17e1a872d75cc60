"""
End-to-end runner for the sentiment methods.

This script runs every labeled-data method on the configured corpus and
prints one comparison table:

1) Keyword dictionary
2) Lexicon with a threshold fitted on the training split
3) Supervised classifier on a document-term matrix
4) Zero-shot LLM labeling (only with --with-llm; needs an API key)

Usage (from the project root):

    python -m scripts.run_all [--with-llm]

or:

    python scripts/run_all.py [--with-llm]
"""

from __future__ import annotations

import pandas as pd

from textasdata.pipelines.sentiment import (
    run_classifier_pipeline,
    run_keyword_pipeline,
    run_lexicon_pipeline,
)
from textasdata.pipelines.zero_shot import run_llm_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit
from textasdata.utils.runtime import get_logger, load_run_config


def main() -> None:
    parser = base_parser("Run and compare all sentiment methods.")
    add_ml_config(parser)
    parser.add_argument(
        "--llm-config",
        type=str,
        default="config/llm.yaml",
        help="Path to LLM config YAML (default: config/llm.yaml).",
    )
    parser.add_argument(
        "--with-llm",
        action="store_true",
        help="Also run zero-shot LLM labeling.",
    )
    args = parser.parse_args()

    def body() -> None:
        logger = get_logger(
            name="run_all",
            config=load_run_config(args.run_config),
            log_file_suffix="all",
        )
        common = dict(data_config_path=args.data_config, run_config_path=args.run_config)

        logger.info("=" * 80)
        logger.info("Running keyword, lexicon and classifier methods.")
        results = [
            run_keyword_pipeline(ml_config_path=args.ml_config, **common),
            run_lexicon_pipeline(ml_config_path=args.ml_config, **common),
            run_classifier_pipeline(ml_config_path=args.ml_config, **common),
        ]

        if args.with_llm:
            logger.info("=" * 80)
            logger.info("Running zero-shot LLM labeling.")
            results.append(run_llm_pipeline(llm_config_path=args.llm_config, **common))

        table = pd.DataFrame(
            [
                {
                    "method": r["method"],
                    "n_documents": r["n_documents"],
                    "accuracy_pct": r["accuracy_pct"],
                }
                for r in results
            ]
        )
        logger.info("=" * 80)
        logger.info("Accuracy by method:\n%s", table.to_string(index=False))

    run_or_exit("run_all", args.run_config, body)


if __name__ == "__main__":
    main()
