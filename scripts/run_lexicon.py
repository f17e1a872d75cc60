"""
Lexicon sentiment.

Scores documents with the configured polarity lexicon, fits the
threshold on the training split and reports test accuracy. With
--plot, also saves the confusion matrix of the test split.

Usage (from the project root):

    python -m scripts.run_lexicon [--plot]

or:

    python scripts/run_lexicon.py [--plot]
"""

from __future__ import annotations

import os

from textasdata.pipelines.sentiment import run_lexicon_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit


def main() -> None:
    parser = base_parser("Lexicon (dictionary) sentiment classification.")
    add_ml_config(parser)
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a confusion-matrix figure under the figures directory.",
    )
    args = parser.parse_args()

    def body() -> None:
        metrics = run_lexicon_pipeline(
            data_config_path=args.data_config,
            ml_config_path=args.ml_config,
            run_config_path=args.run_config,
        )
        print(
            f"Lexicon '{metrics['lexicon']}' accuracy: {metrics['accuracy_pct']:.2f}% "
            f"(threshold {metrics['threshold']:.4f})"
        )

        if args.plot:
            from textasdata.evaluation.plots import plot_confusion_matrix
            from textasdata.utils.runtime import ensure_dir_exists, load_run_config

            figures_dir = load_run_config(args.run_config)["paths"]["figures_dir"]
            ensure_dir_exists(figures_dir)
            out_path = os.path.join(figures_dir, "lexicon_confusion_matrix.png")
            plot_confusion_matrix(metrics["confusion_matrix"], out_path=out_path, show=False)
            print(f"Saved {out_path}")

    run_or_exit("run_lexicon", args.run_config, body)


if __name__ == "__main__":
    main()
