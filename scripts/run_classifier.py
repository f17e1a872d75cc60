"""
Supervised classification on a document-term matrix.

This script is a convenience wrapper around
`textasdata.pipelines.sentiment.run_classifier_pipeline`, which:

- loads and splits the configured dataset
- fits the vocabulary on the training split
- builds train and test document-term matrices on that vocabulary
- trains the configured classifier (random forest by default)
- reports test accuracy and the most informative terms

Usage (from the project root):

    python -m scripts.run_classifier [--model logistic_regression]

or:

    python scripts/run_classifier.py [--model logistic_regression]
"""

from __future__ import annotations

from textasdata.pipelines.sentiment import run_classifier_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit


def main() -> None:
    parser = base_parser("Supervised sentiment classification on a DTM.")
    add_ml_config(parser)
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Classifier name overriding classifier.name in the ML config.",
    )
    args = parser.parse_args()

    def body() -> None:
        metrics = run_classifier_pipeline(
            data_config_path=args.data_config,
            ml_config_path=args.ml_config,
            run_config_path=args.run_config,
            classifier_name=args.model,
        )
        print(
            f"{metrics['model']} test accuracy: {metrics['accuracy_pct']:.2f}% "
            f"(train {metrics['train_accuracy_pct']:.2f}%, {metrics['n_terms']} terms)"
        )
        if metrics["top_terms"]:
            print("Most informative terms:", ", ".join(metrics["top_terms"]))

    run_or_exit("run_classifier", args.run_config, body)


if __name__ == "__main__":
    main()
