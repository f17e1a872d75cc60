"""
Keyword dictionary sentiment.

Labels every document positive when it mentions more positive than
negative keywords (config/ml.yaml, "keywords" section) and reports the
accuracy against the true labels.

Usage (from the project root):

    python -m scripts.run_keywords

or:

    python scripts/run_keywords.py
"""

from __future__ import annotations

from textasdata.pipelines.sentiment import run_keyword_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit


def main() -> None:
    parser = base_parser("Keyword dictionary sentiment classification.")
    add_ml_config(parser)
    args = parser.parse_args()

    def body() -> None:
        metrics = run_keyword_pipeline(
            data_config_path=args.data_config,
            ml_config_path=args.ml_config,
            run_config_path=args.run_config,
        )
        print(f"Keyword accuracy: {metrics['accuracy_pct']:.2f}%")

    run_or_exit("run_keywords", args.run_config, body)


if __name__ == "__main__":
    main()
