"""
LDA topic modeling, optionally keyword-seeded via "topics.seeds" in
config/ml.yaml.

Usage (from the project root):

    python -m scripts.run_topics [--k 6] [--plot]

or:

    python scripts/run_topics.py [--k 6] [--plot]
"""

from __future__ import annotations

from textasdata.pipelines.topics import run_topic_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit


def main() -> None:
    parser = base_parser("LDA topic modeling on the configured corpus.")
    add_ml_config(parser)
    parser.add_argument("--k", type=int, default=None, help="Number of topics.")
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a top-terms bar chart under the figures directory.",
    )
    args = parser.parse_args()

    def body() -> None:
        result = run_topic_pipeline(
            data_config_path=args.data_config,
            ml_config_path=args.ml_config,
            run_config_path=args.run_config,
            n_topics=args.k,
            save_figure=args.plot,
        )
        for topic, group in result["top_terms"].groupby("topic"):
            print(f"Topic {topic}: {', '.join(group['term'])}")
        if result["figure_path"]:
            print(f"Saved {result['figure_path']}")

    run_or_exit("run_topics", args.run_config, body)


if __name__ == "__main__":
    main()
