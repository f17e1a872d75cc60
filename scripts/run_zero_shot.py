"""
Zero-shot sentiment labeling with an LLM.

Requires the API key environment variable named in config/llm.yaml
(OPENAI_API_KEY by default). Documents the model cannot label are
reported as unscored and do not count towards the accuracy.

Usage (from the project root):

    OPENAI_API_KEY=... python -m scripts.run_zero_shot

or:

    OPENAI_API_KEY=... python scripts/run_zero_shot.py
"""

from __future__ import annotations

from textasdata.pipelines.zero_shot import run_llm_pipeline
from textasdata.utils.cli import base_parser, run_or_exit


def main() -> None:
    parser = base_parser("Zero-shot sentiment labeling with a chat-completion model.")
    parser.add_argument(
        "--llm-config",
        type=str,
        default="config/llm.yaml",
        help="Path to LLM config YAML (default: config/llm.yaml).",
    )
    args = parser.parse_args()

    def body() -> None:
        summary = run_llm_pipeline(
            data_config_path=args.data_config,
            llm_config_path=args.llm_config,
            run_config_path=args.run_config,
        )
        print(f"Scored {summary['n_scored']}/{summary['n_documents']} documents.")
        if summary["accuracy_pct"] is not None:
            print(f"Zero-shot accuracy: {summary['accuracy_pct']:.2f}%")
        print(summary["predictions"].to_string(index=False))

    run_or_exit("run_zero_shot", args.run_config, body)


if __name__ == "__main__":
    main()
