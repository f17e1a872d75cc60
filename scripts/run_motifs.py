"""
Semantic-role motifs from dependency parses.

Requires a spaCy English model (python -m spacy download en_core_web_sm).

Usage (from the project root):

    python -m scripts.run_motifs

or:

    python scripts/run_motifs.py
"""

from __future__ import annotations

from textasdata.pipelines.motifs import run_motif_pipeline
from textasdata.utils.cli import add_ml_config, base_parser, run_or_exit


def main() -> None:
    parser = base_parser("Extract action/treatment/characterization motifs.")
    add_ml_config(parser)
    args = parser.parse_args()

    def body() -> None:
        result = run_motif_pipeline(
            data_config_path=args.data_config,
            ml_config_path=args.ml_config,
            run_config_path=args.run_config,
        )
        print(result["counts"].to_string(index=False))

    run_or_exit("run_motifs", args.run_config, body)


if __name__ == "__main__":
    main()
