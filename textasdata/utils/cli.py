"""
Argument and error handling shared by the scripts in scripts/.
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable

from textasdata.errors import ConfigurationError, DataValidationError
from textasdata.utils.runtime import get_logger, load_run_config


def base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--run-config",
        type=str,
        default="config/run.yaml",
        help="Path to run config YAML (default: config/run.yaml).",
    )
    return parser


def add_ml_config(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ml-config",
        type=str,
        default="config/ml.yaml",
        help="Path to ML config YAML (default: config/ml.yaml).",
    )


def run_or_exit(name: str, run_config_path: str, fn: Callable[[], None]) -> None:
    """
    Run a script body, turning configuration and data-shape errors into a
    logged message and a non-zero exit code.
    """
    try:
        fn()
    except (ConfigurationError, DataValidationError) as exc:
        try:
            logger = get_logger(name=name, config=load_run_config(run_config_path))
            logger.error("%s: %s", type(exc).__name__, exc)
        except ConfigurationError:
            print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        sys.exit(1)
