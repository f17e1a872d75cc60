"""
Run configuration and utility helpers.

This module centralizes common functionality used across the project:

- loading YAML configuration files (config/run.yaml and friends)
- ensuring directories exist before writing files
- setting random seeds for reproducibility
- constructing loggers that respect config/logging settings

All pipelines (keyword, lexicon, classifier, LLM, topics) rely on these
utilities.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Any, Dict, Iterable, Optional

import numpy as np
import yaml

from textasdata.errors import ConfigurationError


DEFAULT_RUN_CONFIG_PATH = "config/run.yaml"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_yaml_config(
    path: str,
    required_sections: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.
    required_sections : Iterable[str]
        Top-level keys that must be present.

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    ConfigurationError
        If the file does not exist, is empty, or misses a required section.
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if not isinstance(cfg, dict):
        raise ConfigurationError(f"Config file is empty or invalid: {path}")

    for section in required_sections:
        if section not in cfg:
            raise ConfigurationError(f'Missing "{section}" section in config: {path}')

    return cfg


def load_run_config(
    config_path: str = DEFAULT_RUN_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load and return the run configuration dictionary.

    The run config holds sections such as "general", "paths" and
    "logging". We keep this permissive: downstream code will access the
    keys it needs with sensible defaults.
    """
    return load_yaml_config(config_path)


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    """
    Ensure that a directory exists (create it if necessary).
    """
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


# ---------------------------------------------------------------------------
# Reproducibility utilities
# ---------------------------------------------------------------------------


def seed_everything(seed: int = 42) -> None:
    """
    Seed Python and NumPy RNGs for reproducible runs.

    scikit-learn estimators receive their own ``random_state`` from the
    model config, so this only covers ad-hoc sampling.
    """
    random.seed(seed)
    np.random.seed(seed)


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


def _parse_log_level(level_str: str) -> int:
    """
    Convert a string log level into a logging module constant.

    Parameters
    ----------
    level_str : str
        One of: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL" (case-insensitive).

    Returns
    -------
    int
        Corresponding logging level.
    """
    level_str = (level_str or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level_str, logging.INFO)


def get_logger(
    name: str,
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Construct and return a logger that respects the logging section of
    the run config.

    Parameters
    ----------
    name : str
        Logger name.
    config : Dict[str, Any]
        Run configuration.
    log_file_suffix : Optional[str]
        Optional suffix appended to the log file name (e.g., "lexicon", "llm").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # If the logger already has handlers, assume it's already configured.
    if logger.handlers:
        return logger

    logging_cfg = config.get("logging", {}) or {}
    paths_cfg = config.get("paths", {}) or {}

    level = _parse_log_level(logging_cfg.get("level", "INFO"))
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if bool(logging_cfg.get("to_file", False)):
        logs_dir = paths_cfg.get("logs_dir", "outputs/logs")
        ensure_dir_exists(logs_dir)

        file_prefix = logging_cfg.get("file_prefix", "textasdata")
        if log_file_suffix:
            filename = f"{file_prefix}_{log_file_suffix}.log"
        else:
            filename = f"{file_prefix}.log"

        file_handler = logging.FileHandler(
            os.path.join(logs_dir, filename), encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
