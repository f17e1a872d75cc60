"""
Exception hierarchy for the text-as-data pipelines.

Errors fall in three groups:

- fatal configuration errors (missing config/input files, missing
  credentials), which abort a run
- data-shape errors (bad input tables, train/evaluation vocabulary
  mismatch), raised before any scoring starts
- per-document scoring errors, which the zero-shot labeler records and
  skips without aborting the batch.
"""

from __future__ import annotations


class TextAsDataError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(TextAsDataError):
    """A config file, input file or credential is missing or invalid."""


class DataValidationError(TextAsDataError):
    """Input data does not have the expected shape or content."""


class ColumnMismatchError(DataValidationError):
    """Two document-term matrices were built on different vocabularies."""


class LengthMismatchError(DataValidationError, ValueError):
    """Predicted and true label sequences have different lengths."""


class NotFittedError(TextAsDataError):
    """A scorer or adapter was used before being fitted."""


class DocumentScoringError(TextAsDataError):
    """Scoring a single document failed."""


class TransientRequestError(DocumentScoringError):
    """
    A remote request failed in a way that may succeed on retry
    (timeout, connection error, rate limiting, server error).
    """


class MalformedResponseError(DocumentScoringError):
    """The remote model answered with something other than a label."""
