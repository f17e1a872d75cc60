"""
Data loading and splitting utilities.

This subpackage provides:
- functions to load a labeled text table (``text`` + ``sentiment``) from a
  CSV file or from the bundled example corpus
- train/test splitting with stratification.
"""
