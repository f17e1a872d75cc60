"""
Text normalization and feature extraction utilities.

This subpackage includes:
- text normalization, cleaning, tokenization, stopword removal and stemming
- keyword matching
- lexicon (dictionary) polarity scoring
- document-term matrices built on a shared vocabulary
- dependency-parse based semantic-role motifs.
"""
