"""
Top-level package for the text-as-data methods course material.

This package contains modules for:
- loading labeled text corpora and splitting them
- text normalization and feature extraction (keyword hits, lexicon
  scores, document-term matrices, semantic-role motifs)
- model adapters (scikit-learn classifiers, LDA topic models and a
  zero-shot LLM labeler)
- evaluation utilities and plots
- one end-to-end pipeline per technique taught in the course
"""

__version__ = "0.1.0"
