"""
Model adapters.

This subpackage contains:
- scikit-learn classifier builders and a vocabulary-checking adapter
- LDA topic modeling on document-term matrices
- a zero-shot labeler backed by a remote chat-completion endpoint.
"""
