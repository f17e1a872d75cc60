"""
End-to-end pipelines, one per technique:

- keyword dictionary sentiment
- lexicon sentiment with a threshold fitted on the training split
- supervised classification on a document-term matrix
- zero-shot labeling with an LLM
- LDA topic modeling
- semantic-role motifs.
"""
