"""
Evaluation utilities.

This subpackage offers:
- accuracy percentage and standard classification metrics
- evaluation of partially scored prediction sets
- plotting helpers for topics, score distributions and confusion matrices.
"""
