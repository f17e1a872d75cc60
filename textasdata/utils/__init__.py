"""
Shared utility functions.

This subpackage includes:
- run configuration loading
- seeding helpers
- directory management
- argument parsing and error handling for the scripts
- logger construction used across the project.
"""
