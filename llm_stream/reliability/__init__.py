"""Reliability layer for transport error handling.

This layer handles:
- Classification of transport failures
- Human-readable failure messages reported through on_error
"""

from .error_classifier import ErrorCategory, ErrorClassification, ErrorClassifier

__all__ = [
    "ErrorClassifier",
    "ErrorCategory",
    "ErrorClassification",
]
