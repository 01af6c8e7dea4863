"""
Classification Submodule

Exports the combination matching engine.
"""

from .matcher import UNCLASSIFIED, ClassificationResult, CombinationMatcher

__all__ = ["CombinationMatcher", "ClassificationResult", "UNCLASSIFIED"]
