"""Deterministic prompt classifier and its pattern library."""

from modeltriage.classifier.engine import PromptClassifier, classify_prompt
from modeltriage.classifier.patterns import DEFAULT_PATTERNS, PatternLibrary, match_count

__all__ = [
    "DEFAULT_PATTERNS",
    "PatternLibrary",
    "PromptClassifier",
    "classify_prompt",
    "match_count",
]
