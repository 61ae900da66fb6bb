"""ModelTriage — deterministic prompt classification and model routing."""

__version__ = "0.1.0"

from .classifier import PromptClassifier, classify_prompt
from .errors import (
    ConfigurationError,
    NoCandidatesError,
    TriageError,
    UnknownModelError,
)
from .registry import load_capability_matrix, load_router_config
from .routing import DecisionRouter, ScoringEngine, route

__all__ = [
    "ConfigurationError",
    "DecisionRouter",
    "NoCandidatesError",
    "PromptClassifier",
    "ScoringEngine",
    "TriageError",
    "UnknownModelError",
    "classify_prompt",
    "load_capability_matrix",
    "load_router_config",
    "route",
]
