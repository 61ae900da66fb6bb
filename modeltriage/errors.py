"""Exception hierarchy for the routing core.

Every error raised here is a programming or configuration defect, not a
runtime condition to recover from. Callers wrap the boundary in their own
fallback policy.
"""

from __future__ import annotations


class TriageError(Exception):
    """Base exception for all ModelTriage errors."""


class ConfigurationError(TriageError):
    """Raised when the router configuration cannot be honoured."""


class NoCandidatesError(ConfigurationError):
    """Raised when the scoring engine is handed an empty candidate set."""


class UnknownModelError(TriageError):
    """Raised when a model id is not part of the candidate set."""
