"""Decision routing for ModelTriage.

Capability-weighted scoring, the keyword-priority fallback and the
optional routing cache.
"""

from modeltriage.routing.cache import RoutingCache, normalize_prompt
from modeltriage.routing.engine import DecisionRouter, get_default_router, route
from modeltriage.routing.scoring import ModelScore, ScoringEngine, compute_confidence

__all__ = [
    "DecisionRouter",
    "ModelScore",
    "RoutingCache",
    "ScoringEngine",
    "compute_confidence",
    "get_default_router",
    "normalize_prompt",
    "route",
]
