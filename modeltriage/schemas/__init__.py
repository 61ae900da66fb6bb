"""ModelTriage schema definitions.

All Pydantic v2 models shared by the classifier, scoring engine and router.
"""

from modeltriage.schemas.capabilities import (
    CAPABILITY_LABELS,
    Capability,
    CapabilityMatrix,
    CapabilityScores,
    ModelProfile,
    TaskWeightProfile,
)
from modeltriage.schemas.classification import (
    ClassifierConfidence,
    FileSignals,
    InputSignals,
    PromptClassification,
    StakesLevel,
    TaskType,
)
from modeltriage.schemas.routing import (
    ConfidenceLevel,
    DecisionConfidence,
    Intent,
    KeyFactor,
    RouterConfig,
    RoutingDecision,
    RoutingStrategy,
    ScoringResult,
    TierModels,
)

__all__ = [
    "CAPABILITY_LABELS",
    "Capability",
    "CapabilityMatrix",
    "CapabilityScores",
    "ClassifierConfidence",
    "ConfidenceLevel",
    "DecisionConfidence",
    "FileSignals",
    "InputSignals",
    "Intent",
    "KeyFactor",
    "ModelProfile",
    "PromptClassification",
    "RouterConfig",
    "RoutingDecision",
    "RoutingStrategy",
    "ScoringResult",
    "StakesLevel",
    "TaskType",
    "TaskWeightProfile",
    "TierModels",
]
