"""Routing decision schemas for the Decision Router.

Defines the routing strategy enum, the ScoringResult produced by the
scoring engine, and the RoutingDecision that records which model was
selected for a prompt and why.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from modeltriage.schemas.classification import PromptClassification


class RoutingStrategy(StrEnum):
    """Available router variants.

    ``AUTO`` picks capability scoring when every candidate has capability
    data and falls back to keyword priority otherwise.
    """

    AUTO = "auto"
    CAPABILITY_SCORED = "capability_scored"
    KEYWORD_PRIORITY = "keyword_priority"


class ConfidenceLevel(StrEnum):
    """Scoring engine confidence band."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class DecisionConfidence(StrEnum):
    """Confidence attached to a routing decision."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Intent(StrEnum):
    """Coarse intent recorded for analytics consumers."""

    CODING = "coding"
    WRITING = "writing"
    ANALYSIS = "analysis"
    UNKNOWN = "unknown"


class KeyFactor(BaseModel):
    """One capability that drove the recommendation."""

    label: str = Field(description="Capability display label")
    score: int = Field(ge=0, le=100, description="Model's score on this capability")
    short_reason: str = Field(description="Short phrase explaining the factor")


class ScoringResult(BaseModel):
    """Expected-success recommendation for a classified prompt."""

    recommended_model_id: str = Field(description="Winning model, always a candidate")
    expected_success: int = Field(ge=0, le=100, description="Expected success, 0-100")
    confidence: ConfidenceLevel = Field(description="Confidence in the recommendation")
    key_factors: list[KeyFactor] = Field(
        min_length=3, max_length=4, description="Top contributing capabilities"
    )
    short_why: str = Field(description="One-sentence justification")


class TierModels(BaseModel):
    """Model ids used by the keyword-priority router and the attachment rule."""

    fast: str = Field(default="gpt-5-mini", description="Short, simple prompts")
    balanced: str = Field(
        default="gemini-3-pro-preview", description="General-purpose fallback"
    )
    quality: str = Field(
        default="gpt-5.2", description="Analysis, creative and long prompts"
    )
    code: str = Field(
        default="claude-sonnet-4-5-20250929", description="Code and technical prompts"
    )


class RouterConfig(BaseModel):
    """Decision router configuration.

    Loaded from defaults.toml. Candidates default to every model in the
    capability matrix when left empty.
    """

    strategy: RoutingStrategy = Field(
        default=RoutingStrategy.AUTO, description="Router variant"
    )
    candidates: list[str] = Field(
        default_factory=list, description="Candidate model ids (empty = all profiled models)"
    )
    tiers: TierModels = Field(
        default_factory=TierModels, description="Tier models for keyword routing"
    )
    cache_size: int = Field(
        default=0, ge=0, description="Routing cache entries (0 disables caching)"
    )
    cache_ttl: float = Field(
        default=600.0, gt=0.0, description="Routing cache entry lifetime in seconds"
    )


class RoutingDecision(BaseModel):
    """Record of a routing decision for a single prompt.

    ``model``, ``reason`` and ``confidence`` form the simple outbound shape;
    the remaining fields serve analytics consumers.
    """

    model: str = Field(description="Selected model id")
    reason: str = Field(description="Human-readable explanation of the selection")
    confidence: DecisionConfidence = Field(description="Confidence band")
    strategy: RoutingStrategy | None = Field(
        default=None, description="Router variant that decided (None for overrides)"
    )
    intent: Intent = Field(default=Intent.UNKNOWN, description="Coarse intent")
    category: str = Field(default="", description="Routing category label")
    confidence_score: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Numeric confidence for analytics"
    )
    classification: PromptClassification | None = Field(
        default=None, description="Classifier output, when the prompt was classified"
    )
    scoring: ScoringResult | None = Field(
        default=None, description="Scoring metadata for the selected model"
    )

    def summary(self) -> dict[str, str]:
        """The simple ``{model, reason, confidence}`` shape."""
        return {
            "model": self.model,
            "reason": self.reason,
            "confidence": self.confidence.value,
        }
