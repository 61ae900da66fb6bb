"""Capability matrix schemas.

Per-model capability vectors and per-task weight profiles share the same
eight dimensions. Both are loaded once from models.toml and treated as
read-only for the life of the process.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, Field

from modeltriage.schemas.classification import TaskType


class Capability(StrEnum):
    """The eight quality dimensions every model is scored on."""

    REASONING = "reasoning"
    CODE_GENERATION = "code_generation"
    DEBUGGING = "debugging"
    STRUCTURED_OUTPUT = "structured_output"
    INSTRUCTION_FOLLOWING = "instruction_following"
    SPEED = "speed"
    COST_EFFICIENCY = "cost_efficiency"
    RECENCY_STRENGTH = "recency_strength"


CAPABILITY_LABELS: dict[Capability, str] = {
    Capability.REASONING: "Reasoning",
    Capability.CODE_GENERATION: "Code Generation",
    Capability.DEBUGGING: "Debugging",
    Capability.STRUCTURED_OUTPUT: "Structured Output",
    Capability.INSTRUCTION_FOLLOWING: "Instruction Following",
    Capability.SPEED: "Speed",
    Capability.COST_EFFICIENCY: "Cost Efficiency",
    Capability.RECENCY_STRENGTH: "Knowledge Recency",
}


class CapabilityScores(BaseModel):
    """Scores in [0, 1] for each capability dimension."""

    reasoning: float = Field(default=0.0, ge=0.0, le=1.0, description="Multi-step logic")
    code_generation: float = Field(default=0.0, ge=0.0, le=1.0, description="Writing new code")
    debugging: float = Field(default=0.0, ge=0.0, le=1.0, description="Error analysis")
    structured_output: float = Field(
        default=0.0, ge=0.0, le=1.0, description="JSON, tables, strict formats"
    )
    instruction_following: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Adherence to constraints"
    )
    speed: float = Field(default=0.0, ge=0.0, le=1.0, description="Response latency")
    cost_efficiency: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Cost per quality unit"
    )
    recency_strength: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Knowledge cutoff freshness"
    )

    def get(self, capability: Capability) -> float:
        """Return the score for a single dimension."""
        return getattr(self, capability.value)


class TaskWeightProfile(CapabilityScores):
    """Relative importance of each capability for one task type.

    Weights are not required to sum to 1; the scoring engine normalizes.
    """


class ModelProfile(BaseModel):
    """A candidate model and its capability vector."""

    id: str = Field(description="Provider model identifier (e.g. 'gpt-5.2')")
    display_name: str = Field(description="Human-friendly model name")
    provider: str = Field(description="Provider name (e.g. 'OpenAI', 'Anthropic')")
    capabilities: CapabilityScores = Field(
        default_factory=CapabilityScores, description="Capability vector"
    )


class CapabilityMatrix(BaseModel):
    """All model profiles plus the task weight table.

    Constructed once at start-up by the registry loader and injected into
    the scoring engine and router.
    """

    models: dict[str, ModelProfile] = Field(
        default_factory=dict, description="Model profiles keyed by model id"
    )
    task_weights: dict[TaskType, TaskWeightProfile] = Field(
        default_factory=dict, description="Weight profile per task type"
    )

    def weights_for(self, task_type: TaskType) -> TaskWeightProfile:
        """Weight profile for a task type, falling back to ``general``."""
        profile = self.task_weights.get(task_type)
        if profile is None:
            profile = self.task_weights.get(TaskType.GENERAL, TaskWeightProfile())
        return profile

    def profile(self, model_id: str) -> ModelProfile | None:
        return self.models.get(model_id)

    def covers(self, model_ids: Iterable[str]) -> bool:
        """True when every id has a profile and at least one id was given."""
        ids = list(model_ids)
        return bool(ids) and all(model_id in self.models for model_id in ids)

    def profiles_for(self, model_ids: Iterable[str]) -> list[ModelProfile]:
        """Profiles for the given ids, skipping ids without capability data."""
        return [self.models[m] for m in model_ids if m in self.models]
