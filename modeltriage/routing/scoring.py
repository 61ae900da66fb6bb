"""Expected-success scoring engine.

Scores every candidate model against a prompt classification:

  base         weighted average of capability x task weight, scaled to 0-100
  adjustments  signal bonuses and penalties (code, stack trace, format,
               recency, stakes, prompt length)
  result       rounded and clamped to an integer in [0, 100]

Candidates are ranked by score, then cost efficiency, then model id, so
ties never depend on input order. The winner's confidence band, key
factors and one-line justification are derived from the ranking.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from modeltriage.errors import NoCandidatesError, UnknownModelError
from modeltriage.schemas.capabilities import (
    CAPABILITY_LABELS,
    Capability,
    CapabilityMatrix,
    CapabilityScores,
    ModelProfile,
)
from modeltriage.schemas.classification import (
    ClassifierConfidence,
    PromptClassification,
    StakesLevel,
    TaskType,
)
from modeltriage.schemas.routing import ConfidenceLevel, KeyFactor, ScoringResult

logger = logging.getLogger(__name__)

# Base score when a weight profile is all zeros
_NEUTRAL_SCORE = 50.0

# Dimensions below this weight only appear as padding in key factors
_MIN_FACTOR_WEIGHT = 0.05
_MAX_FACTORS = 4
_MIN_FACTORS = 3


@dataclass(frozen=True)
class _Adjustment:
    """Additive score change when a classification and capability test both hold."""

    applies: Callable[[PromptClassification], bool]
    qualifies: Callable[[CapabilityScores], bool]
    delta: int


_ADJUSTMENTS: tuple[_Adjustment, ...] = (
    # Bonuses: signals that line up with a model's strengths
    _Adjustment(lambda c: c.input_signals.has_code, lambda m: m.code_generation >= 0.75, 5),
    _Adjustment(lambda c: c.input_signals.has_stack_trace, lambda m: m.debugging >= 0.70, 6),
    _Adjustment(lambda c: c.input_signals.strict_format, lambda m: m.structured_output >= 0.75, 5),
    _Adjustment(lambda c: c.recency_requirement, lambda m: m.recency_strength >= 0.80, 5),
    # Penalties: risky or stale models for demanding prompts
    _Adjustment(lambda c: c.stakes == StakesLevel.HIGH, lambda m: m.reasoning < 0.70, -12),
    _Adjustment(lambda c: c.stakes == StakesLevel.MEDIUM, lambda m: m.reasoning < 0.60, -6),
    _Adjustment(lambda c: c.recency_requirement, lambda m: m.recency_strength < 0.70, -8),
    _Adjustment(
        lambda c: c.task_type in (TaskType.CODE_GEN, TaskType.DEBUG),
        lambda m: m.code_generation < 0.60,
        -8,
    ),
    # Prompt length: short asks favour fast models, long ones favour depth
    _Adjustment(lambda c: c.input_signals.concise, lambda m: m.speed < 0.50, -5),
    _Adjustment(lambda c: c.input_signals.concise, lambda m: m.speed >= 0.85, 4),
    _Adjustment(lambda c: c.input_signals.long_form, lambda m: m.reasoning >= 0.75, 6),
    _Adjustment(
        lambda c: c.input_signals.long_form, lambda m: m.instruction_following >= 0.85, 3,
    ),
    _Adjustment(lambda c: c.input_signals.long_form, lambda m: m.reasoning < 0.55, -6),
)

# Input signal that makes a capability directly relevant, with its phrase
_SIGNAL_REASONS: dict[Capability, tuple[str, str]] = {
    Capability.DEBUGGING: ("has_stack_trace", "Strong debugging support for stack traces"),
    Capability.CODE_GENERATION: ("has_code", "Handles the code in this prompt well"),
    Capability.STRUCTURED_OUTPUT: ("strict_format", "Reliable with the requested format"),
    Capability.RECENCY_STRENGTH: ("mentions_latest", "Fresh knowledge for recent topics"),
    Capability.SPEED: ("concise", "Fast turnaround for a short ask"),
    Capability.REASONING: ("long_form", "Keeps up with a detailed prompt"),
}

# (high >= 80, solid >= 60, otherwise)
_BAND_REASONS: dict[Capability, tuple[str, str, str]] = {
    Capability.REASONING: (
        "Excels at complex logic", "Solid logical reasoning", "Basic reasoning capability",
    ),
    Capability.CODE_GENERATION: (
        "Top-tier code output", "Reliable code generation", "Adequate code support",
    ),
    Capability.DEBUGGING: (
        "Expert error diagnosis", "Good error tracing", "Basic debugging support",
    ),
    Capability.STRUCTURED_OUTPUT: (
        "Precise format control", "Good format adherence", "Basic format support",
    ),
    Capability.INSTRUCTION_FOLLOWING: (
        "Follows instructions closely", "Reliable instruction adherence", "May need guidance",
    ),
    Capability.SPEED: (
        "Very fast response time", "Reasonable response speed", "Slower, more thorough",
    ),
    Capability.COST_EFFICIENCY: (
        "Highly cost-effective", "Good value for quality", "Premium quality, higher cost",
    ),
    Capability.RECENCY_STRENGTH: (
        "Up-to-date knowledge", "Fairly current training", "May lack recent info",
    ),
}

_TASK_DESCRIPTIONS: dict[TaskType, str] = {
    TaskType.CODE_GEN: "code generation",
    TaskType.DEBUG: "debugging and error analysis",
    TaskType.REFACTOR: "code review and refactoring",
    TaskType.EXPLAIN: "explanations and analysis",
    TaskType.RESEARCH: "deep research and reasoning",
    TaskType.CREATIVE: "creative writing and content",
    TaskType.MATH: "math and quantitative reasoning",
    TaskType.QA: "quick factual answers",
    TaskType.GENERAL: "general-purpose tasks",
}


@dataclass
class DimensionScore:
    """One capability's share of a model's score."""

    capability: Capability
    raw: float          # 0.0–1.0 capability score
    weight: float       # task weight
    contribution: float  # raw * weight


@dataclass
class ModelScore:
    """Full scoring detail for one candidate."""

    profile: ModelProfile
    base_score: float = 0.0
    expected_success: int = 0
    dimensions: list[DimensionScore] = field(default_factory=list)

    @property
    def model_id(self) -> str:
        return self.profile.id


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _rank_key(score: ModelScore) -> tuple[int, float, str]:
    return (
        -score.expected_success,
        -score.profile.capabilities.cost_efficiency,
        score.model_id,
    )


class ScoringEngine:
    """Capability-weighted scoring over an injected capability matrix."""

    def __init__(self, matrix: CapabilityMatrix) -> None:
        self._matrix = matrix

    @property
    def matrix(self) -> CapabilityMatrix:
        return self._matrix

    def score_candidate(
        self,
        profile: ModelProfile,
        classification: PromptClassification,
    ) -> ModelScore:
        """Compute expected success for a single model."""
        weights = self._matrix.weights_for(classification.task_type)
        caps = profile.capabilities

        dimensions: list[DimensionScore] = []
        weighted_sum = 0.0
        total_weight = 0.0
        for capability in Capability:
            raw = caps.get(capability)
            weight = weights.get(capability)
            dimensions.append(DimensionScore(capability, raw, weight, raw * weight))
            weighted_sum += raw * weight
            total_weight += weight

        base = (weighted_sum / total_weight) * 100 if total_weight > 0 else _NEUTRAL_SCORE
        adjusted = base + sum(
            adj.delta
            for adj in _ADJUSTMENTS
            if adj.applies(classification) and adj.qualifies(caps)
        )
        expected = max(0, min(100, _round_half_up(adjusted)))

        return ModelScore(
            profile=profile,
            base_score=base,
            expected_success=expected,
            dimensions=dimensions,
        )

    def rank(
        self,
        classification: PromptClassification,
        candidates: Sequence[ModelProfile],
    ) -> list[ModelScore]:
        """Score and rank candidates, best first.

        Raises:
            NoCandidatesError: If ``candidates`` is empty.
        """
        if not candidates:
            raise NoCandidatesError("No candidate models available for scoring")

        scores = [self.score_candidate(p, classification) for p in candidates]
        scores.sort(key=_rank_key)
        return scores

    def score(
        self,
        classification: PromptClassification,
        candidates: Sequence[ModelProfile],
    ) -> ScoringResult:
        """Recommend the best candidate for a classified prompt.

        Args:
            classification: Output of the prompt classifier.
            candidates: Non-empty set of model profiles to choose from.

        Returns:
            ScoringResult naming a member of ``candidates``.

        Raises:
            NoCandidatesError: If ``candidates`` is empty.
        """
        return self.recommend(classification, self.rank(classification, candidates))

    def recommend(
        self,
        classification: PromptClassification,
        ranked: Sequence[ModelScore],
    ) -> ScoringResult:
        """Recommendation from an existing ranking (output of ``rank``).

        Raises:
            NoCandidatesError: If ``ranked`` is empty.
        """
        if not ranked:
            raise NoCandidatesError("No candidate models available for scoring")

        best = ranked[0]
        runner_up = ranked[1].expected_success if len(ranked) > 1 else 0

        result = self._build_result(best, runner_up, classification)
        logger.debug(
            "Scored %d candidates for %s: %s=%d (%s)",
            len(ranked),
            classification.task_type.value,
            best.model_id,
            best.expected_success,
            result.confidence.value,
        )
        return result

    def score_model(
        self,
        classification: PromptClassification,
        candidates: Sequence[ModelProfile],
        model_id: str,
    ) -> ScoringResult:
        """Scoring metadata for a model chosen elsewhere.

        Confidence is measured against the runner-up when ``model_id`` is
        the top-ranked model and against the top-ranked model otherwise.

        Raises:
            NoCandidatesError: If ``candidates`` is empty.
            UnknownModelError: If ``model_id`` is not a candidate.
        """
        ranked = self.rank(classification, candidates)
        target = next((s for s in ranked if s.model_id == model_id), None)
        if target is None:
            raise UnknownModelError(f"Model '{model_id}' is not in the candidate set")

        if target is ranked[0]:
            reference = ranked[1].expected_success if len(ranked) > 1 else 0
        else:
            reference = ranked[0].expected_success
        return self._build_result(target, reference, classification)

    def _build_result(
        self,
        chosen: ModelScore,
        reference_score: int,
        classification: PromptClassification,
    ) -> ScoringResult:
        key_factors = select_key_factors(chosen, classification)
        return ScoringResult(
            recommended_model_id=chosen.model_id,
            expected_success=chosen.expected_success,
            confidence=compute_confidence(
                chosen.expected_success, reference_score, classification,
            ),
            key_factors=key_factors,
            short_why=short_why(chosen, classification, key_factors[0]),
        )


def compute_confidence(
    top_score: int,
    reference_score: int,
    classification: PromptClassification,
) -> ConfidenceLevel:
    """Confidence band from score margin, classifier confidence and absolute score.

    Points: margin >= 12 → 3, >= 6 → 2, >= 3 → 1; classifier high → 2,
    medium → 1; top score >= 70 → 1. Four or more is High, two or more
    is Medium.
    """
    gap = top_score - reference_score
    points = 0

    if gap >= 12:
        points += 3
    elif gap >= 6:
        points += 2
    elif gap >= 3:
        points += 1

    if classification.classifier_confidence == ClassifierConfidence.HIGH:
        points += 2
    elif classification.classifier_confidence == ClassifierConfidence.MEDIUM:
        points += 1

    if top_score >= 70:
        points += 1

    if points >= 4:
        return ConfidenceLevel.HIGH
    if points >= 2:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _factor_reason(
    capability: Capability,
    score100: int,
    classification: PromptClassification,
) -> str:
    signal = _SIGNAL_REASONS.get(capability)
    if signal is not None and score100 >= 60:
        signal_name, phrase = signal
        if getattr(classification.input_signals, signal_name):
            return phrase

    high, solid, basic = _BAND_REASONS[capability]
    if score100 >= 80:
        return high
    if score100 >= 60:
        return solid
    return basic


def select_key_factors(
    score: ModelScore,
    classification: PromptClassification,
) -> list[KeyFactor]:
    """Pick the 3–4 dimensions contributing most to a model's score.

    Dimensions weighted at least 0.05 come first, ordered by contribution;
    the list is padded to three from the remaining dimensions when the task
    profile concentrates its weight on fewer capabilities.
    """
    order = {c: i for i, c in enumerate(Capability)}
    ranked = sorted(
        score.dimensions,
        key=lambda d: (-d.contribution, order[d.capability]),
    )
    significant = [d for d in ranked if d.weight >= _MIN_FACTOR_WEIGHT]
    chosen = significant[:_MAX_FACTORS]
    for d in ranked:
        if len(chosen) >= _MIN_FACTORS:
            break
        if d not in chosen:
            chosen.append(d)

    factors = []
    for d in chosen:
        score100 = _round_half_up(d.raw * 100)
        factors.append(
            KeyFactor(
                label=CAPABILITY_LABELS[d.capability],
                score=score100,
                short_reason=_factor_reason(d.capability, score100, classification),
            )
        )
    return factors


def short_why(
    score: ModelScore,
    classification: PromptClassification,
    top_factor: KeyFactor,
) -> str:
    """One-sentence justification naming the model, task and top factor."""
    name = score.profile.display_name
    task = _TASK_DESCRIPTIONS.get(classification.task_type, "this type of task")
    factor = top_factor.label.lower()
    value = score.expected_success

    if value >= 85:
        return f"{name} is exceptionally well-suited for {task}, led by its {factor}."
    if value >= 75:
        return f"{name} is a strong match for {task}, led by its {factor}."
    if value >= 65:
        return f"{name} is a good fit for {task}, with solid {factor} where it matters most."
    return f"{name} is the best available option for {task}, relying on its {factor}."
