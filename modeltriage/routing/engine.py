"""Decision Router.

Turns a prompt into a RoutingDecision. An explicit model request always
wins; otherwise the prompt is classified and handed to one of two
strategies:

  keyword_priority   ordered keyword and length rules over four tier models
  capability_scored  expected-success ranking over the candidate profiles

``auto`` picks capability scoring whenever every candidate has capability
data. Attached files bypass both strategies and go to the code or quality
tier. The router never calls a model and never blocks.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

from modeltriage.classifier.engine import PromptClassifier
from modeltriage.errors import ConfigurationError
from modeltriage.registry import load_capability_matrix, load_router_config
from modeltriage.routing.cache import RoutingCache
from modeltriage.routing.scoring import ScoringEngine
from modeltriage.schemas.capabilities import CapabilityMatrix
from modeltriage.schemas.classification import (
    FileSignals,
    PromptClassification,
    TaskType,
)
from modeltriage.schemas.routing import (
    DecisionConfidence,
    Intent,
    RouterConfig,
    RoutingDecision,
    RoutingStrategy,
    ScoringResult,
)

logger = logging.getLogger(__name__)

OVERRIDE_REASON = "user requested specific model"

# Prompt length rules for keyword routing (characters, exclusive)
_LONG_PROMPT_CHARS = 1000
_SHORT_PROMPT_CHARS = 50

# Attached text above these sizes escalates to the quality tier
_LARGE_ATTACHMENT_CHARS = 12_000
_FILE_ATTACHMENT_CHARS = 6_000

_CONFIDENCE_SCORES: dict[DecisionConfidence, float] = {
    DecisionConfidence.HIGH: 0.9,
    DecisionConfidence.MEDIUM: 0.7,
    DecisionConfidence.LOW: 0.4,
}

_TASK_INTENTS: dict[TaskType, Intent] = {
    TaskType.CODE_GEN: Intent.CODING,
    TaskType.DEBUG: Intent.CODING,
    TaskType.REFACTOR: Intent.CODING,
    TaskType.CREATIVE: Intent.WRITING,
    TaskType.EXPLAIN: Intent.ANALYSIS,
    TaskType.RESEARCH: Intent.ANALYSIS,
    TaskType.MATH: Intent.ANALYSIS,
    TaskType.QA: Intent.ANALYSIS,
    TaskType.GENERAL: Intent.UNKNOWN,
}


class DecisionRouter:
    """Prompt-to-model router over an injected capability matrix.

    Args:
        matrix: Capability matrix shared with the scoring engine.
        config: Router configuration (defaults to ``RouterConfig()``).
        classifier: Prompt classifier (defaults to the stock pattern library).
        scorer: Scoring engine (defaults to one built over ``matrix``).

    Raises:
        ConfigurationError: If ``capability_scored`` is requested but some
            candidate has no capability profile.
    """

    def __init__(
        self,
        matrix: CapabilityMatrix,
        config: RouterConfig | None = None,
        classifier: PromptClassifier | None = None,
        scorer: ScoringEngine | None = None,
    ) -> None:
        self._matrix = matrix
        self._config = config or RouterConfig()
        self._classifier = classifier or PromptClassifier()
        self._scorer = scorer or ScoringEngine(matrix)
        self._candidates = list(self._config.candidates) or list(matrix.models)
        self._strategy = self.resolve_strategy()
        self._cache = (
            RoutingCache(self._config.cache_size, self._config.cache_ttl)
            if self._config.cache_size > 0
            else None
        )

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def matrix(self) -> CapabilityMatrix:
        return self._matrix

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    @property
    def strategy(self) -> RoutingStrategy:
        """The concrete strategy in use (never ``auto``)."""
        return self._strategy

    @property
    def cache(self) -> RoutingCache | None:
        return self._cache

    def resolve_strategy(self) -> RoutingStrategy:
        """Resolve the configured strategy against the candidate set."""
        covered = self._matrix.covers(self._candidates)
        configured = self._config.strategy

        if configured == RoutingStrategy.AUTO:
            if covered:
                return RoutingStrategy.CAPABILITY_SCORED
            return RoutingStrategy.KEYWORD_PRIORITY

        if configured == RoutingStrategy.CAPABILITY_SCORED and not covered:
            if not self._candidates:
                raise ConfigurationError(
                    "capability_scored routing needs at least one candidate model"
                )
            missing = [m for m in self._candidates if self._matrix.profile(m) is None]
            raise ConfigurationError(
                "capability_scored routing needs a capability profile for every "
                f"candidate; missing: {', '.join(missing)}"
            )
        return configured

    def route(
        self,
        prompt: str,
        requested_model: str | None = None,
        file_signals: FileSignals | None = None,
    ) -> RoutingDecision:
        """Select a model for a prompt.

        Args:
            prompt: Raw user prompt.
            requested_model: Explicit model id; returned verbatim when truthy.
            file_signals: Optional pre-computed signals for attached files.

        Returns:
            RoutingDecision with the selected model and rationale.
        """
        if requested_model:
            decision = RoutingDecision(
                model=requested_model,
                reason=OVERRIDE_REASON,
                confidence=DecisionConfidence.HIGH,
                category="override",
                confidence_score=1.0,
            )
            logger.info("Routing → %s (user override)", requested_model)
            return decision

        cacheable = self._cache is not None and file_signals is None
        if cacheable:
            cached = self._cache.get(prompt)
            if cached is not None:
                logger.debug("Routing cache hit (%d chars) → %s", len(prompt), cached.model)
                return cached

        classification = self._classifier.classify(prompt, file_signals)
        decision = None
        if file_signals is not None:
            decision = self._route_attachment(prompt, classification, file_signals)
        if decision is None:
            dispatch = _STRATEGY_FN[self._strategy]
            decision = dispatch(self, prompt, classification)

        logger.info(
            "Routing → %s (%s, confidence=%s, task=%s, prompt=%d chars)",
            decision.model,
            self._strategy.value,
            decision.confidence.value,
            classification.task_type.value,
            len(prompt),
        )

        if cacheable:
            self._cache.put(prompt, decision)
        return decision

    # ── Strategies ──────────────────────────────────────────────────

    def _route_keyword(
        self,
        prompt: str,
        classification: PromptClassification,
    ) -> RoutingDecision:
        """Ordered keyword rules, then prompt length, then the balanced tier."""
        text = prompt.lower()
        patterns = self._classifier.patterns
        tiers = self._config.tiers

        if any(k in text for k in patterns.analytical_keywords):
            model, confidence, intent, category, reason = (
                tiers.quality, DecisionConfidence.HIGH, Intent.ANALYSIS, "analysis",
                "Optimized for analysis and reasoning",
            )
        elif any(k in text for k in patterns.code_keywords):
            model, confidence, intent, category, reason = (
                tiers.code, DecisionConfidence.HIGH, Intent.CODING, "code",
                "Optimized for code generation and technical content",
            )
        elif any(k in text for k in patterns.creative_keywords):
            model, confidence, intent, category, reason = (
                tiers.quality, DecisionConfidence.HIGH, Intent.WRITING, "creative",
                "Enhanced for creative and narrative tasks",
            )
        elif len(prompt) > _LONG_PROMPT_CHARS:
            model, confidence, intent, category, reason = (
                tiers.quality, DecisionConfidence.HIGH, Intent.UNKNOWN, "long_prompt",
                "Enhanced reasoning for detailed prompt",
            )
        elif len(prompt) < _SHORT_PROMPT_CHARS:
            model, confidence, intent, category, reason = (
                tiers.fast, DecisionConfidence.MEDIUM, Intent.UNKNOWN, "short_prompt",
                "Quick response for short prompt",
            )
        else:
            model, confidence, intent, category, reason = (
                tiers.balanced, DecisionConfidence.LOW, Intent.UNKNOWN, "general",
                "General-purpose model for balanced performance",
            )

        return RoutingDecision(
            model=model,
            reason=reason,
            confidence=confidence,
            strategy=RoutingStrategy.KEYWORD_PRIORITY,
            intent=intent,
            category=category,
            confidence_score=_CONFIDENCE_SCORES[confidence],
            classification=classification,
            scoring=self._enrich(model, classification),
        )

    def _route_attachment(
        self,
        prompt: str,
        classification: PromptClassification,
        file_signals: FileSignals,
    ) -> RoutingDecision | None:
        """Attached files never go to the fast tier.

        Large text or a complexity term in the prompt escalates to the
        quality tier; anything else attached goes to the code tier.
        Returns None when nothing is attached.
        """
        attached = (
            file_signals.has_code_files
            or file_signals.has_structured_files
            or file_signals.text_chars > 0
        )
        if not attached:
            return None

        text = prompt.lower()
        tiers = self._config.tiers
        # Text or structured files escalate at a lower size than source code
        text_files = file_signals.has_structured_files or not file_signals.has_code_files
        deep = (
            file_signals.text_chars > _LARGE_ATTACHMENT_CHARS
            or (text_files and file_signals.text_chars > _FILE_ATTACHMENT_CHARS)
            or any(k in text for k in self._classifier.patterns.complexity_keywords)
        )
        if deep:
            model, category, reason = (
                tiers.quality, "code_complex",
                "Escalated to deep reasoning for a large or complex attachment",
            )
        else:
            model, category, reason = (
                tiers.code, "code_uploaded_file",
                "Uploaded files go to a strong code model",
            )

        return RoutingDecision(
            model=model,
            reason=reason,
            confidence=DecisionConfidence.HIGH,
            strategy=self._strategy,
            intent=Intent.CODING,
            category=category,
            confidence_score=_CONFIDENCE_SCORES[DecisionConfidence.HIGH],
            classification=classification,
            scoring=self._enrich(model, classification),
        )

    def _enrich(
        self,
        model: str,
        classification: PromptClassification,
    ) -> ScoringResult | None:
        """Capability scoring for a tier pick; None when the model is unprofiled."""
        if self._matrix.profile(model) is None:
            return None
        candidates = self._matrix.profiles_for(self._candidates)
        if all(p.id != model for p in candidates):
            candidates.append(self._matrix.models[model])
        return self._scorer.score_model(classification, candidates, model)

    def _route_scored(
        self,
        prompt: str,
        classification: PromptClassification,
    ) -> RoutingDecision:
        """Highest expected success among the candidate profiles."""
        candidates = self._matrix.profiles_for(self._candidates)
        result = self._scorer.score(classification, candidates)

        return RoutingDecision(
            model=result.recommended_model_id,
            reason=result.short_why,
            confidence=DecisionConfidence(result.confidence.value.lower()),
            strategy=RoutingStrategy.CAPABILITY_SCORED,
            intent=_TASK_INTENTS[classification.task_type],
            category=classification.task_type.value,
            confidence_score=result.expected_success / 100,
            classification=classification,
            scoring=result,
        )


# Strategy dispatcher
_STRATEGY_FN: dict[
    RoutingStrategy,
    Callable[[DecisionRouter, str, PromptClassification], RoutingDecision],
] = {
    RoutingStrategy.KEYWORD_PRIORITY: DecisionRouter._route_keyword,
    RoutingStrategy.CAPABILITY_SCORED: DecisionRouter._route_scored,
}


@functools.lru_cache(maxsize=1)
def get_default_router() -> DecisionRouter:
    """Process-wide router built from the packaged TOML config on first use."""
    return DecisionRouter(load_capability_matrix(), load_router_config())


def route(
    prompt: str,
    requested_model: str | None = None,
    file_signals: FileSignals | None = None,
) -> RoutingDecision:
    """Route a prompt with the default router."""
    return get_default_router().route(prompt, requested_model, file_signals)
