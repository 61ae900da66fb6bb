"""Tests for modeltriage.routing.engine — strategies, overrides, cache, defaults."""

import logging

import pytest

import modeltriage
from modeltriage.errors import ConfigurationError
from modeltriage.registry import load_capability_matrix, load_router_config
from modeltriage.routing.engine import (
    OVERRIDE_REASON,
    DecisionRouter,
    get_default_router,
)
from modeltriage.schemas.capabilities import CapabilityMatrix, TaskWeightProfile
from modeltriage.schemas.classification import FileSignals, TaskType
from modeltriage.schemas.routing import (
    DecisionConfidence,
    Intent,
    RouterConfig,
    RoutingStrategy,
    TierModels,
)

_MOCK_TIERS = TierModels(
    fast="mock-fast-1",
    balanced="mock-balanced-1",
    quality="mock-quality-1",
    code="mock-code-1",
)


# ── Factories ──────────────────────────────────────────────────────


def _make_keyword_router(**overrides) -> DecisionRouter:
    """Keyword router over tier models that have no capability profile."""
    defaults = {"strategy": RoutingStrategy.KEYWORD_PRIORITY, "tiers": _MOCK_TIERS}
    defaults.update(overrides)
    return DecisionRouter(load_capability_matrix(), RouterConfig(**defaults))


def _make_scored_router(**overrides) -> DecisionRouter:
    return DecisionRouter(load_capability_matrix(), RouterConfig(**overrides))


# ── Override ───────────────────────────────────────────────────────


class TestOverride:
    def test_requested_model_returned_verbatim(self):
        decision = _make_scored_router().route("Any prompt", "custom-model-x")
        assert decision.summary() == {
            "model": "custom-model-x",
            "reason": OVERRIDE_REASON,
            "confidence": "high",
        }

    def test_override_skips_classification(self):
        decision = _make_keyword_router().route("Write a function", "custom-model-x")
        assert decision.strategy is None
        assert decision.classification is None
        assert decision.scoring is None

    @pytest.mark.parametrize(
        "prompt",
        ["", "Hello", "Analyze the pros and cons of serverless", "x" * 5000],
    )
    def test_override_regardless_of_prompt(self, prompt):
        for router in (_make_keyword_router(), _make_scored_router()):
            assert router.route(prompt, "custom-model-x").model == "custom-model-x"

    def test_empty_requested_model_is_not_override(self):
        decision = _make_keyword_router().route("Hello", "")
        assert decision.model == "mock-fast-1"


# ── Keyword priority ───────────────────────────────────────────────


class TestKeywordRouting:
    def test_code_prompt(self):
        decision = _make_keyword_router().route("Write a function to sort an array")
        assert decision.model == "mock-code-1"
        assert decision.confidence == DecisionConfidence.HIGH
        assert "code" in decision.reason.lower()
        assert decision.intent == Intent.CODING

    def test_short_prompt(self):
        decision = _make_keyword_router().route("Hello")
        assert decision.model == "mock-fast-1"
        assert decision.confidence == DecisionConfidence.MEDIUM

    def test_long_prompt(self):
        decision = _make_keyword_router().route("a" * 1500)
        assert decision.model == "mock-quality-1"
        assert decision.confidence == DecisionConfidence.HIGH
        assert decision.reason == "Enhanced reasoning for detailed prompt"

    def test_analytical_prompt(self):
        decision = _make_keyword_router().route(
            "Analyze the pros and cons of serverless architecture"
        )
        assert decision.model == "mock-quality-1"
        assert decision.confidence == DecisionConfidence.HIGH
        assert "analysis" in decision.reason.lower()

    def test_fallback_to_balanced(self):
        decision = _make_keyword_router().route(
            "Tell me something interesting about the weather today"
        )
        assert decision.model == "mock-balanced-1"
        assert decision.confidence == DecisionConfidence.LOW
        assert decision.reason == "General-purpose model for balanced performance"

    def test_analytical_beats_code(self):
        decision = _make_keyword_router().route("Compare React and Vue")
        assert decision.model == "mock-quality-1"
        assert "analysis" in decision.reason.lower()

    def test_creative_prompt(self):
        decision = _make_keyword_router().route("Imagine a dragon that hoards teacups")
        assert decision.model == "mock-quality-1"
        assert decision.intent == Intent.WRITING

    def test_length_boundaries(self):
        router = _make_keyword_router()
        assert router.route("a" * 1000).model == "mock-balanced-1"
        assert router.route("a" * 1001).model == "mock-quality-1"
        assert router.route("a" * 50).model == "mock-balanced-1"
        assert router.route("a" * 49).model == "mock-fast-1"

    def test_classification_attached(self):
        decision = _make_keyword_router().route("Write a function to sort an array")
        assert decision.classification is not None
        assert decision.classification.task_type == TaskType.CODE_GEN
        assert decision.strategy == RoutingStrategy.KEYWORD_PRIORITY

    def test_unprofiled_tier_has_no_scoring(self):
        assert _make_keyword_router().route("Hello").scoring is None

    def test_profiled_tier_is_enriched(self):
        router = DecisionRouter(
            load_capability_matrix(),
            RouterConfig(strategy=RoutingStrategy.KEYWORD_PRIORITY),
        )
        decision = router.route("Write a function to sort an array")
        assert decision.model == "claude-sonnet-4-5-20250929"
        assert decision.scoring is not None
        assert decision.scoring.recommended_model_id == decision.model

    def test_numeric_confidence(self):
        router = _make_keyword_router()
        assert router.route("Compare React and Vue").confidence_score == pytest.approx(0.9)
        assert router.route("Hello").confidence_score == pytest.approx(0.7)


# ── Capability scored ──────────────────────────────────────────────


class TestScoredRouting:
    def test_auto_resolves_to_scored(self):
        router = _make_scored_router()
        assert router.strategy == RoutingStrategy.CAPABILITY_SCORED

    def test_decision_mirrors_scoring(self):
        router = _make_scored_router()
        decision = router.route("Fix this bug: TypeError: cannot read property 'x'")
        scoring = decision.scoring
        assert scoring is not None
        assert decision.model == scoring.recommended_model_id
        assert decision.model in router.candidates
        assert decision.reason == scoring.short_why
        assert decision.confidence.value == scoring.confidence.value.lower()
        assert decision.confidence_score == pytest.approx(scoring.expected_success / 100)
        assert decision.intent == Intent.CODING
        assert decision.category == "debug"

    def test_candidates_restrict_choice(self):
        router = _make_scored_router(candidates=["gpt-5-mini", "gemini-3-flash-preview"])
        decision = router.route("Prove that the square root of 2 is irrational")
        assert decision.model in {"gpt-5-mini", "gemini-3-flash-preview"}

    def test_deterministic(self):
        router = _make_scored_router()
        prompt = "Summarize the latest research on transformers in 2026"
        assert router.route(prompt) == router.route(prompt)


# ── Strategy resolution ────────────────────────────────────────────


class TestStrategyResolution:
    def test_auto_with_unprofiled_candidate_uses_keywords(self):
        router = _make_scored_router(candidates=["gpt-5.2", "mock-x"])
        assert router.strategy == RoutingStrategy.KEYWORD_PRIORITY

    def test_explicit_scored_without_profiles_raises(self):
        with pytest.raises(ConfigurationError, match="mock-x"):
            _make_scored_router(
                strategy=RoutingStrategy.CAPABILITY_SCORED,
                candidates=["gpt-5.2", "mock-x"],
            )

    def test_explicit_scored_with_empty_matrix_raises(self):
        matrix = CapabilityMatrix(
            task_weights={TaskType.GENERAL: TaskWeightProfile(reasoning=1.0)},
        )
        with pytest.raises(ConfigurationError):
            DecisionRouter(
                matrix, RouterConfig(strategy=RoutingStrategy.CAPABILITY_SCORED),
            )

    def test_auto_with_empty_matrix_uses_keywords(self):
        matrix = CapabilityMatrix(
            task_weights={TaskType.GENERAL: TaskWeightProfile(reasoning=1.0)},
        )
        router = DecisionRouter(matrix, RouterConfig(tiers=_MOCK_TIERS))
        assert router.strategy == RoutingStrategy.KEYWORD_PRIORITY
        assert router.route("Hello").model == "mock-fast-1"


# ── Attachments ────────────────────────────────────────────────────


class TestAttachmentRouting:
    def test_code_file_goes_to_code_tier(self):
        decision = _make_keyword_router().route(
            "Review this", file_signals=FileSignals(has_code_files=True, text_chars=5000),
        )
        assert decision.model == "mock-code-1"
        assert decision.category == "code_uploaded_file"
        assert decision.intent == Intent.CODING
        assert decision.confidence == DecisionConfidence.HIGH

    def test_short_prompt_with_attachment_avoids_fast_tier(self):
        decision = _make_keyword_router().route(
            "Hi", file_signals=FileSignals(has_structured_files=True, text_chars=200),
        )
        assert decision.model == "mock-code-1"

    def test_large_attachment_goes_to_quality_tier(self):
        decision = _make_keyword_router().route(
            "Review this", file_signals=FileSignals(has_code_files=True, text_chars=12_001),
        )
        assert decision.model == "mock-quality-1"
        assert decision.category == "code_complex"

    def test_large_text_file_goes_to_quality_tier(self):
        decision = _make_keyword_router().route(
            "Summarize this", file_signals=FileSignals(text_chars=6_001),
        )
        assert decision.model == "mock-quality-1"

    def test_code_file_under_large_threshold_stays_on_code_tier(self):
        decision = _make_keyword_router().route(
            "Review this", file_signals=FileSignals(has_code_files=True, text_chars=6_001),
        )
        assert decision.model == "mock-code-1"

    def test_complexity_term_escalates(self):
        decision = _make_keyword_router().route(
            "Suggest a better architecture for this",
            file_signals=FileSignals(has_code_files=True, text_chars=100),
        )
        assert decision.model == "mock-quality-1"

    def test_no_attachment_falls_through_to_keywords(self):
        decision = _make_keyword_router().route("Hello", file_signals=FileSignals())
        assert decision.model == "mock-fast-1"
        assert decision.category == "short_prompt"

    def test_applies_under_capability_scoring(self):
        router = _make_scored_router()
        decision = router.route(
            "Review this", file_signals=FileSignals(has_code_files=True),
        )
        assert decision.model == router.config.tiers.code
        assert decision.strategy == RoutingStrategy.CAPABILITY_SCORED
        assert decision.scoring.recommended_model_id == router.config.tiers.code

    def test_override_wins_over_attachment(self):
        decision = _make_keyword_router().route(
            "Review this", "custom-model-x", FileSignals(has_code_files=True),
        )
        assert decision.model == "custom-model-x"

    def test_default_router_uses_code_tier(self):
        decision = modeltriage.route(
            "Review this", file_signals=FileSignals(has_code_files=True, text_chars=5000),
        )
        assert decision.model == load_router_config().tiers.code


# ── Cache ──────────────────────────────────────────────────────────


class TestRoutingCache:
    def test_disabled_by_default(self):
        assert _make_scored_router().cache is None

    def test_repeat_prompt_hits_cache(self):
        router = _make_scored_router(cache_size=10)
        first = router.route("Explain  closures in JavaScript")
        second = router.route("explain closures in javascript ")
        assert second == first
        assert second is not first
        assert len(router.cache) == 1

    def test_hit_is_isolated_from_caller_mutation(self):
        router = _make_scored_router(cache_size=10)
        first = router.route("Explain closures in JavaScript")
        model = first.model
        first.model = "tampered"
        first.scoring.key_factors.clear()
        again = router.route("Explain closures in JavaScript")
        assert again.model == model
        assert len(again.scoring.key_factors) >= 3

    def test_file_signals_bypass_cache(self):
        router = _make_scored_router(cache_size=10)
        router.route("Review this", file_signals=FileSignals(has_code_files=True))
        assert len(router.cache) == 0

    def test_override_not_cached(self):
        router = _make_scored_router(cache_size=10)
        router.route("Hello", "custom-model-x")
        assert len(router.cache) == 0
        assert router.route("Hello").model != "custom-model-x"


# ── Module-level API ───────────────────────────────────────────────


class TestDefaultRouter:
    def test_default_router_is_shared(self):
        assert get_default_router() is get_default_router()

    def test_shipped_strategy_is_keyword_priority(self):
        assert get_default_router().strategy == RoutingStrategy.KEYWORD_PRIORITY

    @pytest.mark.parametrize(
        ("prompt", "tier", "confidence"),
        [
            ("Write a function to sort an array", "code", DecisionConfidence.HIGH),
            ("Hello", "fast", DecisionConfidence.MEDIUM),
            ("a" * 1500, "quality", DecisionConfidence.HIGH),
            (
                "Analyze the pros and cons of serverless architecture",
                "quality", DecisionConfidence.HIGH,
            ),
            (
                "Tell me something interesting about the weather today",
                "balanced", DecisionConfidence.LOW,
            ),
            ("Compare React and Vue", "quality", DecisionConfidence.HIGH),
        ],
    )
    def test_route(self, prompt, tier, confidence):
        tiers = load_router_config().tiers
        decision = modeltriage.route(prompt)
        assert decision.model == getattr(tiers, tier)
        assert decision.confidence == confidence
        assert decision.strategy == RoutingStrategy.KEYWORD_PRIORITY

    def test_route_analysis_reason(self):
        decision = modeltriage.route("Analyze the pros and cons of serverless architecture")
        assert "analysis" in decision.reason.lower()

    def test_route_override(self):
        decision = modeltriage.route("Any prompt", "custom-model-x")
        assert decision.model == "custom-model-x"
        assert decision.confidence == DecisionConfidence.HIGH

    def test_classify_prompt(self):
        assert modeltriage.classify_prompt("Fix this bug").task_type == TaskType.DEBUG


class TestLogging:
    def test_decision_logged_without_prompt_text(self, caplog):
        caplog.set_level(logging.INFO, logger="modeltriage.routing.engine")
        _make_keyword_router().route("Confidential launch plan for the zebra project")
        assert "Routing" in caplog.text
        assert "zebra" not in caplog.text
