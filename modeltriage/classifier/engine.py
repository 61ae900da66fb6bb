"""Deterministic prompt classifier.

Extracts structured signals from a prompt without any model calls: task
type by pattern-match counts, boolean input signals, a point-based stakes
level and a classifier confidence. Runs well under a millisecond.
"""

from __future__ import annotations

import logging

from modeltriage.classifier.patterns import DEFAULT_PATTERNS, PatternLibrary, match_count
from modeltriage.schemas.classification import (
    ClassifierConfidence,
    FileSignals,
    InputSignals,
    PromptClassification,
    StakesLevel,
    TaskType,
)

logger = logging.getLogger(__name__)

# Length thresholds (characters)
_LONG_FORM_CHARS = 500
_CONCISE_CHARS = 100
_CONFIDENT_LENGTH_CHARS = 100

# Stakes point table
_HIGH_STAKES_POINTS_PER_HIT = 3
_TASK_STAKES_POINTS: dict[TaskType, int] = {
    TaskType.MATH: 2,
    TaskType.DEBUG: 2,
    TaskType.REFACTOR: 1,
    TaskType.CODE_GEN: 1,
    TaskType.QA: -1,
}
_HIGH_STAKES_THRESHOLD = 5
_MEDIUM_STAKES_THRESHOLD = 2


class PromptClassifier:
    """Rule-based classifier over a fixed, auditable pattern library."""

    def __init__(self, patterns: PatternLibrary = DEFAULT_PATTERNS) -> None:
        self._patterns = patterns

    @property
    def patterns(self) -> PatternLibrary:
        return self._patterns

    def classify(
        self,
        prompt: str,
        file_signals: FileSignals | None = None,
    ) -> PromptClassification:
        """Classify a prompt.

        Total over strings: never raises. A prompt that matches nothing is
        ``general`` with low stakes and low confidence.

        Args:
            prompt: Raw user prompt (may be empty).
            file_signals: Optional pre-computed signals for attached files.

        Returns:
            PromptClassification for the prompt.
        """
        task_type, strength = self.detect_task_type(prompt)
        signals = self.detect_input_signals(prompt, file_signals)
        stakes = self.score_stakes(prompt, task_type, signals)
        confidence = self.classifier_confidence(strength, prompt)

        logger.debug(
            "Classified prompt (%d chars) as %s (strength=%d, stakes=%s, confidence=%s)",
            len(prompt), task_type.value, strength, stakes.value, confidence.value,
        )
        return PromptClassification(
            task_type=task_type,
            input_signals=signals,
            stakes=stakes,
            recency_requirement=signals.mentions_latest,
            classifier_confidence=confidence,
        )

    # ── Task type ───────────────────────────────────────────────────

    def task_scores(self, prompt: str) -> dict[TaskType, int]:
        """Per-category match counts after boosts and disambiguation."""
        p = self._patterns
        scores = {
            task: match_count(prompt, patterns) for task, patterns in p.task_patterns
        }

        # A real stack trace is a strong debug signal even without "bug"
        if match_count(prompt, p.stack_trace) >= 2:
            scores[TaskType.DEBUG] += 3

        if p.code_language.search(prompt) and scores[TaskType.CODE_GEN] > 0:
            scores[TaskType.CODE_GEN] += 1

        qa = scores.get(TaskType.QA, 0)
        if qa > 0 and scores.get(TaskType.EXPLAIN, 0) >= qa:
            scores[TaskType.QA] = 0
        elif qa > 0 and any(
            scores.get(t, 0) > 0
            for t in (TaskType.CODE_GEN, TaskType.DEBUG, TaskType.MATH)
        ):
            scores[TaskType.QA] = 0

        return scores

    def detect_task_type(self, prompt: str) -> tuple[TaskType, int]:
        """Return the winning task type and its match count.

        Walks ``task_priority`` and keeps the first strictly greater count,
        so ties go to the earlier task type. No matches yields ``general``.
        """
        scores = self.task_scores(prompt)
        best_type = TaskType.GENERAL
        best_score = 0
        for task in self._patterns.task_priority:
            if scores[task] > best_score:
                best_type, best_score = task, scores[task]
        return best_type, best_score

    # ── Input signals ───────────────────────────────────────────────

    def detect_input_signals(
        self,
        prompt: str,
        file_signals: FileSignals | None = None,
    ) -> InputSignals:
        p = self._patterns
        has_code = bool(
            p.code_language.search(prompt)
            or p.fenced_code.search(prompt)
            or p.code_keyword.search(prompt)
        )
        strict_format = match_count(prompt, p.structured_format) >= 1
        length = len(prompt)

        if file_signals is not None:
            has_code = has_code or file_signals.has_code_files
            strict_format = strict_format or file_signals.has_structured_files
            length += file_signals.text_chars

        return InputSignals(
            has_code=has_code,
            has_stack_trace=match_count(prompt, p.stack_trace) >= 2,
            strict_format=strict_format,
            long_form=length > _LONG_FORM_CHARS,
            concise=len(prompt) < _CONCISE_CHARS,
            mentions_latest=match_count(prompt, p.recency) >= 1,
        )

    # ── Stakes ──────────────────────────────────────────────────────

    def stakes_points(
        self,
        prompt: str,
        task_type: TaskType,
        signals: InputSignals,
    ) -> int:
        """Accumulate the stakes point total for a classified prompt."""
        points = _HIGH_STAKES_POINTS_PER_HIT * match_count(prompt, self._patterns.high_stakes)
        points += _TASK_STAKES_POINTS.get(task_type, 0)

        if signals.has_code:
            points += 2
        if signals.has_stack_trace:
            points += 2
        if signals.strict_format:
            points += 1
        if signals.has_code and signals.has_stack_trace:
            points += 1
        if signals.has_code and signals.strict_format:
            points += 1

        length = len(prompt)
        if length > 800:
            points += 2
        elif length > 300:
            points += 1
        if length < 80:
            points -= 1

        return points

    def score_stakes(
        self,
        prompt: str,
        task_type: TaskType,
        signals: InputSignals,
    ) -> StakesLevel:
        points = self.stakes_points(prompt, task_type, signals)
        if points >= _HIGH_STAKES_THRESHOLD:
            return StakesLevel.HIGH
        if points >= _MEDIUM_STAKES_THRESHOLD:
            return StakesLevel.MEDIUM
        return StakesLevel.LOW

    # ── Confidence ──────────────────────────────────────────────────

    @staticmethod
    def classifier_confidence(strength: int, prompt: str) -> ClassifierConfidence:
        if strength >= 2:
            return ClassifierConfidence.HIGH
        if strength == 1:
            return ClassifierConfidence.MEDIUM
        # No pattern matched, but a prompt of real length is not a shot in the dark
        if len(prompt) > _CONFIDENT_LENGTH_CHARS:
            return ClassifierConfidence.MEDIUM
        return ClassifierConfidence.LOW


_DEFAULT_CLASSIFIER = PromptClassifier()


def classify_prompt(
    prompt: str,
    file_signals: FileSignals | None = None,
) -> PromptClassification:
    """Classify a prompt with the default pattern library."""
    return _DEFAULT_CLASSIFIER.classify(prompt, file_signals)
