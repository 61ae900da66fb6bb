"""Prompt classification schemas.

Defines the closed task-type set, stakes and confidence levels, and the
PromptClassification value produced by the deterministic classifier.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class TaskType(StrEnum):
    """Closed set of user intents the classifier can detect.

    ``GENERAL`` is the zero-signal default when no category matches.
    """

    CODE_GEN = "code_gen"
    DEBUG = "debug"
    REFACTOR = "refactor"
    EXPLAIN = "explain"
    RESEARCH = "research"
    CREATIVE = "creative"
    MATH = "math"
    QA = "qa"
    GENERAL = "general"


class StakesLevel(StrEnum):
    """Estimated consequence severity of an incorrect answer."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClassifierConfidence(StrEnum):
    """How strongly the prompt matched its winning task type."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InputSignals(BaseModel):
    """Structural features of the prompt. Independent and non-exclusive."""

    has_code: bool = Field(default=False, description="Code, a code keyword, or a language token")
    has_stack_trace: bool = Field(
        default=False, description="At least two stack-trace patterns matched"
    )
    strict_format: bool = Field(
        default=False, description="A structured output format was requested"
    )
    long_form: bool = Field(default=False, description="Prompt longer than 500 characters")
    concise: bool = Field(default=False, description="Prompt shorter than 100 characters")
    mentions_latest: bool = Field(
        default=False, description="Temporal or freshness language was used"
    )


class FileSignals(BaseModel):
    """Pre-computed signals describing files attached to the prompt.

    Produced by the caller's upload handling; the core never reads files.
    """

    has_code_files: bool = Field(default=False, description="A source file was attached")
    has_structured_files: bool = Field(
        default=False, description="A JSON, YAML, CSV or similar file was attached"
    )
    text_chars: int = Field(
        default=0, ge=0, description="Characters of extracted text across attachments"
    )


class PromptClassification(BaseModel):
    """Structured signals extracted from a raw prompt.

    Identical input always yields an identical classification, so results
    can be cached and compared byte for byte.
    """

    task_type: TaskType = Field(default=TaskType.GENERAL, description="Detected user intent")
    input_signals: InputSignals = Field(
        default_factory=InputSignals, description="Boolean structural features"
    )
    stakes: StakesLevel = Field(default=StakesLevel.LOW, description="Risk of a wrong answer")
    recency_requirement: bool = Field(
        default=False, description="Mirrors input_signals.mentions_latest"
    )
    classifier_confidence: ClassifierConfidence = Field(
        default=ClassifierConfidence.LOW, description="Strength of the task-type match"
    )
