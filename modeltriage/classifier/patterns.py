"""Pattern library for the prompt classifier and keyword router.

Immutable groups of compiled regular expressions, one group per semantic
category, plus the plain keyword sets used by keyword-priority routing.
Compiled once at import; the classifier and router receive the library
through their constructors.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from modeltriage.schemas.classification import TaskType

_I = re.IGNORECASE


def _compile(*patterns: str, flags: int = _I) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, flags) for p in patterns)


def match_count(text: str, patterns: Iterable[re.Pattern[str]]) -> int:
    """Number of patterns that match anywhere in ``text``."""
    return sum(1 for p in patterns if p.search(text))


# ── Task intent ─────────────────────────────────────────────────────

CODE_GEN_PATTERNS = _compile(
    r"\b(write|create|generate|implement|build|make)\s+(?:(?:a|an|the|me)\s+)?"
    r"(function|method|class|component|script|module|api|endpoint|hook|util)",
    r"\b(write|create|build)\s+(code|program|app|application|service)",
    r"\b(how\s+(to|do\s+I)\s+(create|make|implement|write|build))\b",
    r"\b(snippet|boilerplate|starter|template|scaffold)\b",
    r"\b(convert|transform|parse|serialize|deserialize)\s+(this|it|the|a|from|to)\b",
)

DEBUG_PATTERNS = _compile(
    r"\b(debug|fix|error|bug|issue|problem|broken|crash|fail|exception)\b",
    r"\b(stack\s*trace|traceback|runtime\s*error|type\s*error|syntax\s*error)\b",
    r"\b(segfault|null\s*pointer|undefined\s+is\s+not|cannot\s+read\s+propert)",
    r"\b(ENOENT|ECONNREFUSED|SIGABRT|exit\s+code|status\s+code\s+[45]\d\d)\b",
    r"\b(what('s|\s+is)\s+wrong|doesn('t|t)\s+work|not\s+working)\b",
    r"\b(troubleshoot|diagnose|root\s+cause)\b",
)

REFACTOR_PATTERNS = _compile(
    r"\b(refactor|clean\s+up|improve|optimize|simplify|restructure)\s+"
    r"(this|my|the|code|function|class)",
    r"\b(code\s+review|review\s+(this|my|the)\s+(code|pr|pull\s+request))\b",
    r"\b(make\s+(this|it)\s+(cleaner|better|more\s+(readable|maintainable|efficient)))\b",
    r"\b(reduce\s+complexity|dry\s+up|extract\s+(method|function|component))\b",
    r"\b(pr\s+review|pull\s+request\s+review)\b",
)

EXPLAIN_PATTERNS = _compile(
    r"\b(explain|describe|what\s+(is|are|does)|how\s+does|walk\s+me\s+through)\b",
    r"\b(understand|clarify|elaborate|break\s+down)\b",
    r"\b(difference\s+between|compare|contrast|vs\.?|versus)\b",
    r"\b(when\s+to\s+use|why\s+(would|should|do)\s+(I|we|you))\b",
    r"\b(pros\s+and\s+cons|advantages|disadvantages|tradeoffs?)\b",
)

RESEARCH_PATTERNS = _compile(
    r"\b(research|investigate|find\s+out|look\s+into|deep\s+dive)\b",
    r"\b(analyze\s+(the\s+)?tradeoffs?|evaluate\s+(the\s+)?(options|approaches))\b",
    r"\b(system\s+design|architect(ure)?|design\s+pattern)\b",
    r"\b(benchmark|performance\s+comparison|cost[- ]benefit)\b",
    r"\b(feasibility|impact\s+analysis|risk\s+assessment)\b",
    r"\b(multi[- ]step\s+reasoning|think\s+through\s+step)\b",
)

CREATIVE_PATTERNS = _compile(
    r"\b(write\s+(a|an|me)\s+(story|poem|essay|blog|article|post|copy|email|letter|newsletter))\b",
    r"\b(marketing\s+(copy|email|content|campaign))\b",
    r"\b(draft|compose|author|ghostwrite)\b",
    r"\b(creative|brainstorm|ideate|come\s+up\s+with)\b",
    r"\b(summarize|rewrite|rephrase|paraphrase|simplify)\b",
    r"\b(cover\s+letter|resume|cv|linkedin)\b",
    r"\b(landing\s+page|headline|tagline|slogan)\b",
)

MATH_PATTERNS = _compile(
    r"\b(solve|calculate|compute|evaluate)\s+(the\s+|this\s+)?"
    r"(equation|integral|derivative|expression|sum|limit|probability|series)\b",
    r"\b(prove|proof|theorem|lemma|corollary)\b",
    r"\b(integral|derivative|differentiate|calculus|algebra|eigen\w*|polynomial|logarithm)\b",
    r"\b(probability|variance|standard\s+deviation|expected\s+value|combinatorics)\b",
    r"(?<![\d.])\d+(?:\.\d+)?\s*[-+*/^×÷]\s*\d+(?:\.\d+)?\s*(=|\?)",
    r"\b(equation|inequality|formula|solve\s+for\s+[a-z])\b",
)

QA_PATTERNS = _compile(
    r"^\s*(who|what|when|where|which)\s+(is|was|are|were|did)\b",
    r"\b(how\s+(many|much|old|long|far|tall|big))\b",
    r"\b(capital|population|currency|birthday|meaning|definition)\s+of\b",
    r"\b(define|what\s+does\s+\S+\s+(mean|stand\s+for))\b",
    r"\?\s*$",
)

# Walk order for the winner search. Equal top counts go to the earlier entry.
TASK_PRIORITY: tuple[TaskType, ...] = (
    TaskType.CODE_GEN,
    TaskType.DEBUG,
    TaskType.REFACTOR,
    TaskType.EXPLAIN,
    TaskType.RESEARCH,
    TaskType.CREATIVE,
    TaskType.MATH,
    TaskType.QA,
)

# ── Input signals ───────────────────────────────────────────────────

STACK_TRACE_PATTERNS = (
    re.compile(r"\b(at\s+\w+\.\w+\s*\()"),                 # "at Module.func ("
    re.compile(r"\b(File\s+\"[^\"]+\",\s+line\s+\d+)", _I),  # Python traceback
    re.compile(r"\b(Traceback\s+\(most\s+recent)", _I),
    re.compile(r"^[ \t]*at\s+", re.MULTILINE),
    re.compile(r"\b(Error|Exception):\s+"),
    re.compile(r"\b(panic:|goroutine\s+\d+)"),                # Go panics
)

STRUCTURED_FORMAT_PATTERNS = _compile(
    r"\b(json|yaml|xml|csv|table|markdown\s+table|schema)\b",
    r"\b(format\s+as|output\s+as|return\s+as|respond\s+with|give\s+me\s+a)\s+"
    r"(json|yaml|xml|csv|table)",
    r"\b(structured|formatted|typed)\s+(output|response|data)\b",
    r"\b(interface|type|schema|spec)\b",
)

RECENCY_PATTERNS = (
    re.compile(r"\b(latest|newest|recent|current|up[- ]to[- ]date|modern)\b", _I),
    re.compile(r"\b(202[5-9]|2030)\b"),
    re.compile(r"\b(new\s+(version|release|feature|api|update))\b", _I),
    re.compile(r"\b(just\s+released|recently\s+(added|changed|updated))\b", _I),
)

HIGH_STAKES_PATTERNS = _compile(
    r"\b(executive|board|investor|stakeholder|c-suite|ceo|cto|cfo)\b",
    r"\b(production[- ]ready|enterprise|mission[- ]critical)\b",
    r"\b(legal|compliance|regulatory|audit)\b",
    r"\b(public\s+statement|press\s+release|official)\b",
    r"\b(sensitive|confidential|high[- ]stakes)\b",
    r"\b(security|authentication|authorization|encryption)\b",
    r"\b(payment|billing|financial|transaction)\b",
)

CODE_LANGUAGE_PATTERN = re.compile(
    r"\b(typescript|javascript|python|java|rust|golang|go|ruby|swift|kotlin|c\+\+|csharp|"
    r"c#|php|sql|html|css|react|vue|angular|node\.?js|express|django|flask|rails|spring|"
    r"docker|kubernetes|terraform|aws|gcp|azure)\b",
    _I,
)

CODE_KEYWORD_PATTERN = re.compile(
    r"\b(function|class|const|let|var|def|import|export|return)\b"
)

FENCED_CODE_PATTERN = re.compile(r"```[\s\S]*```")

# ── Keyword-priority routing ────────────────────────────────────────

ANALYTICAL_KEYWORDS = (
    "analyze", "compare", "evaluate", "explain", "why", "how",
    "what are the", "difference between", "pros and cons",
    "advantages", "disadvantages", "consider", "assess",
)

CODE_KEYWORDS = (
    "code", "function", "class", "algorithm", "debug", "implement",
    "programming", "script", "api", "database", "sql", "javascript",
    "python", "typescript", "react", "component", "error", "bug",
    "refactor", "syntax",
)

CREATIVE_KEYWORDS = (
    "write a story", "create a", "imagine", "creative", "narrative",
    "poem", "song", "fiction", "character", "plot", "brainstorm",
    "ideas for",
)

# Prompt terms that escalate a request with attached files to the quality tier
COMPLEXITY_KEYWORDS = (
    "design", "architecture", "multi-file", "refactor across",
    "performance optimization", "security audit", "migrate",
    "implement end-to-end", "system design", "scale", "best practices",
    "trade-offs", "compare approaches", "evaluate", "full implementation",
    "production-ready",
)


@dataclass(frozen=True)
class PatternLibrary:
    """Immutable bundle of every pattern group the core matches against."""

    task_patterns: tuple[tuple[TaskType, tuple[re.Pattern[str], ...]], ...]
    stack_trace: tuple[re.Pattern[str], ...]
    structured_format: tuple[re.Pattern[str], ...]
    recency: tuple[re.Pattern[str], ...]
    high_stakes: tuple[re.Pattern[str], ...]
    code_language: re.Pattern[str]
    code_keyword: re.Pattern[str]
    fenced_code: re.Pattern[str]
    analytical_keywords: tuple[str, ...]
    code_keywords: tuple[str, ...]
    creative_keywords: tuple[str, ...]
    complexity_keywords: tuple[str, ...]

    @property
    def task_priority(self) -> tuple[TaskType, ...]:
        """Task types in the order ties are resolved."""
        return tuple(task for task, _ in self.task_patterns)

    def patterns_for(self, task_type: TaskType) -> tuple[re.Pattern[str], ...]:
        for task, patterns in self.task_patterns:
            if task == task_type:
                return patterns
        return ()


DEFAULT_PATTERNS = PatternLibrary(
    task_patterns=tuple(
        (task, patterns)
        for task, patterns in zip(
            TASK_PRIORITY,
            (
                CODE_GEN_PATTERNS,
                DEBUG_PATTERNS,
                REFACTOR_PATTERNS,
                EXPLAIN_PATTERNS,
                RESEARCH_PATTERNS,
                CREATIVE_PATTERNS,
                MATH_PATTERNS,
                QA_PATTERNS,
            ),
            strict=True,
        )
    ),
    stack_trace=STACK_TRACE_PATTERNS,
    structured_format=STRUCTURED_FORMAT_PATTERNS,
    recency=RECENCY_PATTERNS,
    high_stakes=HIGH_STAKES_PATTERNS,
    code_language=CODE_LANGUAGE_PATTERN,
    code_keyword=CODE_KEYWORD_PATTERN,
    fenced_code=FENCED_CODE_PATTERN,
    analytical_keywords=ANALYTICAL_KEYWORDS,
    code_keywords=CODE_KEYWORDS,
    creative_keywords=CREATIVE_KEYWORDS,
    complexity_keywords=COMPLEXITY_KEYWORDS,
)
