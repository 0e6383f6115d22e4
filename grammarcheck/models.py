"""
GrammarCheck Data Model
=======================
Canonical issue, suggestion, health and result types shared by every
pipeline stage.

Issues and suggestions are immutable once produced; the service hands the
same objects to the cache, the working set and the caller.
"""

import dataclasses
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

__version__ = "1.0.0"


class IssueCategory(Enum):
    """Kinds of writing problems."""
    SPELLING = "spelling"
    GRAMMAR = "grammar"
    PUNCTUATION = "punctuation"
    STYLE = "style"
    WORD_CHOICE = "word_choice"
    IDIOM = "idiom"


class Severity(Enum):
    """How strongly an issue should be surfaced."""
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class Classification(Enum):
    """Safety tier for applying a suggestion."""
    AUTO_FIXABLE = "auto-fixable"
    SEMI_FIXABLE = "semi-fixable"
    MANUAL_ONLY = "manual-only"


ALL_CATEGORIES: FrozenSet[IssueCategory] = frozenset(IssueCategory)


@dataclass(frozen=True)
class Suggestion:
    """A replacement candidate for an issue's original text."""
    text: str
    confidence: float = 0.0
    classification: Classification = Classification.MANUAL_ONLY
    safety_score: float = 0.0
    complexity_score: float = 1.0
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'confidence': self.confidence,
            'classification': self.classification.value,
            'safety_score': self.safety_score,
            'complexity_score': self.complexity_score,
            'reasoning': self.reasoning,
        }


@dataclass(frozen=True)
class Issue:
    """
    One positioned writing problem in the analyzed text.

    Invariant: text[offset:offset + length] == original_text.
    """
    id: str
    category: IssueCategory
    severity: Severity
    offset: int
    length: int
    original_text: str
    message: str
    suggestions: Tuple[Suggestion, ...] = ()
    confidence: float = 0.0
    source: str = ""
    rule_id: str = ""
    context_snippet: str = ""

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def best_suggestion(self) -> Optional[Suggestion]:
        return self.suggestions[0] if self.suggestions else None

    def replace(self, **changes) -> 'Issue':
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for callers."""
        return {
            'id': self.id,
            'category': self.category.value,
            'severity': self.severity.value,
            'offset': self.offset,
            'length': self.length,
            'original_text': self.original_text,
            'message': self.message,
            'suggestions': [s.to_dict() for s in self.suggestions],
            'confidence': self.confidence,
            'source': self.source,
            'rule_id': self.rule_id,
            'context_snippet': self.context_snippet,
        }


@dataclass
class CheckOptions:
    """Per-call options for check_text."""
    categories: FrozenSet[IssueCategory] = ALL_CATEGORIES
    language: str = "en-US"

    @classmethod
    def from_value(cls, value: Union['CheckOptions', Mapping[str, Any], None],
                   default_categories: Iterable[Any] = (),
                   default_language: str = "en-US") -> 'CheckOptions':
        """Build options from a mapping, falling back to service defaults."""
        if isinstance(value, CheckOptions):
            return value
        value = value or {}
        categories = value.get('categories') or list(default_categories) or list(ALL_CATEGORIES)
        return cls(
            categories=frozenset(parse_category(c) for c in categories),
            language=value.get('language') or default_language,
        )

    def signature(self) -> str:
        """Stable string identifying options that change analysis output."""
        cats = ','.join(sorted(c.value for c in self.categories))
        return f"{self.language}:{cats}"

    @property
    def locale(self) -> str:
        """Language tag in dictionary form (en_US)."""
        return self.language.replace('-', '_')


def parse_category(value: Any) -> IssueCategory:
    if isinstance(value, IssueCategory):
        return value
    return IssueCategory(str(value).lower())


@dataclass
class EngineHealthRecord:
    """Per-adapter call counters."""
    name: str
    call_count: int = 0
    total_latency_ms: float = 0.0
    success_count: int = 0
    error_count: int = 0
    timeout_count: int = 0
    issues_contributed: int = 0
    last_used: Optional[float] = None
    last_error: Optional[str] = None
    available: bool = True
    status: str = "healthy"

    @property
    def average_latency_ms(self) -> float:
        if not self.call_count:
            return 0.0
        return self.total_latency_ms / self.call_count

    @property
    def failure_rate(self) -> float:
        if not self.call_count:
            return 0.0
        return (self.error_count + self.timeout_count) / self.call_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'call_count': self.call_count,
            'total_latency_ms': round(self.total_latency_ms, 2),
            'average_latency_ms': round(self.average_latency_ms, 2),
            'success_count': self.success_count,
            'error_count': self.error_count,
            'timeout_count': self.timeout_count,
            'failure_rate': round(self.failure_rate, 3),
            'issues_contributed': self.issues_contributed,
            'last_used': self.last_used,
            'last_error': self.last_error,
            'available': self.available,
            'status': self.status,
        }


@dataclass
class HealthReport:
    """Snapshot of engine health with recommendations."""
    per_engine: List[EngineHealthRecord] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    overall_status: str = "healthy"
    cache: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'per_engine': [r.to_dict() for r in self.per_engine],
            'recommendations': list(self.recommendations),
            'overall_status': self.overall_status,
            'cache': dict(self.cache),
        }


@dataclass
class CheckStatistics:
    """Statistics for one check_text call."""
    total_issues: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_classification: Dict[str, int] = field(default_factory=dict)
    processing_time_ms: float = 0.0
    quality_score: float = 100.0
    from_cache: bool = False
    near_duplicate: bool = False
    engines_used: List[str] = field(default_factory=list)
    engine_latencies: Dict[str, float] = field(default_factory=dict)
    fallback_used: List[str] = field(default_factory=list)
    partial: bool = False
    raw_issue_count: int = 0
    deduplication_efficiency: float = 0.0
    request_id: str = ""
    skipped_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class CheckResult:
    """Result of one check_text call."""
    issues: List[Issue] = field(default_factory=list)
    statistics: CheckStatistics = field(default_factory=CheckStatistics)
    analyzed_text: str = ""
    fingerprint: str = ""

    @classmethod
    def empty(cls, request_id: str = "", reason: Optional[str] = None,
              processing_time_ms: float = 0.0) -> 'CheckResult':
        return cls(statistics=CheckStatistics(
            request_id=request_id,
            skipped_reason=reason,
            processing_time_ms=processing_time_ms,
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'issues': [i.to_dict() for i in self.issues],
            'statistics': self.statistics.to_dict(),
            'analyzed_text': self.analyzed_text,
            'fingerprint': self.fingerprint,
        }
