"""
Issue Normalizer
================
Maps each engine's raw issue type onto the canonical Issue.

One mapping function per raw type. Every mapped issue is validated
against the analyzed text; an issue whose range falls outside the text or
whose original text does not match is dropped and logged as an adapter
data-quality problem.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config_logging import NormalizationError, get_logger
from .base import GrammarMatch, PatternMatch, RawIssue, SpellingMatch, StyleMatch
from .models import Issue, IssueCategory, Severity, Suggestion, parse_category
from .text_normalizer import context_snippet

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.normalizer')

MAX_SUGGESTIONS = 5
SUGGESTION_DECAY = 0.1

# LanguageTool category ids -> issue category
LT_CATEGORY_MAP = {
    'TYPOS': IssueCategory.SPELLING,
    'GRAMMAR': IssueCategory.GRAMMAR,
    'PUNCTUATION': IssueCategory.PUNCTUATION,
    'TYPOGRAPHY': IssueCategory.PUNCTUATION,
    'STYLE': IssueCategory.STYLE,
    'REDUNDANCY': IssueCategory.STYLE,
    'PLAIN_ENGLISH': IssueCategory.STYLE,
    'CONFUSED_WORDS': IssueCategory.WORD_CHOICE,
    'COLLOCATIONS': IssueCategory.WORD_CHOICE,
    'SEMANTICS': IssueCategory.WORD_CHOICE,
    'CASING': IssueCategory.GRAMMAR,
    'MISC': IssueCategory.GRAMMAR,
}

# LanguageTool issue types -> severity
LT_SEVERITY_MAP = {
    'misspelling': Severity.ERROR,
    'grammar': Severity.ERROR,
    'typographical': Severity.WARNING,
    'duplication': Severity.WARNING,
    'inconsistency': Severity.WARNING,
    'style': Severity.SUGGESTION,
    'locale-violation': Severity.SUGGESTION,
    'register': Severity.SUGGESTION,
}

LT_CONFIDENCE = {
    IssueCategory.SPELLING: 0.85,
    IssueCategory.GRAMMAR: 0.85,
    IssueCategory.PUNCTUATION: 0.8,
    IssueCategory.WORD_CHOICE: 0.75,
    IssueCategory.STYLE: 0.65,
    IssueCategory.IDIOM: 0.7,
}

_Fields = Tuple[int, int, IssueCategory, Severity, str, Sequence[str], float, str]


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _from_pattern(raw: PatternMatch) -> _Fields:
    return (raw.offset, raw.length, raw.category, raw.severity, raw.message,
            raw.replacements, raw.confidence, raw.rule_id)


def _from_spelling(raw: SpellingMatch) -> _Fields:
    return (raw.start, raw.end - raw.start, IssueCategory.SPELLING, Severity.ERROR,
            f'Possible spelling mistake: "{raw.word}"',
            [c.term for c in raw.candidates], raw.engine_confidence, raw.rule_id)


def _from_grammar(raw: GrammarMatch) -> _Fields:
    if raw.issue_type == 'misspelling':
        category = IssueCategory.SPELLING
    else:
        category = LT_CATEGORY_MAP.get(str(raw.lt_category).upper(), IssueCategory.GRAMMAR)
    severity = LT_SEVERITY_MAP.get(raw.issue_type, Severity.WARNING)
    return (raw.offset, raw.error_length, category, severity, raw.message,
            raw.replacements, LT_CONFIDENCE[category], raw.rule_id)


def _from_style(raw: StyleMatch) -> _Fields:
    try:
        category = parse_category(raw.style_category)
    except ValueError:
        category = IssueCategory.STYLE
    try:
        severity = Severity(raw.severity_hint)
    except ValueError:
        severity = Severity.SUGGESTION
    return (raw.start, raw.end - raw.start, category, severity, raw.message,
            [raw.replacement] if raw.replacement else [], raw.confidence, raw.check_name)


_MAPPERS: Dict[type, Callable[..., _Fields]] = {
    PatternMatch: _from_pattern,
    SpellingMatch: _from_spelling,
    GrammarMatch: _from_grammar,
    StyleMatch: _from_style,
}


class IssueNormalizer:
    """Converts raw engine output into validated canonical issues."""

    def __init__(self, context_radius: int = 30, max_suggestions: int = MAX_SUGGESTIONS):
        self.context_radius = context_radius
        self.max_suggestions = max_suggestions
        self.dropped_count = 0

    def normalize(self, raw_issues: Sequence[RawIssue], text: str,
                  run_id: str = "run") -> List[Issue]:
        """
        Map and validate raw issues.

        Args:
            raw_issues: Raw output of the orchestrator, in priority order
            text: The analyzed text every offset refers to
            run_id: Prefix for issue ids (unique per analysis run)
        """
        issues = []
        for raw in raw_issues:
            try:
                issue = self.normalize_one(raw, text, f"{run_id}-{len(issues) + 1}")
            except NormalizationError as e:
                self.dropped_count += 1
                _logger.warning(f"Dropped invalid issue: {e.message}", **e.details)
                continue
            issues.append(issue)
        return issues

    def normalize_one(self, raw: RawIssue, text: str, issue_id: str) -> Issue:
        """
        Map one raw issue.

        Raises:
            NormalizationError: unknown raw type or range/text mismatch
        """
        mapper = _MAPPERS.get(type(raw))
        engine = getattr(raw, 'engine', None)
        if mapper is None:
            raise NormalizationError(f"Unknown raw issue type {type(raw).__name__}", engine=engine)

        offset, length, category, severity, message, replacements, confidence, rule_id = mapper(raw)
        self._validate(raw, text, offset, length, engine)
        original = text[offset:offset + length]

        return Issue(
            id=issue_id,
            category=category,
            severity=severity,
            offset=offset,
            length=length,
            original_text=original,
            message=message,
            suggestions=self._suggestions(original, replacements, confidence),
            confidence=_clamp(confidence),
            source=engine or '',
            rule_id=rule_id,
            context_snippet=context_snippet(text, offset, length, self.context_radius),
        )

    @staticmethod
    def _validate(raw: RawIssue, text: str, offset: int, length: int, engine: Optional[str]):
        if offset < 0 or length < 0 or offset + length > len(text):
            raise NormalizationError(
                f"Range [{offset}, {offset + length}) outside text of length {len(text)}",
                engine=engine, offset=offset, length=length)
        expected = getattr(raw, 'matched_text', None) or getattr(raw, 'word', None)
        if expected is not None and text[offset:offset + length] != expected:
            raise NormalizationError(
                f"Text at [{offset}, {offset + length}) does not match {expected!r}",
                engine=engine, offset=offset, length=length)

    def _suggestions(self, original: str, replacements: Sequence[str],
                     confidence: float) -> Tuple[Suggestion, ...]:
        seen = set()
        suggestions = []
        for text in replacements:
            if text is None or text == original or text in seen:
                continue
            seen.add(text)
            decay = 1.0 - SUGGESTION_DECAY * len(suggestions)
            suggestions.append(Suggestion(text=text, confidence=_clamp(confidence * decay)))
            if len(suggestions) >= self.max_suggestions:
                break
        return tuple(suggestions)
