"""
Test Doubles
============
Canned engine adapters, an editor bridge and a recording observer.
"""

import threading
import time
from typing import Iterable, List, Optional, Tuple

from grammarcheck.base import EngineAdapter, PatternMatch, SpellingCandidate, SpellingMatch
from grammarcheck.models import Issue, IssueCategory, Severity, Suggestion
from grammarcheck.scheduler import CheckObserver


class FakeAdapter(EngineAdapter):
    """
    Adapter returning canned raw issues.

    issues may be a list of raw issues or a callable taking the analyzed
    text. delay sleeps in the worker thread; raises is raised from
    analysis.
    """

    def __init__(self, name: str, issues=(), categories: Optional[Iterable[IssueCategory]] = None,
                 available: bool = True, delay: float = 0.0,
                 raises: Optional[Exception] = None, enabled: bool = True):
        self.ADAPTER_NAME = name
        self.CATEGORIES = frozenset(categories) if categories is not None else frozenset(IssueCategory)
        super().__init__(enabled)
        self._issues = issues
        self._can_start = available
        self.delay = delay
        self.raises = raises
        self.calls = 0
        self.texts: List[str] = []
        self.closed = False
        self._calls_lock = threading.Lock()

    def _initialize(self) -> bool:
        if not self._can_start:
            self._init_error = f"{self.ADAPTER_NAME} dependencies missing"
        return self._can_start

    def _analyze_impl(self, text, options):
        with self._calls_lock:
            self.calls += 1
            self.texts.append(text)
        if self.delay:
            time.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if callable(self._issues):
            return list(self._issues(text))
        return list(self._issues)

    def close(self):
        self.closed = True


def spelling_match(text: str, word: str, suggestion: str, engine: str = 'symspell',
                   confidence: float = 0.9) -> SpellingMatch:
    start = text.index(word)
    return SpellingMatch(
        engine=engine,
        start=start,
        end=start + len(word),
        word=word,
        candidates=(SpellingCandidate(term=suggestion, distance=1),),
        engine_confidence=confidence,
    )


def pattern_match(text: str, phrase: str, replacement: Optional[str], engine: str = 'rules',
                  category: IssueCategory = IssueCategory.GRAMMAR, confidence: float = 0.9,
                  rule_id: str = 'TEST001') -> PatternMatch:
    start = text.index(phrase)
    return PatternMatch(
        engine=engine,
        offset=start,
        length=len(phrase),
        matched_text=phrase,
        message=f'Problem with "{phrase}"',
        replacements=(replacement,) if replacement is not None else (),
        rule_id=rule_id,
        category=category,
        confidence=confidence,
        severity=Severity.WARNING,
    )


def make_issue(issue_id: str, offset: int, original: str,
               category: IssueCategory = IssueCategory.SPELLING, confidence: float = 0.9,
               source: str = 'rules', suggestions: Tuple[str, ...] = ('fix',)) -> Issue:
    return Issue(
        id=issue_id,
        category=category,
        severity=Severity.WARNING,
        offset=offset,
        length=len(original),
        original_text=original,
        message=f'Problem with "{original}"',
        suggestions=tuple(Suggestion(text=s, confidence=confidence) for s in suggestions),
        confidence=confidence,
        source=source,
    )


class RecordingEditor:
    """Editor bridge that records replacements."""

    def __init__(self, accept: bool = True, raises: Optional[Exception] = None):
        self.accept = accept
        self.raises = raises
        self.calls: List[Tuple[int, int, str]] = []

    def apply_replacement(self, offset: int, length: int, text: str) -> bool:
        self.calls.append((offset, length, text))
        if self.raises is not None:
            raise self.raises
        return self.accept


class RecordingObserver(CheckObserver):
    """Observer that keeps every notification."""

    def __init__(self):
        self.started: List[str] = []
        self.completed = []
        self.discarded = []
        self.cleared = 0
        self.transitions = []

    def on_check_started(self, fingerprint):
        self.started.append(fingerprint)

    def on_check_completed(self, result):
        self.completed.append(result)

    def on_check_discarded(self, result):
        self.discarded.append(result)

    def on_results_cleared(self):
        self.cleared += 1

    def on_state_changed(self, old, new):
        self.transitions.append((old, new))
