"""
Sentence Readability Analysis
=============================
Per-sentence word counts and grade levels using textstat.

Requires: pip install textstat
"""

import re
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from config_logging import get_logger
from ..base import IntegrationBase

_logger = get_logger('grammarcheck.style.readability')

_SENTENCE_RE = re.compile(r'[^.!?]+(?:[.!?]+|$)')


@dataclass
class SentenceStats:
    """Readability numbers for one sentence of the analyzed text."""
    start: int
    end: int
    word_count: int
    grade_level: Optional[float] = None


class ReadabilityAnalyzer(IntegrationBase):
    """textstat-backed sentence analysis."""

    INTEGRATION_NAME = "textstat"
    INTEGRATION_VERSION = "1.0.0"

    def __init__(self):
        super().__init__()
        self._textstat = None
        try:
            import textstat
            self._textstat = textstat
            self._available = True
        except ImportError as e:
            self._error = f"textstat not installed: {e}"
            self._available = False

    def get_status(self) -> Dict[str, Any]:
        return {'available': self.is_available, 'error': self._error}

    def sentences(self, text: str) -> List[SentenceStats]:
        """Split text into sentences with trimmed spans."""
        if not self.is_available:
            return []
        stats = []
        for m in _SENTENCE_RE.finditer(text):
            raw = m.group()
            stripped = raw.strip()
            if not stripped:
                continue
            start = m.start() + (len(raw) - len(raw.lstrip()))
            end = start + len(stripped)
            stats.append(SentenceStats(
                start=start,
                end=end,
                word_count=self._textstat.lexicon_count(stripped, removepunct=True),
            ))
        return stats

    def long_sentences(self, text: str, max_words: int) -> List[SentenceStats]:
        """
        Sentences over max_words, with their Flesch-Kincaid grade.

        The grade is left unset when textstat cannot compute it (newer
        releases need NLTK's cmudict corpus for syllable counts).
        """
        long = [s for s in self.sentences(text) if s.word_count > max_words]
        for s in long:
            try:
                s.grade_level = self._textstat.flesch_kincaid_grade(text[s.start:s.end])
            except Exception as e:
                _logger.warning(f"Grade level unavailable: {e}")
        return long
