"""
Spelling Engine Adapters
========================
Adapters exposing the PyEnchant and SymSpell integrations as engines.
"""

from typing import Iterable, List, Optional

from ..base import EngineAdapter, RawIssue, SpellingCandidate, SpellingMatch
from ..distance import edit_distance
from ..models import CheckOptions, IssueCategory
from ..rules.checker import match_case
from .tokens import iter_checkable_words

__version__ = "1.0.0"

# Engine confidence by edit distance of the best candidate
DICTIONARY_CONFIDENCE = {1: 0.85, 2: 0.8}
SYMSPELL_CONFIDENCE = {1: 0.9, 2: 0.75}


class DictionarySpellingAdapter(EngineAdapter):
    """Dictionary and morphology-aware spelling via PyEnchant."""

    ADAPTER_NAME = "dictionary"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({IssueCategory.SPELLING})

    def __init__(self, enabled: bool = True, language: str = 'en_US',
                 personal_dictionary: Optional[str] = None, max_suggestions: int = 5):
        super().__init__(enabled)
        self.language = language
        self.personal_dictionary = personal_dictionary
        self.max_suggestions = max_suggestions
        self._manager = None

    def _initialize(self) -> bool:
        from .enchant import DictionaryManager
        self._manager = DictionaryManager(self.language, self.personal_dictionary)
        self._init_error = self._manager.error
        return self._manager.is_available

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        issues: List[RawIssue] = []
        verdicts = {}

        for start, end, word in iter_checkable_words(text):
            key = word.lower()
            if key not in verdicts:
                verdicts[key] = self._manager.check(word, options.locale)
            if verdicts[key]:
                continue

            candidates = tuple(
                SpellingCandidate(term=match_case(word, s), distance=edit_distance(word.lower(), s.lower()))
                for s in self._manager.suggest(word, options.locale, self.max_suggestions)
            )
            best = candidates[0].distance if candidates else None
            issues.append(SpellingMatch(
                engine=self.ADAPTER_NAME,
                start=start,
                end=end,
                word=word,
                candidates=candidates,
                engine_confidence=DICTIONARY_CONFIDENCE.get(best, 0.7),
                rule_id='DICT_SPELLING',
            ))
        return issues

    def add_words(self, words: Iterable[str]):
        """Add words to the personal word list."""
        if self._manager is not None:
            for word in words:
                self._manager.add_word(word)

    def get_status(self):
        status = super().get_status()
        if self._manager is not None:
            status['integration'] = self._manager.get_status()
        return status


class SymSpellAdapter(EngineAdapter):
    """Fast approximate-match spelling suggestions via SymSpell."""

    ADAPTER_NAME = "symspell"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({IssueCategory.SPELLING})

    def __init__(self, enabled: bool = True, max_edit_distance: int = 2,
                 prefix_length: int = 7, custom_dictionary: Optional[str] = None):
        super().__init__(enabled)
        self.max_edit_distance = max_edit_distance
        self.prefix_length = prefix_length
        self.custom_dictionary = custom_dictionary
        self._checker = None

    def _initialize(self) -> bool:
        from .symspell import SymSpellChecker
        self._checker = SymSpellChecker(
            max_edit_distance=self.max_edit_distance,
            prefix_length=self.prefix_length,
            custom_dictionary=self.custom_dictionary,
        )
        self._init_error = self._checker.error
        return self._checker.is_available

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        return [
            SpellingMatch(
                engine=self.ADAPTER_NAME,
                start=m.start,
                end=m.end,
                word=m.word,
                candidates=tuple(
                    SpellingCandidate(match_case(m.word, c.term), c.distance, c.frequency)
                    for c in m.suggestions
                ),
                engine_confidence=SYMSPELL_CONFIDENCE.get(m.suggestions[0].distance, 0.6),
                rule_id='SYMSPELL',
            )
            for m in self._checker.check_text(text)
        ]

    def get_status(self):
        status = super().get_status()
        if self._checker is not None:
            status['integration'] = self._checker.get_status()
        return status
