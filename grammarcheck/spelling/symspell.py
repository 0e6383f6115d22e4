"""
SymSpell Spell Checker for GrammarCheck
=======================================
Fast spell checking with symspellpy's bundled frequency dictionary.

Features:
- Symmetric delete edit-distance lookup
- Word frequency ranking for suggestions
- Custom dictionary support

Requires: pip install symspellpy
"""

from importlib.resources import files
from typing import Dict, List, Optional, Any, Set
from dataclasses import dataclass
from pathlib import Path

from config_logging import get_logger
from ..base import IntegrationBase, SpellingCandidate
from .tokens import iter_checkable_words

_logger = get_logger('grammarcheck.spelling.symspell')


@dataclass
class Misspelling:
    """A detected misspelling with suggestions."""
    word: str
    start: int
    end: int
    suggestions: List[SpellingCandidate]

    @property
    def best_suggestion(self) -> str:
        return self.suggestions[0].term if self.suggestions else ""


class SymSpellChecker(IntegrationBase):
    """SymSpell-based spell checker."""

    INTEGRATION_NAME = "SymSpell"
    INTEGRATION_VERSION = "1.0.0"

    # Dictionary filenames bundled with symspellpy
    FREQUENCY_DICT = "frequency_dictionary_en_82_765.txt"

    def __init__(
        self,
        max_edit_distance: int = 2,
        prefix_length: int = 7,
        custom_dictionary: Optional[Path] = None
    ):
        """
        Initialize SymSpell checker.

        Args:
            max_edit_distance: Maximum edit distance for corrections (1-3)
            prefix_length: Length of prefix to use for lookup
            custom_dictionary: Path to custom words file
        """
        super().__init__()
        self.max_edit_distance = max_edit_distance
        self.prefix_length = prefix_length
        self.custom_dictionary = custom_dictionary

        self._sym_spell = None
        self._custom_words: Set[str] = set()
        self._load_dictionaries()

    def _load_dictionaries(self):
        """Load frequency dictionaries."""
        try:
            from symspellpy import SymSpell, Verbosity
            self._Verbosity = Verbosity

            self._sym_spell = SymSpell(
                max_dictionary_edit_distance=self.max_edit_distance,
                prefix_length=self.prefix_length
            )

            package_dir = files("symspellpy")
            if not self._sym_spell.load_dictionary(
                str(package_dir / self.FREQUENCY_DICT),
                term_index=0,
                count_index=1
            ):
                self._error = f"Frequency dictionary not found: {self.FREQUENCY_DICT}"
                self._available = False
                return

            if self.custom_dictionary and Path(self.custom_dictionary).exists():
                self._load_custom_dictionary()

            self._available = True

        except ImportError as e:
            self._error = f"symspellpy not installed: {e}"
            self._available = False

        except (OSError, ValueError) as e:
            self._error = f"Failed to load dictionaries: {e}"
            self._available = False

    def _load_custom_dictionary(self):
        """Load custom technical terms dictionary."""
        try:
            with open(self.custom_dictionary, 'r', encoding='utf-8') as f:
                for line in f:
                    word = line.strip().lower()
                    if word and not word.startswith('#'):
                        self.add_word(word)
        except OSError as e:
            _logger.warning(f"Could not read custom dictionary: {e}",
                            path=str(self.custom_dictionary))

    def add_word(self, word: str, frequency: int = 1000000):
        """Add a word to the dictionary with a high frequency."""
        if self._sym_spell:
            self._custom_words.add(word.lower())
            self._sym_spell.create_dictionary_entry(word.lower(), frequency)

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the SymSpell integration."""
        status = {
            'available': self.is_available,
            'error': self._error,
            'max_edit_distance': self.max_edit_distance,
            'custom_words_count': len(self._custom_words),
        }

        if self.is_available and self._sym_spell:
            status['dictionary_size'] = len(self._sym_spell.words)

        return status

    def check_word(self, word: str) -> List[SpellingCandidate]:
        """
        Check a single word for spelling errors.

        Returns:
            Up to 5 candidates; empty if the word is known
        """
        if not self.is_available or not word:
            return []

        lower = word.lower()
        if len(word) < 2 or word.isdigit() or lower in self._custom_words:
            return []

        suggestions = self._sym_spell.lookup(
            lower,
            self._Verbosity.CLOSEST,
            max_edit_distance=self.max_edit_distance,
            include_unknown=False
        )

        results = []
        for suggestion in suggestions:
            if suggestion.distance == 0:
                return []
            results.append(SpellingCandidate(
                term=suggestion.term,
                distance=suggestion.distance,
                frequency=suggestion.count
            ))

        return results[:5]

    def check_text(self, text: str) -> List[Misspelling]:
        """
        Check text for spelling errors.

        Every occurrence is reported with its position; lookups are
        memoized per word.
        """
        if not self.is_available:
            return []

        memo: Dict[str, List[SpellingCandidate]] = {}
        misspellings = []

        for start, end, word in iter_checkable_words(text):
            lower = word.lower()
            if lower not in memo:
                memo[lower] = self.check_word(word)
            suggestions = memo[lower]
            if suggestions:
                misspellings.append(Misspelling(
                    word=word, start=start, end=end, suggestions=suggestions
                ))

        return misspellings

