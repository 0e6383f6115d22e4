"""
Dictionary Manager for GrammarCheck
===================================
Dictionary-backed spelling support via PyEnchant.

Features:
- Per-language dictionaries, created on first use
- Inflection-aware acceptance (known stem + regular suffix)
- Personal word list support

Requires: pip install pyenchant
Note: macOS may need: brew install enchant
"""

import threading
from typing import Dict, List, Set, Optional, Any
from pathlib import Path

from config_logging import get_logger
from ..base import IntegrationBase

_logger = get_logger('grammarcheck.spelling.enchant')

# (suffix, restore) pairs tried when a word is not in the dictionary
INFLECTION_SUFFIXES = [
    ('ies', 'y'), ('ied', 'y'), ('es', ''), ('s', ''),
    ('ed', ''), ('ed', 'e'), ('ing', ''), ('ing', 'e'),
    ('ly', ''), ('er', ''), ('est', ''), ('ness', ''),
]


class DictionaryManager(IntegrationBase):
    """Manages PyEnchant dictionaries and a personal word list."""

    INTEGRATION_NAME = "PyEnchant"
    INTEGRATION_VERSION = "1.0.0"

    def __init__(
        self,
        language: str = 'en_US',
        personal_dict: Optional[Path] = None
    ):
        """
        Initialize dictionary manager.

        Args:
            language: Default language (default: en_US)
            personal_dict: Path to personal word list
        """
        super().__init__()
        self.language = language
        self.personal_dict = personal_dict

        self._enchant = None
        self._dicts: Dict[str, Any] = {}
        self._personal_words: Set[str] = set()
        # Enchant dictionaries are not safe to share across threads
        self._lock = threading.Lock()

        self._initialize()

    def _initialize(self):
        """Initialize PyEnchant and load the default dictionary."""
        try:
            import enchant
            self._enchant = enchant

            self._dicts[self.language] = enchant.Dict(self.language)

            if self.personal_dict and Path(self.personal_dict).exists():
                self._load_personal_dictionary()

            self._available = True

        except ImportError as e:
            self._error = f"pyenchant not installed: {e}"
            self._available = False

        except Exception as e:
            # enchant raises DictNotFoundError for missing languages
            self._error = f"Failed to initialize: {e}"
            self._available = False

    def _load_personal_dictionary(self):
        """Load personal word list."""
        try:
            with open(self.personal_dict, 'r', encoding='utf-8') as f:
                for line in f:
                    word = line.strip().lower()
                    if word and not word.startswith('#'):
                        self._personal_words.add(word)
        except OSError as e:
            _logger.warning(f"Could not read personal dictionary: {e}",
                            path=str(self.personal_dict))

    def _dict_for(self, language: Optional[str]):
        """Dictionary for language, falling back to the default language."""
        language = language or self.language
        if language not in self._dicts:
            if self._enchant.dict_exists(language):
                self._dicts[language] = self._enchant.Dict(language)
            else:
                _logger.debug(f"No dictionary for {language}, using {self.language}",
                              language=language)
                self._dicts[language] = self._dicts[self.language]
        return self._dicts[language]

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the PyEnchant integration."""
        status = {
            'available': self.is_available,
            'error': self._error,
            'language': self.language,
            'loaded_languages': sorted(self._dicts),
            'personal_words_count': len(self._personal_words),
        }

        if self.is_available and self._enchant:
            status['available_languages'] = self._enchant.list_languages()

        return status

    def check(self, word: str, language: Optional[str] = None) -> bool:
        """
        Check if a word is spelled correctly.

        Accepts personal words, dictionary words, and regular inflections
        of dictionary words.
        """
        if self.is_personal_term(word):
            return True

        if not self.is_available:
            return True

        with self._lock:
            dictionary = self._dict_for(language)
            if dictionary.check(word) or dictionary.check(word.lower()):
                return True
            return self._check_inflection(dictionary, word.lower())

    def _check_inflection(self, dictionary, word: str) -> bool:
        for suffix, restore in INFLECTION_SUFFIXES:
            if not word.endswith(suffix) or len(word) - len(suffix) < 3:
                continue
            stem = word[:-len(suffix)] + restore
            if dictionary.check(stem):
                return True
            # running -> runn -> run
            if not restore and len(stem) > 3 and stem[-1] == stem[-2] and dictionary.check(stem[:-1]):
                return True
        return False

    def suggest(self, word: str, language: Optional[str] = None, limit: int = 5) -> List[str]:
        """Get spelling suggestions for a word."""
        if not self.is_available:
            return []
        with self._lock:
            return self._dict_for(language).suggest(word)[:limit]

    def add_word(self, word: str):
        """Add a word to the personal word list."""
        self._personal_words.add(word.lower())

    def is_personal_term(self, word: str) -> bool:
        """Check if a word is in the personal word list."""
        return word.lower() in self._personal_words
