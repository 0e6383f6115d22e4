"""
Spelling Engines for GrammarCheck
=================================
Dictionary and edit-distance spell checking.

Features:
- SymSpell: frequency-ranked suggestions, very fast
- PyEnchant: system dictionaries with inflection awareness

Requires: pip install symspellpy pyenchant
"""

__version__ = "1.0.0"


def is_available() -> bool:
    """Check if at least one spelling library can be imported."""
    try:
        import symspellpy  # noqa: F401
        return True
    except ImportError:
        pass
    try:
        import enchant  # noqa: F401
        return True
    except ImportError:
        return False


def get_adapters():
    """Get the spelling adapter classes."""
    from .checker import DictionarySpellingAdapter, SymSpellAdapter
    return [DictionarySpellingAdapter, SymSpellAdapter]
