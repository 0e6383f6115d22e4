"""
Rule Engines for GrammarCheck
=============================
Offline regex engines. No third-party dependencies; always available.
"""

__version__ = "1.0.0"


def is_available() -> bool:
    """Rule engines only need the standard library."""
    return True


def get_status() -> dict:
    from . import patterns
    return {
        'available': True,
        'misspellings': len(patterns.COMMON_MISSPELLINGS),
        'idioms': len(patterns.IDIOMS),
    }


def get_adapters():
    """Get the rule engine adapter classes."""
    from .checker import PatternRuleAdapter, BasicGrammarAdapter
    return [PatternRuleAdapter, BasicGrammarAdapter]
