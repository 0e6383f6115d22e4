"""
Style Engine for GrammarCheck
=============================
Passive voice, wordiness, redundancy, long sentences and Proselint checks.

Requires: pip install textstat proselint
"""

__version__ = "1.0.0"


def is_available() -> bool:
    """Check if textstat can be imported; proselint is optional."""
    try:
        import textstat  # noqa: F401
        return True
    except ImportError:
        return False


def get_adapters():
    """Get the style adapter class."""
    from .checker import StyleAdapter
    return [StyleAdapter]
