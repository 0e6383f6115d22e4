"""
LanguageTool Integration for GrammarCheck
=========================================
Comprehensive grammar checking with 3000+ rules.

Requires: pip install language-tool-python
Note: First run downloads the LanguageTool server (~200MB)
"""

__version__ = "1.0.0"


def is_available() -> bool:
    """Check if language_tool_python can be imported (does not start a server)."""
    try:
        import language_tool_python  # noqa: F401
        return True
    except ImportError:
        return False


def get_adapters():
    """Get the LanguageTool adapter class."""
    from .checker import LanguageToolAdapter
    return [LanguageToolAdapter]
