"""
Proselint Wrapper for GrammarCheck
==================================
Editorial style rules from Strunk & White, Garner, Orwell and others.

Features:
- Cliché, jargon and redundancy detection
- Weasel word detection
- Works with both the registry API (v0.14+) and the tools.lint API

Requires: pip install proselint
"""

from typing import List, Dict, Set, Any, Iterable, Optional
from dataclasses import dataclass

from ..base import IntegrationBase


@dataclass
class StyleIssue:
    """A style issue found by Proselint."""
    check_name: str
    message: str
    start: int
    end: int
    severity: str
    replacement: str = ""


def _first(replacements) -> str:
    if isinstance(replacements, (list, tuple)):
        return str(replacements[0]) if replacements else ''
    return replacements or ''


# Module-level flag to prevent duplicate registration
_checks_registered = False


class ProselintWrapper(IntegrationBase):
    """Proselint integration for professional writing style."""

    INTEGRATION_NAME = "Proselint"
    INTEGRATION_VERSION = "1.0.0"

    # Checks covered by the style engine's own rules
    SKIP_CHECKS: Set[str] = {
        'misc.passive',
        'passive_voice',
        'misc.contractions',
        'typography.symbols.ellipsis',
        'typography.symbols.multiplication_symbol',
    }

    # Map proselint check families onto issue categories
    CATEGORY_MAP = {
        'cliches': 'style',
        'hedging': 'style',
        'redundancy': 'style',
        'jargon': 'word_choice',
        'weasel_words': 'style',
        'skunked_terms': 'word_choice',
        'lexical_illusions': 'grammar',
        'mixed_metaphors': 'idiom',
        'oxymorons': 'style',
        'sexism': 'word_choice',
        'uncomparables': 'grammar',
        'corporate_speak': 'word_choice',
        'archaism': 'word_choice',
        'typography': 'punctuation',
        'spelling': 'spelling',
    }

    def __init__(self, skip_checks: Iterable[str] = ()):
        """Initialize Proselint wrapper."""
        super().__init__()
        self.skip_checks = set(self.SKIP_CHECKS) | set(skip_checks)
        self._proselint = None
        self._default_config = None
        self._initialize()

    def _initialize(self):
        """Initialize proselint library."""
        global _checks_registered
        try:
            import proselint
        except ImportError as e:
            self._error = f"proselint not installed: {e}"
            self._available = False
            return

        self._proselint = proselint
        try:
            # Registry API (v0.14+): register all checks once
            from proselint.checks import __register__
            from proselint.registry import CheckRegistry
            from proselint.config import DEFAULT

            if not _checks_registered:
                registry = CheckRegistry()
                registry.register_many(__register__)
                _checks_registered = True
            self._default_config = DEFAULT
        except ImportError:
            # Older releases expose proselint.tools.lint(text)
            import proselint.tools  # noqa: F401
        self._available = True

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the Proselint integration."""
        return {
            'available': self.is_available,
            'error': self._error,
            'api': 'registry' if self._default_config is not None else 'tools.lint',
            'skip_checks': sorted(self.skip_checks),
        }

    def _lint(self, text: str) -> list:
        if self._default_config is not None:
            from proselint.tools import LintFile
            lint_file = LintFile(source='-', content=text)
            return lint_file.lint(self._default_config)
        return self._proselint.tools.lint(text)

    def check(self, text: str) -> List[StyleIssue]:
        """
        Check text for style issues.

        Offsets index text. Results in a format this wrapper does not
        recognize are skipped.
        """
        if not self.is_available:
            return []

        issues = []
        for sug in self._lint(text):
            parsed = self._parse(sug)
            if parsed is None or self._should_skip(parsed.check_name):
                continue
            issues.append(parsed)
        return issues

    @staticmethod
    def _parse(sug) -> Optional[StyleIssue]:
        # Registry API: LintResult(check_result=CheckResult(...), pos=(line, col))
        check_result = getattr(sug, 'check_result', None)
        if check_result is None and isinstance(sug, tuple) and len(sug) == 2 \
                and hasattr(sug[0], 'check_path'):
            check_result = sug[0]
        if check_result is not None:
            span = check_result.span or (0, 0)
            return StyleIssue(
                check_name=check_result.check_path,
                message=check_result.message,
                start=span[0],
                end=span[1],
                severity='warning',
                replacement=_first(check_result.replacements),
            )

        # tools.lint API: (check, message, line, column, start, end, extent, severity, replacements)
        try:
            return StyleIssue(
                check_name=sug[0],
                message=sug[1],
                start=sug[4],
                end=sug[5],
                severity=sug[7] if len(sug) > 7 else 'warning',
                replacement=_first(sug[8]) if len(sug) > 8 else '',
            )
        except (IndexError, TypeError):
            return None

    def _should_skip(self, check_name: str) -> bool:
        """Check if a rule should be skipped (prefix match)."""
        return any(check_name == skip or check_name.startswith(skip + '.') or skip in check_name
                   for skip in self.skip_checks)

    def get_category(self, check_name: str) -> str:
        """Issue category for a check name ('cliches.hell' -> 'style')."""
        for part in check_name.split('.'):
            if part in self.CATEGORY_MAP:
                return self.CATEGORY_MAP[part]
        return 'style'
