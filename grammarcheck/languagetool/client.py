"""
LanguageTool Client for GrammarCheck
====================================
Wraps the language_tool_python library for grammar checking.

Features:
- Local Java server or remote LanguageTool server
- Rule filtering for rules that duplicate other engines
- Technical term whitelist
- Match attribute access across library versions

Requires: pip install language-tool-python
Note: First run downloads the LanguageTool server (~200MB) and needs Java
"""

import threading
from typing import List, Dict, Any, Iterable, Optional, Set

from config_logging import AdapterError, get_logger
from ..base import GrammarMatch, IntegrationBase

_logger = get_logger('grammarcheck.languagetool')


def _match_attr(match, *names, default=None):
    """Read a Match attribute under its camelCase or snake_case name."""
    for name in names:
        if hasattr(match, name):
            return getattr(match, name)
    return default


class LanguageToolClient(IntegrationBase):
    """
    LanguageTool integration for comprehensive grammar checking.

    One client owns one server process; close() shuts it down.
    """

    INTEGRATION_NAME = "LanguageTool"
    INTEGRATION_VERSION = "1.0.0"

    # Rules that overlap with the style and rule engines
    SKIP_RULES: Set[str] = {
        'WHITESPACE_RULE',
        'DOUBLE_WHITESPACE',
        'CONTRACTION_SPELLING',
    }

    TECHNICAL_WHITELIST: Set[str] = {
        'api', 'sdk', 'gui', 'cli', 'backend', 'frontend',
        'microservice', 'kubernetes', 'docker', 'devops',
        'readme', 'changelog', 'npm', 'yaml', 'json',
    }

    def __init__(self, language: str = 'en-US', remote_server: Optional[str] = None,
                 disabled_rules: Iterable[str] = (), cache_size: int = 1000):
        """
        Initialize LanguageTool client.

        Args:
            language: Language code (default: 'en-US')
            remote_server: URL of a running LanguageTool server; a local
                server is started when omitted
            disabled_rules: Additional rule ids to drop
            cache_size: Server-side result cache size (local server only)
        """
        super().__init__()
        self.language = language
        self.remote_server = remote_server
        self.cache_size = cache_size
        self.skip_rules = set(self.SKIP_RULES) | set(disabled_rules)
        self._tool = None
        # A LanguageTool instance serializes requests to its server
        self._lock = threading.Lock()
        self._init_tool()

    def _init_tool(self):
        """Initialize LanguageTool (starts a local Java server unless remote)."""
        try:
            import language_tool_python

            if self.remote_server:
                self._tool = language_tool_python.LanguageTool(
                    self.language, remote_server=self.remote_server
                )
            else:
                self._tool = language_tool_python.LanguageTool(
                    self.language,
                    config={'cacheSize': self.cache_size, 'pipelineCaching': True}
                )
            self._available = True

        except ImportError as e:
            self._error = f"language-tool-python not installed: {e}"
            self._available = False

        except Exception as e:
            # Java missing, download failure, server start failure
            self._error = f"LanguageTool initialization failed: {e}"
            self._available = False

    @property
    def is_available(self) -> bool:
        """Check if LanguageTool is available."""
        return self._available and self._tool is not None

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the LanguageTool integration."""
        return {
            'available': self.is_available,
            'language': self.language if self.is_available else None,
            'remote_server': self.remote_server,
            'error': self._error,
            'skip_rules': sorted(self.skip_rules),
        }

    def check(self, text: str, engine: str = 'languagetool') -> List[GrammarMatch]:
        """
        Check text for grammar issues.

        Raises:
            AdapterError: if the server is unavailable or the request fails
        """
        if not self.is_available:
            raise AdapterError(self._error or "LanguageTool not available", engine=engine)

        try:
            with self._lock:
                matches = self._tool.check(text)
        except Exception as e:
            raise AdapterError(f"LanguageTool check failed: {e}", engine=engine) from e

        issues = []
        for match in matches:
            rule_id = _match_attr(match, 'ruleId', 'rule_id', default='')
            if rule_id in self.skip_rules:
                continue

            offset = _match_attr(match, 'offset', default=0)
            length = _match_attr(match, 'errorLength', 'error_length', default=0)
            if self._is_whitelisted_term(text[offset:offset + length]):
                continue

            issues.append(GrammarMatch(
                engine=engine,
                offset=offset,
                error_length=length,
                message=_match_attr(match, 'message', default=''),
                replacements=tuple(_match_attr(match, 'replacements', default=None) or ())[:5],
                rule_id=rule_id,
                lt_category=_match_attr(match, 'category', default='MISC') or 'MISC',
                issue_type=_match_attr(match, 'ruleIssueType', 'rule_issue_type', default='') or '',
                context=_match_attr(match, 'context', default='') or '',
                sentence=_match_attr(match, 'sentence', default='') or '',
            ))

        return issues

    def _is_whitelisted_term(self, error_text: str) -> bool:
        return error_text.lower() in self.TECHNICAL_WHITELIST

    def close(self):
        """Shut down the LanguageTool server."""
        if self._tool:
            try:
                self._tool.close()
            except Exception as e:
                _logger.warning(f"LanguageTool shutdown failed: {e}")
            self._tool = None
            self._available = False
