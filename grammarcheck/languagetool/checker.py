"""
LanguageTool Engine Adapter
===========================
The primary, heaviest grammar engine. Runs behind a per-adapter timeout;
the orchestrator substitutes the basic grammar engine when it fails.
"""

from typing import Iterable, List, Optional

from ..base import EngineAdapter, RawIssue
from ..models import CheckOptions, IssueCategory

__version__ = "1.0.0"


class LanguageToolAdapter(EngineAdapter):
    """Grammar, punctuation and style checking via LanguageTool."""

    ADAPTER_NAME = "languagetool"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({
        IssueCategory.GRAMMAR, IssueCategory.PUNCTUATION, IssueCategory.STYLE,
        IssueCategory.WORD_CHOICE, IssueCategory.SPELLING,
    })

    def __init__(self, enabled: bool = True, language: str = 'en-US',
                 remote_server: Optional[str] = None,
                 disabled_rules: Iterable[str] = (), cache_size: int = 1000):
        super().__init__(enabled)
        self.language = language
        self.remote_server = remote_server
        self.disabled_rules = list(disabled_rules)
        self.cache_size = cache_size
        self._client = None

    def _initialize(self) -> bool:
        from .client import LanguageToolClient
        self._client = LanguageToolClient(
            language=self.language,
            remote_server=self.remote_server,
            disabled_rules=self.disabled_rules,
            cache_size=self.cache_size,
        )
        self._init_error = self._client.error
        return self._client.is_available

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        return list(self._client.check(text, engine=self.ADAPTER_NAME))

    def get_status(self):
        status = super().get_status()
        if self._client is not None:
            status['integration'] = self._client.get_status()
        return status

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
            self._initialized = False
