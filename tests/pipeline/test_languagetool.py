"""
Tests for the LanguageTool Engine
=================================
Tests for LanguageToolClient and LanguageToolAdapter.

The language_tool_python server is replaced with an in-process stand-in,
so no Java runtime or download is needed.
"""

from dataclasses import dataclass, field
from typing import List

import pytest

from grammarcheck.base import GrammarMatch
from grammarcheck.issue_normalizer import IssueNormalizer
from grammarcheck.models import IssueCategory, Severity


@dataclass
class StubMatch:
    """Mimics language_tool_python.Match (camelCase attributes)."""
    ruleId: str
    offset: int
    errorLength: int
    message: str
    replacements: List[str] = field(default_factory=list)
    category: str = "GRAMMAR"
    ruleIssueType: str = "grammar"
    context: str = ""
    sentence: str = ""


class StubTool:
    """Stands in for language_tool_python.LanguageTool."""

    matches: List[StubMatch] = []
    fail = False

    def __init__(self, language, **kwargs):
        self.language = language
        self.kwargs = kwargs
        self.closed = False

    def check(self, text):
        if self.fail:
            raise RuntimeError("server went away")
        return list(self.matches)

    def close(self):
        self.closed = True


@pytest.fixture
def stub_tool(monkeypatch):
    try:
        import language_tool_python
    except ImportError:
        pytest.skip("language_tool_python not available")
    StubTool.matches = []
    StubTool.fail = False
    monkeypatch.setattr(language_tool_python, "LanguageTool", StubTool)
    return StubTool


class TestLanguageToolClient:
    """Tests for LanguageToolClient."""

    def test_maps_matches(self, stub_tool):
        """Matches become GrammarMatch records with offsets into the text."""
        from grammarcheck.languagetool.client import LanguageToolClient

        text = "He go to school."
        stub_tool.matches = [StubMatch("HE_VERB_AGR", 3, 2, "Use 'goes'.", ["goes", "went"])]
        client = LanguageToolClient()
        assert client.is_available

        matches = client.check(text)
        assert len(matches) == 1
        match = matches[0]
        assert isinstance(match, GrammarMatch)
        assert (match.offset, match.error_length) == (3, 2)
        assert match.replacements == ("goes", "went")
        assert match.rule_id == "HE_VERB_AGR"
        assert match.issue_type == "grammar"

    def test_skips_rules_and_whitelisted_terms(self, stub_tool):
        from grammarcheck.languagetool.client import LanguageToolClient

        text = "Call the api  now."
        stub_tool.matches = [
            StubMatch("MORFOLOGIK_RULE_EN_US", 9, 3, "Possible spelling mistake", ["apt"],
                      category="TYPOS", ruleIssueType="misspelling"),
            StubMatch("WHITESPACE_RULE", 12, 2, "Whitespace repetition", [" "]),
            StubMatch("CUSTOM_RULE", 0, 4, "Custom", ["Phone"]),
        ]
        client = LanguageToolClient(disabled_rules=["CUSTOM_RULE"])
        assert client.check(text) == []

    def test_remote_server(self, stub_tool):
        from grammarcheck.languagetool.client import LanguageToolClient

        client = LanguageToolClient(remote_server="http://localhost:8081")
        assert client._tool.kwargs == {'remote_server': "http://localhost:8081"}

    def test_check_failure_raises_adapter_error(self, stub_tool):
        from config_logging import AdapterError
        from grammarcheck.languagetool.client import LanguageToolClient

        stub_tool.fail = True
        client = LanguageToolClient()
        with pytest.raises(AdapterError):
            client.check("Some text here.")

    def test_close(self, stub_tool):
        from grammarcheck.languagetool.client import LanguageToolClient

        client = LanguageToolClient()
        tool = client._tool
        client.close()
        assert tool.closed
        assert not client.is_available


class TestLanguageToolAdapter:
    """Tests for LanguageToolAdapter."""

    def test_analyze(self, stub_tool):
        from grammarcheck.languagetool.checker import LanguageToolAdapter

        stub_tool.matches = [StubMatch("HE_VERB_AGR", 3, 2, "Use 'goes'.", ["goes"])]
        adapter = LanguageToolAdapter()
        result = adapter.analyze("He go to school.")
        assert result.success
        assert [m.rule_id for m in result.issues] == ["HE_VERB_AGR"]
        assert result.issues[0].engine == "languagetool"

    def test_failure_is_reported_not_raised(self, stub_tool):
        from grammarcheck.languagetool.checker import LanguageToolAdapter

        adapter = LanguageToolAdapter()
        assert adapter.is_available()
        stub_tool.fail = True
        result = adapter.analyze("He go to school.")
        assert not result.success
        assert "LanguageTool check failed" in result.error

    def test_disabled_adapter_does_not_start(self):
        from grammarcheck.languagetool.checker import LanguageToolAdapter

        adapter = LanguageToolAdapter(enabled=False)
        assert adapter.is_available() is False
        assert adapter.analyze("He go to school.").skipped == "disabled"


class TestGrammarMatchNormalization:
    """LanguageTool categories and issue types map onto canonical issues."""

    def _normalize(self, text, match):
        return IssueNormalizer().normalize_one(match, text, "lt-1")

    def test_grammar(self):
        text = "He go to school."
        match = GrammarMatch("languagetool", 3, 2, "Use 'goes'.", ("goes",), "HE_VERB_AGR",
                             "GRAMMAR", "grammar")
        issue = self._normalize(text, match)
        assert issue.category == IssueCategory.GRAMMAR
        assert issue.severity == Severity.ERROR
        assert issue.original_text == "go"

    def test_typos_are_spelling(self):
        text = "A speling error."
        match = GrammarMatch("languagetool", 2, 7, "Possible spelling mistake", ("spelling",),
                             "MORFOLOGIK_RULE_EN_US", "TYPOS", "misspelling")
        issue = self._normalize(text, match)
        assert issue.category == IssueCategory.SPELLING
        assert issue.severity == Severity.ERROR

    def test_confused_words(self):
        text = "Their is a cat."
        match = GrammarMatch("languagetool", 0, 5, "Did you mean 'There'?", ("There",),
                             "THERE_THEIR", "CONFUSED_WORDS", "grammar")
        assert self._normalize(text, match).category == IssueCategory.WORD_CHOICE

    def test_style_is_a_suggestion(self):
        text = "It is very unique."
        match = GrammarMatch("languagetool", 6, 11, "Unique is absolute.", ("unique",),
                             "VERY_UNIQUE", "STYLE", "style")
        issue = self._normalize(text, match)
        assert issue.category == IssueCategory.STYLE
        assert issue.severity == Severity.SUGGESTION

    def test_unknown_category_defaults_to_grammar(self):
        text = "Something odd."
        match = GrammarMatch("languagetool", 0, 9, "Odd.", (), "ODD", "NEW_CATEGORY", "")
        issue = self._normalize(text, match)
        assert issue.category == IssueCategory.GRAMMAR
        assert issue.severity == Severity.WARNING
