"""
Tests for the Suggestion Classifier
===================================
Confidence, safety and complexity scoring and the fixability decision.
"""

import pytest

from grammarcheck.classifier import SuggestionClassifier
from grammarcheck.config import ClassifierConfig
from grammarcheck.models import Classification, IssueCategory

from .fakes import make_issue


@pytest.fixture
def classifier():
    return SuggestionClassifier(ClassifierConfig())


class TestPatterns:
    """Tests for known-pattern recognition."""

    def test_common_misspelling(self, classifier):
        assert classifier.auto_pattern("teh", "the") == "common_misspelling"
        assert classifier.auto_pattern("recieve", "receive") == "common_misspelling"

    def test_short_single_edit(self, classifier):
        assert classifier.auto_pattern("cat", "cart") == "single_edit"

    def test_single_word(self, classifier):
        assert classifier.auto_pattern("colour", "color") == "single_word"

    def test_no_pattern(self, classifier):
        assert classifier.auto_pattern("in order to", "to") is None

    def test_manual_reasons(self, classifier):
        assert classifier.manual_reason("x", "y" * 60) is not None
        assert classifier.manual_reason("x", "It rained. We stayed inside.") is not None
        assert classifier.manual_reason("x", "we left because it rained") is not None
        assert classifier.manual_reason("x", "one two three four five") is not None
        assert classifier.manual_reason("teh", "the") is None


class TestScores:
    """Tests for the individual scores."""

    def test_meaning_preservation(self, classifier):
        assert classifier.meaning_preservation("has", "have") == 1.0
        assert classifier.meaning_preservation("in order to", "to") == pytest.approx(1 / 3)

    def test_reversibility(self, classifier):
        assert classifier.reversibility("teh", "the") == 1.0
        assert classifier.reversibility("a b", "c d") == 0.8
        assert classifier.reversibility("in order to", "to") == 0.5

    def test_ambiguity(self, classifier):
        assert classifier.ambiguity("the") == 1.0
        assert classifier.ambiguity("could have") == 0.8
        assert classifier.ambiguity("one two three four") == 0.5

    def test_complexity_trivial(self, classifier):
        assert classifier.complexity("teh", "the") == 0.0

    def test_complexity_grows_with_restructuring(self, classifier):
        simple = classifier.complexity("has", "have")
        restructured = classifier.complexity("it", "it, however, was not the case")
        assert simple < 0.1
        assert restructured > 0.5


class TestClassify:
    """Tests for the fixability decision."""

    def test_misspelling_auto_fixable(self, classifier):
        issue = make_issue("1", 0, "teh", confidence=0.95)
        result = classifier.classify(issue, "the")
        assert result.classification == Classification.AUTO_FIXABLE
        assert result.pattern == "common_misspelling"
        assert result.safety_score > 0.9
        assert result.complexity_score == 0.0
        assert "High confidence" in result.reasoning

    def test_agreement_fix_auto_fixable(self, classifier):
        issue = make_issue("1", 2, "has", category=IssueCategory.GRAMMAR, confidence=0.9)
        result = classifier.classify(issue, "have")
        assert result.classification == Classification.AUTO_FIXABLE

    def test_less_confident_fix_is_semi_fixable(self, classifier):
        issue = make_issue("1", 2, "has", category=IssueCategory.GRAMMAR, confidence=0.5)
        result = classifier.classify(issue, "have")
        assert result.classification == Classification.SEMI_FIXABLE
        assert "recommend review" in result.reasoning

    def test_relaxed_mode_lowers_thresholds(self):
        """The same suggestion is auto-fixable outside conservative mode."""
        classifier = SuggestionClassifier(ClassifierConfig(conservative_mode=False))
        issue = make_issue("1", 2, "has", category=IssueCategory.GRAMMAR, confidence=0.5)
        assert classifier.classify(issue, "have").classification == Classification.AUTO_FIXABLE

    def test_long_rewrite_manual_only(self, classifier):
        """Long replacements need a human regardless of confidence."""
        issue = make_issue("1", 0, "The results was good", category=IssueCategory.GRAMMAR,
                           confidence=0.99)
        suggestion = "The results were good, although the sample size was too small to be sure."
        result = classifier.classify(issue, suggestion)
        assert result.classification == Classification.MANUAL_ONLY
        assert result.pattern == "complex"
        assert "requires manual review" in result.reasoning

    def test_missing_text_manual_only(self, classifier):
        issue = make_issue("1", 0, "teh")
        assert classifier.classify(issue, "").classification == Classification.MANUAL_ONLY

    def test_internal_error_manual_only(self, classifier, monkeypatch):
        def boom(original, suggestion):
            raise RuntimeError("broken scorer")

        monkeypatch.setattr(classifier, "complexity", boom)
        result = classifier.classify(make_issue("1", 0, "teh"), "the")
        assert result.classification == Classification.MANUAL_ONLY
        assert "Classification failed" in result.reasoning

    def test_scores_in_range(self, classifier):
        cases = [("teh", "the"), ("in order to", "to"), ("it", "it, however, was not")]
        for original, suggestion in cases:
            result = classifier.classify(make_issue("1", 0, original), suggestion)
            for score in (result.confidence, result.safety_score, result.complexity_score):
                assert 0.0 <= score <= 1.0

    def test_deterministic(self, classifier):
        issue = make_issue("1", 0, "in order to", category=IssueCategory.STYLE, confidence=0.7)
        assert classifier.classify(issue, "to") == classifier.classify(issue, "to")


class TestClassifyIssue:
    """Tests for classify_issue."""

    def test_classifies_every_suggestion(self, classifier):
        issue = make_issue("1", 0, "teh", confidence=0.95, suggestions=("the", "tea"))
        classified = classifier.classify_issue(issue)
        assert [s.text for s in classified.suggestions] == ["the", "tea"]
        assert classified.suggestions[0].classification == Classification.AUTO_FIXABLE
        assert all(s.reasoning for s in classified.suggestions)

    def test_original_untouched(self, classifier):
        issue = make_issue("1", 0, "teh", suggestions=("the",))
        classifier.classify_issue(issue)
        assert issue.suggestions[0].classification == Classification.MANUAL_ONLY
        assert issue.suggestions[0].reasoning == ""

    def test_idempotent(self, classifier):
        issue = make_issue("1", 0, "teh", confidence=0.95, suggestions=("the", "tea"))
        once = classifier.classify_issue(issue)
        assert classifier.classify_issue(once) == once
