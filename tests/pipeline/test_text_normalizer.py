"""
Tests for the Text Normalizer
=============================
Markup stripping, whitespace collapsing and fingerprints.
"""

import pytest

from grammarcheck.text_normalizer import (
    clean_text,
    context_snippet,
    fingerprint,
    jaccard_similarity,
    normalize,
    word_count,
    word_set,
)


class TestCleanText:
    """Tests for clean_text."""

    def test_strips_tags(self):
        """Tags become whitespace that is then collapsed."""
        assert clean_text("<p>Hello <b>world</b></p>") == "Hello world"

    def test_drops_script_and_style_blocks(self):
        """Script and style contents are not text."""
        raw = "<style>p { color: red; }</style>Text <script>var x = 1;</script>here"
        assert clean_text(raw) == "Text here"

    def test_decodes_entities(self):
        assert clean_text("Fish &amp; chips &lt;3") == "Fish & chips <3"

    def test_keeps_comparisons(self):
        """Angle brackets that do not form a tag are text."""
        text = "Use x < y and y > z to compare values."
        assert clean_text(text) == text

    def test_strips_escaped_markup(self):
        """Entity-escaped tags are stripped like tags."""
        assert clean_text("&lt;b&gt;bold&lt;/b&gt; text here") == "bold text here"

    def test_decoded_comparisons_kept(self):
        raw = "<p>If a &lt; b and c &gt; d then stop.</p>"
        assert clean_text(raw) == "If a < b and c > d then stop."

    def test_collapses_whitespace(self):
        assert clean_text("  a\n\tb   c ") == "a b c"

    def test_empty_input(self):
        assert clean_text("") == ""
        assert clean_text(None) == ""


class TestFingerprint:
    """Tests for fingerprint."""

    def test_deterministic(self):
        assert fingerprint("The quick brown fox.") == fingerprint("The quick brown fox.")

    def test_differs_for_different_text(self):
        assert fingerprint("The quick brown fox.") != fingerprint("The quick brown fox!")

    def test_prefixed_by_length(self):
        assert fingerprint("abc").startswith("3-")
        assert fingerprint("a" * 26).startswith("1a-")


class TestNormalize:
    """Tests for normalize."""

    def test_normalizes_markup_and_whitespace(self):
        result = normalize("<p>I  has a\n dog.</p>")
        assert result.clean == "I has a dog."
        assert result.fingerprint == fingerprint("I has a dog.")

    def test_equivalent_markup_shares_fingerprint(self):
        """Only the clean text feeds the fingerprint."""
        assert normalize("<div>Hello   world</div>").fingerprint == normalize("Hello world").fingerprint

    def test_short_text_is_empty(self):
        """Text shorter than the minimum length normalizes to nothing."""
        result = normalize("ab")
        assert not result
        assert result.fingerprint == ""

    @pytest.mark.parametrize("raw", [
        "<p>If a &lt; b and c &gt; d then stop.</p>",
        "&lt;b&gt;bold&lt;/b&gt; text here",
        "&amp;lt;p&amp;gt; twice escaped",
        "Fish &amp; chips",
        "Use x < y and y > z to compare values.",
    ])
    def test_idempotent(self, raw):
        """Normalizing clean text again changes nothing."""
        once = normalize(raw)
        assert normalize(once.clean) == once

    def test_min_length_zero(self):
        result = normalize("ab", min_length=0)
        assert result.clean == "ab"
        assert len(result) == 2


class TestWordHelpers:
    """Tests for word_set, word_count and jaccard_similarity."""

    def test_word_set_ignores_case_and_punctuation(self):
        assert word_set("The cat, the hat!") == frozenset({"the", "cat", "hat"})

    def test_word_set_keeps_contractions(self):
        assert "don't" in word_set("I don't know.")

    def test_word_count(self):
        assert word_count("one two  three") == 3

    def test_jaccard(self):
        assert jaccard_similarity(frozenset({"a", "b"}), frozenset({"b", "c"})) == pytest.approx(1 / 3)
        assert jaccard_similarity(frozenset(), frozenset()) == 1.0
        assert jaccard_similarity(frozenset({"a"}), frozenset()) == 0.0


class TestContextSnippet:
    """Tests for context_snippet."""

    def test_clipped_both_sides(self):
        assert context_snippet("0123456789", 5, 1, radius=2) == "...34567..."

    def test_not_clipped(self):
        assert context_snippet("short text", 0, 5, radius=30) == "short text"
