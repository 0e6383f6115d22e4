"""
Tests for the Style Engine
==========================
Tests for StyleAdapter, readability analysis and the Proselint wrapper.
"""

import pytest

from grammarcheck.style.proselint import ProselintWrapper, StyleIssue


def _checks(result):
    return [m.check_name for m in result.issues]


class _NoGradeTextstat:
    """textstat stand-in whose grade formula fails like a missing corpus."""

    def __init__(self, textstat):
        self._textstat = textstat

    def lexicon_count(self, text, removepunct=True):
        return self._textstat.lexicon_count(text, removepunct=removepunct)

    def flesch_kincaid_grade(self, text):
        raise LookupError("Resource cmudict not found.")


@pytest.fixture
def adapter():
    """Style adapter without Proselint so results are predictable."""
    from grammarcheck.style.checker import StyleAdapter
    adapter = StyleAdapter(use_proselint=False)
    if not adapter.is_available():
        pytest.skip(f"Style engine not available: {adapter.init_error}")
    return adapter


class TestStyleAdapter:
    """Tests for StyleAdapter."""

    def test_passive_voice(self, adapter):
        text = "The report was written by the team."
        passive = [m for m in adapter.analyze(text).issues if m.check_name == "passive_voice"]
        assert len(passive) == 1
        assert text[passive[0].start:passive[0].end] == "was written"

    def test_adjectives_not_passive(self, adapter):
        """Participles that usually act as adjectives are ignored."""
        assert "passive_voice" not in _checks(adapter.analyze("The team was excited about it."))

    def test_passive_can_be_disabled(self):
        from grammarcheck.style.checker import StyleAdapter
        adapter = StyleAdapter(use_proselint=False, check_passive_voice=False)
        if not adapter.is_available():
            pytest.skip("Style engine not available")
        assert "passive_voice" not in _checks(adapter.analyze("The report was written by the team."))

    def test_wordy_phrase(self, adapter):
        text = "In order to win, we practice."
        wordy = [m for m in adapter.analyze(text).issues if m.check_name == "wordy_phrase"]
        assert len(wordy) == 1
        match = wordy[0]
        assert text[match.start:match.end] == "In order to"
        assert match.replacement == "To"
        assert match.style_category == "word_choice"

    def test_redundancy(self, adapter):
        text = "The end result was fine."
        redundant = [m for m in adapter.analyze(text).issues if m.check_name == "redundancy"]
        assert len(redundant) == 1
        assert redundant[0].replacement == "result"

    def test_weak_modifier(self, adapter):
        assert "weak_modifier" in _checks(adapter.analyze("It was really good."))

    def test_long_sentence(self, adapter):
        text = " ".join(["word"] * 40) + "."
        long = [m for m in adapter.analyze(text).issues if m.check_name == "long_sentence"]
        assert len(long) == 1
        assert long[0].severity_hint == "warning"
        assert (long[0].start, long[0].end) == (0, len(text))

    def test_long_sentence_without_grade(self, adapter, monkeypatch):
        """A failing grade computation leaves the other checks intact."""
        readability = adapter._readability
        monkeypatch.setattr(readability, "_textstat", _NoGradeTextstat(readability._textstat))
        text = "The report was written by the team " + " ".join(["again"] * 40) + "."
        result = adapter.analyze(text)
        assert result.success
        assert {"passive_voice", "long_sentence"} <= set(_checks(result))
        long = [m for m in result.issues if m.check_name == "long_sentence"][0]
        assert "grade" not in long.message

    def test_short_sentences_pass(self, adapter):
        assert "long_sentence" not in _checks(adapter.analyze("Short one. Another short one."))

    def test_offsets_inside_text(self, adapter):
        text = "In order to help, the end result was written very quickly by the team."
        for match in adapter.analyze(text).issues:
            assert 0 <= match.start <= match.end <= len(text)


class TestReadabilityAnalyzer:
    """Tests for ReadabilityAnalyzer."""

    def test_sentence_spans(self):
        from grammarcheck.style.readability import ReadabilityAnalyzer
        analyzer = ReadabilityAnalyzer()
        if not analyzer.is_available:
            pytest.skip("textstat not available")
        text = "One two three.  Four five!"
        spans = [(text[s.start:s.end], s.word_count) for s in analyzer.sentences(text)]
        assert spans == [("One two three.", 3), ("Four five!", 2)]

    def test_grade_failure_leaves_grade_unset(self, monkeypatch):
        from grammarcheck.style.readability import ReadabilityAnalyzer
        analyzer = ReadabilityAnalyzer()
        if not analyzer.is_available:
            pytest.skip("textstat not available")
        monkeypatch.setattr(analyzer, "_textstat", _NoGradeTextstat(analyzer._textstat))
        long = analyzer.long_sentences(" ".join(["word"] * 12) + ".", max_words=10)
        assert len(long) == 1
        assert long[0].word_count == 12
        assert long[0].grade_level is None


class TestProselintWrapper:
    """Tests for ProselintWrapper."""

    def test_is_available(self):
        wrapper = ProselintWrapper()
        assert isinstance(wrapper.is_available, bool)

    def test_parse_tuple_format(self):
        """The tools.lint tuple format is parsed positionally."""
        sug = ("cliches.write_good", "Cliché.", 1, 2, 5, 10, 5, "warning", ["x"])
        assert ProselintWrapper._parse(sug) == StyleIssue(
            check_name="cliches.write_good", message="Cliché.", start=5, end=10,
            severity="warning", replacement="x")

    def test_parse_unknown_format(self):
        assert ProselintWrapper._parse(("too", "short")) is None

    def test_category(self):
        wrapper = ProselintWrapper()
        assert wrapper.get_category("cliches.hell") == "style"
        assert wrapper.get_category("jargon.misc") == "word_choice"
        assert wrapper.get_category("typography.symbols.curly_quotes") == "punctuation"
        assert wrapper.get_category("unknown.check") == "style"

    def test_skip_checks(self):
        wrapper = ProselintWrapper(skip_checks=["hedging"])
        assert wrapper._should_skip("misc.passive")
        assert wrapper._should_skip("hedging.misc")
        assert not wrapper._should_skip("cliches.hell")

    def test_check_offsets(self):
        wrapper = ProselintWrapper()
        if not wrapper.is_available:
            pytest.skip("proselint not available")
        text = "It is what it is. At the end of the day, we win."
        for issue in wrapper.check(text):
            assert 0 <= issue.start <= issue.end <= len(text)
