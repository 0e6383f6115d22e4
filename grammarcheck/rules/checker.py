"""
Pattern Rule Engines
====================
Offline regex engines for common usage errors.

- PatternRuleAdapter: a/an, common misspellings, could of, homophones,
  repeated words, misused idioms, punctuation spacing
- BasicGrammarAdapter: subject-verb agreement and double negatives; the
  failover engine when LanguageTool is unavailable or too slow
"""

import re
from typing import Iterable, List, Optional

from ..base import EngineAdapter, PatternMatch, RawIssue
from ..models import CheckOptions, IssueCategory, Severity
from . import patterns

__version__ = "1.0.0"

_WORD_RE = re.compile(r"\b[A-Za-z]+\b")
_ARTICLE_RE = re.compile(r"\b(an?)\s+([A-Za-z][\w'-]*)", re.IGNORECASE)
_REPEAT_RE = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
_SPACE_BEFORE_PUNCT_RE = re.compile(r"(?<=\w)([ \t]+)([,;:!?]|\.(?!\.))")
_DOUBLE_PUNCT_RE = re.compile(r"([,;:!?])\1+|(?<!\.)\.\.(?!\.)")
_MISSING_SPACE_RE = re.compile(r"(?<=[a-z]),(?=[A-Za-z])")
_PREV_WORD_RE = re.compile(r"([\w']+)\W*$")


def match_case(original: str, replacement: str) -> str:
    """Carry the leading capital of original over to replacement."""
    if original[:1].isupper() and replacement[:1].islower():
        if original.isupper() and len(original) > 1:
            return replacement.upper()
        return replacement[0].upper() + replacement[1:]
    return replacement


def previous_word(text: str, index: int) -> str:
    m = _PREV_WORD_RE.search(text[:index])
    return m.group(1).lower() if m else ""


class PatternRuleAdapter(EngineAdapter):
    """Regex rules for common usage errors."""

    ADAPTER_NAME = "rules"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({
        IssueCategory.SPELLING, IssueCategory.GRAMMAR, IssueCategory.PUNCTUATION,
        IssueCategory.WORD_CHOICE, IssueCategory.IDIOM,
    })

    def __init__(self, enabled: bool = True, skip_rules: Optional[Iterable[str]] = None):
        super().__init__(enabled)
        self.skip_rules = set(skip_rules or ())
        self._usage_rules = []
        self._homophone_rules = []
        self._idiom_rules = []

    def _initialize(self) -> bool:
        self._usage_rules = [
            (re.compile(p, re.IGNORECASE), msg, repl, rule_id, conf)
            for p, msg, repl, rule_id, conf in patterns.USAGE_RULES
        ]
        self._homophone_rules = [
            (re.compile(p, re.IGNORECASE), msg, repl, rule_id, conf)
            for p, msg, repl, rule_id, conf in patterns.HOMOPHONE_RULES
        ]
        self._idiom_rules = [
            (re.compile(r'\b' + r'\s+'.join(map(re.escape, phrase.split())) + r'\b', re.IGNORECASE),
             phrase, correct)
            for phrase, correct in patterns.IDIOMS.items()
        ]
        return True

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        issues: List[RawIssue] = []
        issues.extend(self._check_articles(text))
        issues.extend(self._check_misspellings(text))
        issues.extend(self._check_templates(text, self._usage_rules, IssueCategory.WORD_CHOICE))
        issues.extend(self._check_templates(text, self._homophone_rules, IssueCategory.WORD_CHOICE))
        issues.extend(self._check_repeated_words(text))
        issues.extend(self._check_idioms(text))
        issues.extend(self._check_punctuation(text))
        return [i for i in issues if i.rule_id not in self.skip_rules]

    def _match(self, text: str, start: int, end: int, message: str, replacement: Optional[str],
               rule_id: str, category: IssueCategory, confidence: float,
               severity: Severity = Severity.WARNING) -> PatternMatch:
        return PatternMatch(
            engine=self.ADAPTER_NAME,
            offset=start,
            length=end - start,
            matched_text=text[start:end],
            message=message,
            replacements=(replacement,) if replacement is not None else (),
            rule_id=rule_id,
            category=category,
            confidence=confidence,
            severity=severity,
        )

    def _check_articles(self, text: str) -> List[PatternMatch]:
        """Check a/an usage."""
        issues = []
        for m in _ARTICLE_RE.finditer(text):
            article, word = m.group(1), m.group(2)
            lower = word.lower()
            # Acronyms and numbers follow pronunciation, not spelling
            if (word.isupper() and len(word) > 1) or word[0].isdigit():
                continue

            if article.lower() == 'a':
                vowel_sound = (lower[0] in 'aeiou' and lower not in patterns.CONSONANT_SOUND_WORDS) \
                    or lower in patterns.VOWEL_SOUND_WORDS
                if not vowel_sound:
                    continue
                issues.append(self._match(
                    text, m.start(1), m.end(1),
                    f'Use "an" before vowel sound: "{article} {word}"',
                    match_case(article, 'an'), 'GR001', IssueCategory.GRAMMAR, 0.9))
            else:
                consonant_sound = (lower[0] not in 'aeiouh' and lower not in patterns.VOWEL_SOUND_WORDS) \
                    or lower in patterns.CONSONANT_SOUND_WORDS
                if not consonant_sound:
                    continue
                issues.append(self._match(
                    text, m.start(1), m.end(1),
                    f'Use "a" before consonant sound: "{article} {word}"',
                    match_case(article, 'a'), 'GR002', IssueCategory.GRAMMAR, 0.9))
        return issues

    def _check_misspellings(self, text: str) -> List[PatternMatch]:
        issues = []
        for m in _WORD_RE.finditer(text):
            word = m.group()
            correct = patterns.COMMON_MISSPELLINGS.get(word.lower())
            if correct is None:
                continue
            issues.append(self._match(
                text, m.start(), m.end(),
                f'Common misspelling: "{word}"',
                match_case(word, correct), 'SP001', IssueCategory.SPELLING, 0.95, Severity.ERROR))
        return issues

    def _check_templates(self, text: str, rules, category: IssueCategory) -> List[PatternMatch]:
        issues = []
        for regex, message, template, rule_id, confidence in rules:
            for m in regex.finditer(text):
                groups = m.groups()
                replacement = match_case(m.group(), template.format(*groups))
                issues.append(self._match(
                    text, m.start(), m.end(),
                    message.format(*groups),
                    replacement, rule_id,
                    IssueCategory.GRAMMAR if rule_id == 'GR050' else category,
                    confidence))
        return issues

    def _check_repeated_words(self, text: str) -> List[PatternMatch]:
        issues = []
        for m in _REPEAT_RE.finditer(text):
            word = m.group(1)
            if word.lower() in patterns.ALLOWED_REPEATS or word.isdigit():
                continue
            issues.append(self._match(
                text, m.start(), m.end(),
                f'Repeated word: "{m.group()}"',
                word, 'REP001', IssueCategory.GRAMMAR, 0.9))
        return issues

    def _check_idioms(self, text: str) -> List[PatternMatch]:
        issues = []
        for regex, phrase, correct in self._idiom_rules:
            for m in regex.finditer(text):
                issues.append(self._match(
                    text, m.start(), m.end(),
                    f'Misused expression: "{m.group()}"',
                    match_case(m.group(), correct), 'ID001', IssueCategory.IDIOM, 0.85))
        return issues

    def _check_punctuation(self, text: str) -> List[PatternMatch]:
        issues = []
        for m in _SPACE_BEFORE_PUNCT_RE.finditer(text):
            issues.append(self._match(
                text, m.start(1), m.end(2),
                'Unexpected space before punctuation',
                m.group(2), 'PU001', IssueCategory.PUNCTUATION, 0.9))
        for m in _DOUBLE_PUNCT_RE.finditer(text):
            issues.append(self._match(
                text, m.start(), m.end(),
                f'Repeated punctuation: "{m.group()}"',
                m.group()[0], 'PU002', IssueCategory.PUNCTUATION, 0.85))
        for m in _MISSING_SPACE_RE.finditer(text):
            issues.append(self._match(
                text, m.start(), m.end(),
                'Missing space after comma',
                ', ', 'PU003', IssueCategory.PUNCTUATION, 0.8))
        return issues


class BasicGrammarAdapter(EngineAdapter):
    """Light grammar rules: subject-verb agreement and double negatives."""

    ADAPTER_NAME = "basic_grammar"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({IssueCategory.GRAMMAR})

    _PRONOUN_VERB_RE = re.compile(
        r"\b(I|you|we|they|he|she|it)\s+(has|have|is|are|am|was|were|does|do|doesn't|don't)\b",
        re.IGNORECASE
    )
    _SINGULAR_RE = re.compile(
        r'\b(each|every|everyone|everybody|someone|somebody|anyone|anybody|'
        r'nobody|nothing|either|neither)\s+(?:of\s+\w+\s+)?(are|were|have)\b',
        re.IGNORECASE
    )
    _PLURAL_RE = re.compile(
        r'\b(both|few|many|several)\s+(?:of\s+\w+\s+)?(is|was|has)\b',
        re.IGNORECASE
    )
    _DOUBLE_NEGATIVE_RE = re.compile(
        r"\b(don't|doesn't|didn't|won't|wouldn't|couldn't|shouldn't|can't|"
        r"isn't|aren't|wasn't|weren't|haven't|hasn't|not)\s+\w*\s*"
        r"(no|none|nothing|nobody|nowhere|never|neither)\b",
        re.IGNORECASE
    )

    def __init__(self, enabled: bool = True, check_double_negatives: bool = True):
        super().__init__(enabled)
        self.check_double_negatives = check_double_negatives

    def _initialize(self) -> bool:
        return True

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        issues: List[RawIssue] = []
        issues.extend(self._check_pronoun_agreement(text))
        issues.extend(self._check_quantifier_agreement(text))
        if self.check_double_negatives:
            issues.extend(self._check_double_negatives(text))
        return issues

    def _verb_issue(self, text: str, m, fixed: str, message: str, rule_id: str,
                    confidence: float) -> PatternMatch:
        verb = m.group(2)
        return PatternMatch(
            engine=self.ADAPTER_NAME,
            offset=m.start(2),
            length=len(verb),
            matched_text=verb,
            message=message,
            replacements=(match_case(verb, fixed),),
            rule_id=rule_id,
            category=IssueCategory.GRAMMAR,
            confidence=confidence,
            severity=Severity.ERROR,
        )

    def _check_pronoun_agreement(self, text: str) -> List[PatternMatch]:
        issues = []
        for m in self._PRONOUN_VERB_RE.finditer(text):
            pronoun, verb = m.group(1).lower(), m.group(2).lower()
            fixed = patterns.PRONOUN_AGREEMENT[pronoun].get(verb)
            if fixed is None:
                continue
            # "does he have", "let it do"
            if previous_word(text, m.start()) in patterns.AUXILIARY_PRECEDERS:
                continue
            issues.append(self._verb_issue(
                text, m, fixed,
                f'Subject-verb disagreement: "{m.group(1)}" takes "{fixed}"',
                'GR010', 0.9))
        return issues

    def _check_quantifier_agreement(self, text: str) -> List[PatternMatch]:
        issues = []
        for m in self._SINGULAR_RE.finditer(text):
            fixed = patterns.SINGULAR_QUANTIFIER_FIXES[m.group(2).lower()]
            issues.append(self._verb_issue(
                text, m, fixed,
                f'Subject-verb disagreement: "{m.group(1)}" takes singular verb',
                'GR020', 0.75))
        for m in self._PLURAL_RE.finditer(text):
            fixed = patterns.PLURAL_QUANTIFIER_FIXES[m.group(2).lower()]
            issues.append(self._verb_issue(
                text, m, fixed,
                f'Subject-verb disagreement: "{m.group(1)}" takes plural verb',
                'GR021', 0.75))
        return issues

    def _check_double_negatives(self, text: str) -> List[PatternMatch]:
        return [
            PatternMatch(
                engine=self.ADAPTER_NAME,
                offset=m.start(),
                length=m.end() - m.start(),
                matched_text=m.group(),
                message='Double negative detected; remove one negative to clarify meaning',
                replacements=(),
                rule_id='GR030',
                category=IssueCategory.GRAMMAR,
                confidence=0.6,
            )
            for m in self._DOUBLE_NEGATIVE_RE.finditer(text)
        ]
