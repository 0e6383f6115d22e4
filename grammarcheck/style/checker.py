"""
Style Engine Adapter
====================
Passive voice, wordy phrases, redundancy, weak modifiers and long
sentences, plus Proselint's editorial checks when it is installed.
"""

import re
from typing import Iterable, List

from config_logging import get_logger
from ..base import EngineAdapter, RawIssue, StyleMatch
from ..models import CheckOptions, IssueCategory
from ..rules.checker import match_case

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.style')

# Words ending in -ed/-en that are usually adjectives
PASSIVE_FALSE_POSITIVES = {
    'concerned', 'interested', 'required', 'needed', 'used', 'based',
    'related', 'associated', 'located', 'designed', 'intended',
    'supposed', 'expected', 'allowed', 'permitted',
    'tired', 'bored', 'excited', 'pleased', 'satisfied', 'disappointed',
    'surprised', 'amazed', 'confused', 'frustrated', 'married',
    'retired', 'qualified', 'experienced', 'skilled', 'trained',
    'dedicated', 'committed', 'motivated', 'determined', 'organized',
    'advanced', 'detailed', 'complicated', 'sophisticated', 'automated',
    'open', 'often', 'seven', 'eleven', 'even', 'ten', 'hidden', 'red', 'bed',
    'need', 'seed', 'feed', 'speed', 'indeed', 'bleed', 'shed',
}

PASSIVE_PATTERNS = [
    r'\b(?:is|are|was|were|be|been|being)\s+(\w+(?:ed|en))\b',
    r'\b(?:has|have|had)\s+been\s+(\w+(?:ed|en))\b',
    r'\b(?:will|shall|can|could|may|might|must|should|would)\s+be\s+(\w+(?:ed|en))\b',
]

# phrase -> concise replacement
WORDY_PHRASES = {
    'in order to': 'to',
    'in order for': 'for',
    'at this point in time': 'now',
    'at the present time': 'now',
    'due to the fact that': 'because',
    'owing to the fact that': 'because',
    'in light of the fact that': 'because',
    'in the event that': 'if',
    'for the purpose of': 'to',
    'with regard to': 'about',
    'with regards to': 'about',
    'in regard to': 'about',
    'with respect to': 'about',
    'in reference to': 'about',
    'prior to': 'before',
    'subsequent to': 'after',
    'at a later date': 'later',
    'a large number of': 'many',
    'a small number of': 'few',
    'a majority of': 'most',
    'in the near future': 'soon',
    'it should be noted that': 'note that',
    'as a matter of fact': 'in fact',
    'despite the fact that': 'although',
    'until such time as': 'until',
    'during the course of': 'during',
    'is able to': 'can',
    'is unable to': 'cannot',
    'has the ability to': 'can',
    'make a decision': 'decide',
    'reach a conclusion': 'conclude',
    'come to a conclusion': 'conclude',
    'give consideration to': 'consider',
    'take into consideration': 'consider',
    'make use of': 'use',
    'on a daily basis': 'daily',
    'on a regular basis': 'regularly',
    'whether or not': 'whether',
    'each and every': 'each',
    'first and foremost': 'first',
    'by means of': 'by',
    'in spite of': 'despite',
    'in the vicinity of': 'near',
    'in close proximity to': 'near',
}

# redundant pair -> the word that carries the meaning
REDUNDANT_PHRASES = {
    'very unique': 'unique',
    'end result': 'result',
    'final outcome': 'outcome',
    'past history': 'history',
    'future plans': 'plans',
    'return back': 'return',
    'revert back': 'revert',
    'repeat again': 'repeat',
    'close proximity': 'proximity',
    'completely destroyed': 'destroyed',
    'absolutely essential': 'essential',
    'free gift': 'gift',
    'added bonus': 'bonus',
    'advance planning': 'planning',
    'basic fundamentals': 'fundamentals',
    'unexpected surprise': 'surprise',
    'true facts': 'facts',
    'join together': 'join',
}

WEAK_MODIFIERS = ['very', 'really', 'quite', 'basically', 'actually',
                  'literally', 'totally', 'extremely', 'somewhat']


def _phrase_regex(phrase: str):
    return re.compile(r'\b' + r'\s+'.join(map(re.escape, phrase.split())) + r'\b', re.IGNORECASE)


class StyleAdapter(EngineAdapter):
    """Style and readability engine."""

    ADAPTER_NAME = "style"
    ADAPTER_VERSION = "1.0.0"
    CATEGORIES = frozenset({
        IssueCategory.STYLE, IssueCategory.WORD_CHOICE, IssueCategory.PUNCTUATION,
        IssueCategory.IDIOM, IssueCategory.GRAMMAR, IssueCategory.SPELLING,
    })

    def __init__(self, enabled: bool = True, use_proselint: bool = True,
                 skip_checks: Iterable[str] = (), check_passive_voice: bool = True,
                 max_sentence_words: int = 35):
        super().__init__(enabled)
        self.use_proselint = use_proselint
        self.skip_checks = list(skip_checks)
        self.check_passive_voice = check_passive_voice
        self.max_sentence_words = max_sentence_words
        self._readability = None
        self._proselint = None

    def _initialize(self) -> bool:
        from .readability import ReadabilityAnalyzer
        self._passive = [re.compile(p, re.IGNORECASE) for p in PASSIVE_PATTERNS]
        self._wordy = [(_phrase_regex(p), r) for p, r in WORDY_PHRASES.items()]
        self._redundant = [(_phrase_regex(p), r) for p, r in REDUNDANT_PHRASES.items()]
        self._weak = re.compile(r'\b(' + '|'.join(WEAK_MODIFIERS) + r')\b', re.IGNORECASE)

        self._readability = ReadabilityAnalyzer()
        if not self._readability.is_available:
            self._init_error = self._readability.error
            return False

        if self.use_proselint:
            from .proselint import ProselintWrapper
            wrapper = ProselintWrapper(self.skip_checks)
            if wrapper.is_available:
                self._proselint = wrapper
            else:
                _logger.info(f"Proselint checks disabled: {wrapper.error}")
        return True

    def _analyze_impl(self, text: str, options: CheckOptions) -> List[RawIssue]:
        issues: List[RawIssue] = []
        if self.check_passive_voice:
            issues.extend(self._check_passive(text))
        issues.extend(self._check_phrases(text, self._wordy, 'wordy_phrase',
                                          'Wordy phrase: "{0}"', 'word_choice', 0.7))
        issues.extend(self._check_phrases(text, self._redundant, 'redundancy',
                                          'Redundant phrase: "{0}"', 'style', 0.75))
        issues.extend(self._check_weak_modifiers(text))
        issues.extend(self._check_long_sentences(text))
        if self._proselint is not None:
            issues.extend(self._check_proselint(text))
        return issues

    def _style(self, start: int, end: int, message: str, check_name: str,
               replacement: str = "", category: str = 'style',
               confidence: float = 0.6, severity: str = 'suggestion') -> StyleMatch:
        return StyleMatch(
            engine=self.ADAPTER_NAME,
            start=start,
            end=end,
            message=message,
            check_name=check_name,
            replacement=replacement,
            style_category=category,
            severity_hint=severity,
            confidence=confidence,
        )

    def _check_passive(self, text: str) -> List[StyleMatch]:
        issues = []
        for regex in self._passive:
            for m in regex.finditer(text):
                if m.group(1).lower() in PASSIVE_FALSE_POSITIVES:
                    continue
                issues.append(self._style(
                    m.start(), m.end(),
                    f'Passive voice detected: "{m.group()}"; consider active voice',
                    'passive_voice', confidence=0.55))
        return issues

    def _check_phrases(self, text: str, rules, check_name: str, message: str,
                       category: str, confidence: float) -> List[StyleMatch]:
        issues = []
        for regex, replacement in rules:
            for m in regex.finditer(text):
                issues.append(self._style(
                    m.start(), m.end(), message.format(m.group()), check_name,
                    match_case(m.group(), replacement), category, confidence))
        return issues

    def _check_weak_modifiers(self, text: str) -> List[StyleMatch]:
        return [
            self._style(m.start(), m.end(),
                        f'Weak modifier "{m.group()}" adds little meaning',
                        'weak_modifier', confidence=0.5)
            for m in self._weak.finditer(text)
        ]

    def _check_long_sentences(self, text: str) -> List[StyleMatch]:
        matches = []
        for s in self._readability.long_sentences(text, self.max_sentence_words):
            detail = f'{s.word_count} words'
            if s.grade_level is not None:
                detail += f', grade {s.grade_level:.0f}'
            matches.append(self._style(s.start, s.end,
                                       f'Long sentence ({detail}); consider splitting it',
                                       'long_sentence', confidence=0.5, severity='warning'))
        return matches

    def _check_proselint(self, text: str) -> List[StyleMatch]:
        return [
            self._style(i.start, i.end, i.message, i.check_name, i.replacement,
                        self._proselint.get_category(i.check_name), 0.65,
                        'warning' if i.severity == 'error' else 'suggestion')
            for i in self._proselint.check(text)
        ]

    def get_status(self):
        status = super().get_status()
        status['proselint'] = self._proselint.get_status() if self._proselint else None
        return status
