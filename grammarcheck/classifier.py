"""
Suggestion Intelligence Classifier
==================================
Decides whether a suggestion may be applied automatically.

Classification tiers:
- AUTO_FIXABLE: confident, safe, simple fixes (typos, obvious corrections)
- SEMI_FIXABLE: grammar and style changes that benefit from a review
- MANUAL_ONLY: complex changes that need human judgment

Scores:
- confidence: engine confidence, length similarity, pattern recognition,
  category confidence, edit-distance similarity
- safety: meaning preservation, category base safety, reversibility,
  ambiguity
- complexity: word-count delta, char-count delta, punctuation-shape
  changes, connective words

The classifier holds no mutable state: identical inputs always classify
identically.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config_logging import ClassificationError, get_logger
from .config import ClassifierConfig
from .distance import edit_distance, edit_similarity
from .models import Classification, Issue, IssueCategory, Suggestion
from .rules.patterns import COMMON_MISSPELLINGS

__version__ = "1.0.0"

_logger = get_logger('grammarcheck.classifier')

CONFIDENCE_WEIGHTS = {
    'engine': 0.3,
    'length_similarity': 0.2,
    'pattern': 0.25,
    'category': 0.15,
    'edit_similarity': 0.1,
}

SAFETY_WEIGHTS = {
    'meaning': 0.35,
    'category': 0.25,
    'reversibility': 0.15,
    'ambiguity': 0.25,
}

CATEGORY_CONFIDENCE = {
    IssueCategory.SPELLING: 0.9,
    IssueCategory.PUNCTUATION: 0.85,
    IssueCategory.GRAMMAR: 0.8,
    IssueCategory.WORD_CHOICE: 0.7,
    IssueCategory.IDIOM: 0.7,
    IssueCategory.STYLE: 0.6,
}

CATEGORY_SAFETY = {
    IssueCategory.SPELLING: 0.95,
    IssueCategory.PUNCTUATION: 0.9,
    IssueCategory.GRAMMAR: 0.75,
    IssueCategory.WORD_CHOICE: 0.65,
    IssueCategory.IDIOM: 0.6,
    IssueCategory.STYLE: 0.55,
}

# Known-pattern name -> pattern confidence
PATTERN_CONFIDENCE = {
    'common_misspelling': 0.95,
    'single_edit': 0.9,
    'punctuation': 0.9,
    'single_word': 0.8,
    'complex': 0.2,
    None: 0.5,
}

_WORD_ONLY_RE = re.compile(r'^\w+$')
_PUNCT_FIX_RE = re.compile(r"""[\s.,;:!?'"]+|[A-Za-z]+[.,;:!?'"]|[.,;:!?'"][A-Za-z]+""")
_MULTI_SENTENCE_RE = re.compile(r'[.!?]\s+\w.*[.!?]')
_CONNECTIVE_RE = re.compile(
    r'\b(because|although|however|therefore|meanwhile|furthermore|'
    r'nevertheless|consequently)\b', re.IGNORECASE)
_NON_WORD_RE = re.compile(r'\W')
_PUNCT_SHAPE_RE = re.compile(r'[\w\s]')


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one suggestion."""
    classification: Classification
    confidence: float
    safety_score: float
    complexity_score: float
    reasoning: str
    pattern: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'classification': self.classification.value,
            'confidence': self.confidence,
            'safety_score': self.safety_score,
            'complexity_score': self.complexity_score,
            'reasoning': self.reasoning,
            'pattern': self.pattern,
        }


def _words(text: str):
    return text.split()


def _manual(reason: str) -> ClassificationResult:
    return ClassificationResult(
        classification=Classification.MANUAL_ONLY,
        confidence=0.3,
        safety_score=0.3,
        complexity_score=0.8,
        reasoning=reason,
    )


class SuggestionClassifier:
    """
    Scores suggestions for confidence, safety and complexity.

    Usage:
        classifier = SuggestionClassifier(ClassifierConfig())
        result = classifier.classify(issue, "the")
        issue = classifier.classify_issue(issue)
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def auto_pattern(self, original: str, suggestion: str) -> Optional[str]:
        """Name of the known safe pattern the change matches, if any."""
        distance = edit_distance(original, suggestion)
        if original.lower() in COMMON_MISSPELLINGS and \
                COMMON_MISSPELLINGS[original.lower()] == suggestion.lower():
            return 'common_misspelling'
        if len(original) <= 5 and distance == 1:
            return 'single_edit'
        if _PUNCT_FIX_RE.fullmatch(suggestion) and \
                _NON_WORD_RE.sub('', original) == _NON_WORD_RE.sub('', suggestion):
            return 'punctuation'
        if _WORD_ONLY_RE.match(original) and _WORD_ONLY_RE.match(suggestion) and distance <= 2:
            return 'single_word'
        return None

    def manual_reason(self, original: str, suggestion: str) -> Optional[str]:
        """Why the change always needs a human, if it does."""
        if len(suggestion) >= self.config.manual_min_length:
            return f"Long replacement ({len(suggestion)} characters)"
        if _MULTI_SENTENCE_RE.search(suggestion):
            return "Replacement spans multiple sentences"
        if _CONNECTIVE_RE.search(suggestion) and len(_words(suggestion)) > 3:
            return "Replacement restructures the sentence"
        if abs(len(_words(original)) - len(_words(suggestion))) > 3:
            return "Replacement changes sentence structure"
        return None

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def confidence(self, category: IssueCategory, original: str, suggestion: str,
                   engine_confidence: float, pattern: Optional[str]) -> float:
        longest = max(len(original), len(suggestion))
        length_similarity = min(len(original), len(suggestion)) / longest if longest else 1.0
        score = (
            engine_confidence * CONFIDENCE_WEIGHTS['engine']
            + length_similarity * CONFIDENCE_WEIGHTS['length_similarity']
            + PATTERN_CONFIDENCE[pattern] * CONFIDENCE_WEIGHTS['pattern']
            + CATEGORY_CONFIDENCE.get(category, 0.5) * CONFIDENCE_WEIGHTS['category']
            + edit_similarity(original, suggestion) * CONFIDENCE_WEIGHTS['edit_similarity']
        )
        return min(1.0, max(0.0, score))

    @staticmethod
    def meaning_preservation(original: str, suggestion: str) -> float:
        """Share of words kept; near-identical words count as kept."""
        original_words = [w.lower() for w in _words(original)]
        suggestion_words = [w.lower() for w in _words(suggestion)]
        longest = max(len(original_words), len(suggestion_words))
        if not longest:
            return 1.0
        preserved = sum(
            1 for word in original_words
            if any(word == other or edit_similarity(word, other) >= 0.5 for other in suggestion_words)
        )
        return min(1.0, preserved / longest)

    @staticmethod
    def reversibility(original: str, suggestion: str) -> float:
        original_words, suggestion_words = _words(original), _words(suggestion)
        if len(original_words) == 1 and len(suggestion_words) == 1 \
                and edit_distance(original, suggestion) <= 2:
            return 1.0
        if len(original_words) == len(suggestion_words):
            return 0.8
        return 0.5

    @staticmethod
    def ambiguity(suggestion: str) -> float:
        """1.0 for unambiguous single words, lower for longer text."""
        words = _words(suggestion)
        if len(words) <= 1 and len(suggestion) <= 15:
            return 1.0
        if len(words) <= 3:
            return 0.8
        return 0.5

    def safety(self, category: IssueCategory, original: str, suggestion: str) -> float:
        return (
            self.meaning_preservation(original, suggestion) * SAFETY_WEIGHTS['meaning']
            + CATEGORY_SAFETY.get(category, 0.5) * SAFETY_WEIGHTS['category']
            + self.reversibility(original, suggestion) * SAFETY_WEIGHTS['reversibility']
            + self.ambiguity(suggestion) * SAFETY_WEIGHTS['ambiguity']
        )

    @staticmethod
    def complexity(original: str, suggestion: str) -> float:
        """0.0 for trivial edits up to 1.0 for restructuring."""
        word_diff = abs(len(_words(original)) - len(_words(suggestion)))
        char_diff = abs(len(original) - len(suggestion))
        structural = edit_distance(_PUNCT_SHAPE_RE.sub('', original),
                                   _PUNCT_SHAPE_RE.sub('', suggestion))
        semantic = min(1.0, word_diff / 5 + (0.5 if _CONNECTIVE_RE.search(suggestion) else 0.0))
        return (
            min(1.0, word_diff / 3) * 0.3
            + min(1.0, char_diff / 20) * 0.2
            + min(1.0, structural / 5) * 0.3
            + semantic * 0.2
        )

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def classify(self, issue: Issue, suggestion_text: str,
                 engine_confidence: Optional[float] = None) -> ClassificationResult:
        """
        Classify one suggestion for an issue.

        Never raises: any internal error yields MANUAL_ONLY.
        """
        try:
            return self._classify(issue, suggestion_text, engine_confidence)
        except Exception as e:
            error = ClassificationError(f"Classification failed: {e}", issue_id=issue.id)
            _logger.warning(error.message, issue_id=issue.id)
            return _manual(error.message)

    def _classify(self, issue: Issue, suggestion: str,
                  engine_confidence: Optional[float]) -> ClassificationResult:
        original = issue.original_text
        if not original or not suggestion:
            return _manual("Missing original or suggested text")

        engine_confidence = issue.confidence if engine_confidence is None else engine_confidence
        manual = self.manual_reason(original, suggestion)
        pattern = 'complex' if manual else self.auto_pattern(original, suggestion)

        confidence = self.confidence(issue.category, original, suggestion, engine_confidence, pattern)
        safety = self.safety(issue.category, original, suggestion)
        complexity = self.complexity(original, suggestion)
        auto, semi = self.config.auto_threshold, self.config.semi_threshold

        if manual:
            classification = Classification.MANUAL_ONLY
        elif pattern and confidence >= auto and safety >= self.config.pattern_min_safety \
                and complexity <= self.config.pattern_max_complexity:
            classification = Classification.AUTO_FIXABLE
        else:
            overall = 0.4 * confidence + 0.4 * safety + 0.2 * (1.0 - complexity)
            if overall >= auto:
                classification = Classification.AUTO_FIXABLE
            elif overall >= semi:
                classification = Classification.SEMI_FIXABLE
            else:
                classification = Classification.MANUAL_ONLY

        return ClassificationResult(
            classification=classification,
            confidence=round(confidence, 4),
            safety_score=round(safety, 4),
            complexity_score=round(complexity, 4),
            reasoning=self._reasoning(classification, safety, complexity, pattern, manual),
            pattern=pattern,
        )

    @staticmethod
    def _reasoning(classification: Classification, safety: float, complexity: float,
                   pattern: Optional[str], manual: Optional[str]) -> str:
        reasons = []
        if classification == Classification.AUTO_FIXABLE:
            reasons.append('High confidence suggestion')
            if pattern:
                reasons.append(f"matches {pattern.replace('_', ' ')} pattern")
            if safety > 0.8:
                reasons.append('safe to apply automatically')
            if complexity < 0.3:
                reasons.append('simple change')
        elif classification == Classification.SEMI_FIXABLE:
            reasons.append('Medium confidence suggestion')
            if complexity > 0.3:
                reasons.append('moderately complex change')
            reasons.append('recommend review')
        else:
            reasons.append(manual or 'Low confidence or complex change')
            if complexity > 0.6:
                reasons.append('high complexity')
            if safety < 0.6:
                reasons.append('potential safety concerns')
            reasons.append('requires manual review')
        return '; '.join(reasons)

    def classify_issue(self, issue: Issue) -> Issue:
        """Return a copy of issue with every suggestion classified."""
        suggestions = []
        for i, suggestion in enumerate(issue.suggestions):
            result = self.classify(issue, suggestion.text,
                                   engine_confidence=issue.confidence * (1.0 - 0.1 * i))
            suggestions.append(Suggestion(
                text=suggestion.text,
                confidence=result.confidence,
                classification=result.classification,
                safety_score=result.safety_score,
                complexity_score=result.complexity_score,
                reasoning=result.reasoning,
            ))
        return issue.replace(suggestions=tuple(suggestions))
