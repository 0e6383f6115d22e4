"""
Text Normalizer
===============
Turns raw editor content into the clean text every engine analyzes, and
computes the fingerprint used as a cache key.

- Strips HTML/XML markup and decodes entities
- Collapses whitespace runs to single spaces and trims
- 64-bit polynomial rolling hash fingerprint
"""

import html
import re
from dataclasses import dataclass
from typing import FrozenSet

__version__ = "1.0.0"

DEFAULT_MIN_LENGTH = 3

_BLOCK_RE = re.compile(r'<(script|style)\b[^>]*>.*?</\1\s*>', re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r'</?[A-Za-z][^<>]*>')
_WS_RE = re.compile(r'\s+')
_WORD_RE = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")

_HASH_BASE = 1099511628211
_HASH_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class NormalizedText:
    clean: str = ""
    fingerprint: str = ""

    def __bool__(self) -> bool:
        return bool(self.clean)

    def __len__(self) -> int:
        return len(self.clean)


def _clean_once(text: str) -> str:
    text = _BLOCK_RE.sub(' ', text)
    text = _TAG_RE.sub(' ', text)
    text = html.unescape(text)
    return _WS_RE.sub(' ', text).strip()


def clean_text(raw: str) -> str:
    """
    Strip markup and entities, collapse whitespace, trim.

    Repeats until nothing changes, so entity-escaped markup is stripped
    like markup and cleaning clean text is a no-op. Every pass that
    changes the text shortens it.
    """
    if not raw:
        return ""
    text = _clean_once(raw)
    while True:
        again = _clean_once(text)
        if again == text:
            return text
        text = again


def fingerprint(text: str) -> str:
    """Deterministic non-cryptographic hash of text, prefixed by its length."""
    h = 0
    for ch in text:
        h = (h * _HASH_BASE + ord(ch)) & _HASH_MASK
    return f"{len(text):x}-{h:016x}"


def normalize(raw: str, min_length: int = DEFAULT_MIN_LENGTH) -> NormalizedText:
    """
    Normalize raw content for analysis.

    Returns an empty NormalizedText when the clean text is shorter than
    min_length.
    """
    clean = clean_text(raw)
    if len(clean) < min_length:
        return NormalizedText()
    return NormalizedText(clean=clean, fingerprint=fingerprint(clean))


def word_set(text: str) -> FrozenSet[str]:
    """Lowercased word tokens of text."""
    return frozenset(_WORD_RE.findall(text.lower()))


def word_count(text: str) -> int:
    return len(text.split())


def jaccard_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    if not a and not b:
        return 1.0
    union = a | b
    return len(a & b) / len(union)


def context_snippet(text: str, offset: int, length: int, radius: int = 30) -> str:
    """Text around [offset, offset + length) with ellipses where clipped."""
    start = max(0, offset - radius)
    end = min(len(text), offset + length + radius)
    snippet = text[start:end]
    if start > 0:
        snippet = '...' + snippet
    if end < len(text):
        snippet = snippet + '...'
    return snippet
