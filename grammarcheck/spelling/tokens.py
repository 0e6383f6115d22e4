"""
Word tokenization shared by the spelling engines.
"""

import re
from typing import Iterator, Tuple

_TOKEN_RE = re.compile(r"[A-Za-z]+")
_SENTENCE_END = '.!?'


def _is_sentence_start(text: str, start: int) -> bool:
    i = start - 1
    while i >= 0 and text[i] in ' \t"\'(':
        i -= 1
    return i < 0 or text[i] in _SENTENCE_END


def iter_checkable_words(text: str, min_length: int = 2) -> Iterator[Tuple[int, int, str]]:
    """
    Yield (start, end, word) for words worth spell checking.

    Skips acronyms, contraction fragments, words glued to digits or
    underscores, and capitalized words inside a sentence (likely names).
    """
    for m in _TOKEN_RE.finditer(text):
        start, end = m.span()
        word = m.group()
        if len(word) < min_length:
            continue
        before = text[start - 1] if start > 0 else ''
        after = text[end] if end < len(text) else ''
        if (before and before in "'’") or (after and after in "'’"):
            continue
        if before.isdigit() or after.isdigit() or before == '_' or after == '_':
            continue
        if word.isupper():
            continue
        if word[0].isupper() and not _is_sentence_start(text, start):
            continue
        yield start, end, word
