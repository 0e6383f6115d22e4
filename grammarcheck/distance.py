"""
String distance helpers backed by symspellpy's edit distance.
"""

from symspellpy.editdistance import DistanceAlgorithm, EditDistance

_comparer = EditDistance(DistanceAlgorithm.DAMERAU_OSA)


def edit_distance(a: str, b: str) -> int:
    """Damerau (optimal string alignment) distance between a and b."""
    if a == b:
        return 0
    if not a or not b:
        return max(len(a), len(b))
    return _comparer.compare(a, b, max(len(a), len(b)))


def edit_similarity(a: str, b: str) -> float:
    """1.0 for identical strings, falling toward 0.0 as edits grow."""
    longest = max(len(a), len(b))
    if not longest:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest
