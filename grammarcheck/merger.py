"""
Issue Deduplication and Merging
===============================
Collapses overlapping issues of the same category reported by different
engines into the best ones.

Issues of one category whose ranges overlap, directly or through a chain,
form a group (a sweep over issues sorted by offset, so groups never share
members). Zero-length issues count as one character wide. Within a group,
issues are taken best first and each is kept unless it overlaps an issue
already kept, so an issue that only overlapped a dropped one survives.
Issues are ranked by:

1. highest confidence
2. has suggestions
3. engine priority order
4. smaller offset, then shorter length, then id

Merging is idempotent: merged output contains no overlapping issues of
one category, so a second pass keeps every issue.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DEFAULT_ADAPTER_PRIORITY
from .models import Issue, IssueCategory

__version__ = "1.0.0"


def _span_end(issue: Issue) -> int:
    return issue.offset + max(1, issue.length)


def _overlaps(a: Issue, b: Issue) -> bool:
    return a.offset < _span_end(b) and b.offset < _span_end(a)


def group_overlapping(issues: Iterable[Issue]) -> List[List[Issue]]:
    """Group issues of one category into overlap clusters."""
    groups: List[List[Issue]] = []
    group_end = -1
    for issue in sorted(issues, key=lambda i: (i.offset, i.length, i.id)):
        if groups and issue.offset < group_end:
            groups[-1].append(issue)
            group_end = max(group_end, _span_end(issue))
        else:
            groups.append([issue])
            group_end = _span_end(issue)
    return groups


def merge_issues(issues: Sequence[Issue],
                 priority: Optional[Sequence[str]] = None) -> List[Issue]:
    """
    Deduplicate issues.

    Args:
        issues: Normalized issues from every engine
        priority: Engine names, most trusted first

    Returns:
        Surviving issues sorted by offset, then category
    """
    priority = list(priority if priority is not None else DEFAULT_ADAPTER_PRIORITY)
    rank = {name: i for i, name in enumerate(priority)}

    def winner_key(issue: Issue):
        return (
            -issue.confidence,
            0 if issue.suggestions else 1,
            rank.get(issue.source, len(rank)),
            issue.offset,
            issue.length,
            issue.id,
        )

    by_category: Dict[IssueCategory, List[Issue]] = defaultdict(list)
    for issue in issues:
        by_category[issue.category].append(issue)

    merged = []
    for category_issues in by_category.values():
        for group in group_overlapping(category_issues):
            kept: List[Issue] = []
            for issue in sorted(group, key=winner_key):
                if not any(_overlaps(issue, other) for other in kept):
                    kept.append(issue)
            merged.extend(kept)

    merged.sort(key=lambda i: (i.offset, i.category.value, i.length, i.id))
    return merged
