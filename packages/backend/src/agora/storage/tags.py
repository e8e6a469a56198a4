"""Tag helpers.

Tags are a free-text comma-separated string. Nothing is normalized on
write; these helpers only split the raw value for aggregation.
"""

from collections import Counter
from collections.abc import Iterable
from typing import Optional

from agora.schemas.forum import TagCount


def split_tags(raw: Optional[str]) -> list[str]:
    """Split on commas, trim whitespace, drop empty entries."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def count_tags(raw_values: Iterable[Optional[str]], limit: int) -> list[TagCount]:
    """Most common tags first. Ties keep first-seen order; counting is case-sensitive."""
    counts: Counter[str] = Counter()
    for raw in raw_values:
        counts.update(split_tags(raw))
    # Counter.most_common is stable for equal counts (insertion order)
    return [TagCount(tag=tag, count=n) for tag, n in counts.most_common(limit)]


def matches_tag(raw: Optional[str], tag: str) -> bool:
    return bool(raw) and tag.lower() in raw.lower()
