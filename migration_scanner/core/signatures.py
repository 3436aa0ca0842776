"""
Signature matching over raw HTML.

A signature is a fixed set of substring and regex tests combined with AND/OR
logic, the same way rule conditions combine. Two iteration styles are kept
separate on purpose:

- first_match(): stop at the first signature that fires (builder detection)
- all_matches(): evaluate every signature and collect the hits (signals,
  plugins, integrations)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Signature:
    name: str
    slug: str = ""
    category: str = "other"
    needles: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = ()
    logic: str = "OR"  # OR | AND

    def matches(self, html: str) -> bool:
        if not html:
            return False
        results = [needle in html for needle in self.needles]
        results += [bool(pattern.search(html)) for pattern in self.patterns]
        if not results:
            return False
        if self.logic == "AND":
            return all(results)
        return any(results)

    def matches_any(self, documents: Iterable[str]) -> bool:
        return any(self.matches(doc) for doc in documents)


def signature(
    name: str,
    *,
    slug: str = "",
    category: str = "other",
    contains: Sequence[str] = (),
    regex: Sequence[str] = (),
    logic: str = "OR",
) -> Signature:
    """Convenience constructor used by the signature tables."""
    return Signature(
        name=name,
        slug=slug,
        category=category,
        needles=tuple(contains),
        patterns=tuple(re.compile(p) for p in regex),
        logic=logic,
    )


def first_match(signatures: Sequence[Signature], documents: Sequence[str]) -> Signature | None:
    """Return the first signature (in table order) matching any document."""
    for sig in signatures:
        if sig.matches_any(documents):
            return sig
    return None


def all_matches(signatures: Sequence[Signature], documents: Sequence[str]) -> list[Signature]:
    """Return every signature matching any document, in table order."""
    return [sig for sig in signatures if sig.matches_any(documents)]


@dataclass
class CategoryOrder:
    """Fixed category priority used for report ordering."""
    categories: Sequence[str]
    _index: dict[str, int] = field(init=False, repr=False)

    def __post_init__(self):
        self._index = {c: i for i, c in enumerate(self.categories)}

    def rank(self, category: str) -> int:
        return self._index.get(getattr(category, "value", category), 99)

    def sort(self, items: Iterable[T]) -> list[T]:
        """Stable sort by category priority, then by display name."""
        return sorted(items, key=lambda item: (self.rank(item.category), item.name.casefold()))
