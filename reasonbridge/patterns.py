"""
Pattern Matchers — Shared Detection Primitive

Every detector owns an ordered table of PatternRule entries:
a compiled case-insensitive regex, the subtype tag it evidences,
and a weight. Order matters: when two subtypes match equally often,
the one declared first in the table is reported.

Matching is deterministic and counts every non-overlapping match
of every rule across the whole text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

_FLAGS = re.IGNORECASE


@dataclass(frozen=True)
class PatternRule:
    """A single entry in a detector's pattern table."""
    pattern: re.Pattern
    subtype: str
    weight: float = 1.0


@dataclass(frozen=True)
class RuleMatch:
    """All matches of one rule in one text."""
    rule: PatternRule
    spans: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.spans)


def rule(regex: str, subtype: str, weight: float = 1.0, flags: int = _FLAGS) -> PatternRule:
    """Compile a table entry. Case-insensitive unless flags say otherwise."""
    return PatternRule(pattern=re.compile(regex, flags), subtype=subtype, weight=weight)


def match_table(text: str, rules: Iterable[PatternRule]) -> list[RuleMatch]:
    """Run every rule against text. Rules with no match are omitted; table order is kept."""
    found: list[RuleMatch] = []
    for r in rules:
        spans = tuple(m.group(0) for m in r.pattern.finditer(text))
        if spans:
            found.append(RuleMatch(rule=r, spans=spans))
    return found


def total_matches(matches: Iterable[RuleMatch]) -> int:
    return sum(m.count for m in matches)


def weighted_matches(matches: Iterable[RuleMatch]) -> float:
    return sum(m.count * m.rule.weight for m in matches)


def subtype_order(rules: Iterable[PatternRule]) -> list[str]:
    """Subtypes in first-declared order."""
    order: list[str] = []
    for r in rules:
        if r.subtype not in order:
            order.append(r.subtype)
    return order


def subtype_counts(matches: Iterable[RuleMatch]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for m in matches:
        counts[m.rule.subtype] = counts.get(m.rule.subtype, 0) + m.count
    return counts


def select_subtype(matches: list[RuleMatch], order: list[str]) -> Optional[str]:
    """
    Pick the subtype with the highest match count.

    Ties go to the subtype declared first in the table. Returns None
    when nothing matched.
    """
    counts = subtype_counts(matches)
    if not counts:
        return None
    best = None
    for subtype in order:
        n = counts.get(subtype, 0)
        if n > 0 and (best is None or n > counts[best]):
            best = subtype
    return best


def quoted_excerpts(
    matches: Iterable[RuleMatch], limit: int = 2, max_chars: int = 120,
) -> list[str]:
    """At most `limit` unique matched spans, quoted, in discovery order."""
    seen: list[str] = []
    for m in matches:
        for span in m.spans:
            span = span.strip()[:max_chars]
            if span and span not in seen:
                seen.append(span)
            if len(seen) >= limit:
                return [f'"{s}"' for s in seen]
    return [f'"{s}"' for s in seen]


def describe_table(rules: Iterable[PatternRule]) -> list[dict]:
    """Serializable view of a pattern table."""
    return [
        {"subtype": r.subtype, "pattern": r.pattern.pattern, "weight": r.weight}
        for r in rules
    ]
