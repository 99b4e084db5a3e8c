"""
Proposition Clusterer — Keyword Similarity + Average-Linkage HAC

Pipeline:
  1. Keywords per proposition (lowercase, punctuation stripped,
     short tokens and stop words dropped, de-duplicated).
  2. Jaccard similarity matrix. Symmetric, 1.0 on the diagonal,
     0.0 when either keyword set is empty.
  3. Hierarchical agglomerative clustering, average linkage.
     Clusters live in an arena indexed by their first member; a merge
     absorbs j into i (i < j) and marks j dead. Linkage sums are kept
     in a matrix and updated in place, so each step is one masked
     argmax. Ties go to the first pair in row-major order.
  4. Clusters below the minimum size are dissolved into unclustered.
  5. Summary per cluster and an overall quality score.

Average linkage never produces inversions, so the merge sequence does
not depend on the threshold: a lower threshold only runs the same
sequence further. Clusters at a lower threshold are unions of clusters
at a higher one, and clustered coverage never shrinks.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

import numpy as np

from reasonbridge.config import settings
from reasonbridge.exceptions import InvalidInputError
from reasonbridge.models import ClusterResult, PropositionCluster
from reasonbridge.scorer import round_half_up
from reasonbridge.validation import PropositionLike, validate_propositions

logger = logging.getLogger(__name__)

STOP_WORDS: frozenset[str] = frozenset({
    "the", "is", "at", "which", "on", "a", "an", "and", "or", "but", "in",
    "with", "to", "for", "of", "as", "by", "that", "this", "it", "from", "be",
    "are", "was", "were", "been", "have", "has", "had", "do", "does", "did",
    "will", "would", "should", "could", "may", "might", "can",
})

MAX_KEYWORDS = 5
THEME_KEYWORDS = 3

_PUNCTUATION = re.compile(r"[^\w\s]")

# Absorbs float noise in linkage averages compared against the threshold
_EPS = 1e-12


# ============================================================
# KEYWORDS AND SIMILARITY
# ============================================================

def extract_keywords(text: str) -> list[str]:
    """Significant words of a statement, first-occurrence order, no duplicates."""
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    seen: dict[str, None] = {}
    for w in words:
        if len(w) > 2 and w not in STOP_WORDS:
            seen.setdefault(w, None)
    return list(seen)


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B|, or 0.0 when either set is empty."""
    sa, sb = set(a), set(b)
    if not sa or not sb:
        return 0.0
    return len(sa & sb) / len(sa | sb)


def similarity_matrix(keyword_sets: list[list[str]]) -> np.ndarray:
    """
    Pairwise Jaccard matrix, unit diagonal.

    Intersections come from a statement-by-keyword incidence product.
    """
    n = len(keyword_sets)
    vocab: dict[str, int] = {}
    rows: list[int] = []
    cols: list[int] = []
    for i, keywords in enumerate(keyword_sets):
        for word in dict.fromkeys(keywords):
            rows.append(i)
            cols.append(vocab.setdefault(word, len(vocab)))

    incidence = np.zeros((n, len(vocab)), dtype=np.float64)
    if rows:
        incidence[rows, cols] = 1.0

    inter = incidence @ incidence.T
    counts = incidence.sum(axis=1)
    union = counts[:, None] + counts[None, :] - inter
    matrix = np.divide(inter, union, out=np.zeros_like(inter), where=union > 0)
    np.fill_diagonal(matrix, 1.0)
    return matrix


def agglomerate(sim: np.ndarray, threshold: float) -> list[list[int]]:
    """
    Average-linkage HAC over a similarity matrix.

    Returns the member index lists of every surviving cluster (singletons
    included) in arena order. Members keep discovery order: the absorbing
    cluster's members first, then the absorbed cluster's.

    Linkages live in the upper triangle (-inf elsewhere). After a merge
    only the survivor's row and column are recomputed.
    """
    n = sim.shape[0]
    if n == 0:
        return []

    sums = sim.astype(np.float64, copy=True)
    sizes = np.ones(n, dtype=np.float64)
    alive = np.ones(n, dtype=bool)
    members: list[list[int]] = [[i] for i in range(n)]
    index = np.arange(n)
    linkage = np.where(np.triu(np.ones((n, n), dtype=bool), k=1), sums, -np.inf)

    while True:
        i, j = divmod(int(np.argmax(linkage)), n)
        best = linkage[i, j]
        if not np.isfinite(best) or best + _EPS < threshold:
            break

        sums[i, :] += sums[j, :]
        sums[:, i] += sums[:, j]
        sizes[i] += sizes[j]
        alive[j] = False
        members[i].extend(members[j])
        members[j] = []

        linkage[j, :] = -np.inf
        linkage[:, j] = -np.inf
        row = sums[i] / (sizes[i] * sizes)
        before = alive & (index < i)
        after = alive & (index > i)
        linkage[before, i] = row[before]
        linkage[i, after] = row[after]

    return [members[k] for k in range(n) if alive[k]]


def cohesion(sim: np.ndarray, indices: list[int]) -> float:
    """Average pairwise similarity among members; 1.0 for a singleton."""
    if len(indices) < 2:
        return 1.0
    sub = sim[np.ix_(indices, indices)]
    iu = np.triu_indices(len(indices), k=1)
    return float(sub[iu].mean())


def rank_keywords(keyword_sets: Iterable[list[str]], limit: int = MAX_KEYWORDS) -> list[str]:
    """Keywords by member frequency, ties by first appearance."""
    counts: dict[str, int] = {}
    for keywords in keyword_sets:
        for k in keywords:
            counts[k] = counts.get(k, 0) + 1
    first_seen = {k: pos for pos, k in enumerate(counts)}
    return sorted(counts, key=lambda k: (-counts[k], first_seen[k]))[:limit]


def make_theme(keywords: list[str]) -> str:
    if not keywords:
        return "Related propositions"
    return "Propositions about " + ", ".join(keywords[:THEME_KEYWORDS])


# ============================================================
# CLUSTERER
# ============================================================

class PropositionClusterer:
    """Groups propositions by shared keywords. Deterministic; no state between calls."""

    def __init__(
        self,
        min_cluster_size: int = 2,
        default_threshold: Optional[float] = None,
    ):
        self.min_cluster_size = min_cluster_size
        self.default_threshold = (
            settings.SIMILARITY_THRESHOLD if default_threshold is None else default_threshold
        )

    def cluster(
        self,
        topic_id: str,
        propositions: Sequence[PropositionLike],
        similarity_threshold: Optional[float] = None,
    ) -> ClusterResult:
        threshold = self.default_threshold if similarity_threshold is None else similarity_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) \
                or not 0.0 <= threshold <= 1.0:
            raise InvalidInputError("similarity_threshold must be within [0, 1]")

        props = validate_propositions(propositions)
        keyword_sets = [extract_keywords(p.statement) for p in props]
        sim = similarity_matrix(keyword_sets)

        groups = [
            g for g in agglomerate(sim, float(threshold))
            if len(g) >= self.min_cluster_size
        ]

        clusters: list[PropositionCluster] = []
        for n, group in enumerate(groups, start=1):
            keywords = rank_keywords(keyword_sets[i] for i in group)
            clusters.append(PropositionCluster(
                id=f"cluster-{n}",
                theme=make_theme(keywords),
                proposition_ids=tuple(props[i].id for i in group),
                size=len(group),
                cohesion_score=round_half_up(cohesion(sim, group), 2),
                keywords=tuple(keywords),
            ))

        clustered = {pid for c in clusters for pid in c.proposition_ids}
        unclustered = tuple(p.id for p in props if p.id not in clustered)
        quality = self.quality_score(clusters, len(props))

        logger.debug(
            "Clustered propositions",
            extra={
                "topic_id": topic_id,
                "proposition_count": len(props),
                "cluster_count": len(clusters),
            },
        )

        if clusters:
            reasoning = (
                f"Identified {len(clusters)} cluster(s) using keyword similarity "
                f"analysis at threshold {float(threshold):.2f}."
            )
        else:
            reasoning = (
                "No clear clusters identified using keyword matching. Propositions "
                "may be too diverse or too few."
            )

        return ClusterResult(
            topic_id=topic_id,
            clusters=tuple(clusters),
            unclustered_ids=unclustered,
            quality_score=quality,
            confidence=0.7 if clusters and quality > 0.5 else 0.5,
            reasoning=reasoning,
        )

    @staticmethod
    def quality_score(clusters: list[PropositionCluster], total: int) -> float:
        """0.7 * mean cohesion + 0.3 * coverage, rounded; 0.0 with no clusters."""
        if not clusters or total == 0:
            return 0.0
        mean_cohesion = sum(c.cohesion_score for c in clusters) / len(clusters)
        coverage = sum(c.size for c in clusters) / total
        return round_half_up(0.7 * mean_cohesion + 0.3 * coverage, 2)
