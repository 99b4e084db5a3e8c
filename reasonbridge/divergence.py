"""
Divergence Point Detector

A divergence point is a proposition where participants clearly
understood the claim and still split on it:

  - at least min_participation stances
  - nuanced share below 30% (more nuance reads as misunderstanding)
  - each side holds more than 10% (90/10 is consensus, not divergence)

Polarization is 1 - |support share - oppose share|: 1.0 for an even
split, falling as one side dominates.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from reasonbridge.common_ground import (
    MAX_REASONS,
    OPPOSE_FALLBACK,
    SUPPORT_FALLBACK,
    explanations,
)
from reasonbridge.config import settings
from reasonbridge.models import (
    DivergenceAnalysis,
    DivergencePoint,
    DivergenceViewpoint,
    PropositionAlignment,
    Stance,
)
from reasonbridge.scorer import polarization, round_half_up, split_percentages
from reasonbridge.validation import AlignmentLike, validate_alignments

logger = logging.getLogger(__name__)


class DivergencePointDetector:
    """Finds genuinely split propositions and scores their polarization."""

    def __init__(
        self,
        min_participation: Optional[int] = None,
        nuance_threshold: float = 0.30,
        minimum_viewpoint_share: float = 0.10,
    ):
        self.min_participation = (
            settings.MIN_PARTICIPATION if min_participation is None else min_participation
        )
        self.nuance_threshold = nuance_threshold
        self.minimum_viewpoint_share = minimum_viewpoint_share

    def identify_divergence_points(
        self, topic_id: str, propositions: Sequence[AlignmentLike],
    ) -> DivergenceAnalysis:
        props = validate_alignments(propositions)
        points = [pt for pt in (self.analyze_proposition(p) for p in props) if pt is not None]

        users = {a.user_id for p in props for a in p.alignments}
        overall = self.overall_polarization(points)

        logger.debug(
            "Identified %d divergence point(s)", len(points),
            extra={"topic_id": topic_id, "proposition_count": len(props)},
        )

        return DivergenceAnalysis(
            topic_id=topic_id,
            divergence_points=tuple(points),
            overall_polarization=overall,
            participant_count=len(users),
        )

    def analyze_proposition(self, p: PropositionAlignment) -> Optional[DivergencePoint]:
        total = p.total
        if total == 0 or total < self.min_participation:
            return None

        support = p.support_count / total
        oppose = p.oppose_count / total
        if p.nuanced_count / total >= self.nuance_threshold:
            return None
        if support <= self.minimum_viewpoint_share or oppose <= self.minimum_viewpoint_share:
            return None

        support_pct, oppose_pct, nuanced_pct = split_percentages(
            p.support_count, p.oppose_count, p.nuanced_count,
        )

        return DivergencePoint(
            proposition_id=p.id,
            proposition=p.statement,
            viewpoints=(
                DivergenceViewpoint(
                    position="Support",
                    participant_count=p.support_count,
                    percentage=support_pct,
                    reasoning=tuple(
                        explanations(p, Stance.SUPPORT)[:MAX_REASONS] or [SUPPORT_FALLBACK]
                    ),
                ),
                DivergenceViewpoint(
                    position="Oppose",
                    participant_count=p.oppose_count,
                    percentage=oppose_pct,
                    reasoning=tuple(
                        explanations(p, Stance.OPPOSE)[:MAX_REASONS] or [OPPOSE_FALLBACK]
                    ),
                ),
            ),
            total_participants=total,
            nuanced_percentage=nuanced_pct,
            polarization_score=polarization(support, oppose),
        )

    @staticmethod
    def overall_polarization(points: list[DivergencePoint]) -> float:
        """Participant-weighted mean of point scores; 0.0 when there are none."""
        weight = sum(pt.total_participants for pt in points)
        if weight == 0:
            return 0.0
        weighted = sum(pt.polarization_score * pt.total_participants for pt in points)
        return round_half_up(weighted / weight, 2)
