"""
Common Ground Synthesizer

From per-proposition stance tallies, derives:
  - Agreement zones:        support share >= 70%
  - Misunderstandings:      nuanced share >= 30% and the nuance notes
                            split into >= 2 interpretation buckets
  - Genuine disagreements:  support and oppose each >= 25%, nuance < 30%
  - Overall consensus:      mean per-proposition consensus, 2 decimals

Propositions with fewer than min_participation stances are ignored
everywhere. A proposition that is an agreement zone is never also a
genuine disagreement: a 75/25 split passes both share tests, so the
disagreement check also requires support below the agreement threshold.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from reasonbridge.config import settings
from reasonbridge.models import (
    AgreementZone,
    GenuineDisagreement,
    Interpretation,
    Misunderstanding,
    PropositionAlignment,
    Stance,
    SynthesisResult,
    TopicData,
    Viewpoint,
)
from reasonbridge.scorer import (
    calculate_agreement_percentage,
    derived_consensus,
    round_half_up,
)
from reasonbridge.validation import validate_alignments

logger = logging.getLogger(__name__)

SUPPORT_LEANING = re.compile(r"\b(?:support|agree|favou?r)", re.IGNORECASE)
OPPOSE_LEANING = re.compile(r"\b(?:oppose|against|disagree)", re.IGNORECASE)

SUPPORT_LABEL = "Support with conditions or caveats"
OPPOSE_LABEL = "Opposition with exceptions"
CONTEXT_LABEL = "Context-dependent position"

SUPPORT_FALLBACK = "Supports this proposition"
OPPOSE_FALLBACK = "Opposes this proposition"

UNDERLYING_VALUES_PLACEHOLDER = (
    "Underlying values are not inferred by pattern analysis; a moral "
    "foundations review is needed to name them.",
)

MAX_EVIDENCE = 3
MAX_REASONS = 2


def explanations(prop: PropositionAlignment, *stances: Stance) -> list[str]:
    """Non-empty nuance notes from alignments with one of the given stances, in order."""
    return [
        a.nuance_explanation
        for a in prop.alignments
        if a.stance in stances and a.nuance_explanation and a.nuance_explanation.strip()
    ]


def group_interpretations(prop: PropositionAlignment) -> list[Interpretation]:
    """
    Bucket the NUANCED notes by leaning.

    A note mentioning both support and opposition counts in both
    buckets; a note mentioning neither is context-dependent. Empty
    buckets are omitted.
    """
    support = oppose = context = 0
    for note in explanations(prop, Stance.NUANCED):
        leans_support = bool(SUPPORT_LEANING.search(note))
        leans_oppose = bool(OPPOSE_LEANING.search(note))
        support += leans_support
        oppose += leans_oppose
        if not (leans_support or leans_oppose):
            context += 1

    found = []
    for label, count in (
        (SUPPORT_LABEL, support), (OPPOSE_LABEL, oppose), (CONTEXT_LABEL, context),
    ):
        if count > 0:
            found.append(Interpretation(interpretation=label, participant_count=count))
    return found


class CommonGroundSynthesizer:
    """Stateless synthesis over one snapshot of a topic's stance data."""

    def __init__(
        self,
        min_participation: Optional[int] = None,
        agreement_threshold: float = 0.70,
        nuance_threshold: float = 0.30,
        significant_share: float = 0.25,
    ):
        self.min_participation = (
            settings.MIN_PARTICIPATION if min_participation is None else min_participation
        )
        self.agreement_threshold = agreement_threshold
        self.nuance_threshold = nuance_threshold
        self.significant_share = significant_share

    # Exposed for callers that only need the percentage
    calculate_agreement_percentage = staticmethod(calculate_agreement_percentage)

    def _qualifying(self, props) -> list[PropositionAlignment]:
        return [p for p in props if p.total > 0 and p.total >= self.min_participation]

    def synthesize(self, topic_data: TopicData) -> SynthesisResult:
        props = self._qualifying(validate_alignments(topic_data.propositions))

        result = SynthesisResult(
            agreement_zones=tuple(self.agreement_zones(props)),
            misunderstandings=tuple(self.misunderstandings(props)),
            genuine_disagreements=tuple(self.genuine_disagreements(props)),
            overall_consensus_score=self.overall_consensus(props),
        )

        logger.debug(
            "Synthesized common ground: %d zone(s), %d misunderstanding(s), %d disagreement(s)",
            len(result.agreement_zones),
            len(result.misunderstandings),
            len(result.genuine_disagreements),
            extra={"topic_id": topic_data.topic_id, "proposition_count": len(props)},
        )
        return result

    def agreement_zones(self, props: list[PropositionAlignment]) -> list[AgreementZone]:
        zones = []
        for p in props:
            if p.support_count / p.total >= self.agreement_threshold:
                zones.append(AgreementZone(
                    proposition=p.statement,
                    agreement_percentage=calculate_agreement_percentage(
                        p.support_count, p.oppose_count, p.nuanced_count,
                    ),
                    supporting_evidence=tuple(
                        explanations(p, Stance.SUPPORT, Stance.NUANCED)[:MAX_EVIDENCE]
                    ),
                    participant_count=p.support_count,
                ))
        # Stable: equal percentages keep input order
        return sorted(zones, key=lambda z: -z.agreement_percentage)

    def misunderstandings(self, props: list[PropositionAlignment]) -> list[Misunderstanding]:
        found = []
        for p in props:
            if p.nuanced_count / p.total < self.nuance_threshold:
                continue
            interpretations = group_interpretations(p)
            if len(interpretations) < 2:
                continue
            found.append(Misunderstanding(
                topic=p.statement,
                interpretations=tuple(interpretations),
                clarification=(
                    f"This proposition has {p.nuanced_count} nuanced responses, "
                    f"suggesting participants may interpret key terms differently. "
                    f"Clarifying what the proposition commits to may resolve part "
                    f"of the split."
                ),
            ))
        return found

    def genuine_disagreements(
        self, props: list[PropositionAlignment],
    ) -> list[GenuineDisagreement]:
        found = []
        for p in props:
            support = p.support_count / p.total
            oppose = p.oppose_count / p.total
            nuanced = p.nuanced_count / p.total
            if not (
                support >= self.significant_share
                and oppose >= self.significant_share
                and nuanced < self.nuance_threshold
                and support < self.agreement_threshold
            ):
                continue

            support_reasons = explanations(p, Stance.SUPPORT)[:MAX_REASONS]
            oppose_reasons = explanations(p, Stance.OPPOSE)[:MAX_REASONS]
            found.append(GenuineDisagreement(
                proposition=p.statement,
                viewpoints=(
                    Viewpoint(
                        position="Support",
                        participant_count=p.support_count,
                        reasoning=tuple(support_reasons or [SUPPORT_FALLBACK]),
                    ),
                    Viewpoint(
                        position="Oppose",
                        participant_count=p.oppose_count,
                        reasoning=tuple(oppose_reasons or [OPPOSE_FALLBACK]),
                    ),
                ),
                underlying_values=UNDERLYING_VALUES_PLACEHOLDER,
            ))
        return found

    def overall_consensus(self, props: list[PropositionAlignment]) -> Optional[float]:
        """Mean consensus over qualifying propositions; None when none qualify."""
        if not props:
            return None
        scores = [
            p.consensus_score if p.consensus_score is not None
            else derived_consensus(p.support_count, p.oppose_count, p.nuanced_count)
            for p in props
        ]
        return round_half_up(sum(scores) / len(scores), 2)
