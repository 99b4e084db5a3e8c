"""
Clarity Analyzer — Unsourced Claims and Loaded Language

Two tiers, checked in a fixed order:
  1. Unsourced: factual claims leaning on unnamed research, bare
     statistics, or hearsay. Reports UNSOURCED.
  2. Bias: loaded language, one-sided framing, charged descriptors.
     Reports BIAS.

Any unsourced match wins outright, whatever the bias tier found.
This is a rule, not a confidence comparison.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from reasonbridge.models import DetectionResult, EducationalResource, FeedbackType
from reasonbridge.patterns import (
    PatternRule,
    RuleMatch,
    match_table,
    quoted_excerpts,
    rule,
    select_subtype,
    subtype_counts,
    subtype_order,
    total_matches,
    weighted_matches,
)
from reasonbridge.scorer import BIAS_CONFIDENCE, UNSOURCED_CONFIDENCE, ConfidenceModel

logger = logging.getLogger(__name__)


# ============================================================
# PATTERN TABLES
# ============================================================

UNSOURCED_RULES: tuple[PatternRule, ...] = (
    # --- unsourced_claim ---
    rule(r"\bstudies\s+show\s+that\b", "unsourced_claim"),
    rule(r"\bresearch\s+(?:shows|proves|demonstrates)\b", "unsourced_claim"),
    rule(r"\bscientists\s+(?:say|believe|found)\b", "unsourced_claim"),
    rule(r"\bit(?:['’]s|\s+is)\s+(?:proven|a\s+fact)\s+that\b", "unsourced_claim"),
    rule(r"\baccording\s+to\s+(?:experts|studies|research)\b", "unsourced_claim"),
    rule(r"\bthe\s+data\s+shows\b", "unsourced_claim"),

    # --- statistical_claim ---
    rule(r"\b\d+%\s+of\s+(?:people|users|respondents)\b", "statistical_claim"),

    # --- vague_attribution ---
    rule(r"\bsome\s+people\s+say\b", "vague_attribution", weight=0.5),
    rule(r"\bI\s+heard\s+that\b", "vague_attribution", weight=0.5),
    rule(r"\bthey\s+say\s+that\b", "vague_attribution", weight=0.5),
    rule(r"\bword\s+on\s+the\s+street\b", "vague_attribution", weight=0.5),
    rule(r"\brumou?r\s+has\s+it\b", "vague_attribution", weight=0.5),
)

BIAS_RULES: tuple[PatternRule, ...] = (
    # --- loaded_language ---
    rule(r"\b(?:obviously|clearly|undeniably)\s+\w+\s+(?:is|are)\b", "loaded_language"),
    rule(r"\bany\s+reasonable\s+person\s+(?:would|knows)\b", "loaded_language"),
    rule(r"\bit['’]s\s+common\s+sense\s+that\b", "loaded_language"),

    # --- one_sided_framing ---
    rule(r"\bonly\s+\w+\s+would\s+(?:think|believe|say)\b", "one_sided_framing"),
    rule(r"\bof\s+course\s+\w+\s+(?:is|are|would)\b", "one_sided_framing"),

    # --- charged_descriptor ---
    rule(r"\b(?:radical|extremist|fanatic)\s+\w+", "charged_descriptor"),
    rule(r"\b(?:crazy|insane|lunatic)\s+\w+", "charged_descriptor"),
)

UNSOURCED_SUGGESTION = (
    "Consider providing specific sources for factual claims. Include links, "
    "citations, or specific study names to strengthen your argument."
)

BIAS_SUGGESTIONS: dict[str, str] = {
    "loaded_language": (
        "Consider using more neutral language to present your argument. Avoid "
        "loaded terms and acknowledge alternative perspectives where relevant."
    ),
    "one_sided_framing": (
        "This framing presents only one side as reasonable. Acknowledge what "
        "people who disagree actually believe, and why."
    ),
    "charged_descriptor": (
        "Emotionally charged labels can make readers defensive. Describe the "
        "position itself instead of labelling the people who hold it."
    ),
}

UNSOURCED_RESOURCES: tuple[EducationalResource, ...] = (
    EducationalResource(title="How to Cite Sources", url="https://en.wikipedia.org/wiki/Citation"),
    EducationalResource(title="Evaluating Information Sources", url="https://en.wikipedia.org/wiki/Source_criticism"),
)

BIAS_RESOURCES: tuple[EducationalResource, ...] = (
    EducationalResource(
        title="Neutral Point of View",
        url="https://en.wikipedia.org/wiki/Wikipedia:Neutral_point_of_view",
    ),
    EducationalResource(title="Loaded Language", url="https://en.wikipedia.org/wiki/Loaded_language"),
)


class ClarityAnalyzer:
    """Detects unsourced claims, then biased framing."""

    def __init__(
        self,
        unsourced_rules: Optional[Sequence[PatternRule]] = None,
        bias_rules: Optional[Sequence[PatternRule]] = None,
        unsourced_confidence: ConfidenceModel = UNSOURCED_CONFIDENCE,
        bias_confidence: ConfidenceModel = BIAS_CONFIDENCE,
    ):
        self.unsourced_rules = (
            tuple(unsourced_rules) if unsourced_rules is not None else UNSOURCED_RULES
        )
        self.bias_rules = tuple(bias_rules) if bias_rules is not None else BIAS_RULES
        self.unsourced_confidence = unsourced_confidence
        self.bias_confidence = bias_confidence

    def analyze(self, text: str) -> Optional[DetectionResult]:
        if not text or not text.strip():
            return None

        unsourced = match_table(text, self.unsourced_rules)
        if unsourced:
            return self._unsourced(unsourced)

        bias = match_table(text, self.bias_rules)
        if bias:
            return self._bias(bias)

        return None

    def _unsourced(self, matches: list[RuleMatch]) -> DetectionResult:
        count = total_matches(matches)
        subtype = select_subtype(matches, subtype_order(self.unsourced_rules))
        families = len(subtype_counts(matches))
        score = self.unsourced_confidence.score(weighted_matches(matches), families)
        excerpts = quoted_excerpts(matches)
        logger.debug("Clarity: unsourced x%d, confidence=%.2f", count, score)

        return DetectionResult(
            type=FeedbackType.UNSOURCED,
            subtype=subtype,
            match_count=count,
            confidence_score=score,
            reasoning=(
                f"Detected {count} instance(s) of potentially unsourced claims "
                f"(e.g., {', '.join(excerpts)}). Providing specific sources helps "
                f"others verify and engage with your evidence."
            ),
            suggestion_text=UNSOURCED_SUGGESTION,
            educational_resources=UNSOURCED_RESOURCES,
            excerpts=tuple(excerpts),
        )

    def _bias(self, matches: list[RuleMatch]) -> DetectionResult:
        count = total_matches(matches)
        subtype = select_subtype(matches, subtype_order(self.bias_rules))
        families = len(subtype_counts(matches))
        score = self.bias_confidence.score(weighted_matches(matches), families)
        excerpts = quoted_excerpts(matches)
        logger.debug("Clarity: bias x%d (%s), confidence=%.2f", count, subtype, score)

        return DetectionResult(
            type=FeedbackType.BIAS,
            subtype=subtype,
            match_count=count,
            confidence_score=score,
            reasoning=(
                f"Detected {count} instance(s) of potentially biased framing "
                f"(e.g., {', '.join(excerpts)}). Loaded language or one-sided framing "
                f"may make your argument less persuasive to those who don't already agree."
            ),
            suggestion_text=BIAS_SUGGESTIONS.get(subtype, BIAS_SUGGESTIONS["loaded_language"]),
            educational_resources=BIAS_RESOURCES,
            excerpts=tuple(excerpts),
        )
