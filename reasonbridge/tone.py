"""
Tone Analyzer — Inflammatory Language

Flags personal attacks, aggressive and dismissive phrasing, and
condescending "obviously you don't..." constructions. Reports the
INFLAMMATORY feedback type.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from reasonbridge.models import DetectionResult, EducationalResource, FeedbackType
from reasonbridge.patterns import (
    PatternRule,
    match_table,
    quoted_excerpts,
    rule,
    select_subtype,
    subtype_counts,
    subtype_order,
    total_matches,
    weighted_matches,
)
from reasonbridge.scorer import TONE_CONFIDENCE, ConfidenceModel

logger = logging.getLogger(__name__)

_ARE = r"(?:['’]re|\s+are)"
_INTENSIFIER = r"(?:(?:really|very|so|completely|totally|absolutely)\s+)?"
_INSULT = r"(?:stupid|dumb|idiots?|morons?|fools?|ignorant|ridiculous)"


# ============================================================
# PATTERN TABLE (declaration order breaks subtype ties)
# ============================================================

TONE_RULES: tuple[PatternRule, ...] = (
    # --- personal_attack ---
    rule(rf"\byou{_ARE}\s+{_INTENSIFIER}(?:stupid|dumb|an?\s+idiot|a\s+moron|a\s+fool|ignorant|ridiculous)",
         "personal_attack"),
    rule(r"\bshut\s+up\b", "personal_attack"),
    rule(r"\bget\s+lost\b", "personal_attack"),
    rule(rf"\b(?:they|these\s+people|those\s+people|those\s+folks|people\s+like\s+(?:you|this|that)){_ARE}\s+{_INTENSIFIER}{_INSULT}",
         "personal_attack"),
    rule(r"\b(?:everyone|anyone)\s+who\s+(?:thinks?|believes?|says?)\s+(?:this|that)\s+is\s+(?:stupid|dumb|an?\s+idiot)",
         "personal_attack"),
    rule(r"f\*+ck\s+(?:you|off|this|that|them)", "personal_attack"),

    # --- aggressive_language ---
    rule(r"\b(?:hate|despise)\s+(?:you|your|them|this|these)\b", "aggressive_language"),
    rule(r"\b(?:makes?|making|make)\s+me\s+(?:sick|angry)\b", "aggressive_language"),

    # --- dismissive ---
    rule(rf"\b(?:this|that|these|those)\s+(?:is|are)\s+{_INTENSIFIER}(?:stupid|dumb|idiotic|moronic|foolish|ignorant|ridiculous)",
         "dismissive"),
    rule(r"\b(?:typical|classic)\s+(?:liberal|conservative|leftist|right-wing)", "dismissive"),
    rule(r"\bwake\s+up\s+sheeple\b", "dismissive"),
    # Shouting: three or more all-caps words in a row
    rule(r"\b[A-Z]{4,}\s+[A-Z]{4,}\s+[A-Z]{4,}", "dismissive", weight=0.5, flags=0),

    # --- hostile_tone ---
    rule(r"\bobviously\s+(?:you|they)\s+(?:don['’]t|can['’]t|won['’]t)", "hostile_tone"),
    rule(r"\bclearly\s+you\s+(?:don['’]t|can['’]t|haven['’]t)", "hostile_tone"),
    rule(r"\banyone\s+with\s+half\s+a\s+brain", "hostile_tone"),
    rule(r"\bit['’]s\s+obvious\s+that\s+you", "hostile_tone"),
)

SUGGESTIONS: dict[str, str] = {
    "personal_attack": (
        "Consider rephrasing to focus on ideas rather than personal characteristics. "
        "Attack the argument, not the person."
    ),
    "aggressive_language": (
        "Strong feelings are understandable, but aggressive language tends to end the "
        "conversation. Describe what you disagree with and why."
    ),
    "dismissive": (
        "Dismissing a view with a label or an insult does not answer it. "
        "Engage with the strongest version of the other position."
    ),
    "hostile_tone": (
        "Your message may come across as hostile. Consider using more neutral "
        "language to foster constructive dialogue."
    ),
}

RESOURCES: tuple[EducationalResource, ...] = (
    EducationalResource(
        title="Constructive Communication Guide",
        url="https://en.wikipedia.org/wiki/Nonviolent_Communication",
    ),
    EducationalResource(
        title="Avoiding Personal Attacks in Discussions",
        url="https://en.wikipedia.org/wiki/Ad_hominem",
    ),
)


class ToneAnalyzer:
    """Detects inflammatory language. Stateless; safe to share across calls."""

    def __init__(
        self,
        rules: Optional[Sequence[PatternRule]] = None,
        confidence: ConfidenceModel = TONE_CONFIDENCE,
    ):
        self.rules = tuple(rules) if rules is not None else TONE_RULES
        self.confidence = confidence
        self._order = subtype_order(self.rules)

    def analyze(self, text: str) -> Optional[DetectionResult]:
        if not text or not text.strip():
            return None

        matches = match_table(text, self.rules)
        if not matches:
            return None

        count = total_matches(matches)
        subtype = select_subtype(matches, self._order)
        families = len(subtype_counts(matches))
        excerpts = quoted_excerpts(matches)
        score = self.confidence.score(weighted_matches(matches), families)

        logger.debug(
            "Tone: %d match(es), subtype=%s, confidence=%.2f", count, subtype, score,
        )

        return DetectionResult(
            type=FeedbackType.INFLAMMATORY,
            subtype=subtype,
            match_count=count,
            confidence_score=score,
            reasoning=(
                f"Detected {count} instance(s) of potentially inflammatory language "
                f"(e.g., {', '.join(excerpts)}). While passion is valuable, personal "
                f"attacks or hostile tone can shut down productive dialogue."
            ),
            suggestion_text=SUGGESTIONS.get(
                subtype,
                "Consider revising inflammatory language to maintain a constructive tone.",
            ),
            educational_resources=RESOURCES,
            excerpts=tuple(excerpts),
        )
