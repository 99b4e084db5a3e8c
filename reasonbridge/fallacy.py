"""
Fallacy Detector — Named Logical Fallacies

Seven fallacy families, each a run of rules in one ordered table.
The most frequent family is reported as the subtype; on a tie the
family declared first wins (ad_hominem before strawman, and so on).
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
from reasonbridge.scorer import FALLACY_CONFIDENCE, ConfidenceModel

logger = logging.getLogger(__name__)

_ARE = r"(?:['’]re|\s+are)"


# ============================================================
# PATTERN TABLE
# ============================================================

FALLACY_RULES: tuple[PatternRule, ...] = (
    # --- ad_hominem ---
    rule(rf"\byou{_ARE}\s+(?:just|only)\s+an?\s+\w+", "ad_hominem"),
    rule(r"\bcoming\s+from\s+(?:someone|you)\b", "ad_hominem"),
    rule(r"\b(?:you|your)\s+(?:lack|don['’]t\s+have)\s+(?:credentials|experience|expertise)", "ad_hominem"),
    rule(r"\bwhat\s+would\s+you\s+know\b", "ad_hominem"),

    # --- strawman ---
    rule(rf"\bso\s+you{_ARE}\s+saying\s+(?:that\s+)?we\s+should", "strawman"),
    rule(r"\bby\s+that\s+logic\b", "strawman"),
    rule(r"\bif\s+we\s+follow\s+your\s+reasoning\b", "strawman"),
    rule(r"\byou\s+think\s+that\s+all\s+\w+\s+are\b", "strawman"),

    # --- false_dichotomy ---
    rule(r"\beither\s+\w+\s+or\s+\w+", "false_dichotomy"),
    rule(rf"\byou{_ARE}\s+(?:either|with\s+us\s+or\s+against\s+us)", "false_dichotomy"),
    rule(r"\bonly\s+two\s+(?:options|choices)\b", "false_dichotomy"),
    rule(r"\bif\s+you\s+don['’]t\s+\w+,?\s+then\s+you\s+must\b", "false_dichotomy"),

    # --- slippery_slope ---
    rule(r"\bif\s+we\s+allow\s+\w+,?\s+(?:then\s+)?next\s+thing\b", "slippery_slope"),
    rule(r"\bthis\s+will\s+lead\s+to\b", "slippery_slope"),
    rule(r"\bwhere\s+does\s+it\s+(?:end|stop)\b", "slippery_slope"),
    rule(r"\bit['’]s\s+a\s+slippery\s+slope\b", "slippery_slope"),

    # --- appeal_to_emotion ---
    rule(r"\bthink\s+of\s+the\s+children\b", "appeal_to_emotion"),
    rule(r"\bhow\s+would\s+you\s+feel\s+if\b", "appeal_to_emotion"),
    rule(r"\bimagine\s+if\s+it\s+(?:was|were)\s+your\b", "appeal_to_emotion"),
    rule(r"\bthis\s+makes\s+me\s+(?:so\s+)?(?:angry|sad|upset)\b", "appeal_to_emotion"),

    # --- hasty_generalization ---
    rule(r"\ball\s+\w+\s+are\s+(?:always|never)\b", "hasty_generalization"),
    rule(r"\bevery(?:one)?\s+knows\s+that\b", "hasty_generalization"),
    rule(r"\b(?:no\s+one|nobody)\s+thinks\s+that\b", "hasty_generalization"),
    rule(r"\b\w+\s+always\s+(?:does|says|thinks)\b", "hasty_generalization", weight=0.5),

    # --- appeal_to_authority ---
    rule(r"\bexperts\s+agree\b", "appeal_to_authority"),
    rule(r"\bstudies\s+show\b", "appeal_to_authority"),
    rule(r"\bscience\s+says\b", "appeal_to_authority"),
    rule(r"\b\w+\s+said\s+(?:so|it)\b", "appeal_to_authority", weight=0.5),
)


FALLACY_NAMES: dict[str, str] = {
    "ad_hominem": "Ad Hominem (attacking the person)",
    "strawman": "Strawman (misrepresenting the argument)",
    "false_dichotomy": "False Dichotomy (presenting only two options)",
    "slippery_slope": "Slippery Slope (claiming cascading consequences without evidence)",
    "appeal_to_emotion": "Appeal to Emotion (using feelings instead of logic)",
    "hasty_generalization": "Hasty Generalization (overgeneralizing from limited examples)",
    "appeal_to_authority": "Appeal to Authority (citing sources without specifics)",
}

SUGGESTIONS: dict[str, str] = {
    "ad_hominem": (
        "Focus on addressing the argument itself rather than attacking the person "
        "making it. What specific claims can you refute?"
    ),
    "strawman": (
        "Ensure you're responding to the actual argument being made, not a "
        "misrepresented version. Can you quote their exact position?"
    ),
    "false_dichotomy": (
        "Consider whether there are more than two options available. Are there "
        "middle-ground positions or alternative approaches?"
    ),
    "slippery_slope": (
        "Provide evidence for each step in the causal chain. What specific "
        "mechanisms would lead to the predicted outcome?"
    ),
    "appeal_to_emotion": (
        "While emotions are valid, consider supporting your point with factual "
        "reasoning. What objective evidence supports this position?"
    ),
    "hasty_generalization": (
        "Avoid sweeping generalizations. Can you provide specific examples or "
        "acknowledge exceptions?"
    ),
    "appeal_to_authority": (
        "When citing authorities, provide specific sources and be open to "
        "counter-evidence. Which studies or experts specifically?"
    ),
}


def _links(*pairs: tuple[str, str]) -> tuple[EducationalResource, ...]:
    return tuple(EducationalResource(title=t, url=u) for t, u in pairs)


RESOURCES: dict[str, tuple[EducationalResource, ...]] = {
    "ad_hominem": _links(
        ("Ad Hominem Fallacy", "https://en.wikipedia.org/wiki/Ad_hominem"),
        ("Arguing Against the Person", "https://yourlogicalfallacyis.com/ad-hominem"),
    ),
    "strawman": _links(
        ("Straw Man Fallacy", "https://en.wikipedia.org/wiki/Straw_man"),
        ("Misrepresenting Arguments", "https://yourlogicalfallacyis.com/strawman"),
    ),
    "false_dichotomy": _links(
        ("False Dilemma", "https://en.wikipedia.org/wiki/False_dilemma"),
        ("Black or White Thinking", "https://yourlogicalfallacyis.com/black-or-white"),
    ),
    "slippery_slope": _links(
        ("Slippery Slope Fallacy", "https://en.wikipedia.org/wiki/Slippery_slope"),
        ("Understanding Slippery Slopes", "https://yourlogicalfallacyis.com/slippery-slope"),
    ),
    "appeal_to_emotion": _links(
        ("Appeal to Emotion", "https://en.wikipedia.org/wiki/Appeal_to_emotion"),
        ("Emotional Reasoning", "https://yourlogicalfallacyis.com/appeal-to-emotion"),
    ),
    "hasty_generalization": _links(
        ("Hasty Generalization", "https://en.wikipedia.org/wiki/Hasty_generalization"),
        ("Overgeneralization", "https://yourlogicalfallacyis.com/composition-division"),
    ),
    "appeal_to_authority": _links(
        ("Appeal to Authority", "https://en.wikipedia.org/wiki/Argument_from_authority"),
        ("When Authorities Aren't Enough", "https://yourlogicalfallacyis.com/appeal-to-authority"),
    ),
}

GENERIC_RESOURCES = _links(
    ("Logical Fallacies", "https://en.wikipedia.org/wiki/List_of_fallacies"),
)


class FallacyDetector:
    """Detects named logical fallacies in argumentative text."""

    def __init__(
        self,
        rules: Optional[Sequence[PatternRule]] = None,
        confidence: ConfidenceModel = FALLACY_CONFIDENCE,
    ):
        self.rules = tuple(rules) if rules is not None else FALLACY_RULES
        self.confidence = confidence
        self._order = subtype_order(self.rules)

    def analyze(self, text: str) -> Optional[DetectionResult]:
        if not text or not text.strip():
            return None

        matches = match_table(text, self.rules)
        if not matches:
            return None

        counts = subtype_counts(matches)
        subtype = select_subtype(matches, self._order)
        score = self.confidence.score(weighted_matches(matches), len(counts))
        primary = [m for m in matches if m.rule.subtype == subtype]
        excerpts = quoted_excerpts(primary)
        name = FALLACY_NAMES.get(subtype, subtype)

        logger.debug(
            "Fallacy: %s x%d (families=%d), confidence=%.2f",
            subtype, counts[subtype], len(counts), score,
        )

        return DetectionResult(
            type=FeedbackType.FALLACY,
            subtype=subtype,
            match_count=total_matches(matches),
            confidence_score=score,
            reasoning=(
                f"Detected {counts[subtype]} instance(s) of the logical fallacy "
                f"{name} (e.g., {', '.join(excerpts)}). Logical fallacies can weaken "
                f"your argument even when your underlying point may be valid."
            ),
            suggestion_text=SUGGESTIONS.get(
                subtype, "Consider strengthening your logical reasoning.",
            ),
            educational_resources=RESOURCES.get(subtype, GENERIC_RESOURCES),
            excerpts=tuple(excerpts),
        )
