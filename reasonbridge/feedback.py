"""
Feedback Orchestrator — One Ranked Result per Text

Fans the text out to the three detectors, waits for all of them,
and picks one result:

  1. Nothing fired            -> AFFIRMATION (confidence 0.85)
  2. Clear confidence winner  -> that result
  3. Tied within epsilon      -> highest type priority among the tied:
                                 FALLACY > INFLAMMATORY > UNSOURCED > BIAS

A detector raising is fatal to the whole call. There is no partial
result; callers get AnalysisUnavailableError and fall back to no
feedback.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence

from reasonbridge.clarity import ClarityAnalyzer
from reasonbridge.config import settings
from reasonbridge.exceptions import AnalysisUnavailableError
from reasonbridge.fallacy import FallacyDetector
from reasonbridge.models import AnalysisResult, DetectionResult, FeedbackType
from reasonbridge.tone import ToneAnalyzer

logger = logging.getLogger(__name__)


class Detector(Protocol):
    def analyze(self, text: str) -> Optional[DetectionResult]: ...


# Lower rank wins a tie
PRIORITY: dict[FeedbackType, int] = {
    FeedbackType.FALLACY: 0,
    FeedbackType.INFLAMMATORY: 1,
    FeedbackType.UNSOURCED: 2,
    FeedbackType.BIAS: 3,
}

AFFIRMATION = AnalysisResult(
    type=FeedbackType.AFFIRMATION,
    suggestion_text=(
        "Your response contributes to constructive dialogue. Thank you for "
        "engaging thoughtfully."
    ),
    reasoning=(
        "No logical fallacies, inflammatory language, or unsourced claims were "
        "detected in this response."
    ),
    confidence_score=0.85,
)


def _gap(a: float, b: float) -> float:
    # Rounded so 0.78 - 0.73 compares as exactly 0.05
    return round(a - b, 9)


def rank_results(
    results: Sequence[DetectionResult], tie_epsilon: float = 0.05,
) -> list[DetectionResult]:
    """
    Order detections so the winner comes first.

    Sorted by confidence descending (priority breaks exact ties). If the
    top two are within tie_epsilon, the highest-priority type among all
    results within tie_epsilon of the top is promoted to the front.
    """
    ordered = sorted(
        results, key=lambda r: (-r.confidence_score, PRIORITY.get(r.type, len(PRIORITY))),
    )
    if len(ordered) < 2:
        return ordered

    top = ordered[0].confidence_score
    if _gap(top, ordered[1].confidence_score) > tie_epsilon:
        return ordered

    tied = [r for r in ordered if _gap(top, r.confidence_score) <= tie_epsilon]
    winner = min(tied, key=lambda r: PRIORITY.get(r.type, len(PRIORITY)))
    return [winner] + [r for r in ordered if r is not winner]


class FeedbackOrchestrator:
    """
    Runs the tone, fallacy and clarity detectors concurrently and
    merges their results.

    Detectors are injected; pass fakes in tests. Holds no state
    between calls.
    """

    def __init__(
        self,
        tone: Optional[Detector] = None,
        fallacy: Optional[Detector] = None,
        clarity: Optional[Detector] = None,
        tie_epsilon: Optional[float] = None,
    ):
        self.tone = tone if tone is not None else ToneAnalyzer()
        self.fallacy = fallacy if fallacy is not None else FallacyDetector()
        self.clarity = clarity if clarity is not None else ClarityAnalyzer()
        self.tie_epsilon = settings.TIE_EPSILON if tie_epsilon is None else tie_epsilon

    @property
    def detectors(self) -> tuple[Detector, Detector, Detector]:
        return (self.tone, self.fallacy, self.clarity)

    async def _detect(self, text: str) -> list[DetectionResult]:
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(d.analyze, text) for d in self.detectors),
            return_exceptions=True,
        )

        fired: list[DetectionResult] = []
        for detector, outcome in zip(self.detectors, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Detector %s failed", type(detector).__name__,
                    extra={"error": str(outcome), "error_type": type(outcome).__name__},
                )
                raise AnalysisUnavailableError(
                    f"{type(detector).__name__} failed: {outcome}"
                ) from outcome
            if outcome is not None:
                fired.append(outcome)
        return fired

    async def analyze_content_full(self, text: str) -> list[AnalysisResult]:
        """Every detection that fired, winner first. [AFFIRMATION] if none."""
        if not text or not text.strip():
            return [AFFIRMATION]

        fired = await self._detect(text)
        if not fired:
            return [AFFIRMATION]

        ranked = rank_results(fired, self.tie_epsilon)
        logger.debug(
            "Feedback ranked",
            extra={
                "feedback_type": ranked[0].type,
                "confidence": ranked[0].confidence_score,
                "detections": len(ranked),
            },
        )
        return [AnalysisResult.from_detection(r) for r in ranked]

    async def analyze_content(self, text: str) -> AnalysisResult:
        """Exactly one result for the text."""
        results = await self.analyze_content_full(text)
        return results[0]

    def analyze_content_sync(self, text: str) -> AnalysisResult:
        """Blocking wrapper for callers without an event loop (calibration CLI)."""
        return asyncio.run(self.analyze_content(text))
