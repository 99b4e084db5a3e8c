"""
Feedback Preview — Pre-Post Check for a Draft

Takes the orchestrator's full result list and decides, for a given
sensitivity, which items the author sees and whether the draft is
ready to post.

  - Display: an item is shown when its confidence reaches the
    sensitivity threshold. A lone AFFIRMATION is always shown.
  - Ready to post: false as soon as any issue (shown or not) reaches
    the critical threshold for its type.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from reasonbridge.models import AnalysisResult, FeedbackType, _Serializable


class Sensitivity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def threshold(self) -> float:
        return DISPLAY_THRESHOLDS[self]


DISPLAY_THRESHOLDS: dict[Sensitivity, float] = {
    Sensitivity.LOW: 0.5,
    Sensitivity.MEDIUM: 0.7,
    Sensitivity.HIGH: 0.85,
}

# Confidence at which an issue blocks "ready to post"
CRITICAL_THRESHOLDS: dict[FeedbackType, float] = {
    FeedbackType.INFLAMMATORY: 0.75,
    FeedbackType.FALLACY: 0.85,
    FeedbackType.UNSOURCED: 0.85,
    FeedbackType.BIAS: 0.85,
}


@dataclass(frozen=True)
class PreviewItem(_Serializable):
    type: FeedbackType
    subtype: Optional[str]
    suggestion_text: str
    reasoning: str
    confidence_score: float
    should_display: bool


@dataclass(frozen=True)
class FeedbackPreview(_Serializable):
    feedback: tuple[PreviewItem, ...]
    primary: Optional[PreviewItem]
    ready_to_post: bool
    summary: str
    analysis_time_ms: int
    sensitivity: Sensitivity = Sensitivity.MEDIUM


def is_critical(result: AnalysisResult) -> bool:
    limit = CRITICAL_THRESHOLDS.get(result.type)
    return limit is not None and result.confidence_score >= limit


def _summary(ready: bool, issues: list[PreviewItem]) -> str:
    if not ready:
        return "Consider revising before posting: some feedback flags a significant issue."
    if not issues:
        return "Looking good! No significant issues were detected."
    noun = "suggestion" if len(issues) == 1 else "suggestions"
    return f"{len(issues)} {noun} to consider before posting."


def build_preview(
    results: Sequence[AnalysisResult],
    sensitivity: Sensitivity = Sensitivity.MEDIUM,
    elapsed_ms: int = 0,
) -> FeedbackPreview:
    """Turn ranked orchestrator output into a draft preview."""
    sensitivity = Sensitivity(sensitivity)
    threshold = sensitivity.threshold
    only_affirmation = all(r.type == FeedbackType.AFFIRMATION for r in results)

    items = tuple(
        PreviewItem(
            type=r.type,
            subtype=r.subtype,
            suggestion_text=r.suggestion_text,
            reasoning=r.reasoning,
            confidence_score=r.confidence_score,
            should_display=(
                (only_affirmation and r.type == FeedbackType.AFFIRMATION)
                or r.confidence_score >= threshold
            ),
        )
        for r in results
    )

    issues = [i for i in items if i.should_display and i.type != FeedbackType.AFFIRMATION]
    ready = not any(is_critical(r) for r in results if r.type != FeedbackType.AFFIRMATION)

    return FeedbackPreview(
        feedback=items,
        primary=issues[0] if issues else None,
        ready_to_post=ready,
        summary=_summary(ready, issues),
        analysis_time_ms=max(0, int(elapsed_ms)),
        sensitivity=sensitivity,
    )
