"""
Data Model — Records Flowing Through the Engine

Every result is recomputed per call and never mutated after it is
returned. Input records are treated as an immutable snapshot: the
engine classifies ids, it never edits the caller's lists.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class FeedbackType(str, Enum):
    AFFIRMATION = "AFFIRMATION"
    INFLAMMATORY = "INFLAMMATORY"
    FALLACY = "FALLACY"
    UNSOURCED = "UNSOURCED"
    BIAS = "BIAS"


class Stance(str, Enum):
    SUPPORT = "SUPPORT"
    OPPOSE = "OPPOSE"
    NUANCED = "NUANCED"


def _plain(value: Any) -> Any:
    """Recursively replace enums with their values for serialization."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict:
        return _plain(asdict(self))


# ============================================================
# FEEDBACK
# ============================================================

@dataclass(frozen=True)
class EducationalResource(_Serializable):
    title: str
    url: str


@dataclass(frozen=True)
class DetectionResult(_Serializable):
    """What a single detector reports when at least one pattern matched."""
    type: FeedbackType
    subtype: Optional[str]
    match_count: int
    confidence_score: float
    reasoning: str
    suggestion_text: str
    educational_resources: tuple[EducationalResource, ...] = ()
    excerpts: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisResult(_Serializable):
    """The orchestrator's answer for one piece of text."""
    type: FeedbackType
    suggestion_text: str
    reasoning: str
    confidence_score: float          # Always within [0, 1]
    subtype: Optional[str] = None
    educational_resources: Optional[tuple[EducationalResource, ...]] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence_score <= 1.0:
            raise ValueError(
                f"confidence_score out of range: {self.confidence_score}"
            )

    @classmethod
    def from_detection(cls, detection: DetectionResult) -> "AnalysisResult":
        return cls(
            type=detection.type,
            subtype=detection.subtype,
            suggestion_text=detection.suggestion_text,
            reasoning=detection.reasoning,
            confidence_score=detection.confidence_score,
            educational_resources=detection.educational_resources or None,
        )


# ============================================================
# CLUSTERING
# ============================================================

@dataclass(frozen=True)
class PropositionInput(_Serializable):
    id: str
    statement: str
    metadata: Optional[dict] = None


@dataclass(frozen=True)
class PropositionCluster(_Serializable):
    id: str
    theme: str
    proposition_ids: tuple[str, ...]  # Discovery order
    size: int
    cohesion_score: float
    keywords: tuple[str, ...]         # At most 5


@dataclass(frozen=True)
class ClusterResult(_Serializable):
    topic_id: str
    clusters: tuple[PropositionCluster, ...]
    unclustered_ids: tuple[str, ...]
    quality_score: float
    confidence: float
    reasoning: str
    method: str = "pattern-based"


# ============================================================
# STANCES / SYNTHESIS
# ============================================================

@dataclass(frozen=True)
class StanceAlignment(_Serializable):
    user_id: str
    stance: Stance
    nuance_explanation: Optional[str] = None


@dataclass(frozen=True)
class PropositionAlignment(_Serializable):
    id: str
    statement: str
    support_count: int
    oppose_count: int
    nuanced_count: int
    consensus_score: Optional[float] = None
    alignments: tuple[StanceAlignment, ...] = ()

    @property
    def total(self) -> int:
        return self.support_count + self.oppose_count + self.nuanced_count


@dataclass(frozen=True)
class TopicData(_Serializable):
    topic_id: str
    propositions: tuple[PropositionAlignment, ...]
    participant_count: Optional[int] = None


@dataclass(frozen=True)
class AgreementZone(_Serializable):
    proposition: str
    agreement_percentage: int
    supporting_evidence: tuple[str, ...]
    participant_count: int


@dataclass(frozen=True)
class Interpretation(_Serializable):
    interpretation: str
    participant_count: int


@dataclass(frozen=True)
class Misunderstanding(_Serializable):
    topic: str
    interpretations: tuple[Interpretation, ...]
    clarification: str


@dataclass(frozen=True)
class Viewpoint(_Serializable):
    position: str                    # "Support" | "Oppose"
    participant_count: int
    reasoning: tuple[str, ...]


@dataclass(frozen=True)
class GenuineDisagreement(_Serializable):
    proposition: str
    viewpoints: tuple[Viewpoint, ...]
    underlying_values: tuple[str, ...]


@dataclass(frozen=True)
class SynthesisResult(_Serializable):
    agreement_zones: tuple[AgreementZone, ...] = ()
    misunderstandings: tuple[Misunderstanding, ...] = ()
    genuine_disagreements: tuple[GenuineDisagreement, ...] = ()
    overall_consensus_score: Optional[float] = None


# ============================================================
# DIVERGENCE
# ============================================================

@dataclass(frozen=True)
class DivergenceViewpoint(_Serializable):
    position: str
    participant_count: int
    percentage: int
    reasoning: tuple[str, ...]


@dataclass(frozen=True)
class DivergencePoint(_Serializable):
    proposition_id: str
    proposition: str
    viewpoints: tuple[DivergenceViewpoint, DivergenceViewpoint]
    total_participants: int
    nuanced_percentage: int
    polarization_score: float


@dataclass(frozen=True)
class DivergenceAnalysis(_Serializable):
    topic_id: str
    divergence_points: tuple[DivergencePoint, ...] = field(default_factory=tuple)
    overall_polarization: float = 0.0
    participant_count: int = 0
