"""
API Schemas — Request and Response Models

Pydantic models for the ReasonBridge analysis API.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from reasonbridge.config import settings


# ============================================================
# FEEDBACK
# ============================================================

class AnalyzeRequest(BaseModel):
    """POST /feedback/analyze and /feedback/analyze/full request body."""
    text: str = Field(..., max_length=settings.MAX_TEXT_LENGTH,
                      description="The response text to analyze.")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "By that logic, we should just eliminate all regulations entirely."},
    ]}}


class PreviewRequest(BaseModel):
    """POST /feedback/preview request body."""
    content: str = Field(..., min_length=20, max_length=settings.MAX_TEXT_LENGTH,
                         description="Draft text, 20 characters or more.")
    sensitivity: str = Field("MEDIUM", pattern="^(LOW|MEDIUM|HIGH)$",
                             description="Display threshold: LOW 0.5, MEDIUM 0.7, HIGH 0.85.")


class ResourceResponse(BaseModel):
    title: str
    url: str


class AnalysisResponse(BaseModel):
    type: str
    subtype: Optional[str] = None
    suggestion_text: str
    reasoning: str
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    educational_resources: Optional[list[ResourceResponse]] = None


class AnalysisListResponse(BaseModel):
    results: list[AnalysisResponse]
    total: int


class PreviewItemResponse(BaseModel):
    type: str
    subtype: Optional[str] = None
    suggestion_text: str
    reasoning: str
    confidence_score: float
    should_display: bool


class PreviewResponse(BaseModel):
    feedback: list[PreviewItemResponse]
    primary: Optional[PreviewItemResponse] = None
    ready_to_post: bool
    summary: str
    analysis_time_ms: int
    sensitivity: str
    cached: bool = False


# ============================================================
# CLUSTERING
# ============================================================

class PropositionIn(BaseModel):
    id: str = Field(..., min_length=1)
    statement: str
    metadata: Optional[dict] = None


class ClusterRequest(BaseModel):
    """POST /propositions/cluster request body."""
    topic_id: str = Field(..., min_length=1)
    propositions: list[PropositionIn] = Field(..., max_length=1000)
    similarity_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)


class ClusterOut(BaseModel):
    id: str
    theme: str
    proposition_ids: list[str]
    size: int
    cohesion_score: float
    keywords: list[str]


class ClusterResponse(BaseModel):
    topic_id: str
    clusters: list[ClusterOut]
    unclustered_ids: list[str]
    quality_score: float
    confidence: float
    reasoning: str
    method: str


# ============================================================
# STANCE SYNTHESIS
# ============================================================

class AlignmentIn(BaseModel):
    user_id: str = Field(..., min_length=1)
    stance: str = Field(..., pattern="^(SUPPORT|OPPOSE|NUANCED)$")
    nuance_explanation: Optional[str] = None


class PropositionAlignmentIn(BaseModel):
    id: str = Field(..., min_length=1)
    statement: str
    support_count: int = Field(..., ge=0)
    oppose_count: int = Field(..., ge=0)
    nuanced_count: int = Field(..., ge=0)
    consensus_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    alignments: list[AlignmentIn] = Field(default_factory=list)


class TopicRequest(BaseModel):
    """POST /common-ground/synthesize and POST /divergence request body."""
    topic_id: str = Field(..., min_length=1)
    propositions: list[PropositionAlignmentIn] = Field(..., max_length=1000)
    participant_count: Optional[int] = Field(None, ge=0)


class AgreementZoneOut(BaseModel):
    proposition: str
    agreement_percentage: int
    supporting_evidence: list[str]
    participant_count: int


class InterpretationOut(BaseModel):
    interpretation: str
    participant_count: int


class MisunderstandingOut(BaseModel):
    topic: str
    interpretations: list[InterpretationOut]
    clarification: str


class ViewpointOut(BaseModel):
    position: str
    participant_count: int
    reasoning: list[str]


class GenuineDisagreementOut(BaseModel):
    proposition: str
    viewpoints: list[ViewpointOut]
    underlying_values: list[str]


class SynthesisResponse(BaseModel):
    topic_id: str
    agreement_zones: list[AgreementZoneOut]
    misunderstandings: list[MisunderstandingOut]
    genuine_disagreements: list[GenuineDisagreementOut]
    overall_consensus_score: Optional[float] = None


class DivergenceViewpointOut(BaseModel):
    position: str
    participant_count: int
    percentage: int
    reasoning: list[str]


class DivergencePointOut(BaseModel):
    proposition_id: str
    proposition: str
    viewpoints: list[DivergenceViewpointOut]
    total_participants: int
    nuanced_percentage: int
    polarization_score: float


class DivergenceResponse(BaseModel):
    topic_id: str
    divergence_points: list[DivergencePointOut]
    overall_polarization: float
    participant_count: int


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    engine_version: str
    cache: dict
