"""
ReasonBridge — Discussion Analysis Engine

Deterministic, pattern-based analysis of discussion text and stance data.

Public API:
  - FeedbackOrchestrator:     One ranked feedback result per response text
  - ToneAnalyzer, FallacyDetector, ClarityAnalyzer: The three detectors
  - build_preview:            Sensitivity filter + ready-to-post for drafts
  - PropositionClusterer:     Keyword-similarity clustering of propositions
  - CommonGroundSynthesizer:  Agreement zones, misunderstandings, disagreements
  - DivergencePointDetector:  Genuine splits and polarization
  - calculate_agreement_percentage: Support share as a whole percentage

Usage:
    from reasonbridge import FeedbackOrchestrator, PropositionClusterer
    result = await FeedbackOrchestrator().analyze_content(text)
"""

__version__ = "1.0.0"

from reasonbridge.exceptions import AnalysisUnavailableError, InvalidInputError
from reasonbridge.models import (
    AnalysisResult,
    ClusterResult,
    DetectionResult,
    DivergenceAnalysis,
    FeedbackType,
    PropositionAlignment,
    PropositionInput,
    Stance,
    StanceAlignment,
    SynthesisResult,
    TopicData,
)
from reasonbridge.tone import ToneAnalyzer
from reasonbridge.fallacy import FallacyDetector
from reasonbridge.clarity import ClarityAnalyzer
from reasonbridge.feedback import AFFIRMATION, PRIORITY, FeedbackOrchestrator, rank_results
from reasonbridge.preview import FeedbackPreview, Sensitivity, build_preview
from reasonbridge.clustering import PropositionClusterer
from reasonbridge.common_ground import CommonGroundSynthesizer
from reasonbridge.divergence import DivergencePointDetector
from reasonbridge.scorer import calculate_agreement_percentage

__all__ = [
    "AnalysisUnavailableError",
    "InvalidInputError",
    "AnalysisResult",
    "ClusterResult",
    "DetectionResult",
    "DivergenceAnalysis",
    "FeedbackType",
    "PropositionAlignment",
    "PropositionInput",
    "Stance",
    "StanceAlignment",
    "SynthesisResult",
    "TopicData",
    "ToneAnalyzer",
    "FallacyDetector",
    "ClarityAnalyzer",
    "AFFIRMATION",
    "PRIORITY",
    "FeedbackOrchestrator",
    "rank_results",
    "FeedbackPreview",
    "Sensitivity",
    "build_preview",
    "PropositionClusterer",
    "CommonGroundSynthesizer",
    "DivergencePointDetector",
    "calculate_agreement_percentage",
]
