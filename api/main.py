"""
ReasonBridge API — Main Application

POST /feedback/analyze         — One ranked feedback result for a response
POST /feedback/analyze/full    — Every detection that fired, winner first
POST /feedback/preview         — Draft preview: display filter + ready-to-post
POST /propositions/cluster     — Group a topic's propositions by keywords
POST /common-ground/synthesize — Agreement zones, misunderstandings, disagreements
POST /divergence               — Genuine splits and polarization
GET  /patterns                 — Every detector's pattern table
GET  /health                   — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reasonbridge import __version__
from reasonbridge.cache import FeedbackCache
from reasonbridge.clarity import BIAS_RULES, UNSOURCED_RULES
from reasonbridge.clustering import PropositionClusterer
from reasonbridge.common_ground import CommonGroundSynthesizer
from reasonbridge.config import settings
from reasonbridge.divergence import DivergencePointDetector
from reasonbridge.exceptions import AnalysisUnavailableError, InvalidInputError
from reasonbridge.fallacy import FALLACY_RULES
from reasonbridge.feedback import FeedbackOrchestrator
from reasonbridge.logging import get_logger, setup_logging
from reasonbridge.models import TopicData
from reasonbridge.patterns import describe_table
from reasonbridge.preview import Sensitivity, build_preview
from reasonbridge.schemas.analysis import (
    AnalysisListResponse,
    AnalysisResponse,
    AnalyzeRequest,
    ClusterRequest,
    ClusterResponse,
    DivergenceResponse,
    HealthResponse,
    PreviewRequest,
    PreviewResponse,
    SynthesisResponse,
    TopicRequest,
)
from reasonbridge.tone import TONE_RULES

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire up the engine components on startup."""
    setup_logging()

    app.state.orchestrator = FeedbackOrchestrator()
    app.state.clusterer = PropositionClusterer()
    app.state.synthesizer = CommonGroundSynthesizer()
    app.state.divergence = DivergencePointDetector()
    app.state.preview_cache = FeedbackCache(
        ttl_seconds=settings.CACHE_TTL, max_entries=settings.CACHE_MAX_ENTRIES,
    )

    logger.info("ReasonBridge API starting", extra={"method": "startup"})
    yield
    logger.info("ReasonBridge API shutting down")


app = FastAPI(
    title="ReasonBridge Analysis API",
    description="Deterministic feedback and common-ground analysis for discussions",
    version=f"{__version__} (engine {settings.ENGINE_VERSION})",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# DEPENDENCIES
# ============================================================

def get_orchestrator(request: Request) -> FeedbackOrchestrator:
    return request.app.state.orchestrator


def get_clusterer(request: Request) -> PropositionClusterer:
    return request.app.state.clusterer


def get_synthesizer(request: Request) -> CommonGroundSynthesizer:
    return request.app.state.synthesizer


def get_divergence_detector(request: Request) -> DivergencePointDetector:
    return request.app.state.divergence


def get_preview_cache(request: Request) -> FeedbackCache:
    return request.app.state.preview_cache


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning(
        "Rejected malformed input",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
    )
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(AnalysisUnavailableError)
async def analysis_unavailable_handler(request: Request, exc: AnalysisUnavailableError):
    logger.error(
        "Analysis unavailable",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
    )
    return JSONResponse(status_code=503, content={"detail": "Analysis unavailable"})


@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions: return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(status_code=503, content={"detail": "Analysis unavailable"})


# ============================================================
# FEEDBACK
# ============================================================

@app.post("/feedback/analyze", response_model=AnalysisResponse)
async def analyze(
    request: AnalyzeRequest,
    orchestrator: FeedbackOrchestrator = Depends(get_orchestrator),
):
    """Return the single most actionable result for a response."""
    start = time.time()
    result = await orchestrator.analyze_content(request.text)

    logger.info(
        f"Feedback: {result.type.value}",
        extra={
            "feedback_type": result.type,
            "confidence": result.confidence_score,
            "duration_ms": int((time.time() - start) * 1000),
        },
    )
    return result.to_dict()


@app.post("/feedback/analyze/full", response_model=AnalysisListResponse)
async def analyze_full(
    request: AnalyzeRequest,
    orchestrator: FeedbackOrchestrator = Depends(get_orchestrator),
):
    """Return every detection that fired, ranked."""
    results = await orchestrator.analyze_content_full(request.text)
    return {"results": [r.to_dict() for r in results], "total": len(results)}


@app.post("/feedback/preview", response_model=PreviewResponse)
async def preview(
    request: PreviewRequest,
    orchestrator: FeedbackOrchestrator = Depends(get_orchestrator),
    cache: FeedbackCache = Depends(get_preview_cache),
):
    """Preview feedback on a draft before posting."""
    cached = await cache.get(request.content, request.sensitivity)
    if cached is not None:
        return cached

    start = time.time()
    results = await orchestrator.analyze_content_full(request.content)
    elapsed = int((time.time() - start) * 1000)

    payload = build_preview(results, Sensitivity(request.sensitivity), elapsed).to_dict()
    await cache.put(request.content, request.sensitivity, payload)

    logger.info(
        "Preview complete",
        extra={
            "feedback_type": results[0].type,
            "detections": len(results),
            "duration_ms": elapsed,
        },
    )
    return payload


# ============================================================
# PROPOSITIONS / COMMON GROUND
# ============================================================

@app.post("/propositions/cluster", response_model=ClusterResponse)
async def cluster_propositions(
    request: ClusterRequest,
    clusterer: PropositionClusterer = Depends(get_clusterer),
):
    result = clusterer.cluster(
        request.topic_id,
        [p.model_dump() for p in request.propositions],
        similarity_threshold=request.similarity_threshold,
    )
    logger.info(
        f"Clustered {len(request.propositions)} propositions",
        extra={
            "topic_id": request.topic_id,
            "proposition_count": len(request.propositions),
            "cluster_count": len(result.clusters),
        },
    )
    return result.to_dict()


@app.post("/common-ground/synthesize", response_model=SynthesisResponse)
async def synthesize(
    request: TopicRequest,
    synthesizer: CommonGroundSynthesizer = Depends(get_synthesizer),
):
    topic = TopicData(
        topic_id=request.topic_id,
        propositions=tuple(p.model_dump() for p in request.propositions),
        participant_count=request.participant_count,
    )
    result = synthesizer.synthesize(topic)
    return {"topic_id": request.topic_id, **result.to_dict()}


@app.post("/divergence", response_model=DivergenceResponse)
async def divergence(
    request: TopicRequest,
    detector: DivergencePointDetector = Depends(get_divergence_detector),
):
    result = detector.identify_divergence_points(
        request.topic_id, [p.model_dump() for p in request.propositions],
    )
    return result.to_dict()


# ============================================================
# META
# ============================================================

@app.get("/patterns")
async def get_patterns():
    """Return every detector's pattern table in declaration order."""
    tables = {
        "INFLAMMATORY": describe_table(TONE_RULES),
        "FALLACY": describe_table(FALLACY_RULES),
        "UNSOURCED": describe_table(UNSOURCED_RULES),
        "BIAS": describe_table(BIAS_RULES),
    }
    return {
        "engine_version": settings.ENGINE_VERSION,
        "total_patterns": sum(len(t) for t in tables.values()),
        "tables": tables,
    }


@app.get("/health", response_model=HealthResponse)
async def health(cache: FeedbackCache = Depends(get_preview_cache)):
    """Health check."""
    return {
        "status": "operational",
        "version": __version__,
        "engine_version": settings.ENGINE_VERSION,
        "cache": cache.stats,
    }


# --- Security + Version Headers Middleware ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security and version headers to all responses."""
    response = await call_next(request)
    response.headers["X-ReasonBridge-Version"] = __version__
    response.headers["X-Engine-Version"] = settings.ENGINE_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
