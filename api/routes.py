"""
FastAPI Route Handlers
Nexus Insights: Comment Intelligence
"""

import logging
from datetime import datetime, timedelta
from typing import Tuple

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from api.schemas import (
    AnalyzeRequest, AnalyzeResponse, AnalysisResponse,
    CompareRequest, BattleCardResponse, HealthResponse,
)
from agents.comparator import Comparator
from agents.fetcher import CommentSource, YouTubeCommentSource, extract_video_id
from agents.llm import LLMClient, OpenAIChatClient
from config.settings import settings
from db.cache import AnalysisCache
from db.database import get_db_dependency
from models.errors import AnalysisError, ClassificationError, VideoNotFoundError
from models.schemas import AnalysisResult
from utils.pipeline import analyze_video

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Dependencies ────────────────────────────────────────────────────────────
# Built per request; tests swap them via app.dependency_overrides.

def get_comment_source() -> CommentSource:
    try:
        return YouTubeCommentSource()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_llm_client() -> LLMClient:
    try:
        return OpenAIChatClient()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_cache(db: Session = Depends(get_db_dependency)) -> AnalysisCache:
    return AnalysisCache(db)


def _status_for(error: AnalysisError) -> int:
    if isinstance(error, VideoNotFoundError):
        return 404
    if isinstance(error, ClassificationError):
        return 500
    return 400


def _require_video_id(ref: str, label: str = "YouTube URL") -> str:
    video_id = extract_video_id(ref)
    if not video_id:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return video_id


def _analysis_for(
    ref: str,
    source: CommentSource,
    llm: LLMClient,
    cache: AnalysisCache,
    force_refresh: bool = False,
) -> Tuple[AnalysisResult, int, bool]:
    """Cache-first analysis. Returns (result, row id, served_from_cache)."""
    video_id = _require_video_id(ref)

    if not force_refresh:
        cached = cache.get_fresh(video_id, timedelta(hours=settings.CACHE_TTL_HOURS))
        if cached is not None:
            return cached, cache.get_row(video_id).analysis_id, True

    try:
        result = analyze_video(ref, source, llm)
    except AnalysisError as e:
        logger.warning(f"Analysis of {video_id} aborted: {e}")
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    except Exception as e:
        logger.error(f"Analysis of {video_id} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {e}")

    row = cache.store(result)
    return result, row.analysis_id, False


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
    )


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.post("/analyze", response_model=AnalyzeResponse, tags=["Analysis"])
def analyze(
    request: AnalyzeRequest,
    source: CommentSource = Depends(get_comment_source),
    llm: LLMClient = Depends(get_llm_client),
    cache: AnalysisCache = Depends(get_cache),
):
    """
    Analyze one video:
    Fetch → Sanitize → Classify → Aggregate → Strategize

    A stored analysis younger than CACHE_TTL_HOURS is returned as-is unless
    `forceRefresh` is set.
    """
    result, row_id, cached = _analysis_for(
        request.url, source, llm, cache, force_refresh=request.force_refresh,
    )
    return AnalyzeResponse(
        cached=cached,
        analysis=AnalysisResponse.model_validate({"id": row_id, **result.to_dict()}),
    )


# ─── Competitor comparison ───────────────────────────────────────────────────

@router.post("/compare", response_model=BattleCardResponse, tags=["Analysis"])
def compare(
    request: CompareRequest,
    source: CommentSource = Depends(get_comment_source),
    llm: LLMClient = Depends(get_llm_client),
    cache: AnalysisCache = Depends(get_cache),
):
    """Build a battle card for our video against a competitor's."""
    _require_video_id(request.my_url)
    _require_video_id(request.their_url, label="competitor URL")

    mine, _, _ = _analysis_for(request.my_url, source, llm, cache)
    theirs, _, _ = _analysis_for(request.their_url, source, llm, cache)

    gap = Comparator(llm).compare_gap(mine.evidence(), theirs.evidence())
    row = cache.record_gap(mine.video.video_id, theirs.video.video_id, gap)

    return BattleCardResponse.model_validate({
        "id": row.gap_id,
        "myVideoId": mine.video.video_id,
        "theirVideoId": theirs.video.video_id,
        **gap.to_dict(),
    })
