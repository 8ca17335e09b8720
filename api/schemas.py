"""
Pydantic schemas for API request/response validation.

Field names on the wire are camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ─── Request Schemas ─────────────────────────────────────────────────────────

class AnalyzeRequest(_CamelModel):
    url: str = Field(..., min_length=1, description="YouTube watch/short/embed URL or bare video id")
    force_refresh: bool = Field(False, alias="forceRefresh")


class CompareRequest(_CamelModel):
    my_url: str = Field(..., min_length=1, alias="myUrl")
    their_url: str = Field(..., min_length=1, alias="theirUrl")


# ─── Response Schemas ────────────────────────────────────────────────────────

class VideoInfoResponse(_CamelModel):
    video_id: str = Field(..., alias="videoId")
    title: str
    thumbnail: str = ""
    channel_title: str = Field("", alias="channelTitle")


class MetricsResponse(_CamelModel):
    pain_index: int = Field(..., ge=0, le=100, alias="painIndex")
    demand_velocity: int = Field(..., ge=0, le=100, alias="demandVelocity")
    loyalty_depth: int = Field(..., ge=0, le=100, alias="loyaltyDepth")
    confusion_score: int = Field(..., ge=0, le=100, alias="confusionScore")


class ThemeResponse(_CamelModel):
    topic: str
    sentiment: str
    intensity: float
    volume: int
    representative_quotes: List[str] = Field(default_factory=list, alias="representativeQuotes")
    user_segment: str = Field("Unknown", alias="userSegment")


class ActionPlanResponse(_CamelModel):
    immediate_fixes: List[str] = Field(default_factory=list, alias="immediateFixes")
    content_opportunities: List[str] = Field(default_factory=list, alias="contentOpportunities")
    marketing_hooks: List[str] = Field(default_factory=list, alias="marketingHooks")


class StatsResponse(_CamelModel):
    total_fetched: int = Field(0, alias="totalFetched")
    total_analyzed: int = Field(0, alias="totalAnalyzed")
    trash_count: int = Field(0, alias="trashCount")


class AnalysisResponse(_CamelModel):
    id: Optional[int] = None
    video_info: VideoInfoResponse = Field(..., alias="videoInfo")
    metrics: MetricsResponse
    themes: List[ThemeResponse] = Field(default_factory=list)
    feature_requests: List[str] = Field(default_factory=list, alias="featureRequests")
    bug_reports: List[str] = Field(default_factory=list, alias="bugReports")
    content_ideas: List[str] = Field(default_factory=list, alias="contentIdeas")
    summary: str
    action_plan: ActionPlanResponse = Field(..., alias="actionPlan")
    stats: StatsResponse
    executed_at: Optional[datetime] = Field(None, alias="executedAt")


class AnalyzeResponse(BaseModel):
    cached: bool
    analysis: AnalysisResponse


class GapPointResponse(_CamelModel):
    topic: str
    our_sentiment: str = Field(..., alias="ourSentiment")
    their_sentiment: str = Field(..., alias="theirSentiment")
    insight: str


class ContentGapResponse(BaseModel):
    question: str
    frequency: int = Field(..., ge=0)
    source: str


class BattleCardResponse(_CamelModel):
    id: Optional[int] = None
    my_video_id: str = Field(..., alias="myVideoId")
    their_video_id: str = Field(..., alias="theirVideoId")
    winning_points: List[GapPointResponse] = Field(default_factory=list, alias="winningPoints")
    losing_points: List[GapPointResponse] = Field(default_factory=list, alias="losingPoints")
    content_gaps: List[ContentGapResponse] = Field(default_factory=list, alias="contentGaps")
    why_us_hooks: List[str] = Field(default_factory=list, alias="whyUsHooks")
    comparison: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
