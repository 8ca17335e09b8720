"""
Analysis cache backed by the `video_analysis` table.

A cached analysis is "fresh" while its `cached_at` is within `max_age`; the
caller decides the age (24 hours by default, `settings.CACHE_TTL_HOURS`).
Storing a result for a video that already has a row refreshes that row.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from db.models import CompetitorGap, VideoAnalysis
from models.schemas import (
    ActionPlan,
    AggregatedMetrics,
    AnalysisResult,
    AnalysisStats,
    CategoryCounts,
    CompetitorGapResult,
    StrategicOutput,
    ThemeCluster,
    VideoInfo,
)
from config.settings import settings

logger = logging.getLogger(__name__)

_COUNT_FIELDS = {
    "bugs": "bugs",
    "features": "features",
    "complaints": "complaints",
    "praise": "praise",
    "questions": "questions",
    "noise": "noise",
    "contentIdeas": "content_ideas",
}


def _counts_from_dict(data: Optional[Dict[str, Any]]) -> CategoryCounts:
    data = data or {}
    return CategoryCounts(**{attr: int(data.get(key, 0)) for key, attr in _COUNT_FIELDS.items()})


def to_result(row: VideoAnalysis) -> AnalysisResult:
    """Rebuild an AnalysisResult from its cached row."""
    return AnalysisResult(
        video=VideoInfo(
            video_id=row.youtube_id,
            title=row.title or "",
            thumbnail=row.thumbnail or "",
            channel_title=row.channel_title or "",
        ),
        metrics=AggregatedMetrics(
            pain_index=row.pain_index,
            demand_velocity=row.demand_velocity,
            loyalty_depth=row.loyalty_depth,
            confusion_score=row.confusion_score,
            feature_requests=list(row.feature_requests or []),
            bug_reports=list(row.bug_reports or []),
            content_ideas=list(row.content_ideas or []),
            themes=[ThemeCluster.from_dict(t) for t in row.themes or []],
            counts=_counts_from_dict(row.counts),
        ),
        strategy=StrategicOutput(
            summary=row.summary or "",
            action_plan=ActionPlan.from_dict(row.action_plan or {}),
        ),
        stats=AnalysisStats(
            total_fetched=row.total_fetched or 0,
            trash_count=row.trash_count or 0,
            total_analyzed=row.total_comments or 0,
        ),
        executed_at=row.executed_at or row.cached_at,
    )


class AnalysisCache:
    def __init__(self, session: Session):
        self.session = session

    def get_row(self, video_id: str) -> Optional[VideoAnalysis]:
        return (
            self.session.query(VideoAnalysis)
            .filter(VideoAnalysis.youtube_id == video_id)
            .one_or_none()
        )

    def get_fresh(
        self,
        video_id: str,
        max_age: timedelta = timedelta(hours=settings.CACHE_TTL_HOURS),
        now: Optional[datetime] = None,
    ) -> Optional[AnalysisResult]:
        cutoff = (now or datetime.utcnow()) - max_age
        row = (
            self.session.query(VideoAnalysis)
            .filter(VideoAnalysis.youtube_id == video_id, VideoAnalysis.cached_at >= cutoff)
            .one_or_none()
        )
        if row is None:
            return None
        logger.info(f"Cache hit for {video_id} (cached {row.cached_at:%Y-%m-%d %H:%M})")
        return to_result(row)

    def store(self, result: AnalysisResult, now: Optional[datetime] = None) -> VideoAnalysis:
        metrics = result.metrics
        row = self.get_row(result.video.video_id)
        if row is None:
            row = VideoAnalysis(youtube_id=result.video.video_id)
            self.session.add(row)

        row.title = result.video.title
        row.thumbnail = result.video.thumbnail
        row.channel_title = result.video.channel_title
        row.pain_index = metrics.pain_index
        row.demand_velocity = metrics.demand_velocity
        row.loyalty_depth = metrics.loyalty_depth
        row.confusion_score = metrics.confusion_score
        row.themes = [t.to_dict() for t in metrics.themes]
        row.feature_requests = list(metrics.feature_requests)
        row.bug_reports = list(metrics.bug_reports)
        row.content_ideas = list(metrics.content_ideas)
        row.counts = metrics.counts.to_dict()
        row.summary = result.strategy.summary
        row.action_plan = result.strategy.action_plan.to_dict()
        row.total_fetched = result.stats.total_fetched
        row.total_comments = result.stats.total_analyzed
        row.trash_count = result.stats.trash_count
        row.executed_at = result.executed_at
        row.cached_at = now or datetime.utcnow()

        self.session.commit()
        self.session.refresh(row)
        return row

    def record_gap(self, my_video_id: str, their_video_id: str, gap: CompetitorGapResult) -> CompetitorGap:
        data = gap.to_dict()
        row = CompetitorGap(
            my_video_id=my_video_id,
            their_video_id=their_video_id,
            winning_points=data["winningPoints"],
            losing_points=data["losingPoints"],
            content_gaps=data["contentGaps"],
            why_us_hooks=data["whyUsHooks"],
            comparison=data["comparison"],
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row
