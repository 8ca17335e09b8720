"""
SQLAlchemy ORM Models
Nexus Insights: cached analyses and battle cards
"""

from sqlalchemy import (
    Column, Integer, String, Text,
    DateTime, JSON, Index
)
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class VideoAnalysis(Base):
    """One cached analysis per video, refreshed in place."""
    __tablename__ = "video_analysis"

    analysis_id = Column(Integer, primary_key=True, autoincrement=True)
    youtube_id = Column(String(64), nullable=False, unique=True)
    title = Column(String(500))
    thumbnail = Column(String(1000))
    channel_title = Column(String(255))

    pain_index = Column(Integer, default=0)
    demand_velocity = Column(Integer, default=0)
    loyalty_depth = Column(Integer, default=50)
    confusion_score = Column(Integer, default=0)

    themes = Column(JSON)
    feature_requests = Column(JSON)
    bug_reports = Column(JSON)
    content_ideas = Column(JSON)
    counts = Column(JSON)
    summary = Column(Text)
    action_plan = Column(JSON)

    total_fetched = Column(Integer, default=0)
    total_comments = Column(Integer, default=0)    # classified comments
    trash_count = Column(Integer, default=0)

    executed_at = Column(DateTime)
    cached_at = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_video_analysis_cached", "youtube_id", "cached_at"),)


class CompetitorGap(Base):
    __tablename__ = "competitor_gap"

    gap_id = Column(Integer, primary_key=True, autoincrement=True)
    my_video_id = Column(String(64), nullable=False)
    their_video_id = Column(String(64), nullable=False)
    winning_points = Column(JSON)
    losing_points = Column(JSON)
    content_gaps = Column(JSON)
    why_us_hooks = Column(JSON)
    comparison = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_competitor_gap_videos", "my_video_id", "their_video_id"),)
