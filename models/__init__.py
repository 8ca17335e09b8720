"""
Core data models for the Nexus Insights comment pipeline.
"""

from .schemas import (
    CommentCategory,
    UserSegment,
    Sentiment,
    PipelineStep,
    VideoInfo,
    RawComment,
    ClassifiedComment,
    ThemeCluster,
    CategoryCounts,
    AggregatedMetrics,
    ActionPlan,
    StrategicOutput,
    GapEvidence,
    GapPoint,
    ContentGap,
    MetricSnapshot,
    CompetitorGapResult,
    AnalysisProgress,
    AnalysisStats,
    AnalysisResult,
    ComparisonResult,
)

__all__ = [
    "CommentCategory",
    "UserSegment",
    "Sentiment",
    "PipelineStep",
    "VideoInfo",
    "RawComment",
    "ClassifiedComment",
    "ThemeCluster",
    "CategoryCounts",
    "AggregatedMetrics",
    "ActionPlan",
    "StrategicOutput",
    "GapEvidence",
    "GapPoint",
    "ContentGap",
    "MetricSnapshot",
    "CompetitorGapResult",
    "AnalysisProgress",
    "AnalysisStats",
    "AnalysisResult",
    "ComparisonResult",
]
