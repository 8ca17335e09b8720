"""
Core data models / schemas for the Nexus Insights comment pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any
from datetime import datetime


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class CommentCategory(str, Enum):
    BUG = "BUG"
    FEATURE = "FEATURE"
    PRAISE = "PRAISE"
    COMPLAINT = "COMPLAINT"
    QUESTION = "QUESTION"
    NOISE = "NOISE"
    CONTENT_IDEA = "CONTENT_IDEA"


class UserSegment(str, Enum):
    PRO = "Pro"
    BEGINNER = "Beginner"
    SWITCHER = "Switcher"
    UNKNOWN = "Unknown"


class Sentiment(str, Enum):
    POS = "POS"
    NEG = "NEG"
    NEU = "NEU"


class PipelineStep(str, Enum):
    FETCHING = "fetching"
    FILTERING = "filtering"
    ANALYZING = "analyzing"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Raw ingestion
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VideoInfo:
    video_id: str
    title: str
    thumbnail: str = ""
    channel_title: str = ""
    comment_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "channelTitle": self.channel_title,
        }


@dataclass(frozen=True)
class RawComment:
    """A comment as fetched. After sanitization the same type carries the cleaned text."""
    comment_id: str
    text: str
    author: str = ""
    author_image: Optional[str] = None
    likes: int = 0
    published_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassifiedComment:
    comment_id: str
    text: str
    author: str
    likes: int
    category: CommentCategory
    topic: str
    intensity: int                  # always within [1, 10]
    segment: UserSegment = UserSegment.UNKNOWN
    sarcasm: bool = False
    author_image: Optional[str] = None
    published_at: Optional[datetime] = None

    @classmethod
    def from_raw(
        cls,
        raw: RawComment,
        category: CommentCategory,
        topic: str,
        intensity: int,
        segment: UserSegment,
        sarcasm: bool,
    ) -> "ClassifiedComment":
        return cls(
            comment_id=raw.comment_id,
            text=raw.text,
            author=raw.author,
            likes=raw.likes,
            category=category,
            topic=topic,
            intensity=intensity,
            segment=segment,
            sarcasm=sarcasm,
            author_image=raw.author_image,
            published_at=raw.published_at,
        )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

@dataclass
class ThemeCluster:
    topic: str
    sentiment: Sentiment
    intensity: float                # one decimal place
    volume: int
    representative_quotes: List[str] = field(default_factory=list)
    user_segment: str = UserSegment.UNKNOWN.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "sentiment": self.sentiment.value,
            "intensity": self.intensity,
            "volume": self.volume,
            "representativeQuotes": list(self.representative_quotes),
            "userSegment": self.user_segment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThemeCluster":
        return cls(
            topic=data["topic"],
            sentiment=Sentiment(data.get("sentiment", "NEU")),
            intensity=float(data.get("intensity", 0.0)),
            volume=int(data.get("volume", 0)),
            representative_quotes=list(data.get("representativeQuotes", [])),
            user_segment=data.get("userSegment", UserSegment.UNKNOWN.value),
        )


@dataclass
class CategoryCounts:
    bugs: int = 0
    features: int = 0
    complaints: int = 0
    praise: int = 0
    questions: int = 0
    noise: int = 0
    content_ideas: int = 0

    @property
    def total(self) -> int:
        return (
            self.bugs + self.features + self.complaints + self.praise
            + self.questions + self.noise + self.content_ideas
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "bugs": self.bugs,
            "features": self.features,
            "complaints": self.complaints,
            "praise": self.praise,
            "questions": self.questions,
            "noise": self.noise,
            "contentIdeas": self.content_ideas,
        }


@dataclass
class AggregatedMetrics:
    # The four indices, integers in [0, 100]
    pain_index: int
    demand_velocity: int
    loyalty_depth: int
    confusion_score: int

    feature_requests: List[str] = field(default_factory=list)
    bug_reports: List[str] = field(default_factory=list)
    content_ideas: List[str] = field(default_factory=list)
    themes: List[ThemeCluster] = field(default_factory=list)
    counts: CategoryCounts = field(default_factory=CategoryCounts)

    @property
    def total_classified(self) -> int:
        return self.counts.total

    def indices(self) -> Dict[str, int]:
        return {
            "painIndex": self.pain_index,
            "demandVelocity": self.demand_velocity,
            "loyaltyDepth": self.loyalty_depth,
            "confusionScore": self.confusion_score,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.indices(),
            "featureRequests": list(self.feature_requests),
            "bugReports": list(self.bug_reports),
            "contentIdeas": list(self.content_ideas),
            "themes": [t.to_dict() for t in self.themes],
            "counts": self.counts.to_dict(),
        }


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------

@dataclass
class ActionPlan:
    immediate_fixes: List[str] = field(default_factory=list)
    content_opportunities: List[str] = field(default_factory=list)
    marketing_hooks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "immediateFixes": list(self.immediate_fixes),
            "contentOpportunities": list(self.content_opportunities),
            "marketingHooks": list(self.marketing_hooks),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionPlan":
        return cls(
            immediate_fixes=list(data.get("immediateFixes", [])),
            content_opportunities=list(data.get("contentOpportunities", [])),
            marketing_hooks=list(data.get("marketingHooks", [])),
        )


@dataclass
class StrategicOutput:
    summary: str
    action_plan: ActionPlan
    used_fallback: bool = False


# ---------------------------------------------------------------------------
# Competitor gap ("battle card")
# ---------------------------------------------------------------------------

@dataclass
class GapEvidence:
    """What the comparator needs from one side of a comparison."""
    metrics: Dict[str, int]
    themes: List[ThemeCluster] = field(default_factory=list)
    bug_reports: List[str] = field(default_factory=list)
    feature_requests: List[str] = field(default_factory=list)

    @classmethod
    def from_metrics(cls, metrics: AggregatedMetrics) -> "GapEvidence":
        return cls(
            metrics=metrics.indices(),
            themes=list(metrics.themes),
            bug_reports=list(metrics.bug_reports),
            feature_requests=list(metrics.feature_requests),
        )


@dataclass
class GapPoint:
    topic: str
    our_sentiment: Sentiment
    their_sentiment: Sentiment
    insight: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "topic": self.topic,
            "ourSentiment": self.our_sentiment.value,
            "theirSentiment": self.their_sentiment.value,
            "insight": self.insight,
        }


@dataclass
class ContentGap:
    question: str
    frequency: int
    source: str                     # "ours" | "theirs" | "both"

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question, "frequency": self.frequency, "source": self.source}


@dataclass
class MetricSnapshot:
    my_pain_index: int
    their_pain_index: int
    my_demand_velocity: int
    their_demand_velocity: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "myPainIndex": self.my_pain_index,
            "theirPainIndex": self.their_pain_index,
            "myDemandVelocity": self.my_demand_velocity,
            "theirDemandVelocity": self.their_demand_velocity,
        }


@dataclass
class CompetitorGapResult:
    winning_points: List[GapPoint]
    losing_points: List[GapPoint]
    content_gaps: List[ContentGap]
    why_us_hooks: List[str]
    comparison: MetricSnapshot
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winningPoints": [p.to_dict() for p in self.winning_points],
            "losingPoints": [p.to_dict() for p in self.losing_points],
            "contentGaps": [g.to_dict() for g in self.content_gaps],
            "whyUsHooks": list(self.why_us_hooks),
            "comparison": self.comparison.to_dict(),
        }


# ---------------------------------------------------------------------------
# Pipeline run summary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisProgress:
    step: PipelineStep
    message: str
    progress: int                   # 0-100


@dataclass
class AnalysisStats:
    total_fetched: int = 0
    trash_count: int = 0
    total_analyzed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalFetched": self.total_fetched,
            "totalAnalyzed": self.total_analyzed,
            "trashCount": self.trash_count,
        }


@dataclass
class AnalysisResult:
    video: VideoInfo
    metrics: AggregatedMetrics
    strategy: StrategicOutput
    stats: AnalysisStats
    executed_at: datetime = field(default_factory=datetime.utcnow)

    def evidence(self) -> GapEvidence:
        return GapEvidence.from_metrics(self.metrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoInfo": self.video.to_dict(),
            "metrics": self.metrics.indices(),
            "themes": [t.to_dict() for t in self.metrics.themes],
            "featureRequests": list(self.metrics.feature_requests),
            "bugReports": list(self.metrics.bug_reports),
            "contentIdeas": list(self.metrics.content_ideas),
            "summary": self.strategy.summary,
            "actionPlan": self.strategy.action_plan.to_dict(),
            "stats": self.stats.to_dict(),
            "executedAt": _iso(self.executed_at),
        }


@dataclass
class ComparisonResult:
    mine: AnalysisResult
    theirs: AnalysisResult
    gap: CompetitorGapResult
