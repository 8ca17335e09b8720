"""
Metrics Aggregator Agent
------------------------
Deterministic reduction of classified comments into four indices and
ranked evidence. No model calls; every number here is reproducible.

  Pain Index       = min(100, |BUG ∪ COMPLAINT| / N × avgIntensity × 15)
  Demand Velocity  = min(100, |FEATURE| / N × avgIntensity × 15)
  Loyalty Depth    = 50 + (defenders / max(1, detractors) − 1) × 25   (Pro users only,
                     neutral 50 with fewer than 3 Pro comments)
  Confusion Score  = |QUESTION| / N × 100

Each index is rounded half-up and clamped once into [0, 100]. N is the
number of classified comments, or 1 for an empty input.

Theme clusters group comments by case-insensitive topic (NOISE excluded),
keep topics with at least 2 comments and return the 10 largest.

Input:  ClassifierOutput
Output: AggregatorOutput
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from agents.base import Agent, ProgressCallback
from agents.classifier import ClassifierOutput, DEFAULT_TOPIC
from models.schemas import (
    AggregatedMetrics,
    AnalysisStats,
    CategoryCounts,
    ClassifiedComment,
    CommentCategory,
    PipelineStep,
    Sentiment,
    ThemeCluster,
    UserSegment,
    VideoInfo,
)
from utils.numeric import clamp, round_half_up

logger = logging.getLogger(__name__)

INDEX_SCALE = 15
SENTIMENT_MAJORITY = 1.5
LOYALTY_NEUTRAL = 50
LOYALTY_MIN_PRO = 3

MAX_FEATURE_REQUESTS = 10
MAX_BUG_REPORTS = 10
MAX_CONTENT_IDEAS = 5
MAX_THEMES = 10
MAX_QUOTES = 3
MIN_THEME_VOLUME = 2

BUG_TEXT_CHARS = 80
CONTENT_IDEA_CHARS = 200
QUOTE_CHARS = 150

_NEGATIVE = (CommentCategory.BUG, CommentCategory.COMPLAINT)


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class AggregatorOutput:
    """Output bundle from the AggregatorAgent."""
    video: VideoInfo
    metrics: AggregatedMetrics
    stats: AnalysisStats = field(default_factory=AnalysisStats)


# ─── Index formulas ──────────────────────────────────────────────────────────


def _index(value: float) -> int:
    return int(clamp(round_half_up(min(100.0, value)), 0, 100))


def average_intensity(comments: List[ClassifiedComment]) -> float:
    if not comments:
        return 0.0
    return float(np.mean([c.intensity for c in comments]))


def volume_index(subset: List[ClassifiedComment], total: int) -> int:
    """Share of comments × their mean intensity × 15, capped at 100."""
    return _index(len(subset) / total * average_intensity(subset) * INDEX_SCALE)


def loyalty_depth(comments: List[ClassifiedComment]) -> int:
    pros = [c for c in comments if c.segment == UserSegment.PRO]
    if len(pros) < LOYALTY_MIN_PRO:
        return LOYALTY_NEUTRAL
    defenders = sum(1 for c in pros if c.category == CommentCategory.PRAISE)
    detractors = sum(1 for c in pros if c.category in _NEGATIVE)
    ratio = defenders / max(1, detractors)
    return _index(LOYALTY_NEUTRAL + (ratio - 1) * 25)


def confusion_score(questions: List[ClassifiedComment], total: int) -> int:
    return _index(len(questions) / total * 100)


# ─── Ranked evidence ─────────────────────────────────────────────────────────


def _by_impact(comments: List[ClassifiedComment]) -> List[ClassifiedComment]:
    return sorted(comments, key=lambda c: c.intensity * c.likes, reverse=True)


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def rank_feature_requests(features: List[ClassifiedComment]) -> List[str]:
    top = _by_impact(features)[:MAX_FEATURE_REQUESTS]
    return _unique(c.topic or DEFAULT_TOPIC for c in top)


def rank_bug_reports(bugs: List[ClassifiedComment]) -> List[str]:
    return [
        f"{c.topic}: {c.text[:BUG_TEXT_CHARS]}..."
        for c in _by_impact(bugs)[:MAX_BUG_REPORTS]
    ]


def rank_content_ideas(ideas: List[ClassifiedComment]) -> List[str]:
    top = sorted(ideas, key=lambda c: c.likes, reverse=True)[:MAX_CONTENT_IDEAS]
    return [c.text[:CONTENT_IDEA_CHARS] for c in top]


# ─── Theme clusters ──────────────────────────────────────────────────────────


def theme_sentiment(members: List[ClassifiedComment]) -> Sentiment:
    positive = sum(1 for c in members if c.category == CommentCategory.PRAISE)
    negative = sum(1 for c in members if c.category in _NEGATIVE)
    if positive > negative * SENTIMENT_MAJORITY:
        return Sentiment.POS
    if negative > positive * SENTIMENT_MAJORITY:
        return Sentiment.NEG
    return Sentiment.NEU


def dominant_segment(members: List[ClassifiedComment]) -> str:
    # most_common keeps first-encountered order among equal counts
    counts = Counter(c.segment.value for c in members)
    return counts.most_common()[0][0] if counts else UserSegment.UNKNOWN.value


def build_theme(key: str, members: List[ClassifiedComment]) -> ThemeCluster:
    quotes = sorted(members, key=lambda c: c.likes, reverse=True)[:MAX_QUOTES]
    return ThemeCluster(
        topic=key[:1].upper() + key[1:],
        sentiment=theme_sentiment(members),
        intensity=round_half_up(average_intensity(members), 1),
        volume=len(members),
        representative_quotes=[c.text[:QUOTE_CHARS] for c in quotes],
        user_segment=dominant_segment(members),
    )


def cluster_themes(comments: List[ClassifiedComment]) -> List[ThemeCluster]:
    groups: Dict[str, List[ClassifiedComment]] = {}
    for c in comments:
        if c.category == CommentCategory.NOISE or not c.topic or not c.topic.strip():
            continue
        groups.setdefault(c.topic.strip().lower(), []).append(c)

    themes = [
        build_theme(key, members)
        for key, members in groups.items()
        if len(members) >= MIN_THEME_VOLUME
    ]
    themes.sort(key=lambda t: t.volume, reverse=True)
    return themes[:MAX_THEMES]


# ─── aggregate ───────────────────────────────────────────────────────────────


def aggregate(comments: List[ClassifiedComment]) -> AggregatedMetrics:
    """Pure, total reduction of classified comments into AggregatedMetrics."""
    total = len(comments) or 1

    buckets: Dict[CommentCategory, List[ClassifiedComment]] = {cat: [] for cat in CommentCategory}
    for c in comments:
        buckets[c.category].append(c)

    bugs = buckets[CommentCategory.BUG]
    complaints = buckets[CommentCategory.COMPLAINT]
    features = buckets[CommentCategory.FEATURE]
    questions = buckets[CommentCategory.QUESTION]
    ideas = buckets[CommentCategory.CONTENT_IDEA]

    return AggregatedMetrics(
        pain_index=volume_index(bugs + complaints, total),
        demand_velocity=volume_index(features, total),
        loyalty_depth=loyalty_depth(comments),
        confusion_score=confusion_score(questions, total),
        feature_requests=rank_feature_requests(features),
        bug_reports=rank_bug_reports(bugs),
        content_ideas=rank_content_ideas(ideas),
        themes=cluster_themes(comments),
        counts=CategoryCounts(
            bugs=len(bugs),
            features=len(features),
            complaints=len(complaints),
            praise=len(buckets[CommentCategory.PRAISE]),
            questions=len(questions),
            noise=len(buckets[CommentCategory.NOISE]),
            content_ideas=len(ideas),
        ),
    )


# ─── AggregatorAgent ─────────────────────────────────────────────────────────


class AggregatorAgent(Agent):
    """
    Agent 4: Aggregation (no model calls)

    Input:  ClassifierOutput
    Output: AggregatorOutput
    """

    def __init__(self, on_progress: Optional[ProgressCallback] = None):
        super().__init__(name="AggregatorAgent", on_progress=on_progress)

    def run(self, classified: ClassifierOutput) -> AggregatorOutput:
        self.report(PipelineStep.SYNTHESIZING, "Calculating metrics and patterns...", 80)

        metrics = aggregate(classified.comments)

        self.logger.info(
            f"Indices: pain={metrics.pain_index} demand={metrics.demand_velocity} "
            f"loyalty={metrics.loyalty_depth} confusion={metrics.confusion_score} "
            f"| {len(metrics.themes)} themes from {len(classified.comments)} comments"
        )
        for i, theme in enumerate(metrics.themes[:5], 1):
            self.logger.info(
                f"  {i}. [{theme.topic}] {theme.sentiment.value} "
                f"vol={theme.volume} intensity={theme.intensity}"
            )

        return AggregatorOutput(video=classified.video, metrics=metrics, stats=classified.stats)
