"""
Pipeline runner: wires the five agents together for one video, and runs two
videos side by side for a competitor comparison.

Architecture:
  CommentFetchAgent → SanitizerAgent → ClassifierAgent → AggregatorAgent → StrategistAgent

Collaborators (comment source, model client) are passed in per call so two
runs never share hidden state.
"""

from __future__ import annotations

import logging
from typing import Optional

from agents.aggregator import AggregatorAgent
from agents.base import Orchestrator, ProgressCallback
from agents.classifier import ClassifierAgent, CommentClassifier
from agents.comparator import Comparator
from agents.fetcher import CommentFetchAgent, CommentSource
from agents.llm import LLMClient
from agents.sanitizer import SanitizerAgent
from agents.strategist import Strategist, StrategistAgent
from config.settings import settings
from models.schemas import AnalysisResult, ComparisonResult

logger = logging.getLogger(__name__)


def build_pipeline(
    source: CommentSource,
    llm: LLMClient,
    on_progress: Optional[ProgressCallback] = None,
    batch_size: int = settings.BATCH_SIZE,
    pause_seconds: float = settings.BATCH_PAUSE_SECONDS,
    min_classified_ratio: float = settings.MIN_CLASSIFIED_RATIO,
    label: str = "analysis",
) -> Orchestrator:
    classifier = CommentClassifier(llm, batch_size=batch_size, pause_seconds=pause_seconds)
    return Orchestrator([
        CommentFetchAgent(source, on_progress=on_progress),
        SanitizerAgent(on_progress=on_progress),
        ClassifierAgent(classifier, min_classified_ratio=min_classified_ratio, on_progress=on_progress),
        AggregatorAgent(on_progress=on_progress),
        StrategistAgent(Strategist(llm), on_progress=on_progress),
    ], label=label)


def analyze_video(
    video_ref: str,
    source: CommentSource,
    llm: LLMClient,
    on_progress: Optional[ProgressCallback] = None,
    batch_size: int = settings.BATCH_SIZE,
    pause_seconds: float = settings.BATCH_PAUSE_SECONDS,
    min_classified_ratio: float = settings.MIN_CLASSIFIED_RATIO,
) -> AnalysisResult:
    """
    Run the full analysis for one video URL or id.

    Raises the AnalysisError subclass of the stage that aborted the run
    (bad reference, missing video, disabled/empty comments, everything
    filtered as spam). Model failures never abort: failed batches are
    skipped and the strategy falls back to a templated summary.
    """
    pipeline = build_pipeline(
        source, llm,
        on_progress=on_progress,
        batch_size=batch_size,
        pause_seconds=pause_seconds,
        min_classified_ratio=min_classified_ratio,
        label=f"analysis[{video_ref}]",
    )
    result: AnalysisResult = pipeline.run(video_ref)
    logger.debug(pipeline.summary())
    return result


def compare_videos(
    my_ref: str,
    their_ref: str,
    source: CommentSource,
    llm: LLMClient,
    on_progress: Optional[ProgressCallback] = None,
    batch_size: int = settings.BATCH_SIZE,
    pause_seconds: float = settings.BATCH_PAUSE_SECONDS,
) -> ComparisonResult:
    """Analyze both videos (ours first) and build the battle card from their evidence."""
    mine = analyze_video(
        my_ref, source, llm,
        on_progress=on_progress, batch_size=batch_size, pause_seconds=pause_seconds,
    )
    theirs = analyze_video(
        their_ref, source, llm,
        on_progress=on_progress, batch_size=batch_size, pause_seconds=pause_seconds,
    )
    gap = Comparator(llm).compare_gap(mine.evidence(), theirs.evidence())
    return ComparisonResult(mine=mine, theirs=theirs, gap=gap)
