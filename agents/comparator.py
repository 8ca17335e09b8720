"""
Competitor Comparator
---------------------
Builds a "battle card" from two analyses: where our audience is happier
than theirs, where it is not, which questions neither side answers, and a
few "why us" marketing lines.

Only the two sides' metrics and ranked evidence are sent to the model.
The numeric snapshot is always computed locally, never taken from the
model. Any failure (call error, bad JSON, wrong shape) produces a fallback
card with empty lists; `compare_gap()` never raises.
"""

import logging
from typing import Any, List, Optional

from agents.llm import LLMClient, parse_json_response
from config.settings import settings
from models.errors import LLMError, MalformedResponseError
from models.schemas import (
    CompetitorGapResult,
    ContentGap,
    GapEvidence,
    GapPoint,
    MetricSnapshot,
    Sentiment,
)

logger = logging.getLogger(__name__)

FALLBACK_HOOKS = [
    "Focus on what makes your product unique",
    "Highlight areas where competitors are struggling",
]
GAP_SOURCES = ("ours", "theirs", "both")

COMPARATOR_PROMPT = """ROLE:
You are a competitive intelligence analyst comparing the audience feedback of two products.

OUR PRODUCT:
- Pain Index: {my_pain}/100
- Demand Velocity: {my_demand}/100
- Top themes: {my_themes}
- Key issues: {my_issues}

COMPETITOR:
- Pain Index: {their_pain}/100
- Demand Velocity: {their_demand}/100
- Top themes: {their_themes}
- Key issues: {their_issues}

TASK:
Build a battle card as a JSON object with:

1. "winningPoints": topics where our audience is more positive than theirs.
   Each item: {{"topic": "...", "ourSentiment": "POS|NEG|NEU", "theirSentiment": "POS|NEG|NEU", "insight": "..."}}
2. "losingPoints": topics where the competitor is ahead, same shape as winningPoints.
3. "contentGaps": questions neither side answers well.
   Each item: {{"question": "...", "frequency": <int>, "source": "ours|theirs|both"}}
4. "whyUsHooks": 3-5 short marketing lines built on our advantages.

OUTPUT FORMAT:
Return ONLY valid JSON, no markdown."""


def _theme_line(evidence: GapEvidence) -> str:
    return "; ".join(
        f"{t.topic} ({t.sentiment.value}, intensity {t.intensity}, {t.volume} comments)"
        for t in evidence.themes[:5]
    ) or "No major themes"


def _issue_line(evidence: GapEvidence) -> str:
    issues = evidence.bug_reports[:3] + evidence.feature_requests[:3]
    return "; ".join(issues) or "None identified"


def build_comparison_prompt(mine: GapEvidence, theirs: GapEvidence) -> str:
    return COMPARATOR_PROMPT.format(
        my_pain=mine.metrics.get("painIndex", 0),
        my_demand=mine.metrics.get("demandVelocity", 0),
        my_themes=_theme_line(mine),
        my_issues=_issue_line(mine),
        their_pain=theirs.metrics.get("painIndex", 0),
        their_demand=theirs.metrics.get("demandVelocity", 0),
        their_themes=_theme_line(theirs),
        their_issues=_issue_line(theirs),
    )


def snapshot(mine: GapEvidence, theirs: GapEvidence) -> MetricSnapshot:
    return MetricSnapshot(
        my_pain_index=mine.metrics.get("painIndex", 0),
        their_pain_index=theirs.metrics.get("painIndex", 0),
        my_demand_velocity=mine.metrics.get("demandVelocity", 0),
        their_demand_velocity=theirs.metrics.get("demandVelocity", 0),
    )


# ─── Response coercion ───────────────────────────────────────────────────────


def _sentiment(value: Any) -> Sentiment:
    if isinstance(value, str):
        try:
            return Sentiment(value.strip().upper())
        except ValueError:
            pass
    return Sentiment.NEU


def _frequency(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def parse_gap_points(items: Any) -> List[GapPoint]:
    points: List[GapPoint] = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        topic = item.get("topic")
        if not isinstance(topic, str) or not topic.strip():
            continue
        insight = item.get("insight")
        points.append(GapPoint(
            topic=topic.strip(),
            our_sentiment=_sentiment(item.get("ourSentiment")),
            their_sentiment=_sentiment(item.get("theirSentiment")),
            insight=insight.strip() if isinstance(insight, str) else "",
        ))
    return points


def parse_content_gaps(items: Any) -> List[ContentGap]:
    gaps: List[ContentGap] = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        question = item.get("question")
        if not isinstance(question, str) or not question.strip():
            continue
        source = item.get("source")
        source = source.strip().lower() if isinstance(source, str) else ""
        gaps.append(ContentGap(
            question=question.strip(),
            frequency=_frequency(item.get("frequency")),
            source=source if source in GAP_SOURCES else "both",
        ))
    return gaps


def parse_hooks(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    return [h.strip() for h in items if isinstance(h, str) and h.strip()]


class Comparator:
    def __init__(
        self,
        llm: LLMClient,
        model: str = settings.STRATEGIST_MODEL,
        temperature: float = settings.STRATEGIST_TEMPERATURE,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature

    def compare_gap(self, mine: GapEvidence, theirs: GapEvidence) -> CompetitorGapResult:
        comparison = snapshot(mine, theirs)
        try:
            content = self.llm.complete(build_comparison_prompt(mine, theirs), self.model, self.temperature)
            parsed = parse_json_response(content)
            if not isinstance(parsed, dict):
                raise MalformedResponseError(f"expected a JSON object, got {type(parsed).__name__}")
        except LLMError as e:
            logger.warning(f"Competitor comparison failed, using fallback: {e}")
            return self.fallback(comparison)
        except Exception as e:
            logger.error(f"Competitor comparison failed unexpectedly, using fallback: {e}")
            return self.fallback(comparison)

        result = CompetitorGapResult(
            winning_points=parse_gap_points(parsed.get("winningPoints")),
            losing_points=parse_gap_points(parsed.get("losingPoints")),
            content_gaps=parse_content_gaps(parsed.get("contentGaps")),
            why_us_hooks=parse_hooks(parsed.get("whyUsHooks")),
            comparison=comparison,
        )
        logger.info(
            f"Battle card: {len(result.winning_points)} winning, "
            f"{len(result.losing_points)} losing, {len(result.content_gaps)} content gaps"
        )
        return result

    @staticmethod
    def fallback(comparison: Optional[MetricSnapshot] = None) -> CompetitorGapResult:
        return CompetitorGapResult(
            winning_points=[],
            losing_points=[],
            content_gaps=[],
            why_us_hooks=list(FALLBACK_HOOKS),
            comparison=comparison or MetricSnapshot(0, 0, 0, 0),
            used_fallback=True,
        )
