"""
Strategist Agent
----------------
Turns AggregatedMetrics into an executive summary and a three-part action
plan (immediate fixes, content opportunities, marketing hooks) with one
model call.

The model never sees raw comments, only the computed indices, counts and
ranked evidence. If the call fails or the answer is not the expected JSON
object, a templated summary and plan are built from the metrics alone;
`synthesize()` never raises.

Input:  AggregatorOutput
Output: AnalysisResult
"""

import logging
from typing import Any, List, Optional

from agents.aggregator import AggregatorOutput
from agents.base import Agent, ProgressCallback
from agents.llm import LLMClient, parse_json_response
from config.settings import settings
from models.errors import LLMError, MalformedResponseError
from models.schemas import (
    ActionPlan,
    AggregatedMetrics,
    AnalysisResult,
    PipelineStep,
    StrategicOutput,
)

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Analysis complete. Review metrics for details."
FALLBACK_HOOKS = ["Trusted by our community", "Built on user feedback"]
NONE_IDENTIFIED = "None identified"

STRATEGIST_PROMPT = """ROLE:
You are a Chief Product Strategist advising a content creator or product manager.

CONTEXT:
Customer feedback has already been measured:

Pain Index: {pain_index}/100 (high = customers are frustrated)
Demand Velocity: {demand_velocity}/100 (high = strong feature demand)
Loyalty Depth: {loyalty_depth}/100 (high = strong advocates among power users)
Confusion Score: {confusion_score}/100 (high = UX or communication failure)

Comment breakdown:
- Bugs/Issues: {bugs}
- Feature Requests: {features}
- Complaints: {complaints}
- Praise: {praise}
- Questions: {questions}
- Content Ideas: {content_ideas}

Top themes:
{themes}

Most requested features:
{feature_requests}

Critical bug reports:
{bug_reports}

Unique / viral comments:
{ideas}

TASK:
Answer with a JSON object containing:

1. "summary": 2-3 sentences for a CEO. Be specific about the situation.
2. "immediateFixes": 3-5 short imperative actions addressing the most critical issues.
3. "contentOpportunities": 3-5 concrete video/post ideas drawn from questions and viral comments.
4. "marketingHooks": 3-5 quotable marketing phrases grounded in the positive sentiment.

OUTPUT FORMAT:
Return ONLY valid JSON, no markdown:
{{"summary": "...", "immediateFixes": ["..."], "contentOpportunities": ["..."], "marketingHooks": ["..."]}}"""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def build_strategy_prompt(metrics: AggregatedMetrics) -> str:
    themes = "\n".join(
        f"- {t.topic}: {t.sentiment.value} sentiment, {t.volume} comments, "
        f"avg intensity {t.intensity}/10"
        for t in metrics.themes[:5]
    ) or "No clear themes identified"
    counts = metrics.counts
    return STRATEGIST_PROMPT.format(
        pain_index=metrics.pain_index,
        demand_velocity=metrics.demand_velocity,
        loyalty_depth=metrics.loyalty_depth,
        confusion_score=metrics.confusion_score,
        bugs=counts.bugs,
        features=counts.features,
        complaints=counts.complaints,
        praise=counts.praise,
        questions=counts.questions,
        content_ideas=counts.content_ideas,
        themes=themes,
        feature_requests=", ".join(metrics.feature_requests[:5]) or NONE_IDENTIFIED,
        bug_reports="\n".join(f"- {b}" for b in metrics.bug_reports[:5]) or NONE_IDENTIFIED,
        ideas="\n".join(f"- {i}" for i in metrics.content_ideas[:3]) or NONE_IDENTIFIED,
    )


def parse_strategy(parsed: Any) -> StrategicOutput:
    if not isinstance(parsed, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(parsed).__name__}")
    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = DEFAULT_SUMMARY
    return StrategicOutput(
        summary=summary.strip(),
        action_plan=ActionPlan(
            immediate_fixes=_string_list(parsed.get("immediateFixes")),
            content_opportunities=_string_list(parsed.get("contentOpportunities")),
            marketing_hooks=_string_list(parsed.get("marketingHooks")),
        ),
    )


def fallback_strategy(metrics: AggregatedMetrics) -> StrategicOutput:
    """Templated output computed from the metrics alone."""
    return StrategicOutput(
        summary=(
            f"Analysis of {metrics.total_classified} comments complete. "
            f"Pain Index: {metrics.pain_index}/100, "
            f"Demand Velocity: {metrics.demand_velocity}/100."
        ),
        action_plan=ActionPlan(
            immediate_fixes=[f"Address: {b}" for b in metrics.bug_reports[:3]],
            content_opportunities=[f"Create content about: {f}" for f in metrics.feature_requests[:3]],
            marketing_hooks=list(FALLBACK_HOOKS),
        ),
        used_fallback=True,
    )


class Strategist:
    def __init__(
        self,
        llm: LLMClient,
        model: str = settings.STRATEGIST_MODEL,
        temperature: float = settings.STRATEGIST_TEMPERATURE,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature

    def synthesize(self, metrics: AggregatedMetrics) -> StrategicOutput:
        try:
            content = self.llm.complete(build_strategy_prompt(metrics), self.model, self.temperature)
            return parse_strategy(parse_json_response(content))
        except LLMError as e:
            logger.warning(f"Strategy synthesis failed, using fallback: {e}")
        except Exception as e:
            logger.error(f"Strategy synthesis failed unexpectedly, using fallback: {e}")
        return fallback_strategy(metrics)


class StrategistAgent(Agent):
    """
    Agent 5: Strategy synthesis

    Input:  AggregatorOutput
    Output: AnalysisResult
    """

    def __init__(self, strategist: Strategist, on_progress: Optional[ProgressCallback] = None):
        super().__init__(name="StrategistAgent", on_progress=on_progress)
        self.strategist = strategist

    def run(self, aggregated: AggregatorOutput) -> AnalysisResult:
        self.report(PipelineStep.SYNTHESIZING, "Generating insights and recommendations...", 90)

        strategy = self.strategist.synthesize(aggregated.metrics)
        if strategy.used_fallback:
            self.logger.warning("Strategic summary built from fallback template")

        self.report(PipelineStep.COMPLETE, "Analysis complete!", 100)
        return AnalysisResult(
            video=aggregated.video,
            metrics=aggregated.metrics,
            strategy=strategy,
            stats=aggregated.stats,
        )
