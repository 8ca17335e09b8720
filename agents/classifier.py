"""
Comment Classifier Agent
------------------------
Labels sanitized comments with a language model, 20 at a time:

  - category   one of BUG, FEATURE, PRAISE, COMPLAINT, QUESTION, NOISE, CONTENT_IDEA
  - topic      1-2 word subject ("Battery", "Pricing")
  - intensity  1-10
  - segment    Pro / Beginner / Switcher / Unknown
  - sarcasm    flag; when set, the category carries the true sentiment

Every response item is validated before it is trusted. Items that cannot be
matched to a comment of their batch, or that carry an unknown category, are
dropped. A batch whose call fails or returns garbage contributes nothing;
the run carries on with the other batches.

Input:  SanitizerOutput
Output: ClassifierOutput
"""

import json
import math
import time
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from agents.base import Agent, ProgressCallback
from agents.llm import LLMClient, parse_json_response
from agents.sanitizer import SanitizerOutput
from config.settings import settings
from models.errors import ClassificationError, LLMError
from models.schemas import (
    AnalysisStats,
    ClassifiedComment,
    CommentCategory,
    PipelineStep,
    RawComment,
    UserSegment,
    VideoInfo,
)
from utils.numeric import clamp, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "General"
DEFAULT_INTENSITY = 5

BatchCallback = Callable[[int, int], None]

CLASSIFIER_PROMPT = """ROLE:
You are a product data analyst. You extract structured data points from user comments; you never summarize.

TASK:
For EACH comment below, return one JSON object with these fields:

1. "id": the comment id, copied unchanged from the input.
2. "category": exactly ONE of [BUG, FEATURE, PRAISE, COMPLAINT, QUESTION, NOISE, CONTENT_IDEA].
   - BUG: crashes, errors, something broken
   - FEATURE: asks for new functionality or an improvement
   - PRAISE: positive feedback
   - COMPLAINT: negative experience that is not a defect
   - QUESTION: "how do I" / asks for clarification
   - NOISE: no product insight
   - CONTENT_IDEA: funny, unexpected or quotable comments that could inspire content
3. "topic": 1-2 words naming the subject, e.g. "Battery", "Pricing", "UI", "Shipping".
4. "intensity": integer 1-10.
   - BUG/COMPLAINT: 1 minor annoyance .. 10 product-breaking, returning it
   - FEATURE: 1 nice to have .. 10 dealbreaker
   - PRAISE: 1 mild approval .. 10 life-changing
   - QUESTION: 1 simple .. 10 critical confusion
   - CONTENT_IDEA: 1 mildly interesting .. 10 viral potential
5. "segment": one of [Pro, Beginner, Switcher, Unknown].
   - Pro: technical jargon, advanced usage
   - Beginner: basic questions, new to the product
   - Switcher: mentions coming from / comparing with a competitor
   - Unknown: cannot tell
6. "sarcasm": true when praise words (great, amazing, thanks) sit next to a negative outcome
   (crash, broken, fail). When sarcasm is true the category must reflect the real sentiment.

INPUT COMMENTS:
{comments}

OUTPUT FORMAT:
Return ONLY a JSON array with one object per input comment. No markdown, no explanation.
Example: [{{"id": "abc123", "category": "BUG", "topic": "Audio", "intensity": 8, "segment": "Pro", "sarcasm": false}}]"""


# ─── Data Structures ──────────────────────────────────────────────────────────


@dataclass
class ClassifierOutput:
    """Output bundle from the ClassifierAgent."""
    video: VideoInfo
    comments: List[ClassifiedComment]
    stats: AnalysisStats = field(default_factory=AnalysisStats)
    failed_batches: int = 0


# ─── Response coercion ───────────────────────────────────────────────────────


_SEGMENTS = {s.value.lower(): s for s in UserSegment}


def coerce_category(value: Any) -> Optional[CommentCategory]:
    if not isinstance(value, str):
        return None
    key = value.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return CommentCategory(key)
    except ValueError:
        return None


def coerce_intensity(value: Any) -> int:
    """Clamp to [1, 10]; missing or non-numeric values become 5."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_INTENSITY
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_INTENSITY
    if not isinstance(value, (int, float)):
        return DEFAULT_INTENSITY
    if isinstance(value, float) and math.isnan(value):
        return DEFAULT_INTENSITY
    # Clamp before rounding: large ints overflow float conversion.
    return int(round_half_up(clamp(value, 1, 10)))


def coerce_segment(value: Any) -> UserSegment:
    if isinstance(value, str):
        return _SEGMENTS.get(value.strip().lower(), UserSegment.UNKNOWN)
    return UserSegment.UNKNOWN


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    if isinstance(value, (int, float)):
        return value != 0
    return False


def coerce_topic(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_TOPIC


def merge_batch_response(batch: List[RawComment], parsed: Any) -> List[ClassifiedComment]:
    """
    Match response items back onto the batch's comments by id.
    Text/author/likes/timestamps always come from the original comment.
    """
    if not isinstance(parsed, list):
        raise ValueError(f"expected a JSON array, got {type(parsed).__name__}")

    originals: Dict[str, RawComment] = {c.comment_id: c for c in batch}
    seen = set()
    merged: List[ClassifiedComment] = []

    for item in parsed:
        if not isinstance(item, dict):
            continue
        comment_id = str(item.get("id", ""))
        original = originals.get(comment_id)
        if original is None or comment_id in seen:
            continue
        category = coerce_category(item.get("category"))
        if category is None:
            logger.debug(f"Dropping {comment_id}: unknown category {item.get('category')!r}")
            continue
        seen.add(comment_id)
        merged.append(ClassifiedComment.from_raw(
            original,
            category=category,
            topic=coerce_topic(item.get("topic")),
            intensity=coerce_intensity(item.get("intensity")),
            segment=coerce_segment(item.get("segment")),
            sarcasm=coerce_bool(item.get("sarcasm")),
        ))

    return merged


def chunk(items: List[RawComment], size: int) -> List[List[RawComment]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


# ─── Batcher ─────────────────────────────────────────────────────────────────


class CommentClassifier:
    """Sequential batch classifier around an injected LLMClient."""

    def __init__(
        self,
        llm: LLMClient,
        batch_size: int = settings.BATCH_SIZE,
        model: str = settings.CLASSIFIER_MODEL,
        temperature: float = settings.CLASSIFIER_TEMPERATURE,
        pause_seconds: float = settings.BATCH_PAUSE_SECONDS,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.llm = llm
        self.batch_size = batch_size
        self.model = model
        self.temperature = temperature
        self.pause_seconds = pause_seconds
        self.failed_batches = 0

    def build_prompt(self, batch: List[RawComment]) -> str:
        payload = [{"id": c.comment_id, "text": c.text, "likes": c.likes} for c in batch]
        return CLASSIFIER_PROMPT.format(comments=json.dumps(payload, indent=2, ensure_ascii=False))

    def classify_batch(self, batch: List[RawComment], index: int = 0) -> List[ClassifiedComment]:
        """One model call. Any failure yields an empty list."""
        try:
            content = self.llm.complete(self.build_prompt(batch), self.model, self.temperature)
            return merge_batch_response(batch, parse_json_response(content))
        except (LLMError, ValueError) as e:
            logger.warning(f"Classification batch {index} ({len(batch)} comments) dropped: {e}")
        except Exception as e:
            logger.error(f"Classification batch {index} ({len(batch)} comments) dropped unexpectedly: {e}")
        self.failed_batches += 1
        return []

    def classify(
        self,
        comments: List[RawComment],
        on_batch: Optional[BatchCallback] = None,
    ) -> List[ClassifiedComment]:
        self.failed_batches = 0
        batches = chunk(comments, self.batch_size)
        results: List[ClassifiedComment] = []
        processed = 0

        for i, batch in enumerate(batches):
            results.extend(self.classify_batch(batch, i))
            processed += len(batch)
            if on_batch:
                on_batch(processed, len(comments))
            if self.pause_seconds and i < len(batches) - 1:
                time.sleep(self.pause_seconds)

        logger.info(
            f"Classified {len(results)}/{len(comments)} comments "
            f"({self.failed_batches}/{len(batches)} batches failed)"
        )
        return results


# ─── ClassifierAgent ─────────────────────────────────────────────────────────


class ClassifierAgent(Agent):
    """
    Agent 3: Classification

    Input:  SanitizerOutput
    Output: ClassifierOutput
    """

    def __init__(
        self,
        classifier: CommentClassifier,
        min_classified_ratio: float = settings.MIN_CLASSIFIED_RATIO,
        on_progress: Optional[ProgressCallback] = None,
    ):
        super().__init__(name="ClassifierAgent", on_progress=on_progress)
        self.classifier = classifier
        self.min_classified_ratio = min_classified_ratio

    def _on_batch(self, processed: int, total: int) -> None:
        self.report(
            PipelineStep.ANALYZING,
            f"Classified {processed}/{total} comments...",
            45 + round_half_up(processed / max(total, 1) * 30),
        )

    def run(self, sanitized: SanitizerOutput) -> ClassifierOutput:
        comments = sanitized.comments
        self.report(PipelineStep.ANALYZING, "Analyzing comment sentiment and categories...", 45)

        classified = self.classifier.classify(comments, on_batch=self._on_batch)

        ratio = len(classified) / max(len(comments), 1)
        if ratio < self.min_classified_ratio:
            raise ClassificationError(
                f"Only {len(classified)}/{len(comments)} comments could be classified "
                f"(minimum ratio {self.min_classified_ratio:.0%})"
            )

        return ClassifierOutput(
            video=sanitized.video,
            comments=classified,
            stats=replace(sanitized.stats, total_analyzed=len(classified)),
            failed_batches=self.classifier.failed_batches,
        )
