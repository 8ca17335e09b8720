"""
Comment Sanitizer
-----------------
Rule-based filtering that runs before any model call, so spam and
low-signal comments never cost classification tokens.

  1. Discard empty, emoji-only, and pattern-matched spam/noise comments
  2. Clean the survivors: redact URLs, collapse whitespace and repeated
     characters, truncate very long comments

Input:  FetchOutput
Output: SanitizerOutput
"""

import re
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from agents.base import Agent, ProgressCallback
from agents.fetcher import FetchOutput
from config.settings import settings
from models.errors import AllCommentsFilteredError
from models.schemas import AnalysisStats, PipelineStep, RawComment, VideoInfo

logger = logging.getLogger(__name__)


# ─── Rules ───────────────────────────────────────────────────────────────────

# A match on any rule discards the comment.
_TRASH_PATTERNS = [
    # Self-promotion
    re.compile(r"check my channel", re.I),
    re.compile(r"check out my", re.I),
    re.compile(r"subscribe to my", re.I),
    re.compile(r"i made a video", re.I),
    re.compile(r"check my latest", re.I),
    re.compile(r"new video on my channel", re.I),
    # Currency / payment solicitation
    re.compile(r"bitcoin", re.I),
    re.compile(r"crypto", re.I),
    # External contact requests
    re.compile(r"whatsapp", re.I),
    re.compile(r"telegram", re.I),
    re.compile(r"dm me", re.I),
    re.compile(r"\+\d{10,}"),
    # Giveaways
    re.compile(r"giveaway", re.I),
    re.compile(r"free iphone", re.I),
    re.compile(r"click the link", re.I),
    re.compile(r"link in bio", re.I),
    # Bot-like
    re.compile(r"^first[!.]*$", re.I),
    re.compile(r"^second[!.]*$", re.I),
    re.compile(r"^third[!.]*$", re.I),
    re.compile(r"^who['’]?s here in \d{4}", re.I),
    re.compile(r"^anyone .*\d{4}\??$", re.I),
    # Too short / one-word affirmations
    re.compile(r"^.{1,5}$", re.S),
    re.compile(r"^(nice|cool|great|good|wow|amazing|awesome|lol|lmao)[!.]*$", re.I),
    re.compile(r"^(love it|loved it|love this)[!.]*$", re.I),
    re.compile(r"^(hi|hello|hey)[!.]*$", re.I),
]

# Code point ranges that count as emoji for the emoji-only rule. Digits, '#'
# and '*' are excluded although they can start keycap sequences.
_EMOJI_RANGES = [
    (0x00A9, 0x00A9), (0x00AE, 0x00AE),
    (0x200D, 0x200D),                       # zero-width joiner
    (0x203C, 0x203C), (0x2049, 0x2049),
    (0x20E3, 0x20E3),                       # combining keycap
    (0x2122, 0x2122), (0x2139, 0x2139),
    (0x2194, 0x21AA),
    (0x231A, 0x23FF),
    (0x24C2, 0x24C2),
    (0x25AA, 0x27BF),
    (0x2934, 0x2935),
    (0x2B05, 0x2B55),
    (0x3030, 0x3030), (0x303D, 0x303D), (0x3297, 0x3297), (0x3299, 0x3299),
    (0xFE0E, 0xFE0F),                       # variation selectors
    (0x1F000, 0x1FAFF),                     # pictographs, emoticons, flags, skin tones
    (0xE0020, 0xE007F),                     # tag sequences
]

_EMOJI_ONLY = re.compile(
    r"^[\s"
    + "".join(re.escape(chr(lo)) + ("-" + re.escape(chr(hi)) if hi != lo else "")
              for lo, hi in _EMOJI_RANGES)
    + r"]+$"
)

_URL = re.compile(r"https?://\S+")
_WHITESPACE = re.compile(r"\s+")
_REPEATED = re.compile(r"(.)\1{4,}", re.S)

LINK_PLACEHOLDER = "[link]"


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class SanitizeResult:
    kept: List[RawComment]
    discarded_count: int


@dataclass
class SanitizerOutput:
    """Output bundle from the SanitizerAgent."""
    video: VideoInfo
    comments: List[RawComment]
    stats: AnalysisStats = field(default_factory=AnalysisStats)


# ─── Pure functions ──────────────────────────────────────────────────────────


def is_trash(text: Optional[str]) -> bool:
    trimmed = (text or "").strip()
    if not trimmed:
        return True
    if _EMOJI_ONLY.match(trimmed):
        return True
    return any(pattern.search(trimmed) for pattern in _TRASH_PATTERNS)


def clean_comment(text: str, max_length: int = settings.MAX_COMMENT_LENGTH) -> str:
    cleaned = _URL.sub(LINK_PLACEHOLDER, text)
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _REPEATED.sub(r"\1\1", cleaned)
    cleaned = cleaned.strip()
    if len(cleaned) > max_length:
        # Trailing dots would merge with the ellipsis into a collapsible run.
        cleaned = cleaned[:max_length].rstrip(".") + "..."
    return cleaned


def sanitize(comments: List[RawComment]) -> SanitizeResult:
    """Drop spam/noise comments and return the rest with cleaned text."""
    kept: List[RawComment] = []
    discarded = 0
    for comment in comments:
        if is_trash(comment.text):
            discarded += 1
            continue
        kept.append(replace(comment, text=clean_comment(comment.text)))
    return SanitizeResult(kept=kept, discarded_count=discarded)


# ─── SanitizerAgent ──────────────────────────────────────────────────────────


class SanitizerAgent(Agent):
    """
    Agent 2: Sanitizer

    Input:  FetchOutput
    Output: SanitizerOutput
    Raises AllCommentsFilteredError when nothing survives.
    """

    def __init__(self, on_progress: Optional[ProgressCallback] = None):
        super().__init__(name="SanitizerAgent", on_progress=on_progress)

    def run(self, fetched: FetchOutput) -> SanitizerOutput:
        self.report(PipelineStep.FILTERING, "Filtering spam and noise...", 30)

        result = sanitize(fetched.comments)
        self.logger.info(
            f"Sanitized {len(fetched.comments)} comments: "
            f"{result.discarded_count} discarded, {len(result.kept)} kept"
        )
        self.report(
            PipelineStep.FILTERING,
            f"Filtered {result.discarded_count} spam/noise comments. "
            f"{len(result.kept)} remaining.",
            40,
        )

        if not result.kept:
            raise AllCommentsFilteredError(
                "All comments were filtered as spam/noise. Cannot analyze."
            )

        return SanitizerOutput(
            video=fetched.video,
            comments=result.kept,
            stats=AnalysisStats(
                total_fetched=len(fetched.comments),
                trash_count=result.discarded_count,
            ),
        )
