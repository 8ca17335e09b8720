"""
Offline demo data: two fictional product videos with hand-written comments
and a rule-based stand-in for the language model.

`KeywordLLM` answers the three prompt types the pipeline sends (batch
classification, strategy, battle card) without any network access, so the
whole pipeline can be exercised from `run.py --mode demo`.
"""

import json
import re
from typing import Dict, List, Tuple

from agents.fetcher import StaticCommentSource
from agents.llm import LLMClient
from models.schemas import RawComment, VideoInfo

MY_VIDEO = VideoInfo(
    video_id="dQw4w9WgXcQ",
    title="AeroBuds Pro: 3 months later",
    channel_title="Gadget Notes",
)
THEIR_VIDEO = VideoInfo(
    video_id="9bZkp7q19f0",
    title="SoundCore X review",
    channel_title="Tech Daily",
)

_MY_COMMENTS = [
    ("Battery dies after 2 hours, this is unacceptable", 40),
    ("battery drain is insane since the last update, crashes too", 31),
    ("Please add multipoint bluetooth, dealbreaker for me", 25),
    ("Would love a proper EQ in the app", 18),
    ("How do I reset them? the manual is useless", 12),
    ("How do I pair with a PC running Linux?", 9),
    ("Best earbuds I have owned, the ANC is superb", 55),
    ("Sound quality is amazing, worth every penny", 22),
    ("Shipping took 3 weeks, terrible experience", 14),
    ("shipping was slow and support never replied", 6),
    ("Great, they crashed my phone again. Thanks a lot", 19),
    ("You should make a video comparing them underwater lol", 33),
    ("first", 0),
    ("Check out my channel for free giveaways", 0),
    ("🔥🔥🔥", 2),
]

_THEIR_COMMENTS = [
    ("Battery lasts forever, easily two days", 28),
    ("Battery life is the reason I switched from AeroBuds", 17),
    ("Case hinge broke after a week", 21),
    ("The app keeps crashing on Android 14", 15),
    ("Please add an EQ preset for podcasts", 8),
    ("How do I update the firmware?", 11),
    ("Fit is uncomfortable after an hour", 9),
    ("Love the sound, bass is punchy", 13),
    ("nice video", 0),
]

# keyword -> (category, topic); first match wins
_RULES: List[Tuple[str, str, str]] = [
    (r"\bhow do i\b|\?$", "QUESTION", "Setup"),
    (r"video|lol", "CONTENT_IDEA", "Content"),
    (r"crash|broke|bug", "BUG", "Stability"),
    (r"lasts|switched", "PRAISE", "Battery"),
    (r"battery", "BUG", "Battery"),
    (r"please add|would love|add an", "FEATURE", "Features"),
    (r"shipping|support", "COMPLAINT", "Shipping"),
    (r"uncomfortable|terrible", "COMPLAINT", "Comfort"),
    (r"best|amazing|love|superb|forever", "PRAISE", "Sound"),
]

_COMMENTS_BLOCK = re.compile(r"INPUT COMMENTS:\s*(\[.*\])\s*OUTPUT FORMAT:", re.S)


def _comments(video: VideoInfo, rows) -> List[RawComment]:
    return [
        RawComment(comment_id=f"{video.video_id}-{i}", text=text, author=f"viewer{i}", likes=likes)
        for i, (text, likes) in enumerate(rows)
    ]


def demo_source() -> StaticCommentSource:
    source = StaticCommentSource()
    source.add_video(MY_VIDEO, _comments(MY_VIDEO, _MY_COMMENTS))
    source.add_video(THEIR_VIDEO, _comments(THEIR_VIDEO, _THEIR_COMMENTS))
    return source


def label_comment(text: str) -> Dict[str, object]:
    lowered = text.lower()
    sarcasm = lowered.startswith("great,") and "crash" in lowered
    for pattern, category, topic in _RULES:
        if re.search(pattern, lowered):
            return {
                "category": category,
                "topic": topic,
                "intensity": 8 if category in ("BUG", "COMPLAINT") else 6,
                "segment": "Pro" if re.search(r"anc|linux|firmware|eq\b", lowered) else "Unknown",
                "sarcasm": sarcasm,
            }
    return {"category": "NOISE", "topic": "General", "intensity": 1, "segment": "Unknown", "sarcasm": False}


class KeywordLLM(LLMClient):
    """Deterministic, offline stand-in for the hosted model."""

    def complete(self, prompt: str, model: str, temperature: float) -> str:
        block = _COMMENTS_BLOCK.search(prompt)
        if block:
            comments = json.loads(block.group(1))
            return json.dumps([{"id": c["id"], **label_comment(c["text"])} for c in comments])
        if "battle card" in prompt:
            return json.dumps({
                "winningPoints": [{
                    "topic": "Sound", "ourSentiment": "POS", "theirSentiment": "NEU",
                    "insight": "Our audience praises audio quality more often.",
                }],
                "losingPoints": [{
                    "topic": "Battery", "ourSentiment": "NEG", "theirSentiment": "POS",
                    "insight": "Their battery life is a reason people switch.",
                }],
                "contentGaps": [{"question": "How do I update the firmware?", "frequency": 2, "source": "both"}],
                "whyUsHooks": ["The ANC reviewers call superb"],
            })
        return json.dumps({
            "summary": "Battery complaints dominate the feedback while sound quality earns strong praise.",
            "immediateFixes": ["Ship a battery drain fix", "Stabilize the companion app"],
            "contentOpportunities": ["Pairing walkthrough for Linux and PC"],
            "marketingHooks": ["ANC that owners call superb"],
        })
