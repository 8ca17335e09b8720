"""
Shared fixtures: scripted language-model clients and a 25-comment video.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
from typing import Dict, List, Union

import pytest

from agents.fetcher import StaticCommentSource
from agents.llm import LLMClient
from models.errors import LLMError
from models.schemas import RawComment, VideoInfo

FIXTURE_VIDEO_ID = "abcdefghijk"

STRATEGY_JSON = json.dumps({
    "summary": "Battery defects drive most of the pain; dark mode is the top request.",
    "immediateFixes": ["Fix battery drain in 2.1"],
    "contentOpportunities": ["Setup walkthrough"],
    "marketingHooks": ["Sound people rave about"],
})


class ScriptedLLM(LLMClient):
    """Replays canned completions in order; an Exception entry is raised instead."""

    def __init__(self, responses: List[Union[str, Exception]]):
        self.responses = list(responses)
        self.prompts: List[str] = []

    def complete(self, prompt: str, model: str, temperature: float) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise LLMError("no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class LabelingLLM(LLMClient):
    """
    Answers classification prompts from a fixed id -> label table and every
    other prompt with `other_response`.
    """

    def __init__(self, labels: Dict[str, dict], other_response: str = STRATEGY_JSON):
        self.labels = labels
        self.other_response = other_response
        self.prompts: List[str] = []
        self.batches: List[List[str]] = []

    def complete(self, prompt: str, model: str, temperature: float) -> str:
        self.prompts.append(prompt)
        if "INPUT COMMENTS:" not in prompt:
            return self.other_response
        block = prompt.split("INPUT COMMENTS:", 1)[1].split("OUTPUT FORMAT:", 1)[0]
        comments = json.loads(block)
        self.batches.append([c["id"] for c in comments])
        return json.dumps([
            {"id": c["id"], **self.labels[c["id"]]}
            for c in comments if c["id"] in self.labels
        ])


def label(category, topic, intensity, segment="Unknown", sarcasm=False):
    return {
        "category": category,
        "topic": topic,
        "intensity": intensity,
        "segment": segment,
        "sarcasm": sarcasm,
    }


# id, text, likes, label (None for spam)
FIXTURE_ROWS = [
    ("c01", "The battery dies after two hours since the update", 40, label("BUG", "Battery", 8, "Pro")),
    ("c02", "Battery drain is brutal on the new firmware build", 30, label("BUG", "Battery", 8, "Pro")),
    ("c03", "My battery percentage jumps around randomly", 12, label("BUG", "Battery", 6)),
    ("c04", "Battery indicator shows full while nearly empty", 5, label("BUG", "Battery", 6)),
    ("c05", "Shipping took three weeks to arrive here", 7, label("COMPLAINT", "Shipping", 4)),
    ("c06", "Delivery was late and the box was crushed", 3, label("COMPLAINT", "Shipping", 4)),
    ("c07", "Please add a dark mode to the companion app", 22, label("FEATURE", "Dark mode", 7)),
    ("c08", "Dark mode please, my eyes hurt at night", 18, label("FEATURE", "Dark mode", 7)),
    ("c09", "A dark theme option would be really welcome", 4, label("FEATURE", "Dark mode", 5)),
    ("c10", "Would pay extra for a dark interface option", 2, label("FEATURE", "Dark mode", 5)),
    ("c11", "Sound quality is incredible for the price", 50, label("PRAISE", "Sound", 6, "Pro")),
    ("c12", "The soundstage on these is really wide", 25, label("PRAISE", "Sound", 6, "Pro")),
    ("c13", "Best audio I have heard from earbuds", 15, label("PRAISE", "Sound", 6)),
    ("c14", "battery easily lasts me a full workday", 9, label("PRAISE", "battery", 6, "Pro")),
    ("c15", "The battery life has been great for me", 6, label("PRAISE", "battery", 6)),
    ("c16", "How do I pair these with my laptop?", 11, label("QUESTION", "Setup", 3)),
    ("c17", "Is there a way to reset the pairing list?", 8, label("QUESTION", "Setup", 3)),
    ("c18", "Where do I find the firmware updater?", 6, label("QUESTION", "Setup", 3)),
    ("c19", "Watching this while eating cereal at 3am", 1, label("NOISE", "General", 1)),
    ("c20", "Someone should test these during a marathon", 20, label("CONTENT_IDEA", "Content", 5)),
    ("s01", "first!", 0, None),
    ("s02", "check out my channel for daily tech", 0, None),
    ("s03", "\U0001F600\U0001F600\U0001F600", 0, None),
    ("s04", "hi", 0, None),
    ("s05", "Win a free iphone, click the link in my profile", 0, None),
]


def fixture_comments() -> List[RawComment]:
    return [
        RawComment(comment_id=cid, text=text, author=f"user-{cid}", likes=likes)
        for cid, text, likes, _ in FIXTURE_ROWS
    ]


def fixture_labels() -> Dict[str, dict]:
    return {cid: lab for cid, _, _, lab in FIXTURE_ROWS if lab is not None}


@pytest.fixture
def fixture_video():
    return VideoInfo(video_id=FIXTURE_VIDEO_ID, title="Earbuds review", channel_title="Test Channel")


@pytest.fixture
def comment_source(fixture_video):
    return StaticCommentSource().add_video(fixture_video, fixture_comments())


@pytest.fixture
def labeling_llm():
    return LabelingLLM(fixture_labels())
