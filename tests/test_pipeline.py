"""
End-to-end pipeline tests using the 25-comment fixture.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

import pytest
from agents.base import Agent, Orchestrator
from agents.fetcher import StaticCommentSource
from models.errors import (
    AllCommentsFilteredError,
    CommentsDisabledError,
    InvalidVideoReferenceError,
    NoCommentsError,
    VideoNotFoundError,
)
from models.schemas import PipelineStep, RawComment, VideoInfo
from utils.pipeline import analyze_video, compare_videos

from conftest import FIXTURE_VIDEO_ID, LabelingLLM, ScriptedLLM, STRATEGY_JSON, fixture_labels


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def result(comment_source, labeling_llm):
    return analyze_video(FIXTURE_VIDEO_ID, comment_source, labeling_llm, batch_size=8, pause_seconds=0)


# ─── Orchestrator ────────────────────────────────────────────────────────────

class _Double(Agent):
    def __init__(self):
        super().__init__(name="Double")

    def run(self, data):
        return data * 2


class _Explode(Agent):
    def __init__(self):
        super().__init__(name="Explode")

    def run(self, data):
        raise NoCommentsError("nothing here")


class TestOrchestrator:
    def test_chains_outputs(self):
        orchestrator = Orchestrator([_Double(), _Double()])
        result = orchestrator.execute(3)
        assert result.success
        assert result.data == 12
        assert len(orchestrator.run_history) == 2

    def test_stops_at_first_failure(self):
        orchestrator = Orchestrator([_Double(), _Explode(), _Double()])
        result = orchestrator.execute(1)
        assert not result.success
        assert result.agent_name == "Explode"
        assert len(orchestrator.run_history) == 2

    def test_run_reraises_original_exception(self):
        orchestrator = Orchestrator([_Double(), _Explode()])
        with pytest.raises(NoCommentsError, match="nothing here"):
            orchestrator.run(1)


# ─── End-to-end ──────────────────────────────────────────────────────────────

class TestAnalyzeVideo:
    def test_stats(self, result):
        assert result.stats.total_fetched == 25
        assert result.stats.trash_count == 5
        assert result.stats.total_analyzed == 20

    def test_counts_match_fixture(self, result):
        counts = result.metrics.counts
        assert counts.to_dict() == {
            "bugs": 4,
            "features": 4,
            "complaints": 2,
            "praise": 5,
            "questions": 3,
            "noise": 1,
            "contentIdeas": 1,
        }
        assert counts.total == 20

    def test_indices_match_hand_computed_values(self, result):
        # pain:      6/20 × mean(8,8,6,6,4,4)=6 × 15 = 27
        # demand:    4/20 × mean(7,7,5,5)=6 × 15    = 18
        # loyalty:   5 Pro, 3 praise vs 2 bugs → 50 + (1.5 − 1) × 25 = 62.5 → 63
        # confusion: 3/20 × 100                     = 15
        assert result.metrics.indices() == {
            "painIndex": 27,
            "demandVelocity": 18,
            "loyaltyDepth": 63,
            "confusionScore": 15,
        }

    def test_themes(self, result):
        themes = {t.topic: t for t in result.metrics.themes}
        assert set(themes) == {"Battery", "Dark mode", "Sound", "Setup", "Shipping"}
        assert result.metrics.themes[0].topic == "Battery"

        battery = themes["Battery"]
        assert battery.volume == 6            # "Battery" and "battery" merge
        assert battery.sentiment.value == "NEG"
        assert battery.intensity == 6.7
        assert len(battery.representative_quotes) == 3
        assert battery.representative_quotes[0].startswith("The battery dies")

        assert themes["Sound"].sentiment.value == "POS"
        assert themes["Dark mode"].sentiment.value == "NEU"

    def test_ranked_evidence(self, result):
        assert result.metrics.feature_requests == ["Dark mode"]
        assert result.metrics.bug_reports[0] == (
            "Battery: The battery dies after two hours since the update..."
        )
        assert len(result.metrics.bug_reports) == 4
        assert result.metrics.content_ideas == ["Someone should test these during a marathon"]

    def test_strategy_from_model(self, result):
        assert not result.strategy.used_fallback
        assert result.strategy.action_plan.immediate_fixes == ["Fix battery drain in 2.1"]

    def test_batches_are_sequential_and_sized(self, comment_source, labeling_llm):
        analyze_video(FIXTURE_VIDEO_ID, comment_source, labeling_llm, batch_size=8, pause_seconds=0)
        assert [len(b) for b in labeling_llm.batches] == [8, 8, 4]
        assert not any(cid.startswith("s") for batch in labeling_llm.batches for cid in batch)

    def test_progress_milestones(self, comment_source, labeling_llm):
        events = []
        analyze_video(
            FIXTURE_VIDEO_ID, comment_source, labeling_llm,
            on_progress=events.append, batch_size=8, pause_seconds=0,
        )
        assert [e.progress for e in events] == [10, 25, 30, 40, 45, 57, 69, 75, 80, 90, 100]
        assert events[0].step == PipelineStep.FETCHING
        assert events[-1].step == PipelineStep.COMPLETE

    def test_failed_batch_degrades_without_aborting(self, comment_source):
        labels = fixture_labels()
        llm = ScriptedLLM([
            "not json at all",                          # batch 0 lost
            json.dumps([{"id": cid, **labels[cid]} for cid in ["c09", "c10", "c11", "c12",
                                                              "c13", "c14", "c15", "c16"]]),
            json.dumps([{"id": cid, **labels[cid]} for cid in ["c17", "c18", "c19", "c20"]]),
            STRATEGY_JSON,
        ])
        result = analyze_video(FIXTURE_VIDEO_ID, comment_source, llm, batch_size=8, pause_seconds=0)
        assert result.stats.total_analyzed == 12
        assert result.metrics.counts.total == 12

    def test_strategy_failure_uses_fallback(self, comment_source):
        llm = LabelingLLM(fixture_labels(), other_response="```json\n[1, 2]\n```")
        result = analyze_video(FIXTURE_VIDEO_ID, comment_source, llm, pause_seconds=0)
        assert result.strategy.used_fallback
        assert result.strategy.summary == (
            "Analysis of 20 comments complete. Pain Index: 27/100, Demand Velocity: 18/100."
        )


# ─── Fatal errors ────────────────────────────────────────────────────────────

class _DisabledSource(StaticCommentSource):
    def fetch_comments(self, video_id, max_results):
        raise CommentsDisabledError("Comments are disabled")


class TestFatalErrors:
    def test_invalid_reference(self, comment_source):
        with pytest.raises(InvalidVideoReferenceError):
            analyze_video("https://example.com/not-youtube", comment_source, ScriptedLLM([]))

    def test_unknown_video(self, comment_source):
        with pytest.raises(VideoNotFoundError):
            analyze_video("zzzzzzzzzzz", comment_source, ScriptedLLM([]))

    def test_comments_disabled(self, fixture_video):
        source = _DisabledSource().add_video(fixture_video, [RawComment("x", "some comment")])
        with pytest.raises(CommentsDisabledError):
            analyze_video(FIXTURE_VIDEO_ID, source, ScriptedLLM([]))

    def test_no_comments(self):
        source = StaticCommentSource().add_video(VideoInfo(FIXTURE_VIDEO_ID, "Empty"), [])
        with pytest.raises(NoCommentsError):
            analyze_video(FIXTURE_VIDEO_ID, source, ScriptedLLM([]))

    def test_everything_filtered(self):
        spam = [RawComment("a", "first!"), RawComment("b", "hi"), RawComment("c", "subscribe to my channel")]
        source = StaticCommentSource().add_video(VideoInfo(FIXTURE_VIDEO_ID, "Spam"), spam)
        llm = ScriptedLLM([])
        with pytest.raises(AllCommentsFilteredError):
            analyze_video(FIXTURE_VIDEO_ID, source, llm)
        assert llm.prompts == []


# ─── Comparison ──────────────────────────────────────────────────────────────

class _BattleCardLLM(LabelingLLM):
    def __init__(self, labels, card):
        super().__init__(labels, other_response=STRATEGY_JSON)
        self.card = card

    def complete(self, prompt, model, temperature):
        if "battle card" in prompt:
            self.prompts.append(prompt)
            return self.card
        return super().complete(prompt, model, temperature)


class TestCompareVideos:
    def test_battle_card(self, fixture_video):
        their_video = VideoInfo("kjihgfedcba", "Rival earbuds")
        source = StaticCommentSource()
        source.add_video(fixture_video, [
            RawComment("m1", "Battery dies within the hour, awful", likes=10),
            RawComment("m2", "Please add multipoint pairing support", likes=5),
        ])
        source.add_video(their_video, [
            RawComment("t1", "Their battery easily lasts two days", likes=8),
        ])
        labels = {
            "m1": {"category": "BUG", "topic": "Battery", "intensity": 9},
            "m2": {"category": "FEATURE", "topic": "Multipoint", "intensity": 6},
            "t1": {"category": "PRAISE", "topic": "Battery", "intensity": 7},
        }
        card = json.dumps({
            "winningPoints": [],
            "losingPoints": [{"topic": "Battery", "ourSentiment": "NEG",
                              "theirSentiment": "POS", "insight": "They last longer"}],
            "contentGaps": [],
            "whyUsHooks": ["Multipoint is coming"],
        })
        llm = _BattleCardLLM(labels, card)

        comparison = compare_videos(FIXTURE_VIDEO_ID, "kjihgfedcba", source, llm, pause_seconds=0)

        assert comparison.mine.metrics.pain_index == 68     # 1/2 × 9 × 15 = 67.5
        assert comparison.theirs.metrics.pain_index == 0
        assert comparison.gap.losing_points[0].topic == "Battery"
        assert comparison.gap.comparison.my_pain_index == 68
        assert comparison.gap.comparison.their_pain_index == 0
        assert comparison.gap.comparison.my_demand_velocity == 45   # 1/2 × 6 × 15
