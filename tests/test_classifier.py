import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

import pytest
from agents.classifier import (
    ClassifierAgent,
    CommentClassifier,
    coerce_category,
    coerce_intensity,
    coerce_segment,
    merge_batch_response,
)
from agents.sanitizer import SanitizerOutput
from models.errors import ClassificationError, LLMError
from models.schemas import AnalysisStats, CommentCategory, RawComment, UserSegment, VideoInfo

from conftest import ScriptedLLM


def _batch(n, prefix="c"):
    return [
        RawComment(comment_id=f"{prefix}{i}", text=f"comment number {i}", author=f"author{i}", likes=i)
        for i in range(n)
    ]


def _answer(batch, category="BUG"):
    return json.dumps([
        {"id": c.comment_id, "category": category, "topic": "Battery", "intensity": 7,
         "segment": "Pro", "sarcasm": False}
        for c in batch
    ])


class TestCoercion:
    @pytest.mark.parametrize("value,expected", [
        (7, 7), (0, 1), (-3, 1), (11, 10), (6.5, 7), ("8", 8), ("high", 5),
        (None, 5), (True, 5), (float("nan"), 5), (float("inf"), 10), ([3], 5),
        (10 ** 400, 10), (-(10 ** 400), 1), ("1e400", 10), (1e308, 10),
    ])
    def test_intensity(self, value, expected):
        assert coerce_intensity(value) == expected

    def test_category(self):
        assert coerce_category("bug") == CommentCategory.BUG
        assert coerce_category("content idea") == CommentCategory.CONTENT_IDEA
        assert coerce_category("RANT") is None
        assert coerce_category(3) is None

    def test_segment(self):
        assert coerce_segment("pro") == UserSegment.PRO
        assert coerce_segment("expert") == UserSegment.UNKNOWN
        assert coerce_segment(None) == UserSegment.UNKNOWN


class TestMergeBatchResponse:
    def test_fields_come_from_original_comment(self):
        batch = _batch(2)
        merged = merge_batch_response(batch, [
            {"id": "c1", "category": "FEATURE", "topic": " Dark mode ", "intensity": 4,
             "text": "model rewrote this", "likes": 999},
        ])
        assert len(merged) == 1
        c = merged[0]
        assert c.comment_id == "c1"
        assert c.text == "comment number 1"
        assert c.author == "author1"
        assert c.likes == 1
        assert c.topic == "Dark mode"
        assert c.category == CommentCategory.FEATURE

    def test_unmatched_duplicate_and_unknown_items_dropped(self):
        batch = _batch(3)
        merged = merge_batch_response(batch, [
            {"id": "zzz", "category": "BUG"},
            {"id": "c0", "category": "BUG"},
            {"id": "c0", "category": "PRAISE"},
            {"id": "c1", "category": "SHRUG"},
            "garbage",
            {"id": "c2"},
        ])
        assert [(c.comment_id, c.category) for c in merged] == [("c0", CommentCategory.BUG)]

    def test_defaults(self):
        merged = merge_batch_response(_batch(1), [{"id": "c0", "category": "QUESTION"}])
        c = merged[0]
        assert c.topic == "General"
        assert c.intensity == 5
        assert c.segment == UserSegment.UNKNOWN
        assert c.sarcasm is False

    def test_non_list_rejected(self):
        with pytest.raises(ValueError):
            merge_batch_response(_batch(1), {"id": "c0"})


class TestCommentClassifier:
    def test_prompt_withholds_author_data(self):
        classifier = CommentClassifier(ScriptedLLM([]), pause_seconds=0)
        prompt = classifier.build_prompt(_batch(2))
        assert '"id": "c0"' in prompt
        assert '"likes": 1' in prompt
        assert "author0" not in prompt

    def test_batches_of_twenty(self):
        comments = _batch(45)
        llm = ScriptedLLM([
            _answer(comments[:20]),
            _answer(comments[20:40]),
            _answer(comments[40:]),
        ])
        classifier = CommentClassifier(llm, batch_size=20, pause_seconds=0)
        progress = []
        result = classifier.classify(comments, on_batch=lambda done, total: progress.append((done, total)))
        assert len(result) == 45
        assert len(llm.prompts) == 3
        assert progress == [(20, 45), (40, 45), (45, 45)]

    def test_failed_batch_contributes_nothing(self):
        comments = _batch(6)
        llm = ScriptedLLM([
            _answer(comments[:2]),
            LLMError("rate limited"),
            "```json\n" + _answer(comments[4:]) + "\n```",
        ])
        classifier = CommentClassifier(llm, batch_size=2, pause_seconds=0)
        result = classifier.classify(comments)
        assert [c.comment_id for c in result] == ["c0", "c1", "c4", "c5"]
        assert classifier.failed_batches == 1

    def test_oversized_intensity_keeps_batch(self):
        comments = _batch(3)
        answer = json.loads(_answer(comments))
        answer[1]["intensity"] = 10 ** 400
        classifier = CommentClassifier(ScriptedLLM([json.dumps(answer)]), pause_seconds=0)
        result = classifier.classify(comments)
        assert [c.intensity for c in result] == [7, 10, 7]
        assert classifier.failed_batches == 0

    def test_unexpected_error_is_absorbed(self):
        llm = ScriptedLLM([RuntimeError("socket closed")])
        classifier = CommentClassifier(llm, pause_seconds=0)
        assert classifier.classify(_batch(3)) == []
        assert classifier.failed_batches == 1

    def test_pause_only_between_batches(self, monkeypatch):
        sleeps = []
        monkeypatch.setattr("agents.classifier.time.sleep", sleeps.append)
        comments = _batch(4)
        llm = ScriptedLLM([_answer(comments[:2]), _answer(comments[2:])])
        CommentClassifier(llm, batch_size=2, pause_seconds=0.1).classify(comments)
        assert sleeps == [0.1]

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            CommentClassifier(ScriptedLLM([]), batch_size=0)


class TestClassifierAgent:
    def _sanitized(self, comments):
        return SanitizerOutput(
            video=VideoInfo("abcdefghijk", "v"),
            comments=comments,
            stats=AnalysisStats(total_fetched=len(comments) + 2, trash_count=2),
        )

    def test_stats_carried_forward(self):
        comments = _batch(3)
        agent = ClassifierAgent(CommentClassifier(ScriptedLLM([_answer(comments[:2])]), pause_seconds=0))
        out = agent.run(self._sanitized(comments))
        assert out.stats.total_analyzed == 2
        assert out.stats.trash_count == 2
        assert out.stats.total_fetched == 5

    def test_ratio_guard(self):
        comments = _batch(4)
        llm = ScriptedLLM([_answer(comments[:1])])
        agent = ClassifierAgent(CommentClassifier(llm, pause_seconds=0), min_classified_ratio=0.5)
        with pytest.raises(ClassificationError):
            agent.run(self._sanitized(comments))

    def test_ratio_guard_disabled_by_default(self):
        agent = ClassifierAgent(CommentClassifier(ScriptedLLM(["[]"]), pause_seconds=0))
        out = agent.run(self._sanitized(_batch(3)))
        assert out.comments == []
