import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from agents.fetcher import FetchOutput
from agents.sanitizer import (
    LINK_PLACEHOLDER,
    SanitizerAgent,
    clean_comment,
    is_trash,
    sanitize,
)
from models.errors import AllCommentsFilteredError
from models.schemas import RawComment, VideoInfo


def _comments(*texts):
    return [RawComment(comment_id=str(i), text=t, likes=i) for i, t in enumerate(texts)]


class TestIsTrash:
    @pytest.mark.parametrize("text", [
        "",
        "   ",
        None,
        "\U0001F600\U0001F600\U0001F600",
        "\U0001F44D\U0001F3FD ❤️",
        "first!",
        "FIRST",
        "check out my channel",
        "Subscribe to my channel for more",
        "hi",
        "Hello!!",
        "amazing",
        "love it!",
        "DM me on telegram",
        "call +12345678901 now",
        "who's here in 2024",
        "anyone watching in 2025?",
        "short",
    ])
    def test_discarded(self, text):
        assert is_trash(text)

    @pytest.mark.parametrize("text", [
        "The battery drains way too fast after the update, very disappointing",
        "How do I reset the pairing list?",
        "2024 was a good year for this brand",
        "Great, it crashed again",
    ])
    def test_kept(self, text):
        assert not is_trash(text)

    @pytest.mark.parametrize("text", ["12345678", "2024 2025", "#1 ***** 10/10"])
    def test_digits_and_symbols_are_not_emoji(self, text):
        assert not is_trash(text)

    def test_emoji_only_versus_mixed(self):
        assert is_trash("🔥🔥🔥 😍😍")
        assert not is_trash("🔥🔥🔥 2024")


class TestCleanComment:
    def test_plain_text_unmodified(self):
        text = "The battery drains way too fast after the update, very disappointing"
        assert clean_comment(text) == text

    def test_urls_redacted(self):
        cleaned = clean_comment("see https://example.com/x?y=1 for the fix")
        assert cleaned == f"see {LINK_PLACEHOLDER} for the fix"

    def test_whitespace_collapsed(self):
        assert clean_comment("  too \n\n  many\tspaces  ") == "too many spaces"

    def test_repeated_characters_collapsed(self):
        assert clean_comment("sooooooo goooood!!!!!!") == "soo good!!"

    def test_truncation(self):
        cleaned = clean_comment("word " * 200, max_length=50)
        assert cleaned.endswith("...")
        assert len(cleaned) <= 53

    @pytest.mark.parametrize("text", [
        "sooooooo goooood!!!!!!",
        "x" * 600,
        "." * 600,
        ("abc " * 130) + "https://a.b/c",
        "wait....... what",
    ])
    def test_idempotent(self, text):
        once = clean_comment(text)
        assert clean_comment(once) == once


class TestSanitize:
    def test_keeps_order_and_counts_discards(self):
        result = sanitize(_comments(
            "first!",
            "Battery life is much worse than the old model",
            "hi",
            "Please add multipoint pairing",
        ))
        assert result.discarded_count == 2
        assert [c.comment_id for c in result.kept] == ["1", "3"]

    def test_kept_comments_carry_cleaned_text(self):
        result = sanitize(_comments("Battery    dies    fast, see https://x.y"))
        assert result.kept[0].text == f"Battery dies fast, see {LINK_PLACEHOLDER}"
        assert result.kept[0].likes == 0


class TestSanitizerAgent:
    def test_stats_and_progress(self):
        events = []
        agent = SanitizerAgent(on_progress=events.append)
        fetched = FetchOutput(
            video=VideoInfo("abcdefghijk", "v"),
            comments=_comments("first!", "The hinge snapped after one week"),
        )
        out = agent.run(fetched)
        assert out.stats.total_fetched == 2
        assert out.stats.trash_count == 1
        assert len(out.comments) == 1
        assert [e.progress for e in events] == [30, 40]

    def test_all_filtered_raises(self):
        agent = SanitizerAgent()
        fetched = FetchOutput(video=VideoInfo("abcdefghijk", "v"), comments=_comments("first!", "hi"))
        with pytest.raises(AllCommentsFilteredError):
            agent.run(fetched)

    def test_execute_wraps_failure(self):
        agent = SanitizerAgent()
        fetched = FetchOutput(video=VideoInfo("abcdefghijk", "v"), comments=_comments("lol"))
        result = agent.execute(fetched)
        assert not result.success
        assert isinstance(result.exception, AllCommentsFilteredError)
