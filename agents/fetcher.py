"""
Comment Fetch Agent
-------------------
Collects a bounded sample of top-level comments for one video.

Sources:
  - YouTube Data API v3 (commentThreads, ordered by relevance)
  - Static in-memory fixtures for tests and demo runs

Smart sample policy: small videos (< 100 comments) are fetched in full,
anything larger is capped at the top 200 by relevance.

Architecture:
  CommentFetchAgent.run(video_ref) -> FetchOutput
"""

import re
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import requests

from agents.base import Agent, ProgressCallback
from config.settings import settings
from models.errors import (
    CommentsDisabledError,
    InvalidVideoReferenceError,
    NoCommentsError,
    VideoNotFoundError,
)
from models.schemas import PipelineStep, RawComment, VideoInfo

logger = logging.getLogger(__name__)

_VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)([^&\n?#]+)"),
    re.compile(r"^([a-zA-Z0-9_-]{11})$"),
]

# API page size maximum
_PAGE_SIZE = 100


# ─── Data Structures ────────────────────────────────────────────────────────


@dataclass
class FetchOutput:
    """Output bundle from the CommentFetchAgent."""
    video: VideoInfo
    comments: List[RawComment] = field(default_factory=list)


# ─── Helpers ─────────────────────────────────────────────────────────────────


def extract_video_id(url_or_id: str) -> Optional[str]:
    """Pull the video id out of a watch/short/embed URL, or accept a bare id."""
    text = (url_or_id or "").strip()
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def smart_sample_size(
    total_comments: int,
    threshold: int = settings.SMART_SAMPLE_THRESHOLD,
    sample_size: int = settings.SMART_SAMPLE_SIZE,
) -> int:
    if total_comments < threshold:
        return max(total_comments, 0)
    return sample_size


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


# ─── Sources ─────────────────────────────────────────────────────────────────


class CommentSource(ABC):
    """Contract for anything that can describe a video and list its comments."""

    @abstractmethod
    def fetch_video_info(self, video_id: str) -> Optional[VideoInfo]:
        """Video metadata, or None when the video does not exist."""
        raise NotImplementedError

    @abstractmethod
    def fetch_comments(self, video_id: str, max_results: int) -> List[RawComment]:
        """Up to max_results top-level comments, most relevant first."""
        raise NotImplementedError

    def fetch_smart_sample(self, video: VideoInfo) -> List[RawComment]:
        return self.fetch_comments(video.video_id, smart_sample_size(video.comment_count))


class YouTubeCommentSource(CommentSource):
    """YouTube Data API v3 client (videos + commentThreads endpoints)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = settings.YOUTUBE_API_BASE,
        timeout: int = settings.REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key or settings.YOUTUBE_API_KEY
        if not self.api_key:
            raise ValueError("YOUTUBE_API_KEY not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, endpoint: str, params: Dict[str, str]) -> requests.Response:
        return self.session.get(
            f"{self.base_url}/{endpoint}",
            params={"key": self.api_key, **params},
            timeout=self.timeout,
        )

    def fetch_video_info(self, video_id: str) -> Optional[VideoInfo]:
        resp = self._get("videos", {"id": video_id, "part": "snippet,statistics"})
        if not resp.ok:
            raise RuntimeError(f"YouTube API error: {resp.status_code}")

        items = resp.json().get("items") or []
        if not items:
            return None

        video = items[0]
        snippet = video.get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url", "")
        return VideoInfo(
            video_id=video_id,
            title=snippet.get("title", ""),
            thumbnail=thumbnail,
            channel_title=snippet.get("channelTitle", ""),
            comment_count=int(video.get("statistics", {}).get("commentCount") or 0),
        )

    def fetch_comments(self, video_id: str, max_results: int) -> List[RawComment]:
        comments: List[RawComment] = []
        page_token: Optional[str] = None

        while len(comments) < max_results:
            params = {
                "videoId": video_id,
                "part": "snippet",
                "maxResults": str(min(_PAGE_SIZE, max_results - len(comments))),
                "order": "relevance",
                "textFormat": "plainText",
            }
            if page_token:
                params["pageToken"] = page_token

            resp = self._get("commentThreads", params)
            if resp.status_code == 403:
                raise CommentsDisabledError(f"Comments are disabled for video {video_id}")
            if not resp.ok:
                raise RuntimeError(f"YouTube API error: {resp.status_code}")

            data = resp.json()
            items = data.get("items") or []
            if not items:
                break

            for item in items:
                top = item["snippet"]["topLevelComment"]
                snippet = top["snippet"]
                comments.append(RawComment(
                    comment_id=top["id"],
                    text=snippet.get("textDisplay", ""),
                    author=snippet.get("authorDisplayName", ""),
                    author_image=snippet.get("authorProfileImageUrl"),
                    likes=int(snippet.get("likeCount") or 0),
                    published_at=_parse_timestamp(snippet.get("publishedAt")),
                ))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return comments[:max_results]


class StaticCommentSource(CommentSource):
    """Serves pre-loaded videos and comments (tests, demo mode)."""

    def __init__(self):
        self._videos: Dict[str, VideoInfo] = {}
        self._comments: Dict[str, List[RawComment]] = {}

    def add_video(self, video: VideoInfo, comments: List[RawComment]) -> "StaticCommentSource":
        if not video.comment_count:
            video = VideoInfo(
                video_id=video.video_id,
                title=video.title,
                thumbnail=video.thumbnail,
                channel_title=video.channel_title,
                comment_count=len(comments),
            )
        self._videos[video.video_id] = video
        self._comments[video.video_id] = list(comments)
        return self

    def fetch_video_info(self, video_id: str) -> Optional[VideoInfo]:
        return self._videos.get(video_id)

    def fetch_comments(self, video_id: str, max_results: int) -> List[RawComment]:
        return self._comments.get(video_id, [])[:max_results]


# ─── CommentFetchAgent ───────────────────────────────────────────────────────


class CommentFetchAgent(Agent):
    """
    Agent 1: Comment Fetch

    Input:  video URL or id
    Output: FetchOutput
    """

    def __init__(self, source: CommentSource, on_progress: Optional[ProgressCallback] = None):
        super().__init__(name="CommentFetchAgent", on_progress=on_progress)
        self.source = source

    def run(self, video_ref: str) -> FetchOutput:
        video_id = extract_video_id(video_ref)
        if not video_id:
            raise InvalidVideoReferenceError("Invalid YouTube URL or video ID")

        self.report(PipelineStep.FETCHING, "Fetching video information and comments...", 10)

        video = self.source.fetch_video_info(video_id)
        if video is None:
            raise VideoNotFoundError("Video not found or is private")

        comments = self.source.fetch_smart_sample(video)
        if not comments:
            raise NoCommentsError("No comments found. Comments may be disabled for this video.")

        self.logger.info(f"Fetched {len(comments)} comments for {video_id} ({video.title!r})")
        self.report(
            PipelineStep.FETCHING,
            f'Fetched {len(comments)} comments from "{video.title}"',
            25,
        )
        return FetchOutput(video=video, comments=comments)
