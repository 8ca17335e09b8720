from .base import Agent, AgentResult, Orchestrator
from .fetcher import CommentFetchAgent, CommentSource, YouTubeCommentSource, StaticCommentSource
from .sanitizer import SanitizerAgent
from .classifier import ClassifierAgent, CommentClassifier
from .aggregator import AggregatorAgent
from .strategist import StrategistAgent, Strategist
from .comparator import Comparator
from .llm import LLMClient, OpenAIChatClient

__all__ = [
    "Agent", "AgentResult", "Orchestrator",
    "CommentFetchAgent", "CommentSource", "YouTubeCommentSource", "StaticCommentSource",
    "SanitizerAgent", "ClassifierAgent", "CommentClassifier",
    "AggregatorAgent", "StrategistAgent", "Strategist", "Comparator",
    "LLMClient", "OpenAIChatClient",
]
