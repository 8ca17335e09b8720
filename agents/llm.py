"""
Language-model client
---------------------
The classifier, strategist and comparator only need "prompt in, text out".
`LLMClient` is that contract; `OpenAIChatClient` implements it with the
OpenAI SDK against any OpenAI-compatible endpoint (Groq by default).

Clients are constructed by the caller and passed into each agent; nothing
in this module holds a shared, module-level client.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from openai import OpenAI

from config.settings import settings
from models.errors import LLMError, MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.S | re.I)


class LLMClient(ABC):
    """Minimal completion contract used by every model-backed agent."""

    @abstractmethod
    def complete(self, prompt: str, model: str, temperature: float) -> str:
        raise NotImplementedError


class OpenAIChatClient(LLMClient):
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = settings.LLM_TIMEOUT_SECONDS,
    ):
        api_key = api_key or settings.LLM_API_KEY
        if not api_key:
            raise ValueError("LLM API key not configured (set GROQ_API_KEY or LLM_API_KEY)")
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url or settings.LLM_BASE_URL,
            timeout=timeout,
            max_retries=0,
        )

    def complete(self, prompt: str, model: str, temperature: float) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
            )
        except Exception as e:
            raise LLMError(f"{model} request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise MalformedResponseError(f"{model} returned an empty completion")
        return content


def parse_json_response(content: str) -> Any:
    """Parse a model completion as JSON, tolerating a surrounding ``` fence."""
    text = (content or "").strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
