"""
Configuration & Settings
Nexus Insights: Comment Intelligence
"""

from pydantic import BaseModel
from typing import Optional
import os

from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    # App
    APP_NAME: str = "Nexus Insights"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Database (analysis cache)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./nexus_insights.db")
    CACHE_TTL_HOURS: int = 24

    # Comment source
    YOUTUBE_API_KEY: Optional[str] = os.getenv("YOUTUBE_API_KEY")
    YOUTUBE_API_BASE: str = "https://www.googleapis.com/youtube/v3"
    REQUEST_TIMEOUT: int = 30
    # Smart sample: fetch everything below the threshold, else the top N by relevance
    SMART_SAMPLE_THRESHOLD: int = 100
    SMART_SAMPLE_SIZE: int = 200

    # Language model (OpenAI-compatible endpoint, Groq by default)
    LLM_API_KEY: Optional[str] = os.getenv("GROQ_API_KEY") or os.getenv("LLM_API_KEY")
    LLM_BASE_URL: Optional[str] = os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1")
    LLM_TIMEOUT_SECONDS: float = 60.0
    CLASSIFIER_MODEL: str = os.getenv("CLASSIFIER_MODEL", "llama-3.1-8b-instant")
    CLASSIFIER_TEMPERATURE: float = 0.0
    STRATEGIST_MODEL: str = os.getenv("STRATEGIST_MODEL", "llama-3.3-70b-versatile")
    STRATEGIST_TEMPERATURE: float = 0.3

    # Classification batching
    BATCH_SIZE: int = 20
    BATCH_PAUSE_SECONDS: float = 0.1
    # 0.0 disables the guard: failed batches only reduce recall.
    MIN_CLASSIFIED_RATIO: float = 0.0

    # Sanitizer
    MAX_COMMENT_LENGTH: int = 500

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


settings = Settings()
