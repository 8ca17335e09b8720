from .database import init_db, get_db, get_db_dependency, make_engine, engine, SessionLocal
from .models import Base, VideoAnalysis, CompetitorGap
from .cache import AnalysisCache

__all__ = [
    "init_db", "get_db", "get_db_dependency", "make_engine", "engine", "SessionLocal",
    "Base", "VideoAnalysis", "CompetitorGap", "AnalysisCache",
]
