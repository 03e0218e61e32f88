from functools import lru_cache

from app.config import Settings, load_settings
from app.services.chatwoot_service import ChatwootService
from app.services.label_service import LabelClassifier
from app.services.orchestrator_service import LabelingPipeline


@lru_cache
def get_settings() -> Settings:
    return load_settings()


@lru_cache
def get_pipeline() -> LabelingPipeline:
    """Single pipeline per process, built from the process-wide settings."""
    settings = get_settings()
    return LabelingPipeline(
        settings=settings,
        classifier=LabelClassifier(settings),
        chatwoot=ChatwootService(settings),
    )
