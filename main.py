import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.dependencies import get_pipeline, get_settings
from app.logging_config import setup_logging
from app.routers import webhook

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings and build the pipeline before serving; a missing variable aborts startup."""
    settings = get_settings()
    setup_logging(settings.log_level)
    get_pipeline()
    logger.info("Chatwoot Labeler listo (etiquetas: %s)", ", ".join(settings.labels))
    yield


app = FastAPI(title="Chatwoot Labeler", lifespan=lifespan)

# Include Routers
app.include_router(webhook.router)

@app.get("/health")
def health():
    return {"status": "ok", "service": "chatwoot-labeler"}
