import logging
from typing import Optional, Type

from openai import OpenAI
from pydantic import BaseModel

from app.config import Settings

logger = logging.getLogger(__name__)

ASSISTANTS_BETA_VERSION = "v2"


def get_openai_client(settings: Settings) -> OpenAI:
    """OpenAI SDK client for the Assistants API (beta protocol v2)."""
    logger.info("Cliente OpenAI: org=%s, timeout=%ss", settings.openai_org, settings.openai_timeout)

    return OpenAI(
        api_key=settings.openai_api_key,
        organization=settings.openai_org,
        timeout=settings.openai_timeout,
        max_retries=0,
        default_headers={"OpenAI-Beta": f"assistants={ASSISTANTS_BETA_VERSION}"},
    )


def get_chat_model(settings: Settings, structured_output: Optional[Type[BaseModel]] = None):
    """Returns a configured ChatOpenAI model, optionally bound to a structured output schema."""
    from langchain_openai import ChatOpenAI

    logger.info("Usando modelo OpenAI: %s", settings.openai_model)

    model = ChatOpenAI(
        model=settings.openai_model,
        temperature=0,
        api_key=settings.openai_api_key,
        organization=settings.openai_org,
        timeout=settings.openai_timeout,
        max_retries=0,
    )

    if structured_output:
        model = model.with_structured_output(structured_output, method="function_calling")

    return model
