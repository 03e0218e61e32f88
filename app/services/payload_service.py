"""
PayloadService: Parses and validates incoming Chatwoot webhook payloads.
Only conversation_created events with a non-empty first message get through.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from app.models.errors import PipelineError
from app.models.event_models import CONVERSATION_CREATED, ConversationCreatedEvent

logger = logging.getLogger(__name__)


# --- EVENT DATA ---

@dataclass
class EventData:
    """Values extracted from a conversation_created payload, or the reason it was rejected."""
    event: str = ""
    conversation_id: Union[int, str, None] = None
    account_id: Union[int, str, None] = None
    content: str = ""

    error: Optional[PipelineError] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def _reject(error: PipelineError, data: Optional[EventData] = None) -> EventData:
    data = data or EventData()
    data.error = error
    return data


def extract_event(raw_body: Union[bytes, str]) -> EventData:
    """
    Parse and validate a webhook body.
    No partial tolerance: the first violation found is returned as data.error.
    """
    # --- JSON ---
    try:
        payload = json.loads(raw_body)
    except (ValueError, TypeError) as e:
        logger.warning("Body no es JSON válido: %s", e)
        return _reject(PipelineError.SCHEMA)

    # --- SCHEMA ---
    try:
        event = ConversationCreatedEvent.model_validate(payload)
    except ValidationError as e:
        logger.warning("Payload no cumple el esquema (%d errores): %s", e.error_count(), e.errors()[:3])
        return _reject(PipelineError.SCHEMA)

    data = EventData(event=event.event, conversation_id=event.id)

    # --- EVENT TYPE ---
    if event.event != CONVERSATION_CREATED:
        logger.warning("Evento '%s' ignorado", event.event)
        return _reject(PipelineError.EVENT_IGNORED, data)

    # --- MESSAGES ---
    if not event.messages:
        logger.warning("Conversación %s sin mensajes", event.id)
        return _reject(PipelineError.EMPTY_CONVERSATION, data)

    initial_message = event.messages[0]
    data.account_id = initial_message.account_id
    if initial_message.content == "":
        logger.warning("Conversación %s: primer mensaje vacío", event.id)
        return _reject(PipelineError.EMPTY_CONTENT, data)

    data.content = initial_message.content
    return data
