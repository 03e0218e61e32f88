from typing import List, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

CONVERSATION_CREATED = "conversation_created"

Identifier = Union[StrictInt, StrictStr]


class ChatwootMessage(BaseModel):
    """One message of a Chatwoot conversation payload."""
    model_config = ConfigDict(extra="allow")

    content: StrictStr
    account_id: Identifier


class ConversationCreatedEvent(BaseModel):
    """Minimal model for Chatwoot event=conversation_created."""
    model_config = ConfigDict(extra="allow")

    event: StrictStr
    id: Identifier
    messages: List[ChatwootMessage] = []
