from typing import List, Literal

from pydantic import BaseModel, Field


class LabelResponse(BaseModel):
    """
    Structured output of the label classifier.
    """
    labels: List[str] = Field(
        default_factory=list,
        description="""Labels that apply to the customer's first message.

ONLY use labels from the candidate list given in the instructions.
- Return every label that clearly applies (usually one).
- Return an empty list if none applies.
- Never invent new labels."""
    )


class WebhookResponse(BaseModel):
    """Body returned to Chatwoot for every webhook call."""
    status: Literal["success", "failed"]
    message: str
