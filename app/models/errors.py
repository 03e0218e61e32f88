"""
Failure taxonomy for the labeling pipeline.

Every failure kind carries the message returned to the caller and the status
code used when STRICT_STATUS_CODES is enabled. By default every failure is
answered with HTTP 500, as the webhook always has.
"""

from enum import Enum


class PipelineError(Enum):
    # (message, strict status)
    METHOD = ("Invalid request method", 405)
    AUTH_MALFORMED = ("Authorization failed", 401)
    AUTH_INVALID = ("Invalid auth key", 401)
    SCHEMA = ("Could not validate a request", 400)
    EVENT_IGNORED = ("Invalid event", 422)
    EMPTY_CONVERSATION = ("Conversation messages are empty", 422)
    EMPTY_CONTENT = ("Message content is empty", 422)
    CLASSIFICATION = ("Failed to get label from message", 502)
    ANNOTATION = ("Failed to add label", 502)

    def __init__(self, message: str, strict_status: int):
        self.message = message
        self.strict_status = strict_status

    def status_code(self, strict: bool = False) -> int:
        return self.strict_status if strict else 500


class ClassificationError(Exception):
    """The assistant could not produce a label set for a message."""


class AnnotationError(Exception):
    """Chatwoot rejected or never answered the add-labels call."""
