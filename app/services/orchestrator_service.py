"""
LabelingPipeline: authenticate -> validate -> classify -> annotate.
Decoupled from HTTP; every stage short-circuits to a failed outcome.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Set

from app.config import Settings
from app.models.errors import AnnotationError, ClassificationError, PipelineError
from app.services.chatwoot_service import ChatwootService
from app.services.label_service import LabelClassifier
from app.services.payload_service import extract_event
from app.services.request_gate import check_request

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Label has been added"


@dataclass
class InboundRequest:
    """The parts of an HTTP request the pipeline looks at."""
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query_tokens: List[str] = field(default_factory=list)
    body: bytes = b""


@dataclass
class PipelineOutcome:
    ok: bool
    message: str
    error: Optional[PipelineError] = None
    labels: Set[str] = field(default_factory=set)

    @classmethod
    def success(cls, labels: Set[str]) -> "PipelineOutcome":
        return cls(ok=True, message=SUCCESS_MESSAGE, labels=labels)

    @classmethod
    def failure(cls, error: PipelineError) -> "PipelineOutcome":
        return cls(ok=False, message=error.message, error=error)

    def status_code(self, strict: bool = False) -> int:
        if self.ok:
            return 200
        return self.error.status_code(strict)

    def to_body(self) -> dict:
        return {"status": "success" if self.ok else "failed", "message": self.message}


class LabelingPipeline:
    """Runs one webhook call through every stage, once. No retries, no dedup."""

    def __init__(self, settings: Settings, classifier: LabelClassifier, chatwoot: ChatwootService):
        self.settings = settings
        self.classifier = classifier
        self.chatwoot = chatwoot

    # =================================================================
    #  PUBLIC ENTRY POINT
    # =================================================================

    def process(self, request: InboundRequest) -> PipelineOutcome:
        # --- STEP 1: GATE ---
        error = check_request(request.method, request.headers, request.query_tokens, self.settings)
        if error:
            return self._fail(error)

        self._dump_request(request.body)

        # --- STEP 2: VALIDATION ---
        data = extract_event(request.body)
        if not data.is_valid:
            return self._fail(data.error)

        logger.info("conversation_created: conversación=%s cuenta=%s", data.conversation_id, data.account_id)
        logger.info("   %s...", data.content[:80])

        # --- STEP 3: CLASSIFICATION ---
        try:
            labels = self.classifier.classify(data.content)
        except ClassificationError:
            return self._fail(PipelineError.CLASSIFICATION)

        # --- STEP 4: ANNOTATION ---
        try:
            self.chatwoot.add_conversation_labels(data.account_id, data.conversation_id, labels)
        except AnnotationError:
            return self._fail(PipelineError.ANNOTATION)

        logger.info("Conversación %s etiquetada: %s", data.conversation_id, sorted(labels))
        return PipelineOutcome.success(labels)

    # =================================================================
    #  HELPERS
    # =================================================================

    def _fail(self, error: PipelineError) -> PipelineOutcome:
        logger.info("Webhook rechazado: %s (%s)", error.name, error.message)
        return PipelineOutcome.failure(error)

    def _dump_request(self, body: bytes):
        """Keeps the last authenticated body around for debugging."""
        logger.debug("Body recibido: %s", body[:2000].decode("utf-8", errors="replace"))

        if not self.settings.last_request_path:
            return
        try:
            Path(self.settings.last_request_path).write_bytes(body)
        except OSError as e:
            logger.warning("No se pudo guardar last_request en %s: %s", self.settings.last_request_path, e)
