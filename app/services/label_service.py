"""
LabelClassifier: asks OpenAI which labels apply to a conversation's first message.

Two backends share the same closed vocabulary:
- Assistants API (threads + runs) when OPENAI_ASSISTANT_ID is configured.
- ChatOpenAI with structured output otherwise.
"""

import json
import logging
import re
import time
from typing import Iterable, List, Optional, Set

from langchain_core.messages import HumanMessage, SystemMessage

from app.config import Settings
from app.models.errors import ClassificationError
from app.models.response_models import LabelResponse
from app.services.llm_client import get_chat_model, get_openai_client

logger = logging.getLogger(__name__)

_TERMINAL_RUN_STATUSES = ("completed", "failed", "cancelled", "expired", "incomplete", "requires_action")

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_instructions(labels: Iterable[str]) -> str:
    candidates = ", ".join(f'"{label}"' for label in labels)
    return f"""Eres un clasificador de conversaciones de soporte al cliente.
Lee el primer mensaje del cliente y elige las etiquetas que le aplican.

ETIQUETAS PERMITIDAS: [{candidates}]

REGLAS:
- Usa SOLO etiquetas de la lista.
- Normalmente aplica una sola etiqueta; usa varias solo si es evidente.
- Si ninguna aplica, devuelve una lista vacía.
- Responde ÚNICAMENTE con JSON: {{"labels": ["..."]}}"""


def parse_label_reply(text: str) -> List[str]:
    """
    Parse the assistant's JSON reply: {"labels": [...]} or a bare list.
    Raises ClassificationError on anything else.
    """
    cleaned = text.strip()
    fenced = _CODE_FENCE_RE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1)

    try:
        parsed = json.loads(cleaned)
    except ValueError:
        raise ClassificationError(f"Assistant reply is not JSON: {text[:100]!r}")

    if isinstance(parsed, dict):
        parsed = parsed.get("labels")
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ClassificationError(f"Assistant reply has no label list: {text[:100]!r}")

    return parsed


class LabelClassifier:
    """Classifies a message into zero or more labels from settings.labels."""

    poll_interval = 0.5

    def __init__(self, settings: Settings, client=None, chat_model=None):
        self.settings = settings
        self.labels = tuple(settings.labels)
        self.assistant_id = settings.openai_assistant_id
        self._client = client
        self._chat_model = chat_model

    @property
    def client(self):
        if self._client is None:
            self._client = get_openai_client(self.settings)
        return self._client

    @property
    def chat_model(self):
        if self._chat_model is None:
            self._chat_model = get_chat_model(self.settings, structured_output=LabelResponse)
        return self._chat_model

    def classify(self, message: str) -> Set[str]:
        """
        Returns the set of allowed labels for the message (possibly empty).
        Any failure is logged and raised as ClassificationError.
        """
        try:
            if self.assistant_id:
                raw_labels = self._classify_with_assistant(message)
            else:
                raw_labels = self._classify_with_chat_model(message)
        except ClassificationError as e:
            logger.error("Error clasificando mensaje: %s", e)
            raise
        except Exception as e:
            logger.error("Error llamando a OpenAI: %s: %s", type(e).__name__, e)
            raise ClassificationError(str(e)) from e

        labels = self.filter_labels(raw_labels)
        logger.info("Etiquetas obtenidas: %s", sorted(labels))
        return labels

    def filter_labels(self, raw_labels: Iterable[str]) -> Set[str]:
        """Normalizes labels and drops anything outside the vocabulary."""
        labels = set()
        for raw in raw_labels:
            label = raw.strip().lower()
            if label in self.labels:
                labels.add(label)
            else:
                logger.warning("Etiqueta desconocida descartada: '%s'", raw)
        return labels

    # =================================================================
    #  BACKENDS
    # =================================================================

    def _classify_with_chat_model(self, message: str) -> List[str]:
        response = self.chat_model.invoke([
            SystemMessage(content=build_instructions(self.labels)),
            HumanMessage(content=message),
        ])
        if not isinstance(response, LabelResponse):
            raise ClassificationError(f"Unexpected structured output: {type(response).__name__}")
        return response.labels

    def _classify_with_assistant(self, message: str) -> List[str]:
        threads = self.client.beta.threads

        thread = threads.create(messages=[{"role": "user", "content": message}])
        run = threads.runs.create(
            thread_id=thread.id,
            assistant_id=self.assistant_id,
            additional_instructions=build_instructions(self.labels),
        )
        logger.info("Run %s creado en thread %s (assistant %s)", run.id, thread.id, self.assistant_id)

        run = self._wait_for_run(thread.id, run)
        if run.status != "completed":
            raise ClassificationError(f"Assistant run {run.id} ended with status '{run.status}'")

        reply = self._latest_reply(thread.id, run.id)
        if reply is None:
            raise ClassificationError(f"Assistant run {run.id} produced no reply")
        return parse_label_reply(reply)

    def _wait_for_run(self, thread_id: str, run):
        deadline = time.monotonic() + self.settings.assistant_run_deadline
        while run.status not in _TERMINAL_RUN_STATUSES:
            if time.monotonic() >= deadline:
                raise ClassificationError(
                    f"Assistant run {run.id} still '{run.status}' after {self.settings.assistant_run_deadline}s"
                )
            time.sleep(self.poll_interval)
            run = self.client.beta.threads.runs.retrieve(run.id, thread_id=thread_id)
        return run

    def _latest_reply(self, thread_id: str, run_id: str) -> Optional[str]:
        page = self.client.beta.threads.messages.list(thread_id=thread_id, run_id=run_id, order="desc", limit=5)
        for thread_message in page.data:
            if thread_message.role != "assistant":
                continue
            parts = [block.text.value for block in thread_message.content if block.type == "text"]
            if parts:
                return "\n".join(parts)
        return None
