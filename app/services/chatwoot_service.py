import logging
from typing import Iterable, Union

import requests

from app.config import Settings
from app.models.errors import AnnotationError

logger = logging.getLogger(__name__)


class ChatwootService:
    """
    Cliente mínimo de la API REST de Chatwoot (Application API v1).
    Se autentica con el header api_access_token de un agente o bot.
    """

    def __init__(self, settings: Settings, session: requests.Session = None):
        base_url = settings.chatwoot_api_url.rstrip("/")
        if not base_url.endswith("/api/v1"):
            base_url = f"{base_url}/api/v1"
        self.base_url = base_url
        self.access_token = settings.chatwoot_api_access_token
        self.timeout = settings.chatwoot_timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            'api_access_token': self.access_token,
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        }

    def add_conversation_labels(self, account_id: Union[int, str], conversation_id: Union[int, str],
                                labels: Iterable[str]) -> bool:
        """
        Adds labels to a conversation.

        Chatwoot replaces the conversation's label list with the one sent, which
        is fine for a freshly created conversation.

        Raises:
            AnnotationError: transport failure or non-2xx response. No retry.
        """
        url = f"{self.base_url}/accounts/{account_id}/conversations/{conversation_id}/labels"
        payload = {"labels": sorted(labels)}

        try:
            logger.info(f"Agregando etiquetas {payload['labels']} a conversación {conversation_id} (cuenta {account_id})...")
            response = self.session.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error conectando con Chatwoot: {e}")
            raise AnnotationError(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Chatwoot respondió {response.status_code} al agregar etiquetas")
            logger.error(f"Detalle: {response.text[:500]}")
            raise AnnotationError(f"Chatwoot returned HTTP {response.status_code}")

        logger.info(f"Etiquetas agregadas: {response.status_code}")
        return True
