"""
Request gate: method and bearer-token checks run before the body is touched.
"""

import logging
import secrets
from typing import List, Mapping, Optional

from app.config import Settings
from app.models.errors import PipelineError

logger = logging.getLogger(__name__)


def is_ajax(headers: Mapping[str, str]) -> bool:
    """True when the request carries the X-Requested-With: XMLHttpRequest flag."""
    normalized = {key.lower(): value for key, value in headers.items()}
    return (normalized.get("x-requested-with") or "").lower() == "xmlhttprequest"


def check_request(method: str, headers: Mapping[str, str], query_tokens: List[str],
                  settings: Settings) -> Optional[PipelineError]:
    """
    Returns None when the request may proceed, otherwise the failure kind.

    query_tokens holds every value of the `token` query parameter; a repeated
    parameter is treated as malformed rather than picking one of the values.
    """
    if method.upper() != "POST" or is_ajax(headers):
        logger.warning("Rechazado: método %s (ajax=%s)", method, is_ajax(headers))
        return PipelineError.METHOD

    if len(query_tokens) > 1:
        logger.warning("Rechazado: parámetro token repetido (%d valores)", len(query_tokens))
        return PipelineError.AUTH_MALFORMED

    token = query_tokens[0] if query_tokens else ""
    if not secrets.compare_digest(token.encode("utf-8"), settings.auth_token.encode("utf-8")):
        logger.warning("Rechazado: token inválido")
        return PipelineError.AUTH_INVALID

    return None
