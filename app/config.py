"""
Process-wide configuration.
Built once at startup by load_settings() and passed into every service.
"""

import math
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_LABELS = ("demand", "support", "spam", "offer", "billing")

_REQUIRED = (
    "OPENAI_API_KEY",
    "OPENAI_ORG",
    "CHATWOOT_API_ACCESS_TOKEN",
    "CHATWOOT_API_URL",
    "AUTH_TOKEN",
)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_org: str
    chatwoot_api_access_token: str
    chatwoot_api_url: str
    auth_token: str
    openai_assistant_id: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 3.0
    assistant_run_deadline: float = 30.0
    chatwoot_timeout: float = 10.0
    labels: Tuple[str, ...] = DEFAULT_LABELS
    strict_status_codes: bool = False
    last_request_path: Optional[str] = None
    log_level: str = "INFO"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a finite number greater than zero")
    return value


def parse_labels(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated label list, keeping first occurrences in order."""
    labels = []
    for item in raw.split(","):
        label = item.strip().lower()
        if label and label not in labels:
            labels.append(label)
    return tuple(labels)


def load_settings() -> Settings:
    """Read the environment (and .env, if present) into an immutable Settings."""
    load_dotenv()

    values = {}
    for name in _REQUIRED:
        value = os.getenv(name, "").strip()
        if not value:
            raise ValueError(f"{name} not found in environment variables")
        values[name] = value

    # Blank assistant id means "no fixed assistant"
    assistant_id = os.getenv("OPENAI_ASSISTANT_ID", "").strip() or None

    labels = parse_labels(os.getenv("LABELS", "")) or DEFAULT_LABELS

    return Settings(
        openai_api_key=values["OPENAI_API_KEY"],
        openai_org=values["OPENAI_ORG"],
        chatwoot_api_access_token=values["CHATWOOT_API_ACCESS_TOKEN"],
        chatwoot_api_url=values["CHATWOOT_API_URL"],
        auth_token=values["AUTH_TOKEN"],
        openai_assistant_id=assistant_id,
        openai_model=os.getenv("OPENAI_MODEL", "").strip() or "gpt-4o-mini",
        openai_timeout=_get_float("OPENAI_TIMEOUT", 3.0),
        assistant_run_deadline=_get_float("OPENAI_RUN_DEADLINE", 30.0),
        chatwoot_timeout=_get_float("CHATWOOT_TIMEOUT", 10.0),
        labels=labels,
        strict_status_codes=os.getenv("STRICT_STATUS_CODES", "").strip().lower() in _TRUTHY,
        last_request_path=os.getenv("LAST_REQUEST_PATH", "").strip() or None,
        log_level=os.getenv("LOG_LEVEL", "").strip().upper() or "INFO",
    )
