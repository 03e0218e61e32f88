"""
Shared fixtures: settings, fake OpenAI Assistants client, fake Chatwoot session.
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from app.config import Settings
from app.dependencies import get_pipeline
from app.services.chatwoot_service import ChatwootService
from app.services.label_service import LabelClassifier
from app.services.orchestrator_service import LabelingPipeline

AUTH_TOKEN = "s3cret-token"


def make_settings(**overrides) -> Settings:
    values = dict(
        openai_api_key="sk-test",
        openai_org="org-test",
        chatwoot_api_access_token="cw-token",
        chatwoot_api_url="https://chatwoot.example.com",
        auth_token=AUTH_TOKEN,
        openai_assistant_id="asst_123",
        assistant_run_deadline=1.0,
    )
    values.update(overrides)
    return Settings(**values)


def make_event(content="I want a refund", event="conversation_created", conversation_id=42, account_id=7):
    return {
        "event": event,
        "id": conversation_id,
        "messages": [{"content": content, "account_id": account_id, "message_type": 0}],
    }


def make_assistant_client(reply='{"labels": ["billing"]}', run_statuses=("completed",)):
    """MagicMock shaped like openai.OpenAI().beta.threads for one run."""
    client = MagicMock()
    threads = client.beta.threads

    threads.create.return_value = SimpleNamespace(id="thread_1")

    runs = [SimpleNamespace(id="run_1", status=status) for status in run_statuses]
    threads.runs.create.return_value = runs[0]
    threads.runs.retrieve.side_effect = runs[1:] or [runs[0]]

    text_block = SimpleNamespace(type="text", text=SimpleNamespace(value=reply))
    message = SimpleNamespace(role="assistant", content=[text_block])
    threads.messages.list.return_value = SimpleNamespace(data=[message])
    return client


def make_response(status_code=200, body=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body or {"payload": []}).encode("utf-8")
    return response


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def assistant_client():
    return make_assistant_client()


@pytest.fixture
def chatwoot_session():
    session = MagicMock(spec=requests.Session)
    session.post.return_value = make_response(200, {"payload": ["billing"]})
    return session


@pytest.fixture
def pipeline(settings, assistant_client, chatwoot_session):
    classifier = LabelClassifier(settings, client=assistant_client)
    classifier.poll_interval = 0
    return LabelingPipeline(
        settings=settings,
        classifier=classifier,
        chatwoot=ChatwootService(settings, session=chatwoot_session),
    )


@pytest.fixture
def client(pipeline):
    from main import app

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
