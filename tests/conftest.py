"""Shared test fixtures for moderation engine testing.

This module provides pytest fixtures for:
- Test configuration
- Mock completion service (scripted model responses)
- Mock Anthropic API responses
- Test data factories (training cases, classification payloads)
- FastAPI test clients
"""

import json
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest


# ---------------------------------------------------------------------------
# Environment Setup - Must happen before importing app modules
# ---------------------------------------------------------------------------

os.environ["ENVIRONMENT"] = "test"
os.environ["ANTHROPIC_API_KEY"] = "test-api-key-sk-ant-xxxxx"
os.environ["TRAINING_STORE"] = "memory"
os.environ["TRAINING_DATABASE_URL"] = "sqlite://"


# ---------------------------------------------------------------------------
# Test Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def test_config():
    """Test configuration object with test values."""
    from soapbox_moderation.config import AppConfig, AnthropicConfig, DatabaseConfig

    return AppConfig(
        environment="test",
        database=DatabaseConfig(url="sqlite://"),
        anthropic=AnthropicConfig(api_key="test-api-key", timeout_seconds=5.0),
        training_store="memory",
        max_concurrent_classifications=4,
    )


# ---------------------------------------------------------------------------
# Model Response Payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def classification_payload_factory():
    """Factory for JSON payloads shaped like a model's classification."""

    def _create_payload(
        priority: str = "high",
        category: str = "harassment_bullying",
        confidence: float = 0.9,
        action: str = "hide",
        flagged: bool = True,
        **kwargs
    ) -> str:
        payload = {
            "flagged": flagged,
            "priority": priority,
            "category": category,
            "violations": kwargs.get("violations", ["personal attack"]),
            "reason": kwargs.get("reason", "Insults directed at a group member"),
            "confidence": confidence,
            "actionRequired": action,
            "learningNote": kwargs.get("learning_note", "Group insults are high priority"),
        }
        return json.dumps(payload)

    return _create_payload


# Scripted verdicts keyed by a phrase of the content under review
SCRIPTED_VERDICTS = {
    "hookup after church": ("critical", "sexual_content", "remove", 0.97),
    "Jesus was a fraud": ("critical", "inappropriate_content", "remove", 0.95),
    "avoid John": ("critical", "harassment_bullying", "remove", 0.93),
    "Tithing is optional": ("critical", "false_information", "remove", 0.88),
    "phone number and home address": ("critical", "privacy_violation", "remove", 0.94),
    "thirst traps": ("high", "sexual_content", "hide", 0.9),
    "supports slavery": ("high", "inappropriate_content", "hide", 0.86),
    "more powerful than medicine": ("high", "false_information", "hide", 0.91),
    "sex toys": ("medium", "sexual_content", "review", 0.8),
    "aren't real Christians": ("medium", "inappropriate_content", "review", 0.82),
    "rapture is happening": ("medium", "false_information", "review", 0.84),
    "attraction a sin": ("low", "sexual_content", "coach", 0.87),
    "sermons are boring": ("low", "inappropriate_content", "coach", 0.9),
    "revival event": ("low", "spam", "coach", 0.78),
}


class ScriptedCompletionClient:
    """Completion client that answers from SCRIPTED_VERDICTS.

    Records every request so tests can inspect the prompts sent.
    """

    def __init__(self, fenced: bool = False):
        self.fenced = fenced
        self.requests = []

    def complete(self, request) -> str:
        self.requests.append(request)
        for phrase, (priority, category, action, confidence) in SCRIPTED_VERDICTS.items():
            if phrase in request.user_message:
                text = json.dumps({
                    "flagged": priority != "low",
                    "priority": priority,
                    "category": category,
                    "violations": [category],
                    "reason": f"Matches {priority} {category} examples",
                    "confidence": confidence,
                    "actionRequired": action,
                    "learningNote": "",
                })
                break
        else:
            text = json.dumps({
                "flagged": False,
                "priority": "low",
                "category": "other",
                "violations": [],
                "reason": "No violation found",
                "confidence": 0.6,
                "actionRequired": "none",
                "learningNote": "",
            })
        if self.fenced:
            return f"```json\n{text}\n```"
        return text


@pytest.fixture
def scripted_client():
    """Scripted completion client returning plain JSON."""
    return ScriptedCompletionClient()


@pytest.fixture
def fenced_client():
    """Scripted completion client wrapping JSON in markdown fences."""
    return ScriptedCompletionClient(fenced=True)


@pytest.fixture
def mock_completion_client(classification_payload_factory):
    """Mock completion client returning a high priority verdict."""
    mock_client = MagicMock()
    mock_client.complete.return_value = classification_payload_factory()
    return mock_client


# ---------------------------------------------------------------------------
# Mock Anthropic API Responses
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_anthropic_response(classification_payload_factory):
    """Mock Anthropic messages response carrying a classification."""
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=classification_payload_factory())]
    mock_response.usage = MagicMock(input_tokens=850, output_tokens=120)
    return mock_response


@pytest.fixture
def mock_anthropic_client(mock_anthropic_response):
    """Mock anthropic.Anthropic instance."""
    mock_client = MagicMock()
    mock_client.messages.create.return_value = mock_anthropic_response
    return mock_client


# ---------------------------------------------------------------------------
# Test Data Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def training_case_factory():
    """Factory for creating TrainingCase instances with derived outcomes."""
    from soapbox_moderation.models.training_case import (
        AIClassification,
        HumanDecision,
        ModeratorAction,
        TrainingCase,
    )
    from soapbox_moderation.taxonomy import Category, Priority

    base_time = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _create_case(
        ai_priority: str = "medium",
        human_priority: str = "medium",
        content: str = "Test content for moderation",
        ai_category: str = "other",
        human_category: str = None,
        moderator_notes: str = None,
        **kwargs
    ) -> TrainingCase:
        counter["n"] += 1
        return TrainingCase.create(
            content=content,
            content_type=kwargs.get("content_type", "discussion"),
            ai_classification=AIClassification(
                priority=Priority(ai_priority),
                category=Category(ai_category),
                confidence=kwargs.get("confidence", 0.8),
            ),
            human_decision=HumanDecision(
                final_priority=Priority(human_priority),
                final_category=Category(human_category or ai_category),
                action=ModeratorAction(kwargs.get("action", "approved")),
                moderator_notes=moderator_notes,
                moderator_id=kwargs.get("moderator_id"),
            ),
            timestamp=kwargs.get("timestamp", base_time + timedelta(minutes=counter["n"])),
        )

    return _create_case


@pytest.fixture
def store():
    """Empty in-memory training store."""
    from soapbox_moderation.learning.training_store import TrainingStore
    return TrainingStore()


@pytest.fixture
def service_factory(test_config):
    """Factory for service instances sharing one store."""
    from soapbox_moderation.service import build_service

    def _create_service(completion_client=None, store=None):
        return build_service(
            config=test_config,
            store=store,
            completion_client=completion_client or ScriptedCompletionClient(),
        )

    return _create_service


# ---------------------------------------------------------------------------
# FastAPI Test Clients
# ---------------------------------------------------------------------------

@pytest.fixture
def api_service(service_factory):
    """Service instance backing the API test client."""
    return service_factory()


@pytest.fixture
def test_client(api_service):
    """Synchronous FastAPI test client over a scripted service."""
    from fastapi.testclient import TestClient
    from soapbox_moderation.main import create_app

    app = create_app(service=api_service)
    with TestClient(app) as client:
        yield client
