"""
Test Configuration and Fixtures
================================
Shared fixtures for all tests
"""

import sys
import random
from pathlib import Path
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from intentbot.main import app
from intentbot.config import settings
from intentbot.api.deps import get_knowledge_base
from intentbot.models.knowledge import KnowledgeBase
from intentbot.services.ai_service import AIResult
from intentbot.services.response_generator import response_generator


SAMPLE_KNOWLEDGE = {
    "intents": [
        {
            "intent": "greeting",
            "patterns": ["hello", "hi", "hey"],
            "responses": ["Hello! How can I help?", "Hi there!"]
        },
        {
            "intent": "bot_identity",
            "patterns": ["who are you", "your name"],
            "responses": ["I'm Bingo."]
        },
        {
            "intent": "farewell",
            "patterns": ["bye", "goodbye"],
            "responses": ["Goodbye!"]
        },
        {
            "intent": "help",
            "patterns": ["help"],
            "responses": []
        },
        {
            "intent": "opening_hours",
            "patterns": ["open", "hours", "monday", "weekend"],
            "responses": ["We're open 9 to 6."]
        },
        {
            "intent": "draft",
            "patterns": [],
            "responses": ["Never detected."]
        },
        {
            "intent": "no_replies",
            "patterns": ["xyzzy"],
            "responses": []
        }
    ],
    "fallback": {
        "responses": ["Sorry, I didn't get that."]
    }
}


class FakeAIService:
    """Stand-in for AIService recording its calls"""

    def __init__(self, result: Optional[AIResult] = None, exc: Optional[Exception] = None):
        self.result = result or AIResult(
            success=True,
            reply="Generated answer.",
            source="ai",
            metadata={"model": "fake-model", "tokensUsed": 12, "finishReason": "stop"},
        )
        self.exc = exc
        self.calls: List[tuple] = []

    async def call(self, message, context=None):
        self.calls.append((message, context))
        if self.exc is not None:
            raise self.exc
        return self.result


class FirstChoice:
    """Deterministic random source: always picks the first item"""

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def knowledge_base() -> KnowledgeBase:
    """Small knowledge base covering safe, escalation and defective intents"""
    return KnowledgeBase.model_validate(SAMPLE_KNOWLEDGE)


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture(autouse=True)
def no_api_secret(monkeypatch):
    """Disable API key checks unless a test sets a secret"""
    monkeypatch.setattr(settings, "api_secret_key", "")


@pytest_asyncio.fixture
async def client(knowledge_base: KnowledgeBase, fake_ai: FakeAIService, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with the sample knowledge base and a fake AI"""
    app.dependency_overrides[get_knowledge_base] = lambda: knowledge_base
    monkeypatch.setattr(response_generator, "ai_service", fake_ai)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def api_headers() -> dict:
    """Headers with API key for authenticated requests"""
    return {
        "X-API-Key": "test-secret",
        "Content-Type": "application/json"
    }
