"""Shared fixtures for frontier-search tests.

This module provides pytest fixtures for:
- Settings overrides
- The literal relation table used by end-to-end search scenarios
- In-memory gateway/validator wiring around a fresh knowledge base
- Mocked httpx clients for the live HTTP implementations
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from frontier_search.advisor import Advisor


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings pointing at a fake API with the advisor disabled."""
    from frontier_search.config import Settings

    return Settings(
        api_base_url="https://api.test",
        api_key="test-key",
        request_timeout=5.0,
        seed_locations=["GDANSK", "POZNAN"],
        notes_url=None,
        notes_required=False,
        advisor_enabled=False,
        log_level="WARNING",
        log_format="text",
        log_module_levels={},
    )


# ============================================================================
# Relation Table Fixtures
# ============================================================================

SEEDS = ["GDANSK", "POZNAN"]

RELATIONS = {
    "GDANSK": ["MONIKA", "PAWEL", "ECHO"],
    "POZNAN": ["PAWEL", "MARCIN", "TOMASZ", "ECHO"],
    "ECHO": ["GDANSK", "POZNAN", "WARSZAWA", "WROCLAW", "OLSZTYN"],
    "GHOST": ["SZCZECIN", "WROCLAW", "OLSZTYN"],
}


@pytest.fixture
def seeds():
    return list(SEEDS)


@pytest.fixture
def relations():
    """Fixed location <-> entity relation table (single namespace)."""
    return {name: list(neighbors) for name, neighbors in RELATIONS.items()}


@pytest.fixture
def knowledge():
    from frontier_search.knowledge import KnowledgeBase

    return KnowledgeBase()


@pytest.fixture
def memory_gateway(knowledge, relations):
    from frontier_search.gateway import InMemoryQueryGateway

    return InMemoryQueryGateway(knowledge, relations)


@pytest.fixture
def make_validator(knowledge):
    """Factory for in-memory validators accepting the given targets."""
    from frontier_search.validator import InMemoryValidator

    def _make(*targets: str):
        return InMemoryValidator(knowledge, targets)

    return _make


# ============================================================================
# Advisor Stubs
# ============================================================================

class ScriptedAdvisor(Advisor):
    """Deterministic advisor: answers with a fixed name and records contexts."""

    def __init__(self, answer: str | None):
        super().__init__()
        self.answer = answer
        self.contexts = []

    async def _ask(self, context):
        self.contexts.append(context)
        return self.answer


class LastCandidateAdvisor(Advisor):
    """Always prefers the last candidate, the opposite of discovery order."""

    async def _ask(self, context):
        return context.candidates[-1]


class BrokenAdvisor(Advisor):
    """Advisor whose transport always fails."""

    def __init__(self):
        super().__init__()
        self.attempts = 0

    async def _ask(self, context):
        self.attempts += 1
        raise httpx.ConnectError("advisor unreachable")


# ============================================================================
# HTTP Mocks
# ============================================================================

def make_response(json_data=None, status_code: int = 200, text: str | None = None, url: str = "https://api.test/x"):
    """Build a real httpx.Response bound to a request, so raise_for_status works."""
    request = httpx.Request("POST", url)
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, json=json_data, request=request)


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient; set ``post``/``get`` return values per test."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.post = AsyncMock()
    client.get = AsyncMock()
    client.aclose = AsyncMock()
    return client
