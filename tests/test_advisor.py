"""Tests for the advisor hook and its Claude implementation."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from conftest import BrokenAdvisor, ScriptedAdvisor
from frontier_search.advisor import (
    ADVISOR_SYSTEM_PROMPT,
    AdvisorContext,
    ClaudeAdvisor,
    NullAdvisor,
    build_prompt,
    parse_suggestion,
)


def _context(**overrides):
    data = {
        "question": "Which one is most likely the target?",
        "candidates": ["WARSZAWA", "WROCLAW", "OLSZTYN"],
        "knowledge_summary": "- ECHO: WARSZAWA, WROCLAW, OLSZTYN",
    }
    data.update(overrides)
    return AdvisorContext(**data)


def _mock_anthropic(text: str | None = None, error: Exception | None = None):
    client = MagicMock()
    if error is not None:
        client.messages.create = AsyncMock(side_effect=error)
    else:
        content = [SimpleNamespace(text=text)] if text is not None else []
        client.messages.create = AsyncMock(return_value=SimpleNamespace(content=content))
    return client


class TestParseSuggestion:

    def test_single_token(self):
        assert parse_suggestion("Olsztyn") == "OLSZTYN"

    def test_takes_first_word_and_strips_punctuation(self):
        assert parse_suggestion('"Wroclaw". It is close to ECHO.') == "WROCLAW"

    def test_empty_reply_uses_fallback(self):
        assert parse_suggestion("") == "NONE"
        assert parse_suggestion(None, fallback="SKIP") == "SKIP"
        assert parse_suggestion(" ... ") == "NONE"


class TestBuildPrompt:

    def test_contains_summary_candidates_and_question(self):
        prompt = build_prompt(_context())
        assert "- ECHO: WARSZAWA, WROCLAW, OLSZTYN" in prompt
        assert "Candidates: WARSZAWA, WROCLAW, OLSZTYN" in prompt
        assert prompt.endswith("Which one is most likely the target?")
        assert "Case notes" not in prompt

    def test_includes_notes_unchanged(self):
        notes = "The target lives near the lakes.\nAsk ECHO."
        prompt = build_prompt(_context(notes=notes))
        assert prompt.startswith("Case notes:\nThe target lives near the lakes.\nAsk ECHO.")

    def test_notes_whitespace_kept_verbatim(self):
        notes = "\n  near the lakes \n"
        prompt = build_prompt(_context(notes=notes))
        assert prompt.startswith("Case notes:\n\n  near the lakes \n\n\nDiscovered so far:")


class TestAdvisorBase:

    @pytest.mark.asyncio
    async def test_null_advisor_returns_fallback(self):
        assert await NullAdvisor().suggest(_context()) == "NONE"

    @pytest.mark.asyncio
    async def test_fallback_is_normalized(self):
        assert await NullAdvisor(fallback="skip").suggest(_context()) == "SKIP"

    @pytest.mark.asyncio
    async def test_transport_failure_returns_fallback(self):
        advisor = BrokenAdvisor()
        assert await advisor.suggest(_context()) == "NONE"
        assert advisor.attempts == 1

    @pytest.mark.asyncio
    async def test_scripted_answer_is_normalized(self):
        advisor = ScriptedAdvisor("olsztyn")
        assert await advisor.suggest(_context()) == "OLSZTYN"
        assert advisor.contexts[0].candidates == ["WARSZAWA", "WROCLAW", "OLSZTYN"]


class TestClaudeAdvisor:

    @pytest.mark.asyncio
    async def test_calls_messages_api(self):
        client = _mock_anthropic("Olsztyn")
        advisor = ClaudeAdvisor(model="claude-test", client=client, max_tokens=10)

        assert await advisor.suggest(_context(notes="lakes")) == "OLSZTYN"

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 10
        assert kwargs["temperature"] == 0.1
        assert kwargs["system"] == ADVISOR_SYSTEM_PROMPT
        assert kwargs["messages"][0]["role"] == "user"
        assert "lakes" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_empty_content_returns_fallback(self):
        advisor = ClaudeAdvisor(model="claude-test", client=_mock_anthropic(None))
        assert await advisor.suggest(_context()) == "NONE"

    @pytest.mark.asyncio
    async def test_api_error_returns_fallback(self):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
        advisor = ClaudeAdvisor(model="claude-test", client=_mock_anthropic(error=error))
        assert await advisor.suggest(_context()) == "NONE"
