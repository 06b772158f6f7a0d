"""
Advisor: optional LLM tie-breaker for candidate ordering.

The advisor sees what has been discovered so far and names the single
location or entity it finds most promising. Its answer is advisory only;
the search driver uses it to move one already-known candidate to the front
of a same-level batch. Any failure (empty reply, API error, timeout)
degrades to the fallback token, which matches no candidate.
"""

import logging
import re

import anthropic
from pydantic import BaseModel, Field

from .knowledge import normalize_name

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK = "NONE"

ADVISOR_SYSTEM_PROMPT = """You are an intelligent search agent helping to find a specific target location
by exploring a network of locations and the entities seen in them.

RULES:
1. Pick exactly one name from the candidate list you are given.
2. Prefer candidates that the case notes or the discovered connections point to.
3. If nothing stands out, pick the first candidate.
4. Reply with the bare name only - one word, no punctuation, no explanation."""


class AdvisorContext(BaseModel):
    """Everything the advisor gets to see for one decision."""

    question: str = Field(..., description="What the driver wants decided")
    candidates: list[str] = Field(..., description="Names the answer must come from")
    knowledge_summary: str = Field("", description="Rendered knowledge base")
    notes: str | None = Field(None, description="Case notes loaded before the search")


def build_prompt(context: AdvisorContext) -> str:
    """Render the user prompt for one advisor decision."""
    parts = []
    if context.notes:
        parts.append(f"Case notes:\n{context.notes}")
    parts.append(f"Discovered so far:\n{context.knowledge_summary}")
    parts.append(f"Candidates: {', '.join(context.candidates)}")
    parts.append(context.question)
    return "\n\n".join(parts)


def parse_suggestion(text: str | None, fallback: str = DEFAULT_FALLBACK) -> str:
    """Reduce a free-text reply to a single normalized token."""
    if not text:
        return fallback
    for token in text.split():
        cleaned = re.sub(r"^[^\w]+|[^\w]+$", "", token)
        if cleaned:
            return normalize_name(cleaned)
    return fallback


class Advisor:
    """Base advisor. ``suggest`` never raises; subclasses implement ``_ask``."""

    def __init__(self, fallback: str = DEFAULT_FALLBACK):
        self.fallback = normalize_name(fallback)

    async def _ask(self, context: AdvisorContext) -> str | None:
        raise NotImplementedError

    async def suggest(self, context: AdvisorContext) -> str:
        try:
            reply = await self._ask(context)
        except Exception as e:
            logger.warning("Advisor unavailable, using fallback: %s", e)
            return self.fallback
        suggestion = parse_suggestion(reply, self.fallback)
        logger.info("Advisor suggests %s among %s", suggestion, context.candidates)
        return suggestion


class NullAdvisor(Advisor):
    """No preference: always answers with the fallback token."""

    async def _ask(self, context: AdvisorContext) -> str | None:
        return None


class ClaudeAdvisor(Advisor):
    """Advisor backed by the Anthropic Messages API."""

    def __init__(
        self,
        model: str,
        client: anthropic.AsyncAnthropic | None = None,
        max_tokens: int = 20,
        temperature: float = 0.1,
        fallback: str = DEFAULT_FALLBACK,
    ):
        super().__init__(fallback)
        self.model = model
        self._client = client
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic()
        return self._client

    async def _ask(self, context: AdvisorContext) -> str | None:
        response = await self._get_client().messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=ADVISOR_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_prompt(context)}],
        )
        return response.content[0].text if response.content else None
