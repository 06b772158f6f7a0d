"""Candidate validation against the checking endpoint."""

import logging
from typing import Iterable

import httpx

from .knowledge import KnowledgeBase, normalize_name

logger = logging.getLogger(__name__)


class Validator:
    """Tests candidates once each; every failure path returns False."""

    def __init__(self, knowledge: KnowledgeBase):
        self.knowledge = knowledge
        self.calls_made = 0

    async def _check(self, candidate: str) -> bool:
        raise NotImplementedError

    async def test(self, candidate: str) -> bool:
        candidate = normalize_name(candidate)
        if self.knowledge.is_tested(candidate):
            logger.info("Target %s already tested, skipping", candidate)
            return False

        # Marked before the call so a slow or failing check is never repeated
        self.knowledge.mark_tested(candidate)
        self.calls_made += 1
        logger.info("Testing target: %s", candidate)

        try:
            found = await self._check(candidate)
        except Exception as e:
            logger.error("Error testing target %s: %s", candidate, e)
            return False

        if found:
            logger.info("TARGET FOUND: %s", candidate)
        return found


class HttpValidator(Validator):
    """POST {base_url}/validate with {"task", "apikey", "answer"}.

    Success requires ``code == 0`` and the success marker in ``message``.
    """

    def __init__(
        self,
        knowledge: KnowledgeBase,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        task: str = "search",
        endpoint: str = "validate",
        success_marker: str = "SUCCESS:",
    ):
        super().__init__(knowledge)
        self.client = client
        self.url = f"{base_url.rstrip('/')}/{endpoint}"
        self.api_key = api_key
        self.task = task
        self.success_marker = success_marker

    async def _check(self, candidate: str) -> bool:
        payload = {"task": self.task, "apikey": self.api_key, "answer": candidate}
        response = await self.client.post(self.url, json=payload)
        response.raise_for_status()
        data = response.json()
        logger.debug("Validation response for %s: %s", candidate, data)

        if not isinstance(data, dict):
            return False
        message = data.get("message")
        return data.get("code") == 0 and isinstance(message, str) and self.success_marker in message


class InMemoryValidator(Validator):
    """Validator that accepts a fixed set of targets."""

    def __init__(self, knowledge: KnowledgeBase, targets: Iterable[str]):
        super().__init__(knowledge)
        self.targets = {normalize_name(t) for t in targets}
        self.calls: list[str] = []

    async def _check(self, candidate: str) -> bool:
        self.calls.append(candidate)
        return normalize_name(candidate) in self.targets
