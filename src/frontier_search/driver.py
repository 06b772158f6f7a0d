"""
Search driver: breadth-first discovery of the target location.

State machine: seeding -> draining -> (found | exhausted)

The frontier is a list consumed by index, so nodes are expanded strictly in
discovery order. The advisor can only reorder the candidates produced by a
single expansion (and the seeds, once); it never touches what is already
queued, so level order holds no matter what it answers.
"""

import logging
from typing import Iterable, Literal

from pydantic import BaseModel

from .advisor import Advisor, AdvisorContext
from .gateway import QueryGateway
from .knowledge import KnowledgeBase, Node, normalize_name
from .validator import Validator

logger = logging.getLogger(__name__)

NOT_FOUND = "No target found"

SearchState = Literal["idle", "seeding", "draining", "found", "exhausted"]

SEED_QUESTION = "Which starting location should be explored first? Answer with one name from the candidates."
CANDIDATE_QUESTION = (
    "Entity {entity} was seen in these locations. Which one is most likely the target? "
    "Answer with one name from the candidates."
)


class SearchResult(BaseModel):
    """Terminal result of one search run."""

    status: Literal["found", "exhausted"]
    target: str | None = None
    expansions: int = 0
    queries: int = 0
    validations: int = 0

    @property
    def found(self) -> bool:
        return self.status == "found"

    @property
    def answer(self) -> str:
        return self.target if self.target is not None else NOT_FOUND


def prefer(candidates: list[str], preferred: str | None) -> list[str]:
    """Move ``preferred`` to the front, keeping the rest in order.

    Unknown or empty preferences leave the list unchanged.
    """
    if not preferred or preferred not in candidates:
        return list(candidates)
    return [preferred] + [c for c in candidates if c != preferred]


class SearchDriver:
    """Owns the frontier and the knowledge base for one search."""

    def __init__(
        self,
        knowledge: KnowledgeBase,
        gateway: QueryGateway,
        validator: Validator,
        seeds: Iterable[str],
        advisor: Advisor | None = None,
        notes: str | None = None,
    ):
        if gateway.knowledge is not knowledge or validator.knowledge is not knowledge:
            raise ValueError("Gateway and validator must share the driver's knowledge base")

        self.knowledge = knowledge
        self.gateway = gateway
        self.validator = validator
        self.advisor = advisor
        self.notes = notes
        # dict.fromkeys keeps first-seen order while dropping duplicates
        self.seeds = list(dict.fromkeys(normalize_name(s) for s in seeds if s.strip()))
        self.state: SearchState = "idle"
        self.queue: list[Node] = []
        self.expansions = 0

    def _transition(self, state: SearchState) -> None:
        logger.debug("Search state %s -> %s", self.state, state)
        self.state = state

    def _enqueue(self, node: Node) -> bool:
        if self.knowledge.is_visited(node.type, node.value):
            return False
        self.queue.append(node)
        self.knowledge.mark_visited(node.type, node.value)
        return True

    def _eligible(self, location: str) -> bool:
        # Seeds are known non-targets
        return not self.knowledge.is_tested(location) and location not in self.seeds

    def _result(self, status: Literal["found", "exhausted"], target: str | None = None) -> SearchResult:
        return SearchResult(
            status=status,
            target=target,
            expansions=self.expansions,
            queries=self.gateway.requests_sent,
            validations=self.validator.calls_made,
        )

    async def _advise(self, question: str, candidates: list[str]) -> list[str]:
        """Ask the advisor to break a tie; returns the (possibly) reordered list."""
        if self.advisor is None or len(candidates) < 2:
            return candidates

        context = AdvisorContext(
            question=question,
            candidates=candidates,
            knowledge_summary=self.knowledge.summary(),
            notes=self.notes,
        )
        try:
            suggestion = await self.advisor.suggest(context)
        except Exception as e:
            logger.warning("Advisor failed, keeping discovery order: %s", e)
            return candidates

        ordered = prefer(candidates, normalize_name(suggestion) if suggestion else None)
        if ordered[0] != candidates[0]:
            logger.info("Advisor moved %s to the front of %s", ordered[0], candidates)
        return ordered

    async def _seed(self) -> None:
        for location in await self._advise(SEED_QUESTION, self.seeds):
            self._enqueue(Node.location(location))
        logger.info("Seeded frontier with %s", [n.value for n in self.queue])

    async def _expand_location(self, node: Node) -> None:
        entities = await self.gateway.fetch("entities_of_location", node.value)
        if not entities:
            return
        self.knowledge.record_edge("location", node.value, entities)
        for entity in entities:
            self._enqueue(Node.entity(entity))

    async def _expand_entity(self, node: Node) -> str | None:
        locations = await self.gateway.fetch("locations_of_entity", node.value)
        if not locations:
            return None
        self.knowledge.record_edge("entity", node.value, locations)

        candidates = [loc for loc in dict.fromkeys(locations) if self._eligible(loc)]
        candidates = await self._advise(CANDIDATE_QUESTION.format(entity=node.value), candidates)

        for location in candidates:
            logger.info("Testing location %s (from entity %s)", location, node.value)
            if await self.validator.test(location):
                return location
            self._enqueue(Node.location(location))
        return None

    async def run(self) -> SearchResult:
        """Run the search to completion. A driver runs exactly once."""
        if self.state != "idle":
            raise RuntimeError(f"Search already ran (state={self.state})")

        self._transition("seeding")
        await self._seed()

        self._transition("draining")
        index = 0
        while index < len(self.queue):
            current = self.queue[index]
            index += 1
            self.expansions += 1

            if current.type == "location":
                await self._expand_location(current)
                continue

            target = await self._expand_entity(current)
            if target is not None:
                self._transition("found")
                logger.info(
                    "Search finished: found %s after %d expansions", target, self.expansions
                )
                return self._result("found", target)

        self._transition("exhausted")
        logger.info(
            "Search finished: frontier exhausted after %d expansions, %d candidates tested",
            self.expansions, len(self.knowledge.tested_targets),
        )
        return self._result("exhausted")
