"""Query gateway - neighbor lookups against the data source.

Every lookup goes through the same pipeline:

1. queries already known to fail are answered from the knowledge base, with
   no external call
2. the raw response text is classified; restricted/error responses are
   cached as failed
3. usable text is split on whitespace into normalized names

Subclasses only implement ``_lookup``: the live HTTP API or an in-memory
relation table used for simulations and tests.
"""

import logging
from typing import Literal, Mapping

import httpx
from pydantic import BaseModel, Field

from .classifier import ResponseClassifier
from .knowledge import KnowledgeBase, normalize_name

logger = logging.getLogger(__name__)

EndpointKind = Literal["entities_of_location", "locations_of_entity"]

QueryStatus = Literal["ok", "empty", "restricted", "transport_error", "cached_failure"]


class QueryResult(BaseModel):
    """Outcome of one gateway lookup, kept for diagnostics."""

    kind: EndpointKind
    query: str
    status: QueryStatus
    names: list[str] = Field(default_factory=list)
    reason: str | None = None

    @property
    def usable(self) -> bool:
        return self.status == "ok"


class QueryGateway:
    """Base gateway: failure cache, response classification and tokenizing."""

    def __init__(self, knowledge: KnowledgeBase, classifier: ResponseClassifier | None = None):
        self.knowledge = knowledge
        self.classifier = classifier or ResponseClassifier.from_keywords()
        self.requests_sent = 0

    async def _lookup(self, kind: EndpointKind, query: str) -> str | None:
        """Return the raw response text, None when the source sent no text.

        Raises on transport/protocol failures.
        """
        raise NotImplementedError

    async def fetch_result(self, kind: EndpointKind, query: str) -> QueryResult:
        query = normalize_name(query)
        if self.knowledge.is_failed(query):
            logger.debug("Skipping %s for %r: cached failure", kind, query)
            return QueryResult(kind=kind, query=query, status="cached_failure")

        logger.info("Querying %s for: %r", kind, query)
        self.requests_sent += 1
        try:
            text = await self._lookup(kind, query)
        except Exception as e:
            logger.error("Error fetching %s for %r: %s", kind, query, e)
            self.knowledge.mark_failed(query)
            return QueryResult(kind=kind, query=query, status="transport_error", reason=str(e))

        if text is None:
            logger.info("No message in %s response for %r", kind, query)
            return QueryResult(kind=kind, query=query, status="empty")

        reason = self.classifier.classify(text)
        if reason:
            logger.warning("Restriction received for %r (%s): %s", query, reason, text[:200])
            self.knowledge.mark_failed(query)
            return QueryResult(kind=kind, query=query, status="restricted", reason=reason)

        names = [normalize_name(token) for token in text.split() if token]
        if not names:
            # Not cached: an empty answer may be transient
            return QueryResult(kind=kind, query=query, status="empty")

        logger.info("Found names for %r: %s", query, names)
        return QueryResult(kind=kind, query=query, status="ok", names=names)

    async def fetch(self, kind: EndpointKind, query: str) -> list[str] | None:
        """Neighbor names for ``query``, or None when nothing usable came back."""
        result = await self.fetch_result(kind, query)
        return result.names if result.usable else None


class HttpQueryGateway(QueryGateway):
    """Gateway backed by the data-source HTTP API.

    POST {base_url}/{endpoint} with {"apikey", "query"}; the answer is the
    ``message`` field of the JSON response.
    """

    def __init__(
        self,
        knowledge: KnowledgeBase,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        endpoints: Mapping[EndpointKind, str] | None = None,
        classifier: ResponseClassifier | None = None,
    ):
        super().__init__(knowledge, classifier)
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.endpoints: dict[EndpointKind, str] = {
            "entities_of_location": "locations",
            "locations_of_entity": "entities",
        }
        if endpoints:
            self.endpoints.update(endpoints)

    async def _lookup(self, kind: EndpointKind, query: str) -> str | None:
        url = f"{self.base_url}/{self.endpoints[kind]}"
        response = await self.client.post(url, json={"apikey": self.api_key, "query": query})
        response.raise_for_status()
        data = response.json()
        logger.debug("Response from %s: %s", url, data)

        message = data.get("message") if isinstance(data, dict) else None
        if message is None:
            return None
        return str(message)


class InMemoryQueryGateway(QueryGateway):
    """Gateway answering from a fixed relation table.

    ``relations`` maps a name (location or entity) to its neighbors; unknown
    names answer "no data" the way the live source does. ``restricted``
    maps names to a canned refusal message.
    """

    def __init__(
        self,
        knowledge: KnowledgeBase,
        relations: Mapping[str, list[str]],
        restricted: Mapping[str, str] | None = None,
        classifier: ResponseClassifier | None = None,
    ):
        super().__init__(knowledge, classifier)
        self.relations = {normalize_name(k): list(v) for k, v in relations.items()}
        self.restricted = {normalize_name(k): v for k, v in (restricted or {}).items()}
        self.calls: list[tuple[EndpointKind, str]] = []

    async def _lookup(self, kind: EndpointKind, query: str) -> str | None:
        self.calls.append((kind, query))
        key = normalize_name(query)
        if key in self.restricted:
            return self.restricted[key]
        if key not in self.relations:
            return f"no data for {query}"
        return " ".join(self.relations[key])
