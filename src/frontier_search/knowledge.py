"""
Knowledge base for one search run.

Holds every edge discovered so far plus the dedup sets that keep the
traversal honest: which names were enqueued, which candidates were already
validated, and which queries failed permanently.
"""

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

NodeType = Literal["location", "entity"]


def normalize_name(name: str) -> str:
    """Canonical form used for identity, set membership and outgoing queries."""
    return name.strip().upper()


class Node(BaseModel):
    """A typed name in the discovery graph (also used as a frontier entry)."""

    model_config = ConfigDict(frozen=True)

    type: NodeType = Field(..., description="Location or entity")
    value: str = Field(..., description="Normalized name")

    @classmethod
    def location(cls, name: str) -> "Node":
        return cls(type="location", value=normalize_name(name))

    @classmethod
    def entity(cls, name: str) -> "Node":
        return cls(type="entity", value=normalize_name(name))


class KnowledgeBase:
    """Mutable bookkeeping for a single search. No behavior beyond state."""

    def __init__(self):
        self.entity_locations: dict[str, list[str]] = {}
        self.location_entities: dict[str, list[str]] = {}
        self.visited_locations: set[str] = set()
        self.visited_entities: set[str] = set()
        self.tested_targets: set[str] = set()
        self.failed_queries: set[str] = set()

    def _visited(self, node_type: NodeType) -> set[str]:
        return self.visited_locations if node_type == "location" else self.visited_entities

    def record_edge(self, source_type: NodeType, source_name: str, neighbors: Iterable[str]) -> None:
        """Append newly seen neighbors of a node, keeping discovery order."""
        mapping = self.location_entities if source_type == "location" else self.entity_locations
        known = mapping.setdefault(source_name, [])
        for neighbor in neighbors:
            if neighbor not in known:
                known.append(neighbor)

    def mark_visited(self, node_type: NodeType, name: str) -> None:
        self._visited(node_type).add(name)

    def is_visited(self, node_type: NodeType, name: str) -> bool:
        return name in self._visited(node_type)

    def mark_tested(self, name: str) -> None:
        self.tested_targets.add(name)

    def is_tested(self, name: str) -> bool:
        return name in self.tested_targets

    def mark_failed(self, query: str) -> None:
        self.failed_queries.add(query)

    def is_failed(self, query: str) -> bool:
        return query in self.failed_queries

    def summary(self) -> str:
        """Render discovered edges and dead ends as plain text for advisor prompts."""
        lines: list[str] = []
        if self.location_entities:
            lines.append("Locations and entities seen there:")
            for location, entities in self.location_entities.items():
                lines.append(f"- {location}: {', '.join(entities)}")
        if self.entity_locations:
            lines.append("Entities and locations they were seen in:")
            for entity, locations in self.entity_locations.items():
                lines.append(f"- {entity}: {', '.join(locations)}")
        if self.tested_targets:
            lines.append(f"Already tested (not the target): {', '.join(sorted(self.tested_targets))}")
        if self.failed_queries:
            lines.append(f"Queries with no usable data: {', '.join(sorted(self.failed_queries))}")
        return "\n".join(lines) if lines else "Nothing discovered yet."
