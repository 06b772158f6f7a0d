"""
Frontier search: breadth-first discovery of a target location over a
location <-> entity graph that is revealed one lookup at a time.

Architecture: SearchDriver -> QueryGateway -> KnowledgeBase -> Advisor
              -> SearchDriver (reorder) -> Validator -> found | exhausted
"""

from .driver import NOT_FOUND, SearchDriver, SearchResult
from .knowledge import KnowledgeBase, Node
from .runner import run_search, run_search_sync

__all__ = [
    "NOT_FOUND",
    "KnowledgeBase",
    "Node",
    "SearchDriver",
    "SearchResult",
    "run_search",
    "run_search_sync",
]
