"""
Search runner: entry point for executing a frontier search.

Wires settings into the live HTTP gateway/validator, the optional Claude
advisor and the case notes, then runs one SearchDriver.
"""

import asyncio
import logging
import sys
import time

import httpx

from .advisor import Advisor, ClaudeAdvisor
from .classifier import ResponseClassifier
from .config import Settings, get_settings
from .driver import SearchDriver, SearchResult
from .gateway import HttpQueryGateway
from .knowledge import KnowledgeBase
from .logging_config import configure_logging, generate_run_id
from .notes import ContextLoadError, load_case_notes
from .validator import HttpValidator

logger = logging.getLogger(__name__)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client shared by the gateway, the validator and the notes loader."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        headers={"Content-Type": "application/json; charset=utf-8"},
    )


def build_advisor(settings: Settings) -> Advisor | None:
    if not settings.advisor_enabled or not settings.advisor_model:
        return None
    return ClaudeAdvisor(
        model=settings.advisor_model,
        max_tokens=settings.advisor_max_tokens,
        fallback=settings.advisor_fallback,
    )


def build_driver(
    settings: Settings,
    client: httpx.AsyncClient,
    advisor: Advisor | None = None,
    notes: str | None = None,
) -> SearchDriver:
    """Assemble a driver over a fresh knowledge base and the live API."""
    knowledge = KnowledgeBase()
    gateway = HttpQueryGateway(
        knowledge,
        client=client,
        base_url=settings.api_base_url,
        api_key=settings.api_key,
        endpoints={
            "entities_of_location": settings.entities_of_location_endpoint,
            "locations_of_entity": settings.locations_of_entity_endpoint,
        },
        classifier=ResponseClassifier.from_keywords(settings.restriction_keywords),
    )
    validator = HttpValidator(
        knowledge,
        client=client,
        base_url=settings.api_base_url,
        api_key=settings.api_key,
        task=settings.validation_task,
        endpoint=settings.validate_endpoint,
        success_marker=settings.success_marker,
    )
    return SearchDriver(
        knowledge,
        gateway=gateway,
        validator=validator,
        seeds=settings.seed_locations,
        advisor=advisor,
        notes=notes,
    )


async def run_search(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    advisor: Advisor | None = None,
) -> SearchResult:
    """
    Run one search against the live API and return its result.

    Args:
        settings: Defaults to environment settings
        client: Optional pre-built HTTP client (not closed here)
        advisor: Overrides the advisor built from settings

    Raises:
        ContextLoadError: when case notes are required and cannot be loaded
    """
    settings = settings or get_settings()
    generate_run_id()
    start_time = time.time()

    owns_client = client is None
    client = client or create_http_client(settings)
    try:
        notes = await load_case_notes(client, settings.notes_url, settings.notes_required)
        driver = build_driver(
            settings,
            client,
            advisor=advisor if advisor is not None else build_advisor(settings),
            notes=notes,
        )
        result = await driver.run()
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Search complete in %.1fs: %s", time.time() - start_time, result.answer)
    return result


def run_search_sync(settings: Settings | None = None) -> SearchResult:
    """Synchronous wrapper for run_search."""
    return asyncio.run(run_search(settings))


def main() -> int:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, settings.log_module_levels)
    try:
        result = run_search_sync(settings)
    except ContextLoadError as e:
        logger.error("Cannot start search: %s", e)
        return 1
    print(f"Final result: {result.answer}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
