"""Case notes loader.

Case notes are a static text blob fetched once before the search and
passed unchanged into every advisor prompt.
"""

import logging

import httpx

logger = logging.getLogger(__name__)


class ContextLoadError(Exception):
    """Case notes could not be loaded."""
    pass


async def fetch_case_notes(client: httpx.AsyncClient, url: str) -> str:
    """
    Fetch case notes as plain text.

    Args:
        client: Shared HTTP client
        url: Location of the notes file

    Returns:
        The notes text

    Raises:
        ContextLoadError: on any transport error, non-2xx status or empty body
    """
    logger.info("Fetching case notes from %s", url)
    try:
        response = await client.get(url, headers={"Accept": "text/plain; charset=utf-8"})
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ContextLoadError(f"Notes request failed with {e.response.status_code}: {url}") from e
    except httpx.HTTPError as e:
        raise ContextLoadError(f"Notes request failed: {e}") from e

    text = response.text
    if not text.strip():
        raise ContextLoadError(f"Notes at {url} are empty")
    logger.info("Case notes fetched (%d chars)", len(text))
    return text


async def load_case_notes(client: httpx.AsyncClient, url: str | None, required: bool = False) -> str | None:
    """Load notes when configured; only a required load failure is fatal."""
    if not url:
        if required:
            raise ContextLoadError("Case notes are required but no notes URL is configured")
        return None
    try:
        return await fetch_case_notes(client, url)
    except ContextLoadError as e:
        if required:
            raise
        logger.warning("Continuing without case notes: %s", e)
        return None
