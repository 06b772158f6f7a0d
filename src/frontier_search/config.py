"""Configuration management for frontier-search."""

import os
from functools import lru_cache
from pydantic import BaseModel
from dotenv import load_dotenv


DEFAULT_RESTRICTION_KEYWORDS = ["restricted", "no data", "anomaly", "error", "forbidden"]


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Data source / validation API
    api_base_url: str = "https://api.example.com"
    api_key: str = ""
    request_timeout: float = 30.0

    # Endpoint paths are named after the type of the query value
    entities_of_location_endpoint: str = "locations"
    locations_of_entity_endpoint: str = "entities"
    validate_endpoint: str = "validate"

    # Search
    seed_locations: list[str] = ["NodeA", "NodeB"]
    restriction_keywords: list[str] = DEFAULT_RESTRICTION_KEYWORDS
    success_marker: str = "SUCCESS:"
    validation_task: str = "search"

    # Case notes passed to every advisor prompt
    notes_url: str | None = None
    notes_required: bool = False

    # Advisor (None model = advisor disabled even if enabled flag is set)
    advisor_enabled: bool = False
    advisor_model: str | None = "claude-sonnet-4-20250514"
    advisor_max_tokens: int = 20
    advisor_fallback: str = "NONE"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "text"  # "json" or "text"
    log_module_levels: dict[str, str] = {}  # Module-specific log levels


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment, cached for performance."""
    load_dotenv()

    # Parse module-specific log levels from env var (format: "module1:DEBUG,module2:INFO")
    module_levels = {}
    module_levels_str = os.getenv("LOG_MODULE_LEVELS", "")
    if module_levels_str:
        for item in module_levels_str.split(","):
            if ":" in item:
                module, level = item.split(":", 1)
                module_levels[module.strip()] = level.strip()

    keywords_str = os.getenv("RESTRICTION_KEYWORDS")
    keywords = _split_list(keywords_str) if keywords_str else list(DEFAULT_RESTRICTION_KEYWORDS)

    return Settings(
        api_base_url=os.getenv("API_BASE_URL", "https://api.example.com").rstrip("/"),
        api_key=os.getenv("API_KEY", ""),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        entities_of_location_endpoint=os.getenv("ENTITIES_OF_LOCATION_ENDPOINT", "locations"),
        locations_of_entity_endpoint=os.getenv("LOCATIONS_OF_ENTITY_ENDPOINT", "entities"),
        validate_endpoint=os.getenv("VALIDATE_ENDPOINT", "validate"),
        seed_locations=_split_list(os.getenv("SEED_LOCATIONS", "NodeA,NodeB")),
        restriction_keywords=keywords,
        success_marker=os.getenv("SUCCESS_MARKER", "SUCCESS:"),
        validation_task=os.getenv("VALIDATION_TASK", "search"),
        notes_url=os.getenv("NOTES_URL") or None,
        notes_required=os.getenv("NOTES_REQUIRED", "false").lower() == "true",
        advisor_enabled=os.getenv("ADVISOR_ENABLED", "false").lower() == "true",
        advisor_model=os.getenv("ADVISOR_MODEL", "claude-sonnet-4-20250514") or None,
        advisor_max_tokens=int(os.getenv("ADVISOR_MAX_TOKENS", "20")),
        advisor_fallback=os.getenv("ADVISOR_FALLBACK", "NONE"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
        log_module_levels=module_levels,
    )
