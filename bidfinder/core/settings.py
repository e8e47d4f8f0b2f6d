"""
Runtime configuration, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Settings:
    db_path: str = "opportunities.db"

    # Web fallback
    openai_api_key: str = ""
    search_model: str = "gpt-4o-mini"
    web_search_tool: str = "web_search_preview"
    search_timeout: float = 60.0

    # Catalog lookup
    max_results: int = 20
    min_database_results: int = 1

    # Import
    source_timezone: str = "UTC"
    hash_missing_ids: bool = True

    # Relevance weights
    score_base: int = 50
    score_naics: int = 20
    score_certification: int = 15
    score_database: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            db_path=os.getenv("BIDFINDER_DB_PATH", defaults.db_path),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            search_model=os.getenv("OPENAI_SEARCH_MODEL", defaults.search_model),
            web_search_tool=os.getenv("OPENAI_WEB_SEARCH_TOOL", defaults.web_search_tool),
            search_timeout=_env_float("BIDFINDER_SEARCH_TIMEOUT", defaults.search_timeout),
            max_results=_env_int("BIDFINDER_MAX_RESULTS", defaults.max_results),
            min_database_results=_env_int(
                "BIDFINDER_MIN_DATABASE_RESULTS", defaults.min_database_results
            ),
            source_timezone=os.getenv("BIDFINDER_SOURCE_TZ", defaults.source_timezone),
            hash_missing_ids=_env_bool("BIDFINDER_HASH_MISSING_IDS", defaults.hash_missing_ids),
            score_base=_env_int("BIDFINDER_SCORE_BASE", defaults.score_base),
            score_naics=_env_int("BIDFINDER_SCORE_NAICS", defaults.score_naics),
            score_certification=_env_int(
                "BIDFINDER_SCORE_CERTIFICATION", defaults.score_certification
            ),
            score_database=_env_int("BIDFINDER_SCORE_DATABASE", defaults.score_database),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings (read once)."""
    return Settings.from_env()
