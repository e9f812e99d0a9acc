import os
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class DatabaseSettings(BaseModel):
    """Connection pool settings for the PostgreSQL backend."""

    host: str = "localhost"
    port: int = 5432
    database: str = "timeseries"
    user: str = "timeseries"
    password: str = "timeseries"
    min_size: int = 1
    max_size: int = 10
    command_timeout: float = 60

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        """Build settings from POSTGRES_* environment variables."""
        return cls(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "timeseries"),
            user=os.getenv("POSTGRES_USER", "timeseries"),
            password=os.getenv("POSTGRES_PASSWORD", "timeseries"),
            min_size=int(os.getenv("POSTGRES_POOL_MIN", "1")),
            max_size=int(os.getenv("POSTGRES_POOL_MAX", "10")),
            command_timeout=float(os.getenv("POSTGRES_COMMAND_TIMEOUT", "60")),
        )


def get_timeseries_config() -> Dict[str, Any]:
    """
    Get time series behaviour settings.

    Returns:
        Dictionary with 'table_prefix', 'value_kind', 'consistent_latest'
        and 'dictionary_cache' keys
    """
    return {
        "table_prefix": os.getenv("RELTS_TABLE_PREFIX", "ts_"),
        "value_kind": os.getenv("RELTS_VALUE_KIND", "float"),
        "consistent_latest": _env_flag("RELTS_CONSISTENT_LATEST", "false"),
        "dictionary_cache": _env_flag("RELTS_DICTIONARY_CACHE", "true"),
    }
