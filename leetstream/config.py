"""
config.py - Configuration model for leetstream
"""

import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from rich.console import Console

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class OmdbConfig(BaseModel):
    api_key: str = ""
    base_url: str = "https://www.omdbapi.com"


class IndexConfig(BaseModel):
    """Torrent index site and scraping limits."""

    name: str = "1337x"
    base_url: str = "https://1337x.to"
    max_results: int = Field(default=20, ge=1, description="Result rows parsed per search page")
    min_interval_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum spacing between two requests to the index host",
    )
    user_agent: str = DEFAULT_USER_AGENT


class SearchConfig(BaseModel):
    """Parameters of the resolution and ranking pipeline."""

    request_timeout: float = Field(default=10.0, gt=0, description="Timeout (seconds) for every collaborator call")
    max_attempts: int = Field(default=3, ge=1, description="HTTP attempts per request on transient failures")
    link_lookup_limit: int = Field(
        default=10,
        ge=1,
        le=10,
        description="How many top candidates get their detail page resolved to a magnet link",
    )
    max_per_resolution: int = Field(default=3, ge=1, description="Streams kept per resolution tier")
    cache_ttl_seconds: float = Field(default=3600.0, ge=0, description="Result freshness window; 0 disables caching")
    quality_suffix_min_year: int = Field(
        default=2010,
        description="Series released from this year on also get 1080p/720p query variants",
    )


class LeetstreamConfig(BaseModel):
    omdb: OmdbConfig = Field(default_factory=OmdbConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    config_path: Optional[Path] = None


def _apply_env(config: LeetstreamConfig) -> LeetstreamConfig:
    env_key = os.environ.get("OMDB_API_KEY", "").strip()
    if env_key and not config.omdb.api_key:
        config.omdb.api_key = env_key
    return config


def load_config(config_path: Optional[Path] = None) -> LeetstreamConfig:
    """Load configuration from TOML file, or defaults when no path is given"""

    if config_path is None:
        return _apply_env(LeetstreamConfig())

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        config = LeetstreamConfig(
            omdb=OmdbConfig(**config_data.get("omdb", {})),
            index=IndexConfig(**config_data.get("index", {})),
            search=SearchConfig(**config_data.get("search", {})),
            config_path=config_path,
        )
        return _apply_env(config)

    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
