"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class RedditConfig:
    """Feed client settings."""
    base_url: str = "https://www.reddit.com"
    app_id: str = "QuackNews"
    timeout: float = 30.0
    news_limit: int = 3
    meme_limit: int = 10


@dataclass
class AggregationConfig:
    """Fan-out settings."""
    dispatch_delay: float = 2.0
    meme_dispatch_delay: float = 1.0
    max_memes: int = 4
    summary_length: int = 250


@dataclass
class PathsConfig:
    """Path settings."""
    store_dir: Path = Path("data/store")
    objects_dir: Path = Path("data/objects")
    output_dir: Path = Path("feeds")


@dataclass
class FeedConfig:
    """Feed settings."""
    include_remote: bool = True


@dataclass
class Settings:
    """Application settings."""

    reddit: RedditConfig = field(default_factory=RedditConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)

    @property
    def user_agent(self) -> str:
        return f"{self.reddit.app_id}/1.0"

    @property
    def store_dir(self) -> Path:
        return self.paths.store_dir

    @property
    def objects_dir(self) -> Path:
        return self.paths.objects_dir

    @property
    def output_dir(self) -> Path:
        return self.paths.output_dir


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    settings = Settings()

    if "reddit" in config:
        for key, value in config["reddit"].items():
            setattr(settings.reddit, key, value)

    if "aggregation" in config:
        for key, value in config["aggregation"].items():
            setattr(settings.aggregation, key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    if "feed" in config:
        for key, value in config["feed"].items():
            setattr(settings.feed, key, value)

    # Environment wins over the YAML file
    base_url = os.getenv("REDDIT_BASE_URL")
    if base_url:
        settings.reddit.base_url = base_url

    app_id = os.getenv("QUACKNEWS_APP_ID")
    if app_id:
        settings.reddit.app_id = app_id

    return settings
