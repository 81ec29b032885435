"""Source adapters for fetching and screening posts."""

from quack_news.adapters.sources.filters import (
    classify_title,
    extract_keywords,
    is_major_news,
    is_relevant_meme,
)
from quack_news.adapters.sources.images import best_image_url, is_meme_candidate
from quack_news.adapters.sources.reddit_source import RedditSource
from quack_news.adapters.sources.text import cleanup

__all__ = [
    "RedditSource",
    "is_major_news",
    "is_relevant_meme",
    "extract_keywords",
    "classify_title",
    "best_image_url",
    "is_meme_candidate",
    "cleanup",
]
