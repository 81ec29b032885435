"""Typed store records and their field-map encoding."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from quack_news.core.entities import (
    Category,
    Meme,
    MemeSource,
    NewsItem,
    NewsOrigin,
    utc_from_timestamp,
)
from quack_news.core.interfaces import SERVER_TIMESTAMP, Document

logger = logging.getLogger(__name__)

NEWS_COLLECTION = "news"
MEMES_COLLECTION = "memes"
DEFAULT_SOURCE_URL = "https://reddit.com"


def is_valid_url(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs."""
    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_image_url(value: Optional[str]) -> bool:
    """True for http(s) URLs and the file:// URLs of the local object store."""
    if is_valid_url(value):
        return True
    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme == "file" and bool(parsed.path)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return utc_from_timestamp(value)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def as_text(value: Any) -> Optional[str]:
    """Scalar field as text; containers and None yield None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    return value if isinstance(value, str) else str(value)


def _tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value if tag is not None]


def _parse_category(value: Any, document_id: str) -> Category:
    try:
        return Category.parse(str(value))
    except ValueError:
        logger.warning(
            "Could not match category %r of %s, using %s",
            value, document_id, Category.SPORTS.value,
        )
        return Category.SPORTS


def _parse_meme_source(value: Any) -> MemeSource:
    try:
        return MemeSource(value)
    except (TypeError, ValueError):
        return MemeSource.MANUAL


@dataclass
class NewsRecord:
    """A curated news document."""

    title: str
    summary: str
    image_url: str
    category: Category
    published_at: Optional[datetime] = None
    source: MemeSource = MemeSource.MANUAL
    source_url: str = DEFAULT_SOURCE_URL
    tags: list[str] = field(default_factory=list)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Document) -> "NewsRecord":
        """Decode a news document, filling defaults for missing fields."""
        data = document.fields
        published_at = _parse_timestamp(data.get("publishedDate"))
        if published_at is None:
            logger.warning("No valid publishedDate for %s, using current time", document.id)
            published_at = datetime.now(timezone.utc)

        return cls(
            id=document.id,
            title=as_text(data.get("title")) or "Untitled News",
            summary=as_text(data.get("summary")) or "No summary available",
            image_url=as_text(data.get("imageURL")) or "",
            category=_parse_category(data.get("category", Category.SPORTS.value), document.id),
            published_at=published_at,
            source=_parse_meme_source(data.get("source")),
            source_url=as_text(data.get("redditURL")) or DEFAULT_SOURCE_URL,
            tags=_tags(data.get("tags")),
        )

    def to_fields(self) -> dict[str, Any]:
        """Encode for the store; an unset date asks the store for its own time."""
        return {
            "title": self.title,
            "summary": self.summary,
            "imageURL": self.image_url,
            "category": self.category.value,
            "publishedDate": self.published_at or SERVER_TIMESTAMP,
            "source": self.source.value,
            "redditURL": self.source_url,
            "tags": list(self.tags),
        }

    def to_news_item(self, memes: list[Meme]) -> NewsItem:
        """Build a curated news item carrying ``memes``."""
        return NewsItem(
            title=self.title,
            summary=self.summary,
            image_url=self.image_url if is_image_url(self.image_url) else None,
            category=self.category,
            published_at=self.published_at or datetime.now(timezone.utc),
            related_memes=tuple(memes),
            source_url=self.source_url if is_valid_url(self.source_url) else DEFAULT_SOURCE_URL,
            origin=NewsOrigin.CURATED,
        )

    def default_meme(self) -> Optional[Meme]:
        """A meme made from the news image, or None without a usable image."""
        if not is_image_url(self.image_url):
            return None
        return Meme(
            image_url=self.image_url,
            source=MemeSource.MANUAL,
            title=self.title,
            source_url=DEFAULT_SOURCE_URL,
        )


@dataclass
class MemeRecord:
    """A curated meme document, linked to a news document or standalone."""

    image_url: str
    category: Category
    title: Optional[str] = None
    source: MemeSource = MemeSource.MANUAL
    news_id: Optional[str] = None
    source_url: str = DEFAULT_SOURCE_URL
    created_at: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Document) -> "MemeRecord":
        data = document.fields
        return cls(
            id=document.id,
            image_url=as_text(data.get("imageURL")) or "",
            category=_parse_category(data.get("category", Category.SPORTS.value), document.id),
            title=as_text(data.get("title")) or None,
            source=_parse_meme_source(data.get("source")),
            news_id=as_text(data.get("newsId")),
            source_url=as_text(data.get("redditURL")) or DEFAULT_SOURCE_URL,
            created_at=_parse_timestamp(data.get("createdAt")),
            tags=_tags(data.get("tags")),
        )

    def to_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "imageURL": self.image_url,
            "title": self.title or "",
            "source": self.source.value,
            "category": self.category.value,
            "redditURL": self.source_url,
            "createdAt": self.created_at or SERVER_TIMESTAMP,
            "tags": list(self.tags),
        }
        if self.news_id is not None:
            fields["newsId"] = self.news_id
        return fields

    def to_meme(self) -> Optional[Meme]:
        """Convert to a meme; records without a usable image yield None."""
        if not is_image_url(self.image_url):
            return None
        return Meme(
            image_url=self.image_url,
            source=self.source,
            title=self.title,
            source_url=self.source_url if is_valid_url(self.source_url) else DEFAULT_SOURCE_URL,
        )
