"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


def _new_id() -> str:
    return str(uuid4())


def utc_from_timestamp(value: float) -> Optional[datetime]:
    """Aware UTC datetime for a Unix timestamp, or None when out of range."""
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class Category(str, Enum):
    """Content domain that scopes sources and keywords."""

    SPORTS = "Sports"
    ELON_MUSK = "Elon Musk"
    ENTERTAINMENT = "Entertainment"
    ADS = "Ads"
    POLITICS = "Politics"

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Match a category by value or member name, ignoring case."""
        needle = value.strip().lower()
        for category in cls:
            if needle in (category.value.lower(), category.name.lower()):
                return category
        raise ValueError(f"Unknown category: {value!r}")


class MemeSource(str, Enum):
    """Where a meme came from."""

    REDDIT = "reddit"
    MANUAL = "manual"


class NewsOrigin(str, Enum):
    """Where a news item came from."""

    REMOTE = "remote"
    CURATED = "curated"


@dataclass(frozen=True)
class SourceDescriptor:
    """A feed identifier bound to the category it serves."""

    name: str
    category: Category


@dataclass
class CandidatePost:
    """Raw post decoded from a listing, before any filtering."""

    title: str
    selftext: str = ""
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    preview_url: Optional[str] = None
    created_utc: float = 0.0
    subreddit: str = ""
    permalink: str = ""
    over_18: bool = False
    is_video: bool = False
    post_hint: Optional[str] = None

    @classmethod
    def from_listing_data(cls, data: dict) -> "CandidatePost":
        """Build a post from the ``data`` object of a listing child."""
        title = data.get("title")
        if not isinstance(title, str):
            raise ValueError("Post has no title")

        created_utc = float(data.get("created_utc") or 0.0)
        if utc_from_timestamp(created_utc) is None:
            raise ValueError(f"Invalid created_utc: {created_utc!r}")

        preview_url = None
        images = (data.get("preview") or {}).get("images") or []
        if images:
            preview_url = (images[0].get("source") or {}).get("url")

        return cls(
            title=title,
            selftext=data.get("selftext") or "",
            url=data.get("url"),
            thumbnail=data.get("thumbnail"),
            preview_url=preview_url,
            created_utc=created_utc,
            subreddit=data.get("subreddit") or "",
            permalink=data.get("permalink") or "",
            over_18=bool(data.get("over_18", False)),
            is_video=bool(data.get("is_video", False)),
            post_hint=data.get("post_hint"),
        )

    @property
    def published_at(self) -> Optional[datetime]:
        return utc_from_timestamp(self.created_utc)


@dataclass(frozen=True)
class Meme:
    """An image related to a news item."""

    image_url: str
    source: MemeSource
    source_url: str
    title: Optional[str] = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.image_url:
            raise ValueError("Image URL cannot be empty")


@dataclass(frozen=True)
class NewsItem:
    """A news entry with its related memes attached once at construction."""

    title: str
    summary: str
    image_url: Optional[str]
    category: Category
    published_at: datetime
    related_memes: tuple[Meme, ...]
    source_url: str
    origin: NewsOrigin = NewsOrigin.REMOTE
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not isinstance(self.related_memes, tuple):
            object.__setattr__(self, "related_memes", tuple(self.related_memes))

    @property
    def dedupe_key(self) -> str:
        """Case-insensitive title used to drop repeated stories in one run."""
        return self.title.lower()
