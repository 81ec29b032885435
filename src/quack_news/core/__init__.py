"""Core domain layer."""

from quack_news.core.catalogue import DEFAULT_CATALOGUE, Catalogue
from quack_news.core.entities import (
    CandidatePost,
    Category,
    Meme,
    MemeSource,
    NewsItem,
    NewsOrigin,
    SourceDescriptor,
)
from quack_news.core.errors import (
    DecodeError,
    NoContentAvailable,
    QuackNewsError,
    SourceError,
    SourceTimeout,
    SourceUnavailable,
    StoreError,
)
from quack_news.core.interfaces import (
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    ListingSource,
    ObjectStore,
)

__all__ = [
    "Category",
    "MemeSource",
    "NewsOrigin",
    "SourceDescriptor",
    "CandidatePost",
    "Meme",
    "NewsItem",
    "Catalogue",
    "DEFAULT_CATALOGUE",
    "QuackNewsError",
    "SourceError",
    "SourceUnavailable",
    "SourceTimeout",
    "DecodeError",
    "NoContentAvailable",
    "StoreError",
    "SERVER_TIMESTAMP",
    "Document",
    "ListingSource",
    "DocumentStore",
    "ObjectStore",
]
