"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from quack_news.core.entities import CandidatePost


class _ServerTimestamp:
    """Sentinel replaced by the store with its own current time on write."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class Document:
    """A stored record: its id plus the raw field map."""

    id: str
    fields: dict[str, Any]


class ListingSource(ABC):
    """Interface for reading a listing of posts from one feed."""

    @abstractmethod
    async def fetch_listing(self, source: str, limit: int) -> list[CandidatePost]:
        """Fetch up to ``limit`` posts from ``source``."""
        pass


class DocumentStore(ABC):
    """Interface for the curated news/meme document store."""

    @abstractmethod
    async def list_documents(self, collection: str) -> list[Document]:
        """List every document in a collection."""
        pass

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> list[Document]:
        """List documents whose ``field`` equals ``value``."""
        pass

    @abstractmethod
    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document and return its id."""
        pass

    @abstractmethod
    async def update_document(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> None:
        """Merge ``fields`` into an existing document."""
        pass


class ObjectStore(ABC):
    """Interface for the binary image store."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """Store bytes at ``path`` and return a durable URL."""
        pass
