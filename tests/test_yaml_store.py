"""Tests for the YAML document store."""

from datetime import datetime
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from quack_news.adapters.store import YamlDocumentStore
from quack_news.core import SERVER_TIMESTAMP, StoreError


@pytest.mark.asyncio
async def test_store_basic() -> None:
    """Test adding, listing and reloading documents."""
    with TemporaryDirectory() as tmpdir:
        storage_dir = Path(tmpdir)
        store = YamlDocumentStore(storage_dir)

        # Empty collection
        assert await store.list_documents("news") == []

        doc_id = await store.add_document("news", {"title": "Hello", "tags": ["a"]})

        # One file per document
        files = list(storage_dir.glob("news/*.yaml"))
        assert len(files) == 1
        assert files[0].stem == doc_id

        # Visible from a new store instance
        store2 = YamlDocumentStore(storage_dir)
        documents = await store2.list_documents("news")
        assert len(documents) == 1
        assert documents[0].id == doc_id
        assert documents[0].fields == {"title": "Hello", "tags": ["a"]}


@pytest.mark.asyncio
async def test_server_timestamp_replaced() -> None:
    """Test the timestamp sentinel is stored as the current time."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))

        await store.add_document("memes", {"createdAt": SERVER_TIMESTAMP})

        documents = await store.list_documents("memes")
        assert isinstance(documents[0].fields["createdAt"], datetime)


@pytest.mark.asyncio
async def test_query_by_field() -> None:
    """Test equality queries."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))

        await store.add_document("memes", {"newsId": "n1", "title": "one"})
        await store.add_document("memes", {"newsId": "n2", "title": "two"})
        await store.add_document("memes", {"title": "standalone"})

        matches = await store.query("memes", "newsId", "n1")
        assert [doc.fields["title"] for doc in matches] == ["one"]
        assert await store.query("memes", "newsId", "missing") == []
        assert await store.query("news", "newsId", "n1") == []


@pytest.mark.asyncio
async def test_update_document() -> None:
    """Test updates merge into existing fields."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))
        doc_id = await store.add_document("news", {"title": "Hello", "category": "Sports"})

        await store.update_document("news", doc_id, {"category": "Politics"})

        documents = await store.list_documents("news")
        assert documents[0].fields == {"title": "Hello", "category": "Politics"}


@pytest.mark.asyncio
async def test_update_missing_document() -> None:
    """Test updating an unknown id raises StoreError."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))

        with pytest.raises(StoreError):
            await store.update_document("news", "nope", {"category": "Politics"})


@pytest.mark.asyncio
async def test_invalid_names_rejected() -> None:
    """Test collection and id names cannot escape the storage directory."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))

        with pytest.raises(StoreError):
            await store.list_documents("../etc")
        with pytest.raises(StoreError):
            await store.update_document("news", "../x", {})


@pytest.mark.asyncio
async def test_unreadable_documents_skipped() -> None:
    """Test corrupt or non-mapping files are skipped."""
    with TemporaryDirectory() as tmpdir:
        storage_dir = Path(tmpdir)
        store = YamlDocumentStore(storage_dir)
        await store.add_document("news", {"title": "Good"})

        (storage_dir / "news" / "broken.yaml").write_text("title: [unclosed", encoding="utf-8")
        (storage_dir / "news" / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")

        documents = await store.list_documents("news")
        assert [doc.fields["title"] for doc in documents] == ["Good"]


@pytest.mark.asyncio
async def test_get_stats() -> None:
    """Test document counts per collection."""
    with TemporaryDirectory() as tmpdir:
        store = YamlDocumentStore(Path(tmpdir))

        await store.add_document("news", {"title": "one"})
        await store.add_document("memes", {"title": "a"})
        await store.add_document("memes", {"title": "b"})

        stats = store.get_stats()
        assert stats["total_documents"] == 3
        assert stats["by_collection"] == {"news": 1, "memes": 2}
