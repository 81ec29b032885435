"""Tests for the curated feed service and the cached feed."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from quack_news.adapters.store import LocalObjectStore, YamlDocumentStore
from quack_news.core import (
    Category,
    Meme,
    MemeSource,
    NewsItem,
    NewsOrigin,
    NoContentAvailable,
    StoreError,
)
from quack_news.use_cases import NewsFeed, NewsFeedService

NOW = datetime(2025, 3, 9, 12, 0, tzinfo=timezone.utc)


def remote_item(title: str, hours_ago: int = 0, category: Category = Category.SPORTS) -> NewsItem:
    return NewsItem(
        title=title,
        summary="Remote summary",
        image_url="https://preview.redd.it/remote.jpg",
        category=category,
        published_at=NOW - timedelta(hours=hours_ago),
        related_memes=(Meme(
            image_url="https://i.redd.it/meme.jpg",
            source=MemeSource.REDDIT,
            source_url="https://www.reddit.com/r/CricketShitpost/",
        ),),
        source_url="https://www.reddit.com/r/Cricket/",
    )


def make_aggregator(result=None, error=None) -> AsyncMock:
    aggregator = AsyncMock()
    if error is not None:
        aggregator.fetch_aggregated_news.side_effect = error
    else:
        aggregator.fetch_aggregated_news.return_value = result or []
    return aggregator


async def add_curated(store: YamlDocumentStore, title: str, hours_ago: int, **extra) -> str:
    fields = {
        "title": title,
        "summary": "Curated summary",
        "imageURL": "https://example.com/curated.jpg",
        "category": "Sports",
        "publishedDate": NOW - timedelta(hours=hours_ago),
        "source": "manual",
        "redditURL": "https://reddit.com",
        "tags": [],
    }
    fields.update(extra)
    return await store.add_document("news", fields)


@pytest.fixture
def store(tmp_path: Path) -> YamlDocumentStore:
    return YamlDocumentStore(tmp_path / "store")


@pytest.mark.asyncio
async def test_empty_store_uses_remote(store: YamlDocumentStore) -> None:
    """Test an empty curated store falls back to aggregation."""
    items = [remote_item("India win the final")]
    service = NewsFeedService(store, aggregator=make_aggregator(items))

    assert await service.fetch_aggregated_news() == items


@pytest.mark.asyncio
async def test_empty_store_without_remote(store: YamlDocumentStore) -> None:
    """Test nothing curated and remote disabled raises NoContentAvailable."""
    aggregator = make_aggregator([remote_item("India win the final")])
    service = NewsFeedService(store, aggregator=aggregator)

    with pytest.raises(NoContentAvailable):
        await service.fetch_aggregated_news(include_remote=False)

    aggregator.fetch_aggregated_news.assert_not_called()


@pytest.mark.asyncio
async def test_created_news_carries_linked_meme(store: YamlDocumentStore) -> None:
    """Test create_news stores the news plus a meme linked to it."""
    service = NewsFeedService(store)

    news_id = await service.create_news(
        title="Local derby ends in draw",
        summary="Nobody scored.",
        image_url="https://example.com/derby.jpg",
        category="sports",
    )

    memes = await store.query("memes", "newsId", news_id)
    assert len(memes) == 1
    assert memes[0].fields["imageURL"] == "https://example.com/derby.jpg"
    assert memes[0].fields["category"] == "Sports"

    items = await service.fetch_aggregated_news(include_remote=False)
    assert len(items) == 1
    item = items[0]
    assert item.origin == NewsOrigin.CURATED
    assert item.category == Category.SPORTS
    assert [meme.image_url for meme in item.related_memes] == ["https://example.com/derby.jpg"]
    assert item.related_memes[0].source == MemeSource.MANUAL


@pytest.mark.asyncio
async def test_curated_without_memes_gets_default_meme(store: YamlDocumentStore) -> None:
    """Test a news record with no linked memes shows its own image as a meme."""
    await add_curated(store, "Quiet news", hours_ago=1)
    service = NewsFeedService(store)

    items = await service.fetch_aggregated_news(include_remote=False)

    assert [meme.image_url for meme in items[0].related_memes] == [
        "https://example.com/curated.jpg"
    ]


@pytest.mark.asyncio
async def test_curated_defaults_for_missing_fields(store: YamlDocumentStore) -> None:
    """Test sparse documents decode with defaults and an unknown category."""
    await store.add_document("news", {"category": "Cooking"})
    service = NewsFeedService(store)

    items = await service.fetch_aggregated_news(include_remote=False)

    item = items[0]
    assert item.title == "Untitled News"
    assert item.summary == "No summary available"
    assert item.category == Category.SPORTS
    assert item.image_url is None
    assert item.related_memes == ()


@pytest.mark.asyncio
async def test_meme_lookup_failure_uses_default(store: YamlDocumentStore) -> None:
    """Test a failing meme query falls back to the news image."""
    await add_curated(store, "Quiet news", hours_ago=1)
    store.query = AsyncMock(side_effect=StoreError("offline"))
    service = NewsFeedService(store)

    items = await service.fetch_aggregated_news(include_remote=False)

    assert [meme.image_url for meme in items[0].related_memes] == [
        "https://example.com/curated.jpg"
    ]


@pytest.mark.asyncio
async def test_remote_titles_deduped_against_curated(store: YamlDocumentStore) -> None:
    """Test remote stories repeating a curated title are dropped, the rest merged by time."""
    await add_curated(store, "India win the final", hours_ago=2)
    aggregator = make_aggregator([
        remote_item("INDIA WIN THE FINAL", hours_ago=0),
        remote_item("Pakistan announce squad", hours_ago=1),
        remote_item("Australia arrive", hours_ago=3),
    ])
    service = NewsFeedService(store, aggregator=aggregator)

    items = await service.fetch_aggregated_news()

    assert [item.title for item in items] == [
        "Pakistan announce squad", "India win the final", "Australia arrive",
    ]
    assert items[1].origin == NewsOrigin.CURATED


@pytest.mark.asyncio
async def test_curated_titles_not_deduped_among_themselves(store: YamlDocumentStore) -> None:
    """Test two curated records with the same title are both shown."""
    await add_curated(store, "Same title", hours_ago=1)
    await add_curated(store, "Same title", hours_ago=2)
    service = NewsFeedService(store)

    items = await service.fetch_aggregated_news(include_remote=False)

    assert len(items) == 2


@pytest.mark.asyncio
async def test_remote_failure_keeps_curated(store: YamlDocumentStore) -> None:
    """Test curated content is served when aggregation yields nothing."""
    await add_curated(store, "Quiet news", hours_ago=1)
    aggregator = make_aggregator(error=NoContentAvailable("nothing"))
    service = NewsFeedService(store, aggregator=aggregator)

    items = await service.fetch_aggregated_news()

    assert [item.title for item in items] == ["Quiet news"]


@pytest.mark.asyncio
async def test_store_failure_falls_back_to_remote() -> None:
    """Test an unreachable curated store does not stop remote content."""
    store = AsyncMock()
    store.list_documents.side_effect = StoreError("offline")
    items = [remote_item("India win the final")]
    service = NewsFeedService(store, aggregator=make_aggregator(items))

    assert await service.fetch_aggregated_news() == items


@pytest.mark.asyncio
async def test_create_meme_standalone(store: YamlDocumentStore) -> None:
    """Test a meme in a category without news is stored without a link."""
    service = NewsFeedService(store)

    ids = await service.create_meme("https://example.com/m.jpg", "Politics", title="Vote!")

    assert len(ids) == 1
    memes = await store.list_documents("memes")
    assert memes[0].id == ids[0]
    assert "newsId" not in memes[0].fields
    assert memes[0].fields["title"] == "Vote!"
    assert memes[0].fields["category"] == "Politics"
    assert isinstance(memes[0].fields["createdAt"], datetime)


@pytest.mark.asyncio
async def test_create_meme_links_every_news_of_category(store: YamlDocumentStore) -> None:
    """Test a meme is attached once per news record of its category."""
    first = await add_curated(store, "First story", hours_ago=1)
    second = await add_curated(store, "Second story", hours_ago=2)
    await add_curated(store, "Film news", hours_ago=1, category="Entertainment")
    service = NewsFeedService(store)

    ids = await service.create_meme("https://example.com/m.jpg", "Sports")

    assert len(ids) == 2
    memes = await store.list_documents("memes")
    links = {meme.fields["newsId"]: meme.fields["title"] for meme in memes}
    assert links == {first: "First story", second: "Second story"}


@pytest.mark.asyncio
async def test_create_news_invalid_category_defaults_to_sports(store: YamlDocumentStore) -> None:
    """Test unknown categories are stored as Sports."""
    service = NewsFeedService(store)

    news_id = await service.create_news("Title", "Summary", "https://example.com/a.jpg", "Cooking")

    documents = await store.list_documents("news")
    assert documents[0].id == news_id
    assert documents[0].fields["category"] == "Sports"


@pytest.mark.asyncio
async def test_update_news_categories(store: YamlDocumentStore) -> None:
    """Test misfiled news and their memes move to the guessed category."""
    service = NewsFeedService(store)
    news_id = await service.create_news(
        "Elon Musk unveils new rocket", "Summary", "https://example.com/a.jpg", "Sports"
    )
    await service.create_news(
        "Cricket showdown tonight", "Summary", "https://example.com/b.jpg", "Sports"
    )
    await service.create_news(
        "Weather is nice", "Summary", "https://example.com/c.jpg", "Politics"
    )

    assert await service.update_news_categories() == 1

    news = {doc.id: doc.fields["category"] for doc in await store.list_documents("news")}
    assert news[news_id] == "Elon Musk"
    assert sorted(news.values()) == ["Elon Musk", "Politics", "Sports"]
    memes = await store.query("memes", "newsId", news_id)
    assert memes[0].fields["category"] == "Elon Musk"

    assert await service.update_news_categories() == 0


@pytest.mark.asyncio
async def test_upload_image(store: YamlDocumentStore, tmp_path: Path) -> None:
    """Test images land under images/<folder>/ with a generated name."""
    service = NewsFeedService(store, object_store=LocalObjectStore(tmp_path / "objects"))

    url = await service.upload_image(b"\xff\xd8\xff", "news")

    assert url.startswith("file://")
    assert url.endswith(".jpg")
    stored = list((tmp_path / "objects" / "images" / "news").glob("*.jpg"))
    assert len(stored) == 1
    assert stored[0].read_bytes() == b"\xff\xd8\xff"


@pytest.mark.asyncio
async def test_upload_image_without_object_store(store: YamlDocumentStore) -> None:
    """Test uploading without an object store raises StoreError."""
    service = NewsFeedService(store)

    with pytest.raises(StoreError):
        await service.upload_image(b"data", "memes")


@pytest.mark.asyncio
async def test_feed_keeps_cache_on_failure() -> None:
    """Test a failed refresh keeps the previous stories."""
    service = AsyncMock()
    items = [
        remote_item("India win the final"),
        remote_item("Rocket launch", category=Category.ELON_MUSK),
    ]
    service.fetch_aggregated_news.side_effect = [items, NoContentAvailable("down")]
    feed = NewsFeed(service)

    assert await feed.refresh() == items
    refreshed_at = feed.last_refreshed
    assert refreshed_at is not None

    assert await feed.refresh() == items
    assert feed.error == "down"
    assert not feed.needs_retry
    assert feed.last_refreshed == refreshed_at
    assert feed.items(Category.ELON_MUSK) == [items[1]]


@pytest.mark.asyncio
async def test_feed_needs_retry_without_cache() -> None:
    """Test a first refresh failing asks for a retry."""
    service = AsyncMock()
    service.fetch_aggregated_news.side_effect = NoContentAvailable("down")
    feed = NewsFeed(service, include_remote=False)

    assert await feed.refresh() == []
    assert feed.needs_retry
    service.fetch_aggregated_news.assert_awaited_once_with(False)


@pytest.mark.asyncio
async def test_numeric_curated_title_is_served(store: YamlDocumentStore) -> None:
    """Test a hand-edited document with a bare number title still renders."""
    (store.storage_dir / "news").mkdir(parents=True)
    (store.storage_dir / "news" / "n1.yaml").write_text(
        "title: 2024\n"
        "summary: 7\n"
        "category: Sports\n"
        "publishedDate: 1741500000\n"
        "tags: sports\n",
        encoding="utf-8",
    )
    service = NewsFeedService(store)

    items = await service.fetch_aggregated_news(include_remote=False)

    assert [item.title for item in items] == ["2024"]
    assert items[0].summary == "7"
    assert await service.update_news_categories() == 0
    assert await service.create_meme("https://example.com/m.jpg", "Sports")
    memes = await store.list_documents("memes")
    assert memes[0].fields["title"] == "2024"
