"""Business logic use cases."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Optional
from uuid import uuid4

from quack_news.adapters.sources.filters import (
    classify_title,
    extract_keywords,
    is_major_news,
    is_relevant_meme,
)
from quack_news.adapters.sources.images import best_image_url, is_meme_candidate
from quack_news.adapters.sources.text import SUMMARY_LENGTH, cleanup
from quack_news.core import (
    DEFAULT_CATALOGUE,
    CandidatePost,
    Catalogue,
    Category,
    DocumentStore,
    ListingSource,
    Meme,
    MemeSource,
    NewsItem,
    NoContentAvailable,
    ObjectStore,
    SourceDescriptor,
    SourceError,
    StoreError,
)
from quack_news.core.fanout import dispatch_paced
from quack_news.core.records import (
    MEMES_COLLECTION,
    NEWS_COLLECTION,
    MemeRecord,
    NewsRecord,
    as_text,
)

logger = logging.getLogger(__name__)


class AggregationState(str, Enum):
    """Phases of one aggregation run, in order."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    AWAITING_NEWS = "awaiting_news"
    PER_ITEM_MEME_FETCH = "per_item_meme_fetch"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


_STATE_ORDER = list(AggregationState)


@dataclass
class AggregationRun:
    """State and outcome of a single aggregation run."""

    state: AggregationState = AggregationState.IDLE
    history: list[AggregationState] = field(default_factory=lambda: [AggregationState.IDLE])
    items: list[NewsItem] = field(default_factory=list)
    error: Optional[NoContentAvailable] = None

    def advance(self, state: AggregationState) -> None:
        """Move forward to ``state``; moving backwards is ignored."""
        if _STATE_ORDER.index(state) <= _STATE_ORDER.index(self.state):
            return
        self.state = state
        self.history.append(state)


@dataclass
class SourceHarvest:
    """What one news feed produced, and how many meme lookups it started."""

    items: list[NewsItem] = field(default_factory=list)
    meme_fetches: int = 0


def merge_news(items: Iterable[NewsItem], seen_keys: Iterable[str] = ()) -> list[NewsItem]:
    """Drop repeated titles (first one wins) and sort newest first."""
    seen = set(seen_keys)
    merged: list[NewsItem] = []
    for item in items:
        if item.dedupe_key in seen:
            logger.debug("Dropping duplicate story: %s", item.title)
            continue
        seen.add(item.dedupe_key)
        merged.append(item)
    merged.sort(key=lambda item: item.published_at, reverse=True)
    return merged


class NewsAggregator:
    """Gather major news and matching memes from every catalogued feed."""

    def __init__(
        self,
        source_client: ListingSource,
        catalogue: Catalogue = DEFAULT_CATALOGUE,
        news_limit: int = 3,
        meme_limit: int = 10,
        max_memes: int = 4,
        dispatch_delay: float = 2.0,
        meme_dispatch_delay: float = 1.0,
        summary_length: int = SUMMARY_LENGTH,
        permalink_base: str = "https://www.reddit.com",
    ) -> None:
        self.source_client = source_client
        self.catalogue = catalogue
        self.news_limit = news_limit
        self.meme_limit = meme_limit
        self.max_memes = max_memes
        self.dispatch_delay = dispatch_delay
        self.meme_dispatch_delay = meme_dispatch_delay
        self.summary_length = summary_length
        self.permalink_base = permalink_base.rstrip("/")

    async def fetch_aggregated_news(
        self, cancel: Optional[asyncio.Event] = None
    ) -> list[NewsItem]:
        """Run an aggregation; raises ``NoContentAvailable`` when nothing qualifies."""
        run = await self.run(cancel)
        if run.error is not None:
            raise run.error
        return run.items

    async def run(self, cancel: Optional[asyncio.Event] = None) -> AggregationRun:
        """Run an aggregation and return its state, items and error."""
        run = AggregationRun()
        descriptors = self.catalogue.news_sources()

        run.advance(AggregationState.DISPATCHING)
        logger.info("Dispatching %d news sources", len(descriptors))

        results = await dispatch_paced(
            [
                (descriptor.name, partial(self._collect_from_source, descriptor, cancel))
                for descriptor in descriptors
            ],
            delay=self.dispatch_delay,
            cancel=cancel,
            on_dispatched=lambda: run.advance(AggregationState.AWAITING_NEWS),
        )

        # Producers never touch the run; phases are recorded here after the join
        harvests = [result.value for result in results if result.ok and result.value]
        if any(harvest.meme_fetches for harvest in harvests):
            run.advance(AggregationState.PER_ITEM_MEME_FETCH)

        run.advance(AggregationState.MERGING)
        collected: list[NewsItem] = []
        for harvest in harvests:
            collected.extend(harvest.items)
        failed = 0
        for result in results:
            if not result.ok:
                failed += 1
                logger.warning("Source r/%s failed: %s", result.label, result.error)

        run.items = merge_news(collected)
        logger.info(
            "Aggregated %d stories from %d sources (%d failed)",
            len(run.items), len(results), failed,
        )

        if not run.items:
            run.error = NoContentAvailable("No qualifying news from any source")
            run.advance(AggregationState.FAILED)
        else:
            run.advance(AggregationState.DONE)

        return run

    async def _collect_from_source(
        self,
        descriptor: SourceDescriptor,
        cancel: Optional[asyncio.Event],
    ) -> SourceHarvest:
        """Turn one news feed into news items that carry at least one meme."""
        harvest = SourceHarvest()
        try:
            posts = await self.source_client.fetch_listing(descriptor.name, self.news_limit)
        except SourceError as e:
            logger.warning("Skipping news source %s: %s", descriptor.name, e)
            return harvest

        for post in posts:
            if cancel is not None and cancel.is_set():
                break

            published_at = post.published_at
            if published_at is None:
                logger.debug("Invalid timestamp for %r", post.title)
                continue
            image_url = best_image_url(post)
            if image_url is None:
                logger.debug("No image for %r", post.title)
                continue
            if not is_major_news(
                post.title, descriptor.category, self.catalogue.keywords(descriptor.category)
            ):
                logger.debug("Not major news: %r", post.title)
                continue

            harvest.meme_fetches += 1
            memes = await self._fetch_memes(
                descriptor.category, extract_keywords(post.title), cancel
            )
            if not memes:
                logger.debug("No relevant memes for %r", post.title)
                continue

            harvest.items.append(NewsItem(
                title=post.title,
                summary=cleanup(post.selftext, self.summary_length),
                image_url=image_url,
                category=descriptor.category,
                published_at=published_at,
                related_memes=tuple(memes),
                source_url=self._post_url(post, descriptor),
            ))

        return harvest

    async def _fetch_memes(
        self,
        category: Category,
        keywords: list[str],
        cancel: Optional[asyncio.Event],
    ) -> list[Meme]:
        """Fan out over the category's meme feeds and keep the first few matches."""
        results = await dispatch_paced(
            [
                (descriptor.name, partial(self._collect_memes, descriptor, keywords))
                for descriptor in self.catalogue.meme_sources(category)
            ],
            delay=self.meme_dispatch_delay,
            cancel=cancel,
        )

        memes: list[Meme] = []
        seen_images: set[str] = set()
        for result in results:
            if not result.ok:
                logger.warning("Skipping meme source %s: %s", result.label, result.error)
                continue
            for meme in result.value or []:
                if meme.image_url in seen_images:
                    continue
                seen_images.add(meme.image_url)
                memes.append(meme)

        return memes[:self.max_memes]

    async def _collect_memes(
        self, descriptor: SourceDescriptor, keywords: list[str]
    ) -> list[Meme]:
        posts = await self.source_client.fetch_listing(descriptor.name, self.meme_limit)

        memes: list[Meme] = []
        for post in posts:
            if not is_meme_candidate(post):
                continue
            image_url = best_image_url(post)
            if image_url is None:
                continue
            if not is_relevant_meme(post.title, keywords, descriptor.category):
                continue
            memes.append(Meme(
                image_url=image_url,
                source=MemeSource.REDDIT,
                title=post.title,
                source_url=self._post_url(post, descriptor),
            ))
        return memes

    def _post_url(self, post: CandidatePost, descriptor: SourceDescriptor) -> str:
        if post.permalink:
            return f"{self.permalink_base}{post.permalink}"
        return f"{self.permalink_base}/r/{post.subreddit or descriptor.name}"


class NewsFeedService:
    """Combine curated store content with remote aggregation, and manage curation."""

    def __init__(
        self,
        document_store: DocumentStore,
        object_store: Optional[ObjectStore] = None,
        aggregator: Optional[NewsAggregator] = None,
    ) -> None:
        self.document_store = document_store
        self.object_store = object_store
        self.aggregator = aggregator

    async def fetch_aggregated_news(self, include_remote: bool = True) -> list[NewsItem]:
        """Curated items plus remote ones with unseen titles, newest first.

        Raises:
            NoContentAvailable: if neither source yields any item
        """
        remote_enabled = include_remote and self.aggregator is not None

        try:
            documents = await self.document_store.list_documents(NEWS_COLLECTION)
        except StoreError as e:
            logger.warning("Curated store unavailable: %s", e)
            documents = []

        if not documents:
            logger.warning("No curated news found")
            if remote_enabled:
                return await self.aggregator.fetch_aggregated_news()
            raise NoContentAvailable("No curated news and remote sources disabled")

        logger.info("Found %d curated news documents", len(documents))
        curated: list[NewsItem] = []
        for document in documents:
            record = NewsRecord.from_document(document)
            memes = await self._memes_for(record)
            curated.append(record.to_news_item(memes))

        remote: list[NewsItem] = []
        if remote_enabled:
            try:
                remote = await self.aggregator.fetch_aggregated_news()
            except NoContentAvailable as e:
                logger.warning("Remote news unavailable: %s", e)

        items = curated + merge_news(remote, seen_keys=(item.dedupe_key for item in curated))
        items.sort(key=lambda item: item.published_at, reverse=True)
        logger.info("Feed has %d stories (%d curated)", len(items), len(curated))

        if not items:
            raise NoContentAvailable("No news available")
        return items

    async def _memes_for(self, record: NewsRecord) -> list[Meme]:
        """Linked memes of a news record, or a meme made from its own image."""
        default = record.default_meme()
        fallback = [default] if default else []

        try:
            documents = await self.document_store.query(MEMES_COLLECTION, "newsId", record.id)
        except StoreError as e:
            logger.warning("Failed to fetch memes for %s: %s", record.id, e)
            return fallback

        memes = [
            meme for meme in
            (MemeRecord.from_document(document).to_meme() for document in documents)
            if meme is not None
        ]
        return memes or fallback

    async def upload_image(self, data: bytes, folder: str) -> str:
        """Store image bytes under ``images/<folder>/`` and return their URL."""
        if self.object_store is None:
            raise StoreError("No object store configured")

        path = f"images/{folder}/{uuid4()}.jpg"
        logger.info("Uploading image to %s", path)
        return await self.object_store.put(path, data, content_type="image/jpeg")

    async def create_news(
        self, title: str, summary: str, image_url: str, category: str
    ) -> str:
        """Create a curated news record plus a meme sharing its image."""
        news_category = self._validate_category(category)
        record = NewsRecord(
            title=title,
            summary=summary,
            image_url=image_url,
            category=news_category,
        )
        news_id = await self.document_store.add_document(NEWS_COLLECTION, record.to_fields())

        meme = MemeRecord(
            image_url=image_url,
            category=news_category,
            title=title,
            news_id=news_id,
        )
        meme_id = await self.document_store.add_document(MEMES_COLLECTION, meme.to_fields())
        logger.info("Created news %s with meme %s", news_id, meme_id)
        return news_id

    async def create_meme(
        self, image_url: str, category: str, title: Optional[str] = None
    ) -> list[str]:
        """Attach a meme to every news record of a category, or store it standalone."""
        meme_category = self._validate_category(category)
        news_documents = await self.document_store.query(
            NEWS_COLLECTION, "category", meme_category.value
        )
        logger.info("Found %d news items in %s", len(news_documents), meme_category.value)

        if not news_documents:
            meme = MemeRecord(image_url=image_url, category=meme_category, title=title)
            meme_id = await self.document_store.add_document(MEMES_COLLECTION, meme.to_fields())
            logger.info("Created standalone meme %s", meme_id)
            return [meme_id]

        meme_ids = []
        for document in news_documents:
            meme = MemeRecord(
                image_url=image_url,
                category=meme_category,
                title=title or as_text(document.fields.get("title")) or "Unknown",
                news_id=document.id,
            )
            meme_ids.append(
                await self.document_store.add_document(MEMES_COLLECTION, meme.to_fields())
            )
        return meme_ids

    async def update_news_categories(self) -> int:
        """Re-classify curated news by title; returns how many records changed."""
        documents = await self.document_store.list_documents(NEWS_COLLECTION)
        updated = 0

        for document in documents:
            title = as_text(document.fields.get("title")) or ""
            current = document.fields.get("category")
            guessed = classify_title(title)
            if guessed is None or guessed.value == current:
                continue

            logger.info("Moving %r from %s to %s", title, current, guessed.value)
            await self.document_store.update_document(
                NEWS_COLLECTION, document.id, {"category": guessed.value}
            )
            for meme in await self.document_store.query(MEMES_COLLECTION, "newsId", document.id):
                await self.document_store.update_document(
                    MEMES_COLLECTION, meme.id, {"category": guessed.value}
                )
            updated += 1

        return updated

    @staticmethod
    def _validate_category(category: str) -> Category:
        try:
            return Category.parse(category)
        except ValueError:
            logger.warning("Invalid category %r, defaulting to %s", category, Category.SPORTS.value)
            return Category.SPORTS


class NewsFeed:
    """Keep the last successful feed in memory for the presentation layer."""

    def __init__(self, service: NewsFeedService, include_remote: bool = True) -> None:
        self.service = service
        self.include_remote = include_remote
        self.error: Optional[str] = None
        self.last_refreshed: Optional[datetime] = None
        self._items: list[NewsItem] = []

    async def refresh(self) -> list[NewsItem]:
        """Reload the feed; on total failure keep showing the previous result."""
        try:
            items = await self.service.fetch_aggregated_news(self.include_remote)
        except NoContentAvailable as e:
            logger.warning("Refresh failed, keeping %d cached stories: %s", len(self._items), e)
            self.error = str(e)
            return list(self._items)

        self._items = items
        self.error = None
        self.last_refreshed = datetime.now(timezone.utc)
        return list(items)

    def items(self, category: Optional[Category] = None) -> list[NewsItem]:
        """Cached stories, optionally limited to one category."""
        if category is None:
            return list(self._items)
        return [item for item in self._items if item.category == category]

    @property
    def needs_retry(self) -> bool:
        """True when the last refresh failed and there is nothing cached to show."""
        return self.error is not None and not self._items
