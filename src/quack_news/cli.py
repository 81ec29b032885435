"""CLI entry point for QuackNews."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from quack_news.adapters.digest import MarkdownFeedRenderer
from quack_news.adapters.sources import RedditSource
from quack_news.adapters.store import LocalObjectStore, YamlDocumentStore
from quack_news.config import Settings, get_settings
from quack_news.core import Category, QuackNewsError
from quack_news.use_cases import NewsAggregator, NewsFeed, NewsFeedService

app = typer.Typer(help="Major news paired with matching memes.", no_args_is_help=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_category(value: Optional[str]) -> Optional[Category]:
    if value is None:
        return None
    try:
        return Category.parse(value)
    except ValueError:
        choices = ", ".join(category.value for category in Category)
        raise typer.BadParameter(f"{value!r} is not one of: {choices}")


def build_service(settings: Settings) -> NewsFeedService:
    """Wire the feed service from settings."""
    source = RedditSource(
        base_url=settings.reddit.base_url,
        user_agent=settings.user_agent,
        timeout=settings.reddit.timeout,
    )
    aggregator = NewsAggregator(
        source_client=source,
        news_limit=settings.reddit.news_limit,
        meme_limit=settings.reddit.meme_limit,
        max_memes=settings.aggregation.max_memes,
        dispatch_delay=settings.aggregation.dispatch_delay,
        meme_dispatch_delay=settings.aggregation.meme_dispatch_delay,
        summary_length=settings.aggregation.summary_length,
        permalink_base=settings.reddit.base_url,
    )
    return NewsFeedService(
        document_store=YamlDocumentStore(settings.store_dir),
        object_store=LocalObjectStore(settings.objects_dir),
        aggregator=aggregator,
    )


@app.command()
def feed(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only show one category"),
    no_remote: bool = typer.Option(False, "--no-remote", help="Curated store content only"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Markdown output file"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Fetch the aggregated feed, print it and save it as markdown."""
    _configure_logging(verbose)
    selected = _parse_category(category)
    settings = get_settings(config)
    include_remote = settings.feed.include_remote and not no_remote

    print("\n" + "=" * 70)
    print("🦆 QUACKNEWS - major news and matching memes")
    print("=" * 70)
    print(f"  • {RedditSource.emoji} {RedditSource.name}: {'✓' if include_remote else '✗'}")
    print(f"  • Category: {selected.value if selected else 'All'}")

    news_feed = NewsFeed(build_service(settings), include_remote=include_remote)
    asyncio.run(news_feed.refresh())

    if news_feed.needs_retry:
        print(f"\n❌ No news available: {news_feed.error}")
        print("   Check your connection and try again.")
        raise typer.Exit(code=1)

    items = news_feed.items(selected)
    print(f"\n✓ Stories: {len(items)}")
    for item in items:
        print(f"  [{item.category.value}] {item.title[:70]}")
        print(f"  └─ {len(item.related_memes)} memes, {item.published_at.strftime('%d.%m.%Y %H:%M')}")

    generated_at = datetime.now()
    if output is None:
        output = settings.output_dir / f"{generated_at.strftime('%Y-%m-%d_%H-%M-%S')}_feed.md"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        MarkdownFeedRenderer().render(items, generated_at, selected),
        encoding="utf-8",
    )
    print(f"\n📄 Feed saved: {output}")


@app.command("add-news")
def add_news(
    title: str = typer.Option(..., "--title", help="Headline"),
    image: Path = typer.Option(..., "--image", exists=True, dir_okay=False, help="Image file"),
    category: str = typer.Option(Category.SPORTS.value, "--category", "-c"),
    summary: str = typer.Option("", "--summary", help="Short summary"),
    config: Path = typer.Option(Path("config.yaml"), "--config"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Upload an image and create a curated news item with it."""
    _configure_logging(verbose)
    service = build_service(get_settings(config))

    async def run() -> str:
        image_url = await service.upload_image(image.read_bytes(), "news")
        return await service.create_news(title, summary, image_url, category)

    try:
        news_id = asyncio.run(run())
    except QuackNewsError as e:
        print(f"❌ Failed to create news: {e}")
        raise typer.Exit(code=1)
    print(f"✓ News created: {news_id}")


@app.command("add-meme")
def add_meme(
    image: Path = typer.Option(..., "--image", exists=True, dir_okay=False, help="Image file"),
    category: str = typer.Option(Category.SPORTS.value, "--category", "-c"),
    title: Optional[str] = typer.Option(None, "--title"),
    config: Path = typer.Option(Path("config.yaml"), "--config"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Upload a meme and attach it to every curated story of a category."""
    _configure_logging(verbose)
    service = build_service(get_settings(config))

    async def run() -> list[str]:
        image_url = await service.upload_image(image.read_bytes(), "memes")
        return await service.create_meme(image_url, category, title)

    try:
        meme_ids = asyncio.run(run())
    except QuackNewsError as e:
        print(f"❌ Failed to upload meme: {e}")
        raise typer.Exit(code=1)
    print(f"✓ Memes created: {len(meme_ids)}")


@app.command("fix-categories")
def fix_categories(
    config: Path = typer.Option(Path("config.yaml"), "--config"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Re-classify curated stories by their titles."""
    _configure_logging(verbose)
    service = build_service(get_settings(config))
    updated = asyncio.run(service.update_news_categories())
    print(f"✓ Categories updated: {updated}")


@app.command()
def stats(
    config: Path = typer.Option(Path("config.yaml"), "--config"),
) -> None:
    """Show how many curated documents are stored."""
    settings = get_settings(config)
    store_stats = YamlDocumentStore(settings.store_dir).get_stats()

    print(f"✓ Documents stored: {store_stats['total_documents']}")
    for collection, count in store_stats["by_collection"].items():
        print(f"  • {collection}: {count}")


if __name__ == "__main__":
    app()
