"""Feed renderers."""

from quack_news.adapters.digest.markdown_generator import MarkdownFeedRenderer

__all__ = ["MarkdownFeedRenderer"]
