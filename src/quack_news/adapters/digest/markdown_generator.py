"""Markdown feed renderer."""

import re
from datetime import datetime
from typing import Optional

from quack_news.adapters.sources.text import PREVIEW_LENGTH, cleanup
from quack_news.core import Category, NewsItem, NewsOrigin

_LINK_TEXT_SPECIAL = re.compile(r"([\\\[\]])")


def _link_text(text: str) -> str:
    """Escape characters that would close a link label early."""
    return _LINK_TEXT_SPECIAL.sub(r"\\\1", text)


def _link_url(url: str) -> str:
    return url.replace(" ", "%20").replace("(", "%28").replace(")", "%29")


class MarkdownFeedRenderer:
    """Render aggregated news items as a markdown document."""

    def render(
        self,
        items: list[NewsItem],
        generated_at: datetime,
        category: Optional[Category] = None,
    ) -> str:
        """Render the feed, grouped by category in catalogue order."""
        scope = category.value if category else "All"
        if not items:
            return (
                f"# 🦆 QuackNews feed ({scope}), {generated_at.strftime('%d.%m.%Y %H:%M')}\n\n"
                "No news available."
            )

        lines = [
            f"# 🦆 QuackNews feed ({scope}), {generated_at.strftime('%d.%m.%Y %H:%M')}",
            "",
            f"Stories: {len(items)}",
            "",
        ]

        for group in Category:
            entries = [item for item in items if item.category == group]
            if not entries:
                continue
            lines.extend([f"## {group.value}", ""])
            for item in entries:
                lines.extend(self._format_item(item))

        return "\n".join(lines)

    def _format_item(self, item: NewsItem) -> list[str]:
        """Format a single story with its memes."""
        lines = [
            f"### [{_link_text(item.title)}]({_link_url(item.source_url)})",
            "",
            f"*{item.published_at.strftime('%d.%m.%Y %H:%M')}"
            f"{' | curated' if item.origin == NewsOrigin.CURATED else ''}*",
            "",
            cleanup(item.summary, PREVIEW_LENGTH),
            "",
        ]

        if item.image_url:
            lines.extend([f"![{_link_text(item.title)}]({_link_url(item.image_url)})", ""])

        if item.related_memes:
            lines.extend(["**Memes:**", ""])
            for meme in item.related_memes:
                label = meme.title or "meme"
                lines.append(f"- [{_link_text(label)}]({_link_url(meme.image_url)}) ({meme.source.value})")
            lines.append("")

        lines.append("---")
        lines.append("")

        return lines
