"""Relevance heuristics for news and meme posts."""

import re
from collections.abc import Iterable
from typing import Optional

from quack_news.core.catalogue import MAJOR_NEWS_KEYWORDS
from quack_news.core.entities import Category

TRENDING_INDICATORS = frozenset({"breaking", "exclusive", "viral", "trending"})

HUMOR_INDICATORS = frozenset({
    "funny", "meme", "lol", "lmao", "parody", "joke", "satire", "humor",
})

# Category -> (anchor term, terms); a title containing the anchor and any
# of the terms counts as a relevant meme regardless of news keywords.
HUMOR_COMBINATIONS: dict[Category, tuple[str, frozenset[str]]] = {
    Category.SPORTS: ("cricket", frozenset({
        "wicket", "umpire", "bowler", "batsman", "duck", "drs", "run out",
    })),
    Category.ELON_MUSK: ("elon", frozenset({
        "rocket", "tweet", "mars", "starship", "tesla",
    })),
    Category.ENTERTAINMENT: ("movie", frozenset({
        "sequel", "trailer", "cgi", "plot", "director",
    })),
    Category.ADS: ("commercial", frozenset({
        "super bowl", "mascot", "brand", "jingle",
    })),
    Category.POLITICS: ("politician", frozenset({
        "debate", "promise", "vote", "speech",
    })),
}

# Ordered: the first category whose terms appear in a title wins.
CATEGORY_HINTS: list[tuple[Category, tuple[str, ...]]] = [
    (Category.SPORTS, ("cricket", "india vs pakistan", "epic", "showdown")),
    (Category.ENTERTAINMENT, ("disney", "snow white", "movie", "film")),
    (Category.ELON_MUSK, ("elon", "musk", "tesla", "spacex")),
    (Category.ADS, (r"\bad\b", "commercial", "campaign")),
    (Category.POLITICS, ("politic", "government", "election")),
]

_WORD = re.compile(r"\w[\w'-]*")


def _contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word match of ``phrase`` inside ``text``."""
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def is_major_news(
    title: str, category: Category, keywords: Optional[Iterable[str]] = None
) -> bool:
    """
    Check if a title reads like major news for a category.

    Args:
        title: Post title
        category: Category whose keyword set applies
        keywords: Overrides the built-in keyword set of ``category``

    Returns:
        True if the title contains a category keyword or a trending indicator
    """
    text = title.lower()
    if keywords is None:
        keywords = MAJOR_NEWS_KEYWORDS.get(category, frozenset())
    return any(_contains_phrase(text, word) for word in keywords) or any(
        _contains_phrase(text, word) for word in TRENDING_INDICATORS
    )


def extract_keywords(title: str, limit: int = 3) -> list[str]:
    """Pick the ``limit`` longest words (over 3 chars) of a title, in title order."""
    words: list[str] = []
    for word in _WORD.findall(title.lower()):
        if len(word) > 3 and word not in words:
            words.append(word)

    longest = sorted(range(len(words)), key=lambda i: (-len(words[i]), i))[:limit]
    return [words[i] for i in sorted(longest)]


def is_relevant_meme(title: str, keywords: list[str], category: Category) -> bool:
    """
    Check if a meme title is humorous and on-topic.

    Args:
        title: Meme post title
        keywords: Words extracted from the originating news title
        category: Category of the originating news item

    Returns:
        True if the title has a humor indicator plus a keyword, or matches
        the category's humor combination
    """
    text = title.lower()

    if any(marker in text for marker in HUMOR_INDICATORS) and any(
        keyword.lower() in text for keyword in keywords if keyword
    ):
        return True

    combination = HUMOR_COMBINATIONS.get(category)
    if combination is None:
        return False
    anchor, terms = combination
    return anchor in text and any(term in text for term in terms)


def classify_title(title: str) -> Optional[Category]:
    """Guess a category from title terms, or None when nothing matches."""
    text = title.lower()
    for category, hints in CATEGORY_HINTS:
        for hint in hints:
            if hint.startswith(r"\b"):
                if re.search(hint, text):
                    return category
            elif hint in text:
                return category
    return None
