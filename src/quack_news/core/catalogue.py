"""Static mapping of categories to feeds and keywords."""

from collections.abc import Mapping
from types import MappingProxyType

from quack_news.core.entities import Category, SourceDescriptor


NEWS_SOURCES: Mapping[Category, tuple[str, ...]] = MappingProxyType({
    Category.SPORTS: ("Cricket",),
    Category.ELON_MUSK: ("SpaceX",),
    Category.ENTERTAINMENT: ("movies",),
    Category.ADS: ("SuperBowl",),
    Category.POLITICS: ("worldnews",),
})

MEME_SOURCES: Mapping[Category, tuple[str, ...]] = MappingProxyType({
    Category.SPORTS: ("CricketShitpost", "sportsshitpost"),
    Category.ELON_MUSK: ("SpaceXMasterrace", "elonmemes"),
    Category.ENTERTAINMENT: ("moviememes", "PrequelMemes"),
    Category.ADS: ("CommercialMemes", "SuperbOwl"),
    Category.POLITICS: ("PoliticalMemes", "worldpoliticsmemes"),
})

# Lowercased; matched as whole words against lowercased titles.
MAJOR_NEWS_KEYWORDS: Mapping[Category, frozenset[str]] = MappingProxyType({
    Category.SPORTS: frozenset({
        "world cup", "final", "semi-final", "champions trophy",
        "india", "pakistan", "australia",
    }),
    Category.ELON_MUSK: frozenset({
        "launch", "tesla", "spacex", "starship", "twitter", "x", "cybertruck",
    }),
    Category.ENTERTAINMENT: frozenset({
        "oscar", "box office", "marvel", "star wars", "record", "award",
    }),
    Category.ADS: frozenset({
        "super bowl", "commercial", "campaign", "advertisement",
    }),
    Category.POLITICS: frozenset({
        "election", "president", "prime minister", "crisis", "war", "peace", "treaty",
    }),
})


class Catalogue:
    """Read-only lookup of news feeds, meme feeds and keywords per category."""

    def __init__(
        self,
        news_sources: Mapping[Category, tuple[str, ...]] = NEWS_SOURCES,
        meme_sources: Mapping[Category, tuple[str, ...]] = MEME_SOURCES,
        keywords: Mapping[Category, frozenset[str]] = MAJOR_NEWS_KEYWORDS,
    ) -> None:
        self._news_sources = MappingProxyType(
            {category: tuple(names) for category, names in news_sources.items()}
        )
        self._meme_sources = MappingProxyType(
            {category: tuple(names) for category, names in meme_sources.items()}
        )
        self._keywords = MappingProxyType(
            {category: frozenset(words) for category, words in keywords.items()}
        )

    @property
    def categories(self) -> list[Category]:
        """Categories that have at least one news feed, in declaration order."""
        return [category for category in Category if self._news_sources.get(category)]

    def news_sources(self) -> list[SourceDescriptor]:
        """All news feeds, ordered by category then by configured order."""
        return [
            SourceDescriptor(name, category)
            for category in self.categories
            for name in self._news_sources[category]
        ]

    def meme_sources(self, category: Category) -> list[SourceDescriptor]:
        """Meme feeds for one category."""
        return [
            SourceDescriptor(name, category)
            for name in self._meme_sources.get(category, ())
        ]

    def keywords(self, category: Category) -> frozenset[str]:
        """Major-news keywords for one category."""
        return self._keywords.get(category, frozenset())


DEFAULT_CATALOGUE = Catalogue()
