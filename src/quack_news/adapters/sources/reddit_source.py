"""Reddit listing client."""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from quack_news.core import (
    CandidatePost,
    DecodeError,
    ListingSource,
    SourceTimeout,
    SourceUnavailable,
)

logger = logging.getLogger(__name__)


class RedditSource(ListingSource):
    """Fetch the hot listing of a subreddit."""

    emoji = "👽"
    name = "Reddit"

    def __init__(
        self,
        base_url: str = "https://www.reddit.com",
        user_agent: str = "QuackNews/1.0",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.client = client

    async def fetch_listing(self, source: str, limit: int) -> list[CandidatePost]:
        """Fetch one page of hot posts; raises a ``SourceError`` on failure."""
        url = f"{self.base_url}/r/{quote(source, safe='')}/hot.json"

        if self.client is not None:
            response = await self._get(self.client, source, url, limit)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await self._get(client, source, url, limit)

        if not response.is_success:
            raise SourceUnavailable(source, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(source, f"invalid JSON: {e}") from e

        return self._parse_listing(source, payload)

    async def _get(
        self, client: httpx.AsyncClient, source: str, url: str, limit: int
    ) -> httpx.Response:
        try:
            return await client.get(
                url,
                params={"limit": limit},
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise SourceTimeout(source) from e
        except httpx.TransportError as e:
            raise SourceUnavailable(source) from e

    def _parse_listing(self, source: str, payload: object) -> list[CandidatePost]:
        """Decode ``{data: {children: [{data: {...}}]}}`` into posts."""
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise DecodeError(source, "missing listing data")

        children = payload["data"].get("children")
        if not isinstance(children, list):
            raise DecodeError(source, "missing children")

        posts: list[CandidatePost] = []
        for child in children:
            data = child.get("data") if isinstance(child, dict) else None
            if not isinstance(data, dict):
                logger.debug("Skipping malformed child in r/%s", source)
                continue
            try:
                posts.append(CandidatePost.from_listing_data(data))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Skipping post in r/%s: %s", source, e)

        return posts

    def _get_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}
