"""Image selection for posts."""

from typing import Optional
from urllib.parse import urlparse

from quack_news.core.entities import CandidatePost
from quack_news.core.records import is_valid_url

IMAGE_EXTENSIONS = (".jpg", ".png")


def best_image_url(post: CandidatePost) -> Optional[str]:
    """Preview image, then a direct image link, then the thumbnail."""
    if post.preview_url:
        decoded = post.preview_url.replace("&amp;", "&")
        if is_valid_url(decoded):
            return decoded

    if post.url and is_valid_url(post.url):
        if urlparse(post.url).path.lower().endswith(IMAGE_EXTENSIONS):
            return post.url

    # Listings use placeholders such as "self" or "default" here
    if post.thumbnail and is_valid_url(post.thumbnail):
        return post.thumbnail

    return None


def is_meme_candidate(post: CandidatePost) -> bool:
    """Reject adult posts, videos and posts declared as something other than an image."""
    if post.over_18 or post.is_video:
        return False
    if post.post_hint is not None and post.post_hint != "image":
        return False
    return True
