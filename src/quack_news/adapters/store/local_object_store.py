"""Object store writing image bytes under a local directory."""

import logging
from pathlib import Path, PurePosixPath

from quack_news.core import ObjectStore, StoreError

logger = logging.getLogger(__name__)


class LocalObjectStore(ObjectStore):
    """Keep objects as files below ``root`` and hand out ``file://`` URLs."""

    def __init__(self, root: Path) -> None:
        self.root = root

    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        if not data:
            raise StoreError("Refusing to store empty object")

        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise StoreError(f"Invalid object path: {path!r}")

        target = self.root.joinpath(*relative.parts)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error("Failed to store %s: %s", path, e)
            raise StoreError(f"Could not store {path}: {e}") from e

        url = target.resolve().as_uri()
        logger.debug("Stored %d bytes (%s) at %s", len(data), content_type, url)
        return url
