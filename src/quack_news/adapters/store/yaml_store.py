"""Document store keeping each record as an individual YAML file."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import yaml

from quack_news.core import SERVER_TIMESTAMP, Document, DocumentStore, StoreError

logger = logging.getLogger(__name__)

_COLLECTION_NAME = re.compile(r"^[\w-]+$")


class YamlDocumentStore(DocumentStore):
    """Store documents as ``<storage_dir>/<collection>/<id>.yaml``."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        """Create the storage directory."""
        if not self.storage_dir.exists():
            self.storage_dir.mkdir(parents=True, exist_ok=True)

    async def list_documents(self, collection: str) -> list[Document]:
        collection_dir = self._collection_dir(collection)
        if not collection_dir.exists():
            return []

        documents = []
        for path in sorted(collection_dir.glob("*.yaml")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    fields = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping unreadable document %s: %s", path, e)
                continue
            if not isinstance(fields, dict):
                logger.warning("Skipping document %s: not a mapping", path)
                continue
            documents.append(Document(id=path.stem, fields=fields))

        return documents

    async def query(self, collection: str, field: str, value: Any) -> list[Document]:
        documents = await self.list_documents(collection)
        return [doc for doc in documents if doc.fields.get(field) == value]

    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        document_id = uuid4().hex
        self._write(collection, document_id, self._resolve(fields))
        logger.debug("Created %s/%s", collection, document_id)
        return document_id

    async def update_document(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> None:
        path = self._document_path(collection, document_id)
        if not path.exists():
            raise StoreError(f"No document {collection}/{document_id}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                current = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not read {collection}/{document_id}: {e}") from e

        current.update(self._resolve(fields))
        self._write(collection, document_id, current)

    def _write(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        path = self._document_path(collection, document_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(fields, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not write {collection}/{document_id}: {e}") from e

    @staticmethod
    def _resolve(fields: dict[str, Any]) -> dict[str, Any]:
        """Replace server timestamp sentinels with the current time."""
        now = datetime.now(timezone.utc)
        return {
            key: now if value is SERVER_TIMESTAMP else value
            for key, value in fields.items()
        }

    def _collection_dir(self, collection: str) -> Path:
        if not _COLLECTION_NAME.match(collection):
            raise StoreError(f"Invalid collection name: {collection!r}")
        return self.storage_dir / collection

    def _document_path(self, collection: str, document_id: str) -> Path:
        if not _COLLECTION_NAME.match(document_id):
            raise StoreError(f"Invalid document id: {document_id!r}")
        return self._collection_dir(collection) / f"{document_id}.yaml"

    def get_stats(self) -> dict:
        """Count documents per collection."""
        collections = {}
        total = 0

        for collection_dir in self.storage_dir.iterdir():
            if collection_dir.is_dir():
                count = len(list(collection_dir.glob("*.yaml")))
                collections[collection_dir.name] = count
                total += count

        return {
            "total_documents": total,
            "by_collection": collections,
        }
