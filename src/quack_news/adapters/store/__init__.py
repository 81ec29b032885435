"""Store adapters for curated content and uploaded images."""

from quack_news.adapters.store.local_object_store import LocalObjectStore
from quack_news.adapters.store.yaml_store import YamlDocumentStore

__all__ = ["LocalObjectStore", "YamlDocumentStore"]
