from __future__ import annotations

from newsdesk.core.config import Settings
from newsdesk.store.base import (
    BATCH_WRITE_LIMIT,
    Condition,
    DocumentStore,
    ItemExistsError,
    Page,
    contains,
    eq,
)
from newsdesk.store.memory import MemoryDocumentStore


def build_store(settings: Settings) -> DocumentStore:
    backend = settings.store_backend.lower()
    if backend == "memory":
        return MemoryDocumentStore()
    if backend == "sqlite":
        from newsdesk.store.sql import SqlDocumentStore

        return SqlDocumentStore(settings.db_path)
    if backend == "dynamodb":
        from newsdesk.store.dynamodb import DynamoDocumentStore

        return DynamoDocumentStore(settings.aws_region, settings.dynamodb_endpoint_url)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend}")


__all__ = [
    "BATCH_WRITE_LIMIT",
    "Condition",
    "DocumentStore",
    "ItemExistsError",
    "MemoryDocumentStore",
    "Page",
    "build_store",
    "contains",
    "eq",
]
