from __future__ import annotations

import copy
import itertools
import threading
from typing import Any, Optional, Sequence

from newsdesk.core.errors import NotFoundError, ValidationError
from newsdesk.store.base import (
    Condition,
    DocumentStore,
    Item,
    ItemExistsError,
    Key,
    Page,
    chunked,
    matches_all,
)


class MemoryDocumentStore(DocumentStore):
    """Process-local store. Scan order is insertion order."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, tuple[int, Item]]] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def _table(self, table: str) -> dict[str, tuple[int, Item]]:
        return self._tables.setdefault(table, {})

    async def get(self, table: str, item_id: str) -> Optional[Item]:
        with self._lock:
            row = self._table(table).get(item_id)
            return copy.deepcopy(row[1]) if row else None

    async def put(self, table: str, item: Item, if_not_exists: bool = False) -> None:
        item_id = item["id"]
        with self._lock:
            rows = self._table(table)
            existing = rows.get(item_id)
            if existing and if_not_exists:
                raise ItemExistsError(f"Item {item_id} already exists")
            seq = existing[0] if existing else next(self._seq)
            rows[item_id] = (seq, copy.deepcopy(item))

    async def delete(self, table: str, item_id: str) -> bool:
        with self._lock:
            return self._table(table).pop(item_id, None) is not None

    async def increment(self, table: str, item_id: str, field_name: str, amount: int = 1) -> int:
        with self._lock:
            row = self._table(table).get(item_id)
            if row is None:
                raise NotFoundError(f"Item {item_id} not found")
            item = row[1]
            item[field_name] = int(item.get(field_name) or 0) + amount
            return item[field_name]

    def _evaluate(
        self,
        rows: list[tuple[int, Item]],
        conditions: Sequence[Condition],
        limit: Optional[int],
        start_key: Optional[Key],
    ) -> Page:
        if start_key is not None:
            try:
                after = int(start_key["seq"])
            except (KeyError, TypeError, ValueError):
                raise ValidationError("Invalid cursor")
            rows = [r for r in rows if r[0] > after]

        evaluated = rows if limit is None else rows[:limit]
        items = [copy.deepcopy(item) for _, item in evaluated if matches_all(item, conditions)]

        last_key = None
        if limit is not None and len(rows) > limit and evaluated:
            seq, item = evaluated[-1]
            last_key = {"id": item["id"], "seq": seq}
        return Page(items=items, last_key=last_key)

    async def scan(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page:
        with self._lock:
            rows = sorted(self._table(table).values(), key=lambda r: r[0])
        return self._evaluate(rows, conditions, limit, start_key)

    async def query(
        self,
        table: str,
        index: str,
        key_attr: str,
        key_value: Any,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page:
        with self._lock:
            rows = sorted(
                (r for r in self._table(table).values() if r[1].get(key_attr) == key_value),
                key=lambda r: r[0],
            )
        return self._evaluate(rows, conditions, limit, start_key)

    async def batch_put(self, table: str, items: Sequence[Item]) -> list[Item]:
        for chunk in chunked(items):
            for item in chunk:
                await self.put(table, item)
        return []
