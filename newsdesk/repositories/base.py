from __future__ import annotations

import datetime as dt
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from newsdesk.models.base import DocumentModel, parse_iso, to_iso, utc_now
from newsdesk.store.base import Condition, DocumentStore, Key, Page

T = TypeVar("T", bound=DocumentModel)


def next_timestamp(previous: Optional[str]) -> str:
    # updatedAt must move forward even when two writes land in the same microsecond
    now = utc_now()
    if previous:
        try:
            prev = parse_iso(previous)
        except ValueError:
            prev = None
        if prev is not None and now <= prev:
            now = prev + dt.timedelta(microseconds=1)
    return to_iso(now)


class BaseRepository(Generic[T]):
    model: Type[T]

    def __init__(self, store: DocumentStore, table_name: str):
        self.store = store
        self.table_name = table_name

    def to_domain(self, item: dict[str, Any]) -> T:
        return self.model.model_validate(item)

    def to_db(self, entity: T) -> dict[str, Any]:
        return entity.to_record()

    def _page(self, page: Page) -> tuple[list[T], Optional[Key]]:
        return [self.to_domain(i) for i in page.items], page.last_key

    async def get_by_id(self, item_id: str) -> Optional[T]:
        item = await self.store.get(self.table_name, item_id)
        return self.to_domain(item) if item else None

    async def create(self, entity: T) -> T:
        record = self.to_db(entity)
        await self.store.put(self.table_name, record, if_not_exists=True)
        return self.to_domain(record)

    async def save(self, entity: T) -> T:
        record = self.to_db(entity)
        await self.store.put(self.table_name, record)
        return self.to_domain(record)

    async def update(self, item_id: str, fields: dict[str, Any]) -> Optional[T]:
        existing = await self.get_by_id(item_id)
        if existing is None:
            return None
        data = existing.model_dump()
        data.update(fields)
        data["updated_at"] = next_timestamp(getattr(existing, "updated_at", None))
        record = self.to_db(self.model.model_validate(data))
        await self.store.put(self.table_name, record)
        return self.to_domain(record)

    async def delete(self, item_id: str) -> bool:
        return await self.store.delete(self.table_name, item_id)

    async def scan(
        self,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> tuple[list[T], Optional[Key]]:
        return self._page(await self.store.scan(self.table_name, conditions, limit, start_key))

    async def query(
        self,
        index: str,
        key_attr: str,
        key_value: Any,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> tuple[list[T], Optional[Key]]:
        page = await self.store.query(self.table_name, index, key_attr, key_value, conditions, limit, start_key)
        return self._page(page)

    async def scan_all(self, conditions: Sequence[Condition] = ()) -> list[T]:
        items: list[T] = []
        start_key = None
        while True:
            page, start_key = await self.scan(conditions, start_key=start_key)
            items.extend(page)
            if not start_key:
                return items

    async def query_all(
        self, index: str, key_attr: str, key_value: Any, conditions: Sequence[Condition] = ()
    ) -> list[T]:
        items: list[T] = []
        start_key = None
        while True:
            page, start_key = await self.query(index, key_attr, key_value, conditions, start_key=start_key)
            items.extend(page)
            if not start_key:
                return items

    async def query_first(self, index: str, key_attr: str, key_value: Any, conditions: Sequence[Condition] = ()) -> Optional[T]:
        items = await self.query_all(index, key_attr, key_value, conditions)
        return items[0] if items else None
