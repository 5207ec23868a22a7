from __future__ import annotations

from typing import Optional

from newsdesk.core.config import Settings
from newsdesk.models import Category
from newsdesk.repositories.base import BaseRepository
from newsdesk.store.base import DocumentStore


class CategoryRepository(BaseRepository[Category]):
    model = Category

    def __init__(self, store: DocumentStore, settings: Settings):
        super().__init__(store, settings.categories_table)
        self.slug_index = settings.categories_slug_index
        self.name_index = settings.categories_name_index

    async def find_by_slug(self, slug: str) -> Optional[Category]:
        return await self.query_first(self.slug_index, "slug", slug)

    async def find_by_name(self, name: str) -> Optional[Category]:
        return await self.query_first(self.name_index, "name", name)

    async def find_all(self) -> list[Category]:
        return await self.scan_all()
