from __future__ import annotations

from typing import Any, Optional

import structlog

from newsdesk.core.config import Settings
from newsdesk.core.errors import ConflictError, NotFoundError, ValidationError
from newsdesk.models import Category
from newsdesk.repositories import ArticleRepository, CategoryRepository
from newsdesk.store.base import DocumentStore

logger = structlog.get_logger()


def _clean(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) else None


class CategoryService:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.categories = CategoryRepository(store, settings)
        self.articles = ArticleRepository(store, settings)

    async def list_categories(self, show_in_header: Optional[bool] = None) -> list[Category]:
        categories = await self.categories.find_all()
        if show_in_header is not None:
            categories = [c for c in categories if c.show_in_header == show_in_header]
        return categories

    async def get_category(self, category_id: str) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[str] = None) -> None:
        if name:
            by_name = await self.categories.find_by_name(name)
            if by_name and by_name.id != exclude_id:
                raise ConflictError("A category with this name already exists")
        if slug:
            by_slug = await self.categories.find_by_slug(slug)
            if by_slug and by_slug.id != exclude_id:
                raise ConflictError("A category with this slug already exists")

    async def _check_parent(self, parent_id: Optional[str], category_id: Optional[str] = None) -> None:
        if not parent_id:
            return
        if parent_id == category_id:
            raise ValidationError("A category cannot be its own parent")
        if await self.categories.get_by_id(parent_id) is None:
            raise ValidationError("Parent category does not exist")

    async def create_category(self, data: dict[str, Any]) -> Category:
        name = _clean(data.get("name"))
        slug = _clean(data.get("slug"))
        if not name or not slug:
            raise ValidationError("Category name and slug are required")
        slug = slug.lower()
        await self._check_unique(name, slug)
        await self._check_parent(data.get("parent_category_id"))

        fields = {k: v for k, v in data.items() if v is not None}
        fields.update(name=name, slug=slug)
        if isinstance(fields.get("description"), str):
            fields["description"] = fields["description"].strip()
        category = await self.categories.create(Category.create(**fields))
        logger.info("category_created", category_id=category.id, slug=slug)
        return category

    async def update_category(self, category_id: str, data: dict[str, Any]) -> Category:
        existing = await self.get_category(category_id)
        fields = dict(data)
        for key in ("id", "created_at", "updated_at"):
            fields.pop(key, None)

        if "name" in fields:
            name = _clean(fields["name"])
            if not name:
                raise ValidationError("Category name cannot be empty")
            fields["name"] = name
        if "slug" in fields:
            slug = _clean(fields["slug"])
            if not slug:
                raise ValidationError("Category slug cannot be empty")
            fields["slug"] = slug.lower()
        if isinstance(fields.get("description"), str):
            fields["description"] = fields["description"].strip()
        if not fields:
            raise ValidationError("No valid category fields provided for update")

        await self._check_unique(
            fields.get("name") if fields.get("name") != existing.name else None,
            fields.get("slug") if fields.get("slug") != existing.slug else None,
            exclude_id=category_id,
        )
        await self._check_parent(fields.get("parent_category_id"), category_id)

        updated = await self.categories.update(category_id, fields)
        if updated is None:
            raise NotFoundError("Category not found")
        logger.info("category_updated", category_id=category_id, fields=sorted(fields))
        return updated

    async def delete_category(self, category_id: str) -> None:
        await self.get_category(category_id)
        linked = await self.articles.find_by_category(category_id, limit=1)
        if linked:
            raise ValidationError("Category is in use by existing articles and cannot be deleted")
        await self.categories.delete(category_id)
        logger.info("category_deleted", category_id=category_id)
