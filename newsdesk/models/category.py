from __future__ import annotations

from typing import ClassVar, Optional

from newsdesk.models.base import DocumentModel


class Category(DocumentModel):
    id_prefix: ClassVar[str] = "c"

    id: str
    name: str
    slug: str
    description: str = ""
    image_url: Optional[str] = None
    # self-reference for header dropdowns; cycles are the client's concern
    parent_category_id: Optional[str] = None
    show_in_header: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
