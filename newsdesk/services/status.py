"""Article status parsing and the editorial transition table.

Two entry points parse loosely-typed status strings:

* ``normalize_status`` never fails; anything unrecognized becomes Draft.
  Stored records and generic updates go through it so that legacy values
  ("PUBLISHED", "pending-review", ...) keep working.
* ``parse_status`` rejects unrecognized input and is used where a caller
  asks for a specific transition.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from newsdesk.core.errors import ForbiddenError, InvalidTransitionError, ValidationError
from newsdesk.models.enums import ArticleStatus, UserRole

STATUS_ALL = "all"

_SEPARATORS_RE = re.compile(r"[\s_-]+")

_SYNONYMS: dict[str, ArticleStatus] = {
    "published": ArticleStatus.PUBLISHED,
    "publish": ArticleStatus.PUBLISHED,
    "approved": ArticleStatus.PUBLISHED,
    "live": ArticleStatus.PUBLISHED,
    "draft": ArticleStatus.DRAFT,
    "drafts": ArticleStatus.DRAFT,
    "rejected": ArticleStatus.REJECTED,
    "declined": ArticleStatus.REJECTED,
    "denied": ArticleStatus.REJECTED,
    "pending review": ArticleStatus.PENDING_REVIEW,
    "pending": ArticleStatus.PENDING_REVIEW,
    "submitted": ArticleStatus.PENDING_REVIEW,
    "awaiting review": ArticleStatus.PENDING_REVIEW,
    "in review": ArticleStatus.PENDING_REVIEW,
    "under review": ArticleStatus.PENDING_REVIEW,
}

_EDITORS = frozenset({UserRole.EDITOR, UserRole.ADMIN})

# moves an author may request; editors and admins may set any status
AUTHOR_TRANSITIONS: frozenset[tuple[ArticleStatus, ArticleStatus]] = frozenset(
    {
        (ArticleStatus.DRAFT, ArticleStatus.PENDING_REVIEW),
        (ArticleStatus.REJECTED, ArticleStatus.PENDING_REVIEW),
    }
)


def _collapse(value: str) -> str:
    return _SEPARATORS_RE.sub(" ", value.strip().lower()).strip()


def _lookup(value: Any) -> Optional[ArticleStatus]:
    if isinstance(value, ArticleStatus):
        return value
    if not isinstance(value, str):
        return None
    return _SYNONYMS.get(_collapse(value))


def normalize_status(value: Any) -> ArticleStatus:
    return _lookup(value) or ArticleStatus.DRAFT


def parse_status(value: Any) -> ArticleStatus:
    status = _lookup(value)
    if status is None:
        raise ValidationError(f"Unknown article status: {value!r}")
    return status


def is_all_statuses(value: Optional[str]) -> bool:
    return isinstance(value, str) and value.strip().lower() == STATUS_ALL


def allowed_targets(current: ArticleStatus, role: UserRole) -> list[ArticleStatus]:
    if role in _EDITORS:
        return list(ArticleStatus)
    if role != UserRole.AUTHOR:
        return []
    return [to for frm, to in AUTHOR_TRANSITIONS if frm == current]


def validate_transition(current: ArticleStatus, target: ArticleStatus, role: UserRole) -> None:
    if role in _EDITORS:
        return
    if role != UserRole.AUTHOR or target != ArticleStatus.PENDING_REVIEW:
        raise ForbiddenError(f"Role {role.value} cannot move article to '{target.value}'")
    if (current, target) not in AUTHOR_TRANSITIONS:
        raise InvalidTransitionError(
            f"Cannot move article from '{current.value}' to '{target.value}'",
            current=current.value,
            target=target.value,
        )
